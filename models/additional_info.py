"""Datenmodell für schulweite Zusatzinformationen (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class AdditionalInfo(BaseModel):
    """Allgemeine Mitteilung, die keinem Tag zugeordnet ist."""

    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    text: str
    has_information: bool = True    # soll eine Benachrichtigung auslösen
    from_schedule: bool = False     # stammt aus dem Vertretungsplan selbst
