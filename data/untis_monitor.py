"""Untis "Monitor"-Pläne (HTML, subst_001.htm).

Aufbau einer Seite:

    <div class="mon_title">11.3.2024 Montag, Woche A (Seite 1 / 2)</div>
    <table class="info"> ... Nachrichten zum Tag ... </table>
    <table class="mon_list"> Kopfzeile mit <th>, danach Zeilen mit <td> </table>

Mehrere Tage können auf einer Seite stehen. Der Zelleninhalt wird als HTML
weitergegeben, damit durchgestrichene Werte erkannt werden.
"""

import logging
import re
from typing import Optional

from bs4 import BeautifulSoup, Tag

from assembly.errors import UnparseableStructureError
from config.schema import SchoolScheduleConfig
from models.raw import ColumnType, RawCell, RawDay, RawPage, RawRow
from normalizer.columns import ColumnTypeDetector

logger = logging.getLogger(__name__)

_PAGE_NUMBER_RE = re.compile(r"\s*\(Seite \d+ ?/ ?\d+\)")
_LAST_CHANGE_RE = re.compile(r"\d\d?\.\d\d?\.\d{4} \d\d?:\d\d")
_STAND_RE = re.compile(r"Stand:\s*([^|\n]{1,40})")
_MESSAGE_HEADER = "Nachrichten zum Tag"


def _classes(tag: Tag) -> list[str]:
    return tag.get("class") or []


class UntisMonitorAdapter:
    """Liest eine Untis-Monitor-Seite in eine RawPage."""

    def __init__(self, config: SchoolScheduleConfig,
                 detector: Optional[ColumnTypeDetector] = None) -> None:
        self.config = config
        self.detector = detector or ColumnTypeDetector()

    def read(self, source: str) -> RawPage:
        soup = BeautifulSoup(source, "html.parser")
        page = RawPage(last_change_text=self._last_change(soup))

        day: Optional[RawDay] = None
        for element in soup.find_all(["div", "table"]):
            css = _classes(element)
            if element.name == "div" and "mon_title" in css:
                title = _PAGE_NUMBER_RE.sub("", element.get_text(" ", strip=True))
                day = RawDay(date_text=title)
                page.days.append(day)
            elif element.name == "table" and "info" in css:
                messages = self._messages(element)
                if day is None:
                    page.general_messages.extend(messages)
                else:
                    day.messages.extend(messages)
            elif element.name == "table" and "mon_list" in css:
                if day is None:
                    day = RawDay()
                    page.days.append(day)
                day.rows.extend(self._rows(element))

        if not page.days:
            logger.info("Untis-Monitor: keine Tage gefunden")
        return page

    # ─── Teile der Seite ───

    @staticmethod
    def _last_change(soup: BeautifulSoup) -> Optional[str]:
        head = soup.find(class_="mon_head")
        if head is not None:
            text = head.get_text(" ", strip=True)
        else:
            # ohne Kopfbereich nur der Textabschnitt mit "Stand:"
            node = soup.find(string=_STAND_RE)
            text = str(node).strip() if node is not None else ""
        match = _LAST_CHANGE_RE.search(text)
        if match:
            return match.group(0)
        match = _STAND_RE.search(text)
        return match.group(1).strip() if match else None

    @staticmethod
    def _messages(table: Tag) -> list[str]:
        messages = []
        for tr in table.find_all("tr"):
            if tr.find("th") is not None:
                continue
            texts = [td.get_text(" ", strip=True) for td in tr.find_all("td")]
            text = ": ".join(t for t in texts if t)
            if text and text != _MESSAGE_HEADER:
                messages.append(text)
        return messages

    def _columns(self, table: Tag) -> list[ColumnType]:
        if self.config.columns:
            return list(self.config.columns)
        header = table.find("tr")
        titles = [th.get_text(" ", strip=True) for th in header.find_all("th")] if header else []
        if not titles:
            raise UnparseableStructureError(
                "Tabelle ohne Kopfzeile und keine Spalten in der Konfiguration"
            )
        return self.detector.detect(titles)

    def _rows(self, table: Tag) -> list[RawRow]:
        columns = self._columns(table)
        has_class_column = ColumnType.CLASS in columns
        current_class: Optional[str] = None
        rows = []
        for tr in table.find_all("tr"):
            tds = tr.find_all("td")
            if not tds:
                continue
            if "inline_header" in _classes(tds[0]):
                current_class = tds[0].get_text(" ", strip=True)
                continue
            if len(tds) > len(columns):
                raise UnparseableStructureError(
                    f"Zeile mit {len(tds)} Zellen, Kopfzeile hat {len(columns)} Spalten"
                )
            cells = [
                RawCell(column=column, text=td.decode_contents())
                for column, td in zip(columns, tds)
            ]
            if not has_class_column and current_class:
                cells.append(RawCell(column=ColumnType.CLASS, text=current_class))
            struck = tr.find("strike") is not None
            rows.append(RawRow(cells=cells, struck=struck))
        return rows
