"""Vertretungsplan: Haupt-CLI.

Verwendung:
  python main.py parse <datei> -s schule.yaml      Plan einlesen und anzeigen
  python main.py parse <datei> --json plan.json    ... und als JSON speichern
  python main.py parse <datei> --excel plan.xlsx   ... und als Excel exportieren
  python main.py classify "fällt aus"              Vertretungsart bestimmen
  python main.py describe "für Deutsch Müller"     Info-Text zerlegen
  python main.py parse-date "Montag, 11.3.2024"    Datum normalisieren
  python main.py diff alt.json neu.json            Zwei Stände vergleichen
  python main.py config init <pfad>                Beispielkonfiguration anlegen
  python main.py config show <pfad>                Konfiguration anzeigen
  python main.py config list                       Gespeicherte Schulen auflisten
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()


def _load_config_or_abort(path: Optional[Path]):
    """Lädt die Schulkonfiguration oder bricht mit Fehlermeldung ab."""
    from config.defaults import default_school_config
    from config.manager import ConfigManager

    if path is None:
        return default_school_config()
    try:
        return ConfigManager().load(path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


# ─── PARSE ────────────────────────────────────────────────────────────────────

@click.command("parse")
@click.argument("datei", type=click.Path(exists=True, path_type=Path))
@click.option("--school", "-s", "school", type=click.Path(exists=True, path_type=Path),
              default=None, help="Schulkonfiguration (YAML).")
@click.option("--format", "-f", "fmt", type=click.Choice(["csv", "untis"]),
              default="untis", show_default=True, help="Format der Quelle.")
@click.option("--infos", type=click.Path(exists=True, path_type=Path), default=None,
              help="CSV mit Zusatzinformationen (nur --format csv).")
@click.option("--json", "json_path", type=click.Path(path_type=Path), default=None,
              help="Plan als JSON speichern.")
@click.option("--excel", "excel_path", type=click.Path(path_type=Path), default=None,
              help="Plan als Excel-Datei exportieren.")
def cmd_parse(datei: Path, school: Optional[Path], fmt: str, infos: Optional[Path],
              json_path: Optional[Path], excel_path: Optional[Path]):
    """Liest eine Vertretungsplan-Datei ein und zeigt den Plan an."""
    from assembly.assembler import ScheduleAssembler
    from assembly.errors import ScheduleError
    from data.csv_import import CsvScheduleAdapter
    from data.untis_monitor import UntisMonitorAdapter

    config = _load_config_or_abort(school)
    assembler = ScheduleAssembler(config)

    try:
        if fmt == "csv":
            adapter = CsvScheduleAdapter(config, dates=assembler.dates)
        else:
            adapter = UntisMonitorAdapter(config)
    except ScheduleError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    pages = [lambda: adapter.read(datei.read_text(encoding="utf-8"))]
    if infos is not None:
        if fmt != "csv":
            raise click.UsageError("--infos ist nur mit --format csv möglich.")
        pages.append(lambda: adapter.read_additional_infos(infos.read_text(encoding="utf-8")))

    try:
        schedule = assembler.assemble(pages)
    except (ScheduleError, ValueError) as e:
        console.print(f"[red]Plan konnte nicht gelesen werden:[/red] {e}")
        sys.exit(1)

    for error in assembler.last_errors:
        console.print(f"[yellow]Warnung:[/yellow] {error}")

    schedule.print_rich()

    if json_path is not None:
        schedule.save_json(json_path)
        console.print(f"[green]✓[/green] JSON gespeichert: {json_path}")
    if excel_path is not None:
        from export.excel_export import ScheduleExcelExporter
        ScheduleExcelExporter(schedule).export(excel_path)
        console.print(f"[green]✓[/green] Excel gespeichert: {excel_path}")


# ─── CLASSIFY / DESCRIBE / PARSE-DATE ─────────────────────────────────────────

@click.command("classify")
@click.argument("text")
@click.option("--school", "-s", "school", type=click.Path(exists=True, path_type=Path),
              default=None, help="Schulkonfiguration (YAML) für eigene Farben.")
def cmd_classify(text: str, school: Optional[Path]):
    """Bestimmt die Vertretungsart und Farbe zu einem Freitext."""
    from normalizer.classifier import TypeClassifier
    from normalizer.colors import ColorProvider

    config = _load_config_or_abort(school)
    type_ = TypeClassifier().classify(text)
    if type_ is None:
        console.print("[dim]Keine Vertretungsart erkannt.[/dim]")
        return
    color = ColorProvider(config.colors).get_color(type_)
    console.print(f"[bold]{type_}[/bold]  [{color}]■[/{color}] {color}")


@click.command("describe")
@click.argument("text")
@click.option("--teacher-schedule", is_flag=True, default=False,
              help="Text stammt aus einem Lehrerplan.")
def cmd_describe(text: str, teacher_schedule: bool):
    """Zerlegt einen Info-Text in Art, Fach, Lehrkraft und Bemerkung."""
    from models.substitution import SubstitutionBuilder
    from normalizer.description import DescriptionParser

    builder = SubstitutionBuilder()
    DescriptionParser().parse_description(builder, text, teacher_schedule)

    table = Table(title="Info-Text", box=box.ROUNDED)
    table.add_column("Feld", style="bold")
    table.add_column("Wert")
    table.add_row("Art", builder.type or "")
    table.add_row("Fach (vorher)", builder.previous_subject or "")
    table.add_row("Lehrkraft", ", ".join(sorted(builder.teachers)))
    table.add_row("Lehrkraft (vorher)", ", ".join(sorted(builder.previous_teachers)))
    table.add_row("Klassen", ", ".join(sorted(builder.classes)))
    table.add_row("Bemerkung", builder.desc or "")
    console.print(table)


@click.command("parse-date")
@click.argument("text")
def cmd_parse_date(text: str):
    """Normalisiert eine Datums- oder Zeitangabe."""
    from normalizer.dates import DateTimeNormalizer

    dates = DateTimeNormalizer()
    value = dates.parse_datetime(text) or dates.parse_date(text)
    if value is None:
        console.print(f"[red]Nicht erkannt:[/red] {text}")
        sys.exit(1)
    console.print(value.isoformat())


# ─── DIFF ─────────────────────────────────────────────────────────────────────

@click.command("diff")
@click.argument("old", type=click.Path(exists=True, path_type=Path))
@click.argument("new", type=click.Path(exists=True, path_type=Path))
@click.option("--json", "as_json", is_flag=True, default=False,
              help="Unterschiede als JSON ausgeben.")
def cmd_diff(old: Path, new: Path, as_json: bool):
    """Vergleicht zwei gespeicherte Stände (JSON) eines Vertretungsplans."""
    from analysis.diff import diff_schedules
    from models.schedule import SubstitutionSchedule

    result = diff_schedules(SubstitutionSchedule.load_json(old),
                            SubstitutionSchedule.load_json(new))
    if as_json:
        click.echo(result.to_json())
    else:
        result.print_rich()


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Schulkonfigurationen anlegen, anzeigen und auflisten."""


@cmd_config.command("init")
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--name", default="Beispielschule", help="Name der Schule.")
@click.option("--force", is_flag=True, default=False, help="Vorhandene Datei überschreiben.")
def config_init(path: Path, name: str, force: bool):
    """Legt eine kommentierte Beispielkonfiguration an."""
    from config.defaults import default_school_config
    from config.manager import ConfigManager

    if path.exists() and not force:
        console.print(f"[yellow]{path} existiert bereits.[/yellow] Mit --force überschreiben.")
        sys.exit(1)
    ConfigManager().save(default_school_config(name), path)


@cmd_config.command("show")
@click.argument("path", type=click.Path(exists=True, path_type=Path))
def config_show(path: Path):
    """Zeigt eine Schulkonfiguration an."""
    from normalizer.classes import classes_from_roster

    config = _load_config_or_abort(path)

    console.print(Panel(
        f"[bold]{config.school_name}[/bold]  |  {config.schedule_type.value}"
        + (f"  |  {config.website}" if config.website else ""),
        title="Schulkonfiguration",
        border_style="cyan",
    ))

    roster = classes_from_roster(config.classes)
    console.print(f"[bold]Klassen:[/bold] {len(roster)} "
                  f"({', '.join(roster[:12])}{' …' if len(roster) > 12 else ''})")
    if config.class_ranges:
        r = config.class_ranges
        console.print(f"[bold]Klassenbereiche:[/bold] {r.range_format} / {r.single_format}")

    if config.colors:
        table = Table(title="Farben", box=box.ROUNDED)
        table.add_column("Art")
        table.add_column("Farbe")
        for type_, color in config.colors.items():
            table.add_row(type_, color)
        console.print(table)

    if config.columns:
        console.print(f"[bold]Spalten:[/bold] {', '.join(c.value for c in config.columns)}")

    console.print(
        f"[bold]Auswertung:[/bold] Typ-Erkennung {'an' if config.type_auto_detection else 'aus'} | "
        f"Lehrkräfte trennen {'an' if config.split_teachers else 'aus'} | "
        f"Zusammenführen bei anderem Typ {'an' if config.merge_with_different_type else 'aus'}"
    )


@cmd_config.command("list")
@click.option("--dir", "schools_dir", type=click.Path(path_type=Path), default=None,
              help="Verzeichnis mit Schulkonfigurationen.")
def config_list(schools_dir: Optional[Path]):
    """Listet alle gespeicherten Schulkonfigurationen auf."""
    from config.manager import ConfigManager
    schools = ConfigManager(schools_dir).list_schools()

    if not schools:
        console.print("[dim]Keine Schulen vorhanden.[/dim]")
        return

    table = Table(title="Gespeicherte Schulen", box=box.ROUNDED)
    table.add_column("Name", style="bold")
    table.add_column("Schule")
    table.add_column("Plan")
    for s in schools:
        table.add_row(s["name"], s["school_name"], s["schedule_type"])
    console.print(table)


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Ausführliche Log-Ausgabe.")
def cli(verbose: bool):
    """Vertretungsplan: Einlesen und Vereinheitlichen von Schul-Vertretungsplänen."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def main():
    cli()


# Befehle registrieren
cli.add_command(cmd_parse)
cli.add_command(cmd_classify)
cli.add_command(cmd_describe)
cli.add_command(cmd_parse_date)
cli.add_command(cmd_diff)
cli.add_command(cmd_config)


if __name__ == "__main__":
    main()
