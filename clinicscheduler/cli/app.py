"""
Main CLI application using Typer.
"""

import logging
import warnings
from datetime import datetime, time
from pathlib import Path
from typing import Annotated, List, Optional

import pendulum
import typer
from pendulum import Date
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.appointment_repository import DEFAULT_DATA_FILE, InMemoryAppointmentRepository
from ..adapters.console_notifier import ConsoleNotificationChannel
from ..adapters.provider_directory import ConfigProviderDirectory
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import ConfigurationWarning, SchedulingError
from ..domain.models import AppointmentCandidate, Frequency, RecurrencePattern, Weekday
from ..domain.recurrence import RecurrenceExpander
from ..services.scheduling import SchedulingService

app = typer.Typer(
    name="clinicscheduler",
    help="Check appointment candidates against provider hours, bookings and recurrence rules",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")]
DurationOption = Annotated[Optional[int], typer.Option("--duration", "-d", help="Appointment duration in minutes")]
RepeatOption = Annotated[Optional[Frequency], typer.Option("--repeat", "-r", help="Recurrence frequency")]
IntervalOption = Annotated[int, typer.Option("--interval", help="Repeat every N days/weeks/months/years")]
CountOption = Annotated[Optional[int], typer.Option("--count", "-n", help="Number of occurrences, including the first")]
UntilOption = Annotated[Optional[str], typer.Option("--until", help="Last possible date (YYYY-MM-DD)")]
DaysOption = Annotated[Optional[List[str]], typer.Option("--day", help="Weekday for weekly repeats (repeatable, e.g. --day mon --day thu)")]
DayOfMonthOption = Annotated[Optional[int], typer.Option("--day-of-month", help="Day of month for monthly repeats")]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _parse_date(value: str, tz: str) -> Date:
    if value.lower() == "today":
        return pendulum.today(tz).date()
    try:
        return pendulum.from_format(value, "YYYY-MM-DD").date()
    except Exception as e:
        console.print(f"[red]Fehler beim Parsen des Datums '{value}': {e}[/red]")
        raise typer.Exit(1)


def _parse_time(value: str) -> time:
    try:
        return datetime.strptime(value, "%H:%M").time()
    except ValueError:
        console.print(f"[red]Ungültige Uhrzeit '{value}', erwartet HH:MM[/red]")
        raise typer.Exit(1)


def _build_pattern(
    *,
    tz: str,
    repeat: Optional[Frequency],
    interval: int,
    count: Optional[int],
    until: Optional[str],
    days: Optional[List[str]],
    day_of_month: Optional[int],
) -> RecurrencePattern | None:
    """Build a recurrence pattern from CLI options, or None for a single appointment."""
    if repeat is None:
        if count or until or days or day_of_month:
            console.print("[red]Fehler: Wiederholungsoptionen benötigen --repeat.[/red]")
            raise typer.Exit(1)
        return None

    try:
        return RecurrencePattern(
            frequency=repeat,
            interval=interval,
            days_of_week=frozenset(Weekday.parse(day) for day in days or []),
            day_of_month=day_of_month,
            end_date=_parse_date(until, tz) if until else None,
            occurrences=count,
        )
    except ValueError as e:
        console.print(f"[red]Fehler: {e}[/red]")
        raise typer.Exit(1)


def _build_repository(config: AppConfig, mock: bool) -> InMemoryAppointmentRepository:
    if mock:
        return InMemoryAppointmentRepository.from_json(DEFAULT_DATA_FILE)
    if config.appointments_file:
        return InMemoryAppointmentRepository.from_json(config.appointments_file)
    return InMemoryAppointmentRepository()


def _print_capped_warnings(caught: List[warnings.WarningMessage]) -> None:
    for warning in caught:
        if issubclass(warning.category, ConfigurationWarning):
            console.print(f"[yellow]⚠  {warning.message}[/yellow]")


@app.command()
def check(
    provider: Annotated[str, typer.Argument(help="Provider id or last name (e.g. 'DOC-001' or 'smith')")],
    date: Annotated[str, typer.Argument(help="Appointment date (YYYY-MM-DD or 'today')")],
    start: Annotated[str, typer.Argument(help="Start time (HH:MM)")],
    duration: DurationOption = None,
    repeat: RepeatOption = None,
    interval: IntervalOption = 1,
    count: CountOption = None,
    until: UntilOption = None,
    day: DaysOption = None,
    day_of_month: DayOfMonthOption = None,
    mock: Annotated[bool, typer.Option("--mock", help="Mock-Termine aus der mitgelieferten JSON-Datei nutzen.")] = False,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Check an appointment (or a recurring series) for conflicts.

    Examples:

        # Single appointment
        clinicscheduler check smith 2025-01-20 09:00

        # Weekly series on Mondays and Thursdays, 8 occurrences
        clinicscheduler check DOC-001 2025-01-20 10:00 --repeat weekly --day mon --day thu --count 8

        # Against the bundled mock bookings
        clinicscheduler check smith 2025-01-20 09:15 --mock
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file)
        tz = config.timezone

        directory = ConfigProviderDirectory(config)
        provider_config = directory.get_provider(provider)

        seed = AppointmentCandidate(
            provider_id=provider_config.id,
            date=_parse_date(date, tz),
            start_time=_parse_time(start),
            duration_minutes=duration if duration is not None else config.booking.duration_minutes,
        )
        if seed.duration_minutes < config.booking.min_duration_minutes:
            console.print(
                f"[red]Fehler: Mindestdauer ist {config.booking.min_duration_minutes} Minuten.[/red]"
            )
            raise typer.Exit(1)

        pattern = _build_pattern(
            tz=tz, repeat=repeat, interval=interval, count=count,
            until=until, days=day, day_of_month=day_of_month,
        )

        service = SchedulingService(
            provider_directory=directory,
            appointment_repository=_build_repository(config, mock),
            notification_channel=ConsoleNotificationChannel(console),
            expander=RecurrenceExpander(
                max_occurrences=config.recurrence.max_occurrences,
                horizon_months=config.recurrence.horizon_months,
            ),
        )

        console.print(f"\n[bold cyan]🗓️  {provider_config.display_name()}[/bold cyan] – {seed}")
        if pattern:
            console.print(f"   Wiederholung: {pattern.describe()}")
        console.print()

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", ConfigurationWarning)
            checks = service.check_series(seed, pattern)
        _print_capped_warnings(caught)

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("#", justify="right")
        table.add_column("Datum")
        table.add_column("Wochentag")
        table.add_column("Uhrzeit")
        table.add_column("Ergebnis")

        for result in checks:
            candidate = result.occurrence.candidate
            outcome = (
                "[green]✓ buchbar[/green]" if result.bookable
                else f"[red]✗ {len(result.findings)} Konflikt(e)[/red]"
            )
            table.add_row(
                str(result.occurrence.index + 1),
                candidate.date.to_date_string(),
                Weekday.of(candidate.date).label,
                str(candidate.window()),
                outcome,
            )

        console.print()
        console.print(table)

        conflicting = sum(1 for result in checks if not result.bookable)
        if conflicting:
            console.print(f"\n[yellow]⚠ {conflicting} von {len(checks)} Termin(en) mit Konflikten.[/yellow]\n")
        else:
            console.print(f"\n[bold green]✓ Alle {len(checks)} Termin(e) buchbar.[/bold green]\n")

    except FileNotFoundError as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)

    except (SchedulingError, ValueError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def expand(
    date: Annotated[str, typer.Argument(help="Date of the first occurrence (YYYY-MM-DD or 'today')")],
    start: Annotated[str, typer.Argument(help="Start time (HH:MM)")],
    repeat: Annotated[Frequency, typer.Option("--repeat", "-r", help="Recurrence frequency")],
    duration: DurationOption = None,
    interval: IntervalOption = 1,
    count: CountOption = None,
    until: UntilOption = None,
    day: DaysOption = None,
    day_of_month: DayOfMonthOption = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    List the occurrences of a recurring appointment without checking them.

    Example:

        clinicscheduler expand 2025-01-31 09:00 --repeat monthly --count 3
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file)
        tz = config.timezone

        seed = AppointmentCandidate(
            provider_id="-",
            date=_parse_date(date, tz),
            start_time=_parse_time(start),
            duration_minutes=duration if duration is not None else config.booking.duration_minutes,
        )
        pattern = _build_pattern(
            tz=tz, repeat=repeat, interval=interval, count=count,
            until=until, days=day, day_of_month=day_of_month,
        )

        expander = RecurrenceExpander(
            max_occurrences=config.recurrence.max_occurrences,
            horizon_months=config.recurrence.horizon_months,
        )
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", ConfigurationWarning)
            occurrences = expander.expand(seed, pattern)
        _print_capped_warnings(caught)

        table = Table(
            title=f"Termine – {pattern.describe()}",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("#", justify="right")
        table.add_column("Datum", style="bold yellow")
        table.add_column("Wochentag")
        table.add_column("Uhrzeit", style="dim")

        for occurrence in occurrences:
            table.add_row(
                str(occurrence.index + 1),
                occurrence.date.to_date_string(),
                Weekday.of(occurrence.date).label,
                str(occurrence.candidate.window()),
            )

        console.print()
        console.print(table)
        console.print()

    except FileNotFoundError as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)

    except (SchedulingError, ValueError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def providers(
    config_file: ConfigOption = None,
):
    """
    List all configured providers with their weekly working hours.
    """
    try:
        config = _load_config(config_file)

        if not config.providers:
            console.print("[yellow]Keine Ärzte in der Config-Datei definiert.[/yellow]")
            return

        table = Table(
            title="Konfigurierte Ärzte",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("ID", style="bold yellow")
        table.add_column("Name")
        for weekday in Weekday:
            table.add_column(weekday.label[:2], style="dim")

        for provider in config.providers:
            hours = provider.working_hours
            cells = []
            for weekday in Weekday:
                entry = hours.get(weekday.name.lower())
                if entry is None:
                    cells.append("?")
                elif not entry.available:
                    cells.append("–")
                else:
                    cells.append(f"{entry.start:%H:%M}-{entry.end:%H:%M}")
            table.add_row(provider.id, provider.display_name(), *cells)

        console.print()
        console.print(table)
        console.print()

    except FileNotFoundError as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)

    except (SchedulingError, ValueError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]clinicscheduler[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
