"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional, Tuple

import typer
from rich.console import Console
from rich.table import Table

from ..adapters.memory_repository import InMemoryBookingRepository
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import BookingSlotsError
from ..domain.models import BookingRequest
from ..domain.slot_calculator import SlotCalculator
from ..services.booking_service import BookingService

app = typer.Typer(
    name="bookingslots",
    help="Compute open booking slots and create conflict-free bookings",
    add_completion=False
)

console = Console()

logger = logging.getLogger(__name__)

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")]


def _configure_logging(level: str) -> None:
    root_logger = logging.getLogger()
    if root_logger.handlers:
        root_logger.setLevel(level)
        return
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _build_service(
    config_file: Optional[Path],
    verbose: bool,
) -> Tuple[AppConfig, InMemoryBookingRepository, BookingService]:
    """
    Load configuration and wire repository, calculator and service together.
    """
    config_path = config_file or get_default_config_path()
    config = AppConfig.load_from_yaml(config_path)
    _configure_logging("DEBUG" if verbose else config.log_level)

    repository = InMemoryBookingRepository.from_yaml(config.data_file)
    calculator = SlotCalculator(holidays=config.holiday_set())
    service = BookingService(repository=repository, slot_calculator=calculator)

    logger.debug(
        "Loaded data from %s with %d holiday(s)",
        config.data_file,
        len(config.holidays),
    )
    return config, repository, service


def _fail(message: str) -> None:
    console.print(f"[bold red]Fehler:[/bold red] {message}")
    raise typer.Exit(1)


@app.command()
def availability(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    service_id: Annotated[int, typer.Argument(help="Service ID")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Show the open slots of a service on a date.

    Examples:

        bookingslots availability 2023-10-15 1
    """
    try:
        _, _, service = _build_service(config_file, verbose)
        slots = asyncio.run(service.get_available_slots(service_id=service_id, on_date=date))
    except (BookingSlotsError, FileNotFoundError, ValueError) as e:
        _fail(str(e))

    if not slots:
        console.print(f"[yellow]⚠ Keine freien Slots am {date} für Service {service_id}.[/yellow]")
        return

    console.print(f"[bold green]✓ {len(slots)} freie(r) Slot(s) am {date}:[/bold green]\n")
    for slot in slots:
        console.print(f"  {slot}")


@app.command()
def book(
    service_id: Annotated[int, typer.Argument(help="Service ID")],
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    start: Annotated[str, typer.Argument(help="Start time (HH:MM:SS)")],
    end: Annotated[str, typer.Argument(help="End time (HH:MM:SS)")],
    user_id: Annotated[int, typer.Option("--user", "-u", help="User ID making the booking")] = 1,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Create a booking, rejecting it if it overlaps an existing one.

    Examples:

        bookingslots book 1 2023-10-16 10:00:00 11:00:00 --user 2
    """
    try:
        config, repository, service = _build_service(config_file, verbose)
        request = BookingRequest(
            user_id=user_id,
            service_id=service_id,
            booking_date=date,
            start_time=start,
            end_time=end,
        )
        booking = asyncio.run(service.create_booking(request))
        repository.save(config.data_file)
    except (BookingSlotsError, OSError, ValueError) as e:
        _fail(str(e))

    console.print(f"[green]✓ Booking {booking.id} created successfully[/green]")


@app.command()
def bookings(
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    List all bookings.
    """
    try:
        _, _, service = _build_service(config_file, verbose)
        rows = asyncio.run(service.list_bookings())
    except (BookingSlotsError, FileNotFoundError, ValueError) as e:
        _fail(str(e))

    if not rows:
        console.print("[yellow]Keine Buchungen vorhanden.[/yellow]")
        return

    table = Table(title="Buchungen", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold yellow")
    table.add_column("User")
    table.add_column("Service")
    table.add_column("Datum")
    table.add_column("Zeit", style="dim")

    for booking in rows:
        table.add_row(
            str(booking.id),
            str(booking.user_id),
            str(booking.service_id),
            booking.booking_date.isoformat(),
            str(booking.interval),
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def services(
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    List all configured services.
    """
    try:
        _, _, service = _build_service(config_file, verbose)
        rows = asyncio.run(service.list_services())
    except (BookingSlotsError, FileNotFoundError, ValueError) as e:
        _fail(str(e))

    if not rows:
        console.print("[yellow]Keine Services definiert.[/yellow]")
        return

    table = Table(title="Services", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold yellow")
    table.add_column("Name")
    table.add_column("Dauer")
    table.add_column("Puffer")
    table.add_column("Preis", style="dim")

    for row in rows:
        table.add_row(
            str(row.id),
            row.name,
            f"{row.duration} Min.",
            f"{row.buffer_time} Min.",
            "" if row.price is None else f"{row.price:.2f}",
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]bookingslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
