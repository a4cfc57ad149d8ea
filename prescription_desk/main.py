from __future__ import annotations

import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import psycopg
import typer
from rich.console import Console

from prescription_desk.config import get_settings
from prescription_desk.domain.criteria import ALL_DEPARTMENTS, FilterCriteria
from prescription_desk.domain.models import Gender, VisitType
from prescription_desk.errors import EncodingError, FormValidationError, StoreError
from prescription_desk.export import ExportFormat
from prescription_desk.infrastructure.abstract import RecordStore
from prescription_desk.infrastructure.db_factory import get_sync_connection
from prescription_desk.infrastructure.record_store import PostgresRecordStore, ensure_schema
from prescription_desk.reporter import notify, print_field_errors, print_record, print_records
from prescription_desk.sequencer import next_number
from prescription_desk.session import RecordListSession
from prescription_desk.utils.logging import configure_logging, get_logger
from prescription_desk.utils.ticker import Ticker
from prescription_desk.validation import validate

app = typer.Typer(help="Hospital prescription desk CLI.")
console = Console()
log = get_logger(__name__)

DATE_FORMATS = ["%Y-%m-%d"]


def _build_store() -> RecordStore:
    return PostgresRecordStore()


def _criteria(
    search: Optional[str],
    genders: Optional[List[Gender]],
    types: Optional[List[VisitType]],
    department: Optional[str],
    date_from: Optional[datetime],
    date_to: Optional[datetime],
) -> FilterCriteria:
    return FilterCriteria(
        search_text=search or "",
        genders=frozenset(genders or ()),
        types=frozenset(types or ()),
        department=department or ALL_DEPARTMENTS,
        date_from=date_from.date() if date_from else None,
        date_to=date_to.date() if date_to else None,
    )


def _load(session: RecordListSession) -> None:
    try:
        session.refresh()
    except StoreError as exc:
        notify("Could not load prescriptions", str(exc), error=True, console=console)
        raise typer.Exit(code=1)


@app.callback()
def setup() -> None:
    """Configure logging from settings before any command runs."""
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} "
        f"table={settings.records_table} | page_size={settings.page_size} "
        f"tz={settings.local_timezone} exports={settings.export_dir}"
    )


@app.command("init-db")
def init_db() -> None:
    """
    Create the prescriptions table if it does not exist.
    """
    try:
        with get_sync_connection() as conn:
            ensure_schema(conn)
    except psycopg.Error as exc:
        notify("Schema setup failed", str(exc), error=True, console=console)
        raise typer.Exit(code=1)
    typer.echo(f"Table '{get_settings().records_table}' is ready.")


@app.command("next-number")
def next_number_command() -> None:
    """
    Show the registration number the next prescription is expected to get.
    """
    suggestion = next_number(_build_store())
    if suggestion.error:
        notify("Registration number unavailable", suggestion.error, error=True, console=console)
    typer.echo(f"{suggestion.value:06d}")


@app.command()
def register(
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Patient name."),
    age: Optional[str] = typer.Option(None, "--age", "-a", help="Age in years (1-150)."),
    gender: Optional[str] = typer.Option(None, "--gender", "-g", help="male, female or others."),
    department: Optional[str] = typer.Option(None, "--department", "-d", help="Department name."),
    visit_type: Optional[str] = typer.Option(None, "--type", "-t", help="ANC, General or JSSK."),
    room_number: Optional[str] = typer.Option(None, "--room", help="Room number."),
    address: Optional[str] = typer.Option(None, "--address", help="Postal address."),
    aadhar_number: Optional[str] = typer.Option(None, "--aadhar", help="Aadhaar number."),
    mobile_number: Optional[str] = typer.Option(None, "--mobile", help="Mobile number."),
) -> None:
    """
    Validate a registration and store it as a new prescription.
    """
    settings = get_settings()
    raw = {
        "name": name,
        "age": age,
        "gender": gender,
        "department": department,
        "type": visit_type,
        "room_number": room_number,
        "address": address,
        "aadhar_number": aadhar_number,
        "mobile_number": mobile_number,
    }
    try:
        new_record = validate(raw, settings.departments)
    except FormValidationError as exc:
        print_field_errors(exc.errors, console=console)
        raise typer.Exit(code=2)

    store = _build_store()
    try:
        record = store.insert(new_record)
    except StoreError as exc:
        log.error("Prescription not created", extra={"error": str(exc)})
        notify("Error", "Failed to create prescription. Please try again.", error=True, console=console)
        raise typer.Exit(code=1)

    notify("Success", "Prescription created successfully!", console=console)
    print_record(record, console=console)


@app.command()
def show(registration_number: int = typer.Argument(..., help="Registration number to show.")) -> None:
    """
    Print the registration slip of one prescription.
    """
    session = RecordListSession(_build_store())
    _load(session)
    for record in session.records:
        if record.registration_number == registration_number:
            print_record(record, console=console, tz=session.tz)
            return
    notify("Not found", f"No prescription with registration number {registration_number}.", error=True, console=console)
    raise typer.Exit(code=1)


@app.command("list")
def list_records(
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Name or registration number."),
    genders: Optional[List[Gender]] = typer.Option(None, "--gender", "-g", case_sensitive=False),
    types: Optional[List[VisitType]] = typer.Option(None, "--type", "-t", case_sensitive=False),
    department: Optional[str] = typer.Option(None, "--department", "-d", help="Department or 'all'."),
    date_from: Optional[datetime] = typer.Option(None, "--from", formats=DATE_FORMATS),
    date_to: Optional[datetime] = typer.Option(None, "--to", formats=DATE_FORMATS),
    page: int = typer.Option(1, "--page", "-p", help="Page to show (clamped to the available pages)."),
    page_size: Optional[int] = typer.Option(None, "--page-size", min=1),
) -> None:
    """
    List prescriptions, newest first, one page at a time.
    """
    criteria = _criteria(search, genders, types, department, date_from, date_to)
    session = RecordListSession(_build_store(), page_size=page_size, criteria=criteria)
    _load(session)
    session.go_to(page)
    print_records(
        session.current_page(),
        len(session.records),
        criteria.active_count,
        console=console,
        tz=session.tz,
    )


@app.command()
def export(
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Name or registration number."),
    genders: Optional[List[Gender]] = typer.Option(None, "--gender", "-g", case_sensitive=False),
    types: Optional[List[VisitType]] = typer.Option(None, "--type", "-t", case_sensitive=False),
    department: Optional[str] = typer.Option(None, "--department", "-d", help="Department or 'all'."),
    date_from: Optional[datetime] = typer.Option(None, "--from", formats=DATE_FORMATS),
    date_to: Optional[datetime] = typer.Option(None, "--to", formats=DATE_FORMATS),
    formats: Optional[List[ExportFormat]] = typer.Option(
        None, "--format", "-f", case_sensitive=False, help="xlsx and/or pdf (default: both)."
    ),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", help="Defaults to EXPORT_DIR."),
) -> None:
    """
    Export every prescription matching the filters to spreadsheet and/or PDF.
    """
    criteria = _criteria(search, genders, types, department, date_from, date_to)
    session = RecordListSession(_build_store(), criteria=criteria)
    _load(session)

    matching = len(session.filtered())
    if matching == 0:
        notify("Nothing to export", "No prescriptions match the current filters.", console=console)
        return

    failures = 0
    for fmt in formats or list(ExportFormat):
        label = fmt.value.upper()
        try:
            path = session.export(fmt, out_dir=output_dir)
        except EncodingError as exc:
            failures += 1
            notify(f"{label} Export Failed", str(exc), error=True, console=console)
            continue
        notify(
            f"{label} Export Successful",
            f"{matching} prescriptions exported to {path}",
            console=console,
        )
    if failures:
        raise typer.Exit(code=1)


@app.command()
def watch(
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Name or registration number."),
    genders: Optional[List[Gender]] = typer.Option(None, "--gender", "-g", case_sensitive=False),
    types: Optional[List[VisitType]] = typer.Option(None, "--type", "-t", case_sensitive=False),
    department: Optional[str] = typer.Option(None, "--department", "-d", help="Department or 'all'."),
    date_from: Optional[datetime] = typer.Option(None, "--from", formats=DATE_FORMATS),
    date_to: Optional[datetime] = typer.Option(None, "--to", formats=DATE_FORMATS),
    interval: Optional[float] = typer.Option(None, "--interval", "-i", min=0.01, help="Seconds between refreshes."),
    ticks: int = typer.Option(0, "--ticks", min=0, help="Stop after this many refreshes (0 = until Ctrl+C)."),
) -> None:
    """
    Show the first page and refresh it periodically until interrupted.
    """
    settings = get_settings()
    criteria = _criteria(search, genders, types, department, date_from, date_to)
    session = RecordListSession(_build_store(), criteria=criteria)
    done = threading.Event()
    refreshes = 0

    def refresh() -> None:
        nonlocal refreshes
        try:
            session.refresh()
        except StoreError as exc:
            notify("Refresh failed", str(exc), error=True, console=console)
        print_records(
            session.current_page(),
            len(session.records),
            criteria.active_count,
            console=console,
            tz=session.tz,
        )
        refreshes += 1
        if ticks and refreshes >= ticks:
            done.set()

    with Ticker(interval or settings.refresh_interval_seconds, refresh, name="auto-refresh", immediate=True):
        try:
            while not done.wait(timeout=0.5):
                pass
        except KeyboardInterrupt:
            typer.echo("Stopped auto-refresh.")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
