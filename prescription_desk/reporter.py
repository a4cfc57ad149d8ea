from __future__ import annotations

from datetime import tzinfo
from typing import Mapping, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from prescription_desk.domain.models import Record
from prescription_desk.export.columns import PLACEHOLDER, format_date
from prescription_desk.filters import local_zone
from prescription_desk.pagination import Page
from prescription_desk.validation import FIELD_LABELS

TYPE_STYLES = {"ANC": "green", "General": "blue", "JSSK": "magenta"}


def _console(console: Optional[Console]) -> Console:
    return console or Console()


def records_table(
    page: Page[Record],
    loaded_total: int,
    active_filters: int = 0,
    tz: Optional[tzinfo] = None,
) -> Table:
    """
    Build the list view for one page of filtered records.

    The caption reports the visible window, the filtered count, and (when filters are
    active) the size of the unfiltered set.
    """
    zone = tz or local_zone()
    table = Table(title="Prescriptions", box=box.ROUNDED)

    table.add_column("Reg. No.", style="cyan", no_wrap=True)
    table.add_column("Patient Name", style="bold")
    table.add_column("Age", justify="right")
    table.add_column("Gender")
    table.add_column("Room", justify="center")
    table.add_column("Department")
    table.add_column("Type")
    table.add_column("Mobile")
    table.add_column("Date", style="dim")

    for record in page.items:
        visit = record.type.value
        table.add_row(
            record.display_number,
            escape(record.name),
            str(record.age),
            record.gender.value.capitalize(),
            record.room_number or PLACEHOLDER,
            record.department,
            f"[{TYPE_STYLES.get(visit, 'white')}]{visit}[/]",
            record.mobile_number or PLACEHOLDER,
            format_date(record, zone),
        )

    if page.total_items == 0:
        caption = "No prescriptions found. Try adjusting your search criteria or filters."
    else:
        noun = "prescription" if page.total_items == 1 else "prescriptions"
        caption = (
            f"Showing {page.first_index}-{page.last_index} of {page.total_items} {noun}"
            f" | page {page.page}/{page.total_pages}"
        )
    if active_filters and page.total_items != loaded_total:
        caption += f" (filtered from {loaded_total} total, {active_filters} active filter(s))"
    table.caption = caption
    return table


def print_records(
    page: Page[Record],
    loaded_total: int,
    active_filters: int = 0,
    console: Optional[Console] = None,
    tz: Optional[tzinfo] = None,
) -> None:
    _console(console).print(records_table(page, loaded_total, active_filters, tz))


def record_panel(record: Record, tz: Optional[tzinfo] = None) -> Panel:
    """Printable registration slip for a single record."""
    zone = tz or local_zone()
    created = record.created_at
    created = created.astimezone(zone) if created.tzinfo else created.replace(tzinfo=zone)

    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="bold")
    grid.add_column()
    grid.add_row("Registration No:", record.display_number)
    grid.add_row("Date:", created.strftime("%d %B %Y, %I:%M %p"))
    grid.add_row("Name:", escape(record.name))
    grid.add_row("Age / Gender:", f"{record.age} / {record.gender.value.capitalize()}")
    grid.add_row("Department:", record.department)
    grid.add_row("Type:", f"[{TYPE_STYLES.get(record.type.value, 'white')}]{record.type.value}[/]")
    grid.add_row("Room:", record.room_number or PLACEHOLDER)
    grid.add_row("Mobile:", record.mobile_number or PLACEHOLDER)
    grid.add_row("Aadhar:", record.aadhar_number or PLACEHOLDER)
    grid.add_row("Address:", escape(record.address or PLACEHOLDER))
    return Panel(grid, title="Prescription", box=box.ROUNDED, expand=False)


def print_record(record: Record, console: Optional[Console] = None, tz: Optional[tzinfo] = None) -> None:
    _console(console).print(record_panel(record, tz))


def print_field_errors(errors: Mapping[str, str], console: Optional[Console] = None) -> None:
    table = Table(title="Please fix the following", box=box.SIMPLE, title_style="bold red")
    table.add_column("Field", style="cyan")
    table.add_column("Problem", style="red")
    for field, message in errors.items():
        table.add_row(FIELD_LABELS.get(field, field), message)
    _console(console).print(table)


def notify(title: str, message: str, error: bool = False, console: Optional[Console] = None) -> None:
    """Dismissable notification: a short titled panel, red for failures."""
    style = "red" if error else "green"
    _console(console).print(Panel(escape(message), title=f"[bold {style}]{title}[/]", border_style=style, expand=False))


__all__ = [
    "notify",
    "print_field_errors",
    "print_record",
    "print_records",
    "record_panel",
    "records_table",
]
