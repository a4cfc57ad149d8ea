"""
Synthetic prescription generator for the prescription desk.

Implements deterministic pseudo-random patient visits, CSV emission, and Postgres
COPY loading, for demos and for exercising the list, filter, and export paths on
realistic volumes.
"""

from __future__ import annotations

import csv
import random
import sys
import tempfile
import time
from datetime import UTC, datetime, timedelta
from pathlib import Path

import psycopg
import typer
from psycopg import sql

from prescription_desk.config import get_settings
from prescription_desk.domain.models import DEPARTMENTS, Gender, VisitType
from prescription_desk.infrastructure.db_factory import build_dsn
from prescription_desk.infrastructure.record_store import ensure_schema

app = typer.Typer(help="Generate synthetic prescriptions and load into Postgres (CSV + COPY).")

CSV_COLUMNS = [
    "created_at",
    "updated_at",
    "name",
    "age",
    "gender",
    "department",
    "type",
    "room_number",
    "address",
    "aadhar_number",
    "mobile_number",
]

FIRST_NAMES = ["Aarav", "Diya", "Ishaan", "Kavya", "Rohan", "Sneha", "Arjun", "Meera", "Vikram", "Anaya"]
LAST_NAMES = ["Sharma", "Patel", "Reddy", "Nair", "Singh", "Das", "Iyer", "Khan", "Gupta", "Verma"]
CITIES = ["Patna", "Lucknow", "Jaipur", "Bhopal", "Ranchi", "Raipur"]


def _build_dsn(dsn_override: str | None) -> str:
    if dsn_override:
        return dsn_override
    return build_dsn()


def _optional(rng: random.Random, value: str, probability: float = 0.7) -> str:
    """Empty CSV cell (NULL on COPY) for roughly 1 - probability of rows."""
    return value if rng.random() < probability else ""


def _generate_rows_csv(
    csv_path: Path, rows: int, batch_size: int, seed: int, days: int = 60
) -> None:
    rng = random.Random(seed)
    now = datetime.now(UTC)
    genders = [g.value for g in Gender]
    types = [t.value for t in VisitType]

    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_COLUMNS)

        buffer: list[list[str]] = []
        for _ in range(rows):
            created = now - timedelta(minutes=rng.randint(0, days * 24 * 60))
            gender = rng.choice(genders)
            visit_type = "ANC" if gender == "female" and rng.random() < 0.3 else rng.choice(types)
            buffer.append(
                [
                    created.isoformat(),
                    created.isoformat(),
                    f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
                    str(rng.randint(1, 95)),
                    gender,
                    rng.choice(DEPARTMENTS),
                    visit_type,
                    _optional(rng, str(rng.randint(100, 450)), 0.5),
                    _optional(rng, f"{rng.randint(1, 300)} Main Road, {rng.choice(CITIES)}"),
                    _optional(rng, " ".join(f"{rng.randint(0, 9999):04d}" for _ in range(3)), 0.6),
                    _optional(rng, f"9{rng.randint(100_000_000, 999_999_999)}"),
                ]
            )
            if len(buffer) >= batch_size:
                writer.writerows(buffer)
                buffer.clear()
        if buffer:
            writer.writerows(buffer)


def _copy_into_db(dsn: str, csv_path: Path, table: str | None = None) -> int:
    """COPY the CSV into the records table; registration numbers come from the identity."""
    table = table or get_settings().records_table
    statement = sql.SQL("COPY {table} ({columns}) FROM STDIN WITH (FORMAT csv, HEADER TRUE)").format(
        table=sql.Identifier("public", table),
        columns=sql.SQL(", ").join(sql.Identifier(column) for column in CSV_COLUMNS),
    )
    with psycopg.connect(dsn) as conn:
        ensure_schema(conn, table)
        with conn.cursor() as cur:
            with cur.copy(statement) as copy:
                with csv_path.open("r", encoding="utf-8") as f:
                    for line in f:
                        copy.write(line)
            loaded = cur.rowcount
        conn.commit()
    return loaded


@app.command()
def main(
    rows: int = typer.Option(
        500,
        "--rows",
        "-r",
        help="Number of prescriptions to generate.",
    ),
    batch_size: int = typer.Option(
        1_000,
        "--batch-size",
        "-b",
        help="Batch size for CSV buffering during generation.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    days: int = typer.Option(
        60,
        "--days",
        help="Spread created_at over this many past days.",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Optional CSV output path (if omitted, a temp file will be used).",
    ),
    dsn: str | None = typer.Option(
        None,
        "--dsn",
        help="Optional DSN override for Postgres.",
    ),
    no_load: bool = typer.Option(
        False,
        "--no-load",
        help="Only generate CSV; skip loading into Postgres.",
    ),
) -> None:
    """
    Generate synthetic prescriptions and optionally load them into Postgres using COPY.
    """
    start = time.perf_counter()
    if output:
        csv_path = output
        csv_path.parent.mkdir(parents=True, exist_ok=True)
    else:
        tmpdir = Path(tempfile.mkdtemp(prefix="prescriptions_csv_"))
        csv_path = tmpdir / "prescriptions.csv"

    typer.echo(f"Generating {rows:,} prescriptions -> {csv_path} (seed={seed}, days={days})")
    _generate_rows_csv(csv_path, rows=rows, batch_size=batch_size, seed=seed, days=days)
    typer.echo(f"CSV generation completed in {time.perf_counter() - start:.2f}s")

    if no_load:
        typer.echo("Skipping load (no-load flag set).")
        return

    typer.echo("Loading CSV into Postgres via COPY...")
    loaded = _copy_into_db(_build_dsn(dsn), csv_path)
    typer.echo(f"Loaded {loaded:,} rows in {time.perf_counter() - start:.2f}s total.")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
