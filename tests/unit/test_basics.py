import csv
from pathlib import Path

from prescription_desk import config
from prescription_desk.domain.models import DEPARTMENTS
from scripts import generate_data


def test_get_settings_defaults():
    settings = config.get_settings()
    assert settings.db_host == "localhost"
    assert settings.db_port == 5432
    assert settings.db_user == "postgres"
    assert settings.records_table == "prescriptions"
    assert settings.page_size > 0
    assert settings.refresh_interval_seconds > 0
    assert settings.export_entity == "Hospital_Prescriptions"


def test_settings_accept_env_aliases(monkeypatch):
    monkeypatch.setenv("PAGE_SIZE", "25")
    monkeypatch.setenv("LOCAL_TIMEZONE", "UTC")
    settings = config.Settings()
    assert settings.page_size == 25
    assert settings.local_timezone == "UTC"


def test_default_department_list_has_fifteen_entries():
    assert len(DEPARTMENTS) == 15
    assert list(config.Settings().departments) == list(DEPARTMENTS)


def test_generate_data_writes_csv(tmp_path: Path):
    csv_path = tmp_path / "prescriptions.csv"
    # Generate a tiny dataset without loading into DB
    generate_data._generate_rows_csv(csv_path, rows=5, batch_size=2, seed=123)
    assert csv_path.exists()
    with csv_path.open("r", newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    # header + 5 rows = 6 lines
    assert len(rows) == 6
    header = rows[0]
    assert header == generate_data.CSV_COLUMNS
    for row in rows[1:]:
        record = dict(zip(header, row))
        assert 1 <= int(record["age"]) <= 150
        assert record["gender"] in {"male", "female", "others"}
        assert record["type"] in {"ANC", "General", "JSSK"}
        assert record["department"] in DEPARTMENTS


def test_generate_data_is_deterministic_for_a_seed(tmp_path: Path):
    first = tmp_path / "a.csv"
    second = tmp_path / "b.csv"
    generate_data._generate_rows_csv(first, rows=20, batch_size=7, seed=7)
    generate_data._generate_rows_csv(second, rows=20, batch_size=7, seed=7)

    def without_timestamps(path: Path):
        with path.open("r", newline="", encoding="utf-8") as f:
            return [row[2:] for row in csv.reader(f)]

    assert without_timestamps(first) == without_timestamps(second)
