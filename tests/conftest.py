"""Shared fixtures: an in-memory DuckDB store seeded with children and trials."""

from datetime import date

import pytest

from anak_trials.adapters.storage import DuckDBAdapter

CHILDREN = [
    ("1234567890", "Budi Santoso", date(2014, 1, 1), 2020),
    ("2222222222", "Ani Lestari", date(2013, 5, 17), 2019),
    ("3333333333", "Ani Lestari", date(2012, 3, 2), 2019),
    ("4444444444", "Citra Dewi", date(2014, 8, 9), 2020),
]

MEDICINES = [
    ("PCT", "Paracetamol"),
    ("IBU", "Ibuprofen"),
]

# id, nisn, medicine_kode, heart_rate_24, blood_pressure_24, respirate_24, temperature_24, pain_score_24
TRIALS = [
    (1, "1234567890", "PCT", 88, "110/70", 22, 36.8, 2),
    (2, "1234567890", "UNKNOWN", 92, "115/75", 24, 37.2, 4),
    (42, "2222222222", "IBU", 80, "100/65", 20, 36.5, 1),
]

TRIAL_NISN = {trial[0]: trial[1] for trial in TRIALS}


def seed(adapter: DuckDBAdapter) -> None:
    for row in CHILDREN:
        adapter._execute(
            "INSERT INTO anak (nisn, nama, tanggal_lahir, tahun_masuk) VALUES (?, ?, ?, ?)",
            row,
            fetch=False,
        )
    for row in MEDICINES:
        adapter._execute("INSERT INTO medicine (kode, nama) VALUES (?, ?)", row, fetch=False)
    for row in TRIALS:
        adapter._execute(
            """
            INSERT INTO clinical_trials
                (id, nisn, medicine_kode, heart_rate_24, blood_pressure_24,
                 respirate_24, temperature_24, pain_score_24, pain_location_24)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            row + ("abdomen",),
            fetch=False,
        )


@pytest.fixture
def duckdb_adapter():
    """Empty in-memory store with the schema created."""
    adapter = DuckDBAdapter(db_path=":memory:")
    result = adapter.initialize_schema()
    assert result.is_success(), result.error
    yield adapter
    adapter.close()


@pytest.fixture
def seeded_adapter(duckdb_adapter):
    seed(duckdb_adapter)
    return duckdb_adapter
