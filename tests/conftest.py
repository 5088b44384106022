import csv
from pathlib import Path

import pytest


@pytest.fixture
def write_ledger(tmp_path):
    """Write CSV text to a ledger file and return its path."""
    def _write(text: str, name: str = "ledger.csv") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def read_rows():
    def _read(path: Path):
        with Path(path).open(newline="", encoding="utf-8") as f:
            return list(csv.reader(f))
    return _read


@pytest.fixture
def trip_ledger(write_ledger):
    # matrix[0][1] = 7, matrix[0][2] = 10, matrix[1][2] = 15
    return write_ledger(
        "Item,Alice owes,Bob owes,Cara owes,Who paid\n"
        "Tickets,7,0,0,1\n"
        "Dinner,10,15,0,2\n"
    )
