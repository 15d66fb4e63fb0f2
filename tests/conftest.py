from __future__ import annotations

import io
import os
import sys
import tempfile
from pathlib import Path
from typing import Callable, Dict, List, Sequence

import pytest
from openpyxl import Workbook

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Keep the shared application log out of the user's home directory.
os.environ.setdefault("SCHOOLROUTE_ROOT", tempfile.mkdtemp(prefix="schoolroute-tests-"))

from schoolroute_persist.crypto import RecordCipher

TEST_SECRET_KEY = "test-secret-key"

SheetRows = Sequence[Sequence[object]]


def build_workbook(sheets: Dict[str, SheetRows]) -> bytes:
    """Return XLSX bytes holding *sheets* in insertion order."""

    wb = Workbook()
    wb.remove(wb.active)
    for title, rows in sheets.items():
        ws = wb.create_sheet(title=title)
        for row in rows:
            ws.append(list(row))
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def student_rows(count: int, *, blank_names: Sequence[int] = (), school: str = "EMEF Centro") -> List[List[object]]:
    """Header row plus *count* students; indexes in *blank_names* get an empty name."""

    rows: List[List[object]] = [["Nome do Aluno", "CPF", "Nome da Escola", "Turma"]]
    for idx in range(count):
        name = "" if idx in blank_names else f"Aluno {idx + 1}"
        rows.append([name, f"000.000.000-{idx:02d}", school, "5A"])
    return rows


@pytest.fixture()
def cipher() -> RecordCipher:
    return RecordCipher(TEST_SECRET_KEY)


@pytest.fixture()
def root(tmp_path: Path) -> Path:
    return tmp_path / "persist"


@pytest.fixture()
def workbook_factory() -> Callable[[Dict[str, SheetRows]], bytes]:
    return build_workbook


@pytest.fixture()
def student_rows_factory() -> Callable[..., List[List[object]]]:
    return student_rows
