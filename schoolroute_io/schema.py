"""Shared schemas for spreadsheet import data structures."""

# Module responsibilities:
# - Define the static catalog of canonical student fields a column can map to.
# - Provide lightweight containers for parsed sheets and extracted rows.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

IGNORE = "ignore"

ColumnMap = Dict[str, str]
RawRow = List[object]
SheetRecord = Dict[str, object]

MONTH_ABBREVIATIONS: Tuple[str, ...] = (
    "JAN",
    "FEV",
    "MAR",
    "ABR",
    "MAI",
    "JUN",
    "JUL",
    "AGO",
    "SET",
    "OUT",
    "NOV",
    "DEZ",
)


@dataclass(frozen=True)
class FieldOption:
    """A canonical system field a spreadsheet column can be mapped to."""

    value: str
    label: str


def received_month_key(month: int) -> str:
    """Return the canonical key for the month (1 = January) a pass was received."""

    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")
    return f"receivedMonth:{month}"


_BASE_FIELDS: Tuple[FieldOption, ...] = (
    FieldOption("name", "Nome do Aluno"),
    FieldOption("cpf", "CPF"),
    FieldOption("ra", "RA"),
    FieldOption("rg", "RG"),
    FieldOption("rgIssueDate", "Data de Emissão do RG"),
    FieldOption("schoolName", "Nome da Escola"),
    FieldOption("grade", "Série/Ano"),
    FieldOption("className", "Turma"),
    FieldOption("classPeriod", "Período da Turma"),
    FieldOption("responsibleName", "Nome do Responsável"),
    FieldOption("contactPhone", "Telefone de Contato"),
    FieldOption("contactEmail", "Email de Contato"),
    FieldOption("address", "Endereço"),
    FieldOption("hasPass", "Possui Passe (Sim/Não)"),
    FieldOption("souCardNumber", "Nº Cartão SOU"),
)

_MONTH_FIELDS: Tuple[FieldOption, ...] = tuple(
    FieldOption(received_month_key(idx), f"Mes Que Recebeu: {abbr}")
    for idx, abbr in enumerate(MONTH_ABBREVIATIONS, start=1)
)

STUDENT_FIELDS: Tuple[FieldOption, ...] = _BASE_FIELDS + _MONTH_FIELDS
FIELD_KEYS: frozenset[str] = frozenset(option.value for option in STUDENT_FIELDS)
REQUIRED_FIELDS: Tuple[str, ...] = ("name", "schoolName")


@dataclass(frozen=True)
class SpreadsheetBook:
    """In-memory workbook: ordered sheet names plus raw 2-D cell values per sheet."""

    file_name: str
    sheet_names: Tuple[str, ...]
    sheets: Dict[str, List[RawRow]] = field(default_factory=dict)

    def rows(self, sheet_name: str) -> List[RawRow]:
        """Return the raw rows of *sheet_name*; blank cells are empty strings."""

        try:
            return self.sheets[sheet_name]
        except KeyError as exc:
            raise KeyError(f"Sheet not found in {self.file_name}: {sheet_name}") from exc


@dataclass(frozen=True)
class SheetExtract:
    """Headers found on the header row and the field-keyed rows below it."""

    headers: List[str]
    rows: List[SheetRecord]

    @property
    def is_empty(self) -> bool:
        return not self.headers and not self.rows
