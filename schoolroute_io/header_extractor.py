"""Header and data-row extraction for a single worksheet."""

# Module responsibilities:
# - Derive the header sequence from a 1-based header row.
# - Convert the rows below it into header-keyed records.

from __future__ import annotations

from datetime import date, datetime
from typing import List, Sequence

from .schema import RawRow, SheetExtract, SheetRecord, SpreadsheetBook
from .utils.log import get_logger

logger = get_logger("header_extractor")


def stringify_cell(value: object) -> str:
    """Render a raw cell as header text."""

    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _header_sequence(raw_header: RawRow) -> List[str]:
    headers = [stringify_cell(cell) for cell in raw_header]
    # Trailing blanks come from other rows being wider than the header row.
    while headers and not headers[-1]:
        headers.pop()
    return headers


def _to_record(headers: Sequence[str], values: RawRow) -> SheetRecord:
    record: SheetRecord = {}
    for idx, header in enumerate(headers):
        value = values[idx] if idx < len(values) else ""
        # Repeated header text keeps the leftmost column's value.
        record.setdefault(header, "" if value is None else value)
    return record


def extract_rows(raw_rows: Sequence[RawRow], header_row: int) -> SheetExtract:
    """Split raw sheet rows into headers and header-keyed records.

    Args:
        raw_rows: Raw 2-D cell values of one sheet.
        header_row: 1-based index of the row holding the column titles.

    Returns:
        ``SheetExtract`` with empty headers and rows when *header_row* lies
        beyond the end of the sheet.
    """

    if header_row < 1:
        raise ValueError(f"header_row must be >= 1, got {header_row}")
    if header_row > len(raw_rows):
        return SheetExtract(headers=[], rows=[])

    headers = _header_sequence(raw_rows[header_row - 1])
    records: List[SheetRecord] = []
    for values in raw_rows[header_row:]:
        if all(_is_blank(cell) for cell in values):
            continue
        records.append(_to_record(headers, values))
    return SheetExtract(headers=headers, rows=records)


def extract_sheet(book: SpreadsheetBook, sheet_name: str, header_row: int) -> SheetExtract:
    """Extract headers and rows for *sheet_name* of *book*."""

    extract = extract_rows(book.rows(sheet_name), header_row)
    logger.info(
        "Extracted %s rows with %s headers from %s/%s (header row %s)",
        len(extract.rows),
        len(extract.headers),
        book.file_name,
        sheet_name,
        header_row,
    )
    return extract
