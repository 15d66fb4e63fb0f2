"""Spreadsheet input helpers."""

# Module responsibilities:
# - Gate uploads on the accepted spreadsheet extensions.
# - Parse uploaded bytes (xlsx/ods/csv) into a SpreadsheetBook via pandas.
# - Convert every library failure into SpreadsheetParseError for the caller.

from __future__ import annotations

import csv
import io
from pathlib import PurePath
from typing import Dict, List

import pandas as pd

from .schema import RawRow, SpreadsheetBook
from .utils.log import get_logger

logger = get_logger("spreadsheet_reader")

ACCEPTED_EXTENSIONS: tuple[str, ...] = (".xlsx", ".csv", ".ods")
# Advertised to users only; uploads above this size are logged, not rejected.
MAX_UPLOAD_BYTES = 10 * 1024 * 1024
CSV_SHEET_NAME = "Sheet1"
CSV_DELIMITERS = ",;\t|"
_SNIFF_SAMPLE_CHARS = 64 * 1024

INVALID_TYPE_MESSAGE = "Por favor, selecione um arquivo .xlsx, .csv ou .ods."
PARSE_FAILURE_MESSAGE = "Não foi possível processar o arquivo. Verifique se o formato é válido."


class SpreadsheetError(RuntimeError):
    """Base error for spreadsheet intake failures; ``str()`` is user-facing."""


class UnsupportedFileTypeError(SpreadsheetError):
    """Raised when an upload does not carry an accepted spreadsheet extension."""


class SpreadsheetParseError(SpreadsheetError):
    """Raised when the spreadsheet library cannot read the uploaded content."""


def file_extension(file_name: str) -> str:
    return PurePath(file_name).suffix.lower()


def is_accepted(file_name: str) -> bool:
    """Return True when *file_name* ends with an accepted spreadsheet extension."""

    return file_extension(file_name) in ACCEPTED_EXTENSIONS


def ensure_accepted(file_name: str) -> str:
    """Return the lower-cased extension or raise :class:`UnsupportedFileTypeError`."""

    if not is_accepted(file_name):
        logger.warning("Rejected upload with unsupported extension: %s", file_name)
        raise UnsupportedFileTypeError(INVALID_TYPE_MESSAGE)
    return file_extension(file_name)


def _frame_to_rows(frame: pd.DataFrame) -> List[RawRow]:
    cleaned = frame.astype(object).where(frame.notna(), "")
    return [list(values) for values in cleaned.itertuples(index=False, name=None)]


def _decode_csv(content: bytes) -> str:
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        # Legacy exports from school systems are commonly Latin-1.
        return content.decode("latin-1")


def _sniff_delimiter(text: str) -> str:
    """Pick the CSV delimiter among CSV_DELIMITERS; never split on spaces."""

    sample = text[:_SNIFF_SAMPLE_CHARS]
    try:
        return csv.Sniffer().sniff(sample, delimiters=CSV_DELIMITERS).delimiter
    except csv.Error:
        pass
    # Title or blank lines above the header defeat the sniffer; use the most frequent candidate.
    counts = {candidate: sample.count(candidate) for candidate in CSV_DELIMITERS}
    best = max(counts, key=lambda candidate: counts[candidate])
    return best if counts[best] else ","


def _read_csv(content: bytes) -> Dict[str, pd.DataFrame]:
    text = _decode_csv(content)
    delimiter = _sniff_delimiter(text)
    # Blank and ragged lines are kept so line N of the file stays row N of the sheet.
    rows = list(csv.reader(io.StringIO(text, newline=""), delimiter=delimiter))
    width = max((len(row) for row in rows), default=0)
    padded = [row + [""] * (width - len(row)) for row in rows]
    frame = pd.DataFrame(padded, dtype=object)
    logger.debug("CSV parsed with delimiter %r into %s rows x %s columns", delimiter, len(padded), width)
    return {CSV_SHEET_NAME: frame}


def _read_workbook(content: bytes, extension: str) -> Dict[str, pd.DataFrame]:
    engine = "odf" if extension == ".ods" else "openpyxl"
    frames = pd.read_excel(
        io.BytesIO(content),
        sheet_name=None,
        header=None,
        dtype=object,
        engine=engine,
    )
    return dict(frames)


def load_spreadsheet(content: bytes, file_name: str) -> SpreadsheetBook:
    """Parse uploaded spreadsheet bytes into a :class:`SpreadsheetBook`.

    Args:
        content: Raw binary content of the upload.
        file_name: Declared file name; its extension selects the parser.

    Returns:
        Workbook with sheet names in file order and raw rows per sheet.

    Raises:
        UnsupportedFileTypeError: When the extension is not accepted.
        SpreadsheetParseError: When the content cannot be parsed.
    """

    extension = ensure_accepted(file_name)
    if len(content) > MAX_UPLOAD_BYTES:
        logger.warning(
            "Upload %s exceeds advertised limit (%s > %s bytes)",
            file_name,
            len(content),
            MAX_UPLOAD_BYTES,
        )

    logger.info("Reading spreadsheet %s (%s bytes)", file_name, len(content))
    try:
        if extension == ".csv":
            frames = _read_csv(content)
        else:
            frames = _read_workbook(content, extension)
    except Exception as exc:  # noqa: BLE001 - pandas/openpyxl/odf raise heterogeneous errors
        logger.error("Failed to parse spreadsheet %s: %s", file_name, exc)
        raise SpreadsheetParseError(PARSE_FAILURE_MESSAGE) from exc

    sheets = {str(name): _frame_to_rows(frame) for name, frame in frames.items()}
    book = SpreadsheetBook(file_name=file_name, sheet_names=tuple(sheets), sheets=sheets)
    logger.info("Spreadsheet %s loaded with sheets %s", file_name, list(book.sheet_names))
    return book
