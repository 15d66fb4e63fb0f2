"""`schoolroute_io` exports the spreadsheet intake helpers used by the import flow."""

# Module responsibilities:
# - Re-export loading, extraction and mapping interfaces so consumers have a stable API surface.

from __future__ import annotations

from .header_extractor import extract_rows, extract_sheet
from .mapping import (
    FixedMappingStrategy,
    HeaderAutoMappingStrategy,
    MappingError,
    apply_column_mapping,
    propose_mapping,
)
from .schema import (
    IGNORE,
    REQUIRED_FIELDS,
    STUDENT_FIELDS,
    FieldOption,
    SheetExtract,
    SpreadsheetBook,
)
from .spreadsheet_reader import (
    ACCEPTED_EXTENSIONS,
    SpreadsheetError,
    SpreadsheetParseError,
    UnsupportedFileTypeError,
    load_spreadsheet,
)

__all__ = [
    "ACCEPTED_EXTENSIONS",
    "IGNORE",
    "REQUIRED_FIELDS",
    "STUDENT_FIELDS",
    "FieldOption",
    "SheetExtract",
    "SpreadsheetBook",
    "SpreadsheetError",
    "SpreadsheetParseError",
    "UnsupportedFileTypeError",
    "load_spreadsheet",
    "extract_rows",
    "extract_sheet",
    "HeaderAutoMappingStrategy",
    "FixedMappingStrategy",
    "MappingError",
    "propose_mapping",
    "apply_column_mapping",
]

__version__ = "0.1.0"
