"""Student spreadsheet import service package."""

from .validation import ImportSummary, RowIssue, validate_rows
from .wizard import StudentImportWizard, WizardStep

__all__ = [
    "ImportSummary",
    "RowIssue",
    "StudentImportWizard",
    "WizardStep",
    "validate_rows",
]
