"""Dry-run validation for mapped student rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Sequence

import pandas as pd

from schoolroute_io.schema import REQUIRED_FIELDS
from schoolroute_persist.schemas.school import normalize_school_name


@dataclass(slots=True)
class RowIssue:
    """A mapped row that cannot be imported because required fields are blank."""

    row_index: int
    missing_fields: List[str]


@dataclass(slots=True)
class ImportSummary:
    """Counts produced by a validation dry run."""

    success_count: int
    error_count: int
    new_schools: Dict[str, int] = field(default_factory=dict)
    issues: List[RowIssue] = field(default_factory=list)

    @property
    def pending_count(self) -> int:
        """Rows held back until their school is registered."""

        return sum(self.new_schools.values())

    def to_dict(self) -> Dict[str, object]:
        return {
            "successCount": self.success_count,
            "errorCount": self.error_count,
            "newSchools": dict(self.new_schools),
        }


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def validate_rows(
    mapped_rows: Iterable[Mapping[str, object]],
    known_schools: Iterable[str],
    required: Sequence[str] = REQUIRED_FIELDS,
) -> ImportSummary:
    """Classify mapped rows without writing anything.

    A row missing any *required* field is an error. A complete row whose
    ``schoolName`` is not among *known_schools* (compared trimmed and
    case-insensitively) is counted under ``new_schools`` keyed by the first
    spelling seen; every other row counts as a success.
    """

    known = {normalize_school_name(str(name)) for name in known_schools}
    success = 0
    issues: List[RowIssue] = []
    new_schools: Dict[str, int] = {}
    display_names: Dict[str, str] = {}

    for idx, row in enumerate(mapped_rows, start=1):
        missing = [name for name in required if _is_missing(row.get(name))]
        if missing:
            issues.append(RowIssue(row_index=idx, missing_fields=missing))
            continue

        school_name = str(row.get("schoolName")).strip()
        key = normalize_school_name(school_name)
        if key in known:
            success += 1
            continue
        display = display_names.setdefault(key, school_name)
        new_schools[display] = new_schools.get(display, 0) + 1

    return ImportSummary(
        success_count=success,
        error_count=len(issues),
        new_schools=new_schools,
        issues=issues,
    )
