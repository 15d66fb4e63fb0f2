"""Dry-run validation tests."""

from __future__ import annotations

import math

from schoolroute.services.student_import import validate_rows


def _rows(count: int, blank: tuple[int, ...] = (), school: str = "EMEF Centro") -> list[dict[str, object]]:
    return [
        {"name": "" if idx in blank else f"Aluno {idx}", "schoolName": school, "cpf": ""}
        for idx in range(count)
    ]


def test_blank_required_fields_are_errors() -> None:
    summary = validate_rows(_rows(10, blank=(3, 7)), ["EMEF Centro"])

    assert summary.success_count == 8
    assert summary.error_count == 2
    assert summary.new_schools == {}
    assert [issue.row_index for issue in summary.issues] == [4, 8]
    assert summary.issues[0].missing_fields == ["name"]


def test_whitespace_none_and_nan_count_as_missing() -> None:
    rows = [
        {"name": "   ", "schoolName": "EMEF Centro"},
        {"name": None, "schoolName": "EMEF Centro"},
        {"name": math.nan, "schoolName": "EMEF Centro"},
        {"schoolName": "EMEF Centro"},
        {"name": "Ana", "schoolName": ""},
        {"name": 0, "schoolName": "EMEF Centro"},
    ]

    summary = validate_rows(rows, ["EMEF Centro"])

    assert summary.error_count == 5
    assert summary.success_count == 1
    assert summary.issues[-1].missing_fields == ["schoolName"]


def test_unknown_schools_are_grouped_case_insensitively() -> None:
    rows = _rows(2) + _rows(3, school="EE Norte") + [{"name": "Zé", "schoolName": " ee NORTE "}]

    summary = validate_rows(rows, ["emef centro"])

    assert summary.success_count == 2
    assert summary.error_count == 0
    assert summary.new_schools == {"EE Norte": 4}
    assert summary.pending_count == 4
    assert summary.to_dict() == {"successCount": 2, "errorCount": 0, "newSchools": {"EE Norte": 4}}


def test_empty_input_gives_zero_counts() -> None:
    summary = validate_rows([], [])

    assert (summary.success_count, summary.error_count, summary.pending_count) == (0, 0, 0)
