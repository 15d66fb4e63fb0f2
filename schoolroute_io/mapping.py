"""Mapping strategies from spreadsheet headers to canonical student fields."""

# Module responsibilities:
# - Define the abstract mapping strategy used by the import flow.
# - Provide header-based automatic mapping against the field catalog.
# - Provide a fixed strategy that replays a previously saved column mapping.
# - Apply a column mapping to extracted rows.

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Sequence

from .schema import (
    FIELD_KEYS,
    IGNORE,
    STUDENT_FIELDS,
    ColumnMap,
    FieldOption,
    SheetRecord,
)


class MappingError(ValueError):
    """Raised when a column mapping targets an unknown system field."""


class BaseMappingStrategy(ABC):
    """Abstract base class for mapping strategies."""

    @abstractmethod
    def map(self, headers: Sequence[str]) -> ColumnMap:
        """Compute a ``header -> canonical key`` mapping for the given headers."""


@dataclass(frozen=True)
class HeaderAutoMappingStrategy(BaseMappingStrategy):
    """Propose a mapping by substring-matching headers against the field catalog.

    Each non-empty header is lower-cased and trimmed; the first catalog entry
    whose lower-cased label or key occurs inside it wins. Headers with no
    match are left out of the result, which readers treat as ``"ignore"``.
    """

    fields: Sequence[FieldOption] = STUDENT_FIELDS

    def match(self, header: str) -> str | None:
        token = header.strip().lower()
        if not token:
            return None
        for option in self.fields:
            if option.label.lower() in token or option.value.lower() in token:
                return option.value
        return None

    def map(self, headers: Sequence[str]) -> ColumnMap:
        proposed: ColumnMap = {}
        for header in headers:
            target = self.match(header)
            if target is not None:
                proposed[header] = target
        return proposed


@dataclass(frozen=True)
class FixedMappingStrategy(BaseMappingStrategy):
    """Replay a stored column mapping onto the headers currently on screen."""

    column_mapping: Mapping[str, str] = field(default_factory=dict)

    def map(self, headers: Sequence[str]) -> ColumnMap:
        return {
            header: self.column_mapping[header]
            for header in headers
            if header in self.column_mapping
        }


def propose_mapping(headers: Sequence[str]) -> ColumnMap:
    """Seed a mapping for *headers* using :class:`HeaderAutoMappingStrategy`."""

    return HeaderAutoMappingStrategy().map(headers)


def validate_targets(column_mapping: Mapping[str, str]) -> ColumnMap:
    """Return a copy of *column_mapping*, rejecting targets outside the catalog."""

    unknown = sorted(
        {target for target in column_mapping.values() if target != IGNORE and target not in FIELD_KEYS}
    )
    if unknown:
        raise MappingError(f"Campos do sistema desconhecidos: {', '.join(unknown)}")
    return dict(column_mapping)


def active_targets(column_mapping: Mapping[str, str]) -> ColumnMap:
    """Drop ignored/blank entries; when targets repeat, the first header wins."""

    result: ColumnMap = {}
    claimed: set[str] = set()
    for header, target in column_mapping.items():
        if not target or target == IGNORE or target in claimed:
            continue
        claimed.add(target)
        result[header] = target
    return result


def apply_column_mapping(
    rows: Iterable[Mapping[str, object]],
    column_mapping: Mapping[str, str],
) -> List[SheetRecord]:
    """Translate header-keyed rows into canonical-field records."""

    effective = active_targets(column_mapping)
    mapped: List[SheetRecord] = []
    for row in rows:
        mapped.append({target: row.get(header, "") for header, target in effective.items()})
    return mapped
