"""
RESPONSIBILITIES
- Provide typed models for per-sheet import rules and the persisted import configuration.
- Enforce the configuration shape before anything is written.
PROCESS OVERVIEW
1. Callers build ImportConfig with snake_case names or the camelCase document keys.
2. to_document() dumps the camelCase shape that is sealed into the envelope.
3. ImportConfigStore re-validates decrypted documents with model_validate().
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from schoolroute_io.mapping import validate_targets


class SheetConfig(BaseModel):
    """Import rule for one sheet of the source workbook."""

    model_config = ConfigDict(populate_by_name=True)

    sheet_name: str = Field(alias="sheetName", strict=True)
    is_primary: bool = Field(alias="isPrimary", strict=True)
    header_row: int = Field(alias="headerRow", strict=True, ge=1)
    column_mapping: Dict[str, str] = Field(alias="columnMapping", strict=True)

    @field_validator("column_mapping")
    @classmethod
    def _known_targets(cls, value: Dict[str, str]) -> Dict[str, str]:
        return validate_targets(value)


class ImportConfig(BaseModel):
    """Persisted unit: every sheet rule for one source file, keyed by file name."""

    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(alias="fileName", strict=True, min_length=1)
    configurations: List[SheetConfig]
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @field_validator("file_name")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("O nome do arquivo é obrigatório.")
        return value

    @model_validator(mode="after")
    def _sheet_rules(self) -> "ImportConfig":
        names = [sheet.sheet_name for sheet in self.configurations]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Planilhas repetidas na configuração: {', '.join(duplicates)}")
        primaries = [sheet.sheet_name for sheet in self.configurations if sheet.is_primary]
        if len(primaries) > 1:
            raise ValueError(
                f"Apenas uma planilha pode ser a principal (marcadas: {', '.join(primaries)})"
            )
        return self

    @property
    def primary_sheet(self) -> Optional[SheetConfig]:
        return next((sheet for sheet in self.configurations if sheet.is_primary), None)

    def sheet(self, sheet_name: str) -> Optional[SheetConfig]:
        return next((sheet for sheet in self.configurations if sheet.sheet_name == sheet_name), None)

    def to_document(self) -> dict:
        """Return the camelCase JSON-ready record stored for this configuration."""

        return self.model_dump(by_alias=True, mode="json")
