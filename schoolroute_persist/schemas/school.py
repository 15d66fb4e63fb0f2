"""
RESPONSIBILITIES
- Provide typed models for school registration and stored school documents.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

SchoolType = Literal["MUNICIPAL", "ESTADUAL", "MUNICIPALIZADA"]
ClassPeriod = Literal["Manhã", "Tarde", "Noite", "Integral"]
SchoolStatus = Literal["Ativa", "Inativa"]

_REQUIRED_MESSAGES = {
    "name": "O nome é obrigatório.",
    "address": "O endereço é obrigatório.",
    "hash": "O hash é obrigatório.",
}


def normalize_school_name(name: str) -> str:
    """Comparison key for school names: trimmed and case-folded."""

    return name.strip().casefold()


class SchoolClass(BaseModel):
    name: str
    period: ClassPeriod


class SchoolGrade(BaseModel):
    name: str
    classes: List[SchoolClass] = Field(default_factory=list)


class NewSchool(BaseModel):
    """Payload accepted when registering a school."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    address: str
    hash: str
    school_type: SchoolType = Field(alias="schoolType")
    grades: Optional[List[SchoolGrade]] = None

    @field_validator("name", "address", "hash")
    @classmethod
    def _required(cls, value: str, info: ValidationInfo) -> str:
        if not value.strip():
            raise PydanticCustomError("required", _REQUIRED_MESSAGES[info.field_name])
        return value.strip()


class School(NewSchool):
    """A stored school as read back from the collection."""

    id: str = ""
    status: SchoolStatus = "Ativa"
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude={"id"}, exclude_none=True)
