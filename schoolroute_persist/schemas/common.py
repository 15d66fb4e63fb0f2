"""
RESPONSIBILITIES
- Provide the structured result returned by store actions and the import wizard.
- Flatten pydantic validation errors into one user-facing message.
"""

from __future__ import annotations

from pydantic import BaseModel, ValidationError


class ActionResult(BaseModel):
    """Outcome of a user-triggered action: never raised, always returned."""

    success: bool
    message: str

    @classmethod
    def ok(cls, message: str) -> "ActionResult":
        return cls(success=True, message=message)

    @classmethod
    def fail(cls, message: str) -> "ActionResult":
        return cls(success=False, message=message)


def format_validation_error(exc: ValidationError, prefix: str) -> str:
    """Join every validation message of *exc* into ``"<prefix>: msg, msg"``."""

    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        text = str(error.get("msg", ""))
        messages.append(f"{location}: {text}" if location else text)
    return f"{prefix}: {', '.join(messages)}"
