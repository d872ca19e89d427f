# errors.py
"""Error taxonomy surfaced to command callers.

Every error renders as a stable display string ``"<Kind>: <message>"``;
presentation and localization belong to whatever sits above the command layer.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError as PydanticValidationError


class LoreweaverError(Exception):
    kind: str = "internal"
    prefix: str = "Internal error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.prefix}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": str(self)}


class NotFoundError(LoreweaverError):
    kind = "not_found"
    prefix = "Not found"

    @classmethod
    def for_entity(cls, label: str, entity_id: str) -> NotFoundError:
        return cls(f"{label} {entity_id} not found")


class ValidationError(LoreweaverError):
    kind = "validation"
    prefix = "Validation error"

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> ValidationError:
        """Collapse every pydantic violation into one ``field: rule`` message."""
        parts: list[str] = []
        for err in exc.errors():
            field = ".".join(str(p) for p in err.get("loc", ())) or "input"
            msg = str(err.get("msg", "invalid value"))
            if msg.startswith("Value error, "):
                msg = msg[len("Value error, ") :]
            parts.append(f"{field}: {msg}")
        return cls("; ".join(parts))


class DatabaseError(LoreweaverError):
    kind = "database"
    prefix = "Database error"


class InternalError(LoreweaverError):
    pass
