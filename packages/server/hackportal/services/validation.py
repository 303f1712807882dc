"""Field checks shared by the repositories. Each raises ActionError on failure."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from hackportal.core.results import ActionError, validation_failed
from hackportal_shared.schemas.common import enum_values


def choice(value, enum_cls: type[Enum], field: str, message: str) -> str:
    """Return the plain string value if it is one of ``enum_cls``'s members."""
    if isinstance(value, Enum):
        value = value.value
    if value not in enum_values(enum_cls):
        raise ActionError(validation_failed(field, message))
    return value


def optional_choice(value, enum_cls: type[Enum], field: str, message: str) -> Optional[str]:
    if value is None:
        return None
    return choice(value, enum_cls, field, message)


def required_text(value: Optional[str], field: str, message: str) -> str:
    """Trimmed text that must not be blank."""
    if value is None or not value.strip():
        raise ActionError(validation_failed(field, message))
    return value.strip()


def max_length(value: Optional[str], limit: int, field: str, message: str) -> None:
    if value is not None and len(value) > limit:
        raise ActionError(validation_failed(field, message))


def clean_text(value: Optional[str]) -> Optional[str]:
    """Trim free text; blank becomes None."""
    if value is None:
        return None
    return value.strip() or None
