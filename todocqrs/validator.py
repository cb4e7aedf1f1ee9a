"""Validation of ``required`` fields on dataclasses."""

from __future__ import annotations

import dataclasses
from collections.abc import Sized
from datetime import datetime
from typing import Any

from todocqrs.contracts import ZERO_TIME


class ValidationError(ValueError):
    """Raised when fields fail their validation tags."""

    def __init__(self, errors: list[tuple[str, str]]) -> None:
        self.errors = errors
        text = "; ".join(f"field {name!r} failed on the {tag!r} tag" for name, tag in errors)
        super().__init__(text)


def _is_zero(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, datetime):
        return value == ZERO_TIME
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0
    if isinstance(value, Sized):
        return len(value) == 0
    return False


class Validation:
    """Checks the tags stored in dataclass field metadata."""

    def validate(self, instance: Any) -> None:
        if not dataclasses.is_dataclass(instance) or isinstance(instance, type):
            raise TypeError("validate expects a dataclass instance")
        errors = [
            (f.name, "required")
            for f in dataclasses.fields(instance)
            if f.metadata.get("validate") == "required" and _is_zero(getattr(instance, f.name))
        ]
        if errors:
            raise ValidationError(errors)

    def custom_error(self, error: Exception) -> str:
        if not isinstance(error, ValidationError):
            raise TypeError("custom_error expects a ValidationError")
        message = ""
        for name, tag in error.errors:
            if tag == "required":
                message = f"{name.lower()} is required"
        return message