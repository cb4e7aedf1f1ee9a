"""Request, response and entity types exchanged between layers."""

from __future__ import annotations

import dataclasses
import enum
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, TypeVar

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)
_REQUIRED = {"validate": "required"}


class StatusCode(enum.IntEnum):
    """Status codes carried by service errors."""

    OK = 0
    CANCELLED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16


class ServiceError(Exception):
    """An error with a status code, reported back to clients."""

    def __init__(self, code: StatusCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def _format_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset()
    if not offset:
        return text + "Z"
    minutes = int(offset.total_seconds()) // 60
    sign = "+" if minutes >= 0 else "-"
    minutes = abs(minutes)
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _parse_time(text: str) -> datetime:
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    if "." in text:
        head, rest = text.split(".", 1)
        cut = next((i for i, ch in enumerate(rest) if not ch.isdigit()), len(rest))
        text = f"{head}.{rest[:cut][:6].ljust(6, '0')}{rest[cut:]}"
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"invalid timestamp: {text!r}") from exc


@dataclass
class Todo:
    id: str = field(default="", metadata=_REQUIRED)
    title: str = field(default="", metadata=_REQUIRED)
    description: str = field(default="", metadata=_REQUIRED)
    completed: bool = field(default=False, metadata=_REQUIRED)
    created_at: str = ""
    updated_at: str = ""


@dataclass
class TodoRequest:
    todo_id: str = ""
    title: str = field(default="", metadata=_REQUIRED)
    description: str = field(default="", metadata=_REQUIRED)
    completed: bool = False
    created_at: datetime = ZERO_TIME
    updated_at: datetime = ZERO_TIME


@dataclass
class UpdateTodoRequest:
    todo_id: str = ""
    title: str = field(default="", metadata=_REQUIRED)
    description: str = field(default="", metadata=_REQUIRED)
    completed: bool = False
    updated_at: datetime = ZERO_TIME


@dataclass
class UpdateTodoStatusRequest:
    todo_id: str = ""
    completed: bool = False
    updated_at: datetime = ZERO_TIME


@dataclass
class GetAllTodoResponse:
    todo_id: str = ""
    title: str = ""
    completed: bool = False
    created_at: datetime = ZERO_TIME
    updated_at: datetime = ZERO_TIME

    def to_dict(self) -> dict[str, Any]:
        return {
            "todo_id": self.todo_id,
            "title": self.title,
            "completed": self.completed,
            "created_at": _format_time(self.created_at),
            "updated_at": _format_time(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GetAllTodoResponse":
        return _from_mapping(cls, data)


@dataclass
class GetTodoByIdResponse:
    todo_id: str = ""
    title: str = ""
    completed: bool = False
    description: str = ""
    created_at: datetime = ZERO_TIME
    updated_at: datetime = ZERO_TIME

    def to_dict(self) -> dict[str, Any]:
        return {
            "todo_id": self.todo_id,
            "title": self.title,
            "completed": self.completed,
            "description": self.description,
            "created_at": _format_time(self.created_at),
            "updated_at": _format_time(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GetTodoByIdResponse":
        return _from_mapping(cls, data)


@dataclass
class Response(Exception):
    """A status message that doubles as an error."""

    message: str = ""
    code: int = 0
    result: Any = None

    def __str__(self) -> str:
        return self.message


@dataclass
class TodoInput:
    title: str = ""
    description: str = ""
    completed: bool = False
    created_at: int = 0
    updated_at: int = 0


@dataclass
class TodoUpdateInput:
    todo_id: str = ""
    title: str = ""
    description: str = ""
    completed: bool = False
    updated_at: int = 0


@dataclass
class TodoStatusInput:
    todo_id: str = ""
    completed: bool = False
    updated_at: int = 0


@dataclass
class TodoParams:
    todo_id: str = ""


_T = TypeVar("_T")


def _is_time_field(f: dataclasses.Field) -> bool:
    return isinstance(f.default, datetime)


def _from_mapping(cls: type[_T], data: dict[str, Any]) -> _T:
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    values: dict[str, Any] = {}
    for f in dataclasses.fields(cls):  # type: ignore[arg-type]
        if f.name not in data:
            continue
        value = data[f.name]
        if _is_time_field(f) and isinstance(value, str):
            value = _parse_time(value)
        values[f.name] = value
    return cls(**values)


def decode_request(body: str | bytes, cls: type[_T]) -> _T:
    """Decode a JSON body into an instance of the dataclass ``cls``."""
    return _from_mapping(cls, json.loads(body))