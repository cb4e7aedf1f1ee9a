"""Write-side handlers: each command validates its input and calls the service."""

from __future__ import annotations

import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from todocqrs.contracts import (
    ServiceError,
    StatusCode,
    TodoInput,
    TodoParams,
    TodoRequest,
    TodoStatusInput,
    TodoUpdateInput,
    UpdateTodoRequest,
)
from todocqrs.validator import Validation, ValidationError

_CROCKFORD = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_TIME_BITS = 48
_RANDOM_BITS = 80
_ULID_LENGTH = 26


def make_ulid(timestamp_ms: int | None = None, randomness: int | None = None) -> str:
    """Return a ULID: 48 bits of milliseconds and 80 random bits in Crockford base32."""
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    if randomness is None:
        randomness = secrets.randbits(_RANDOM_BITS)
    if not 0 <= timestamp_ms < 1 << _TIME_BITS:
        raise ValueError(f"timestamp out of range for a ULID: {timestamp_ms}")
    if not 0 <= randomness < 1 << _RANDOM_BITS:
        raise ValueError(f"randomness out of range for a ULID: {randomness}")
    value = (timestamp_ms << _RANDOM_BITS) | randomness
    chars: list[str] = []
    for _ in range(_ULID_LENGTH):
        value, digit = divmod(value, 32)
        chars.append(_CROCKFORD[digit])
    return "".join(reversed(chars))


def _from_unix(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def _invalid(validation: Validation, error: ValidationError) -> ServiceError:
    return ServiceError(
        StatusCode.INVALID_ARGUMENT,
        f"failed to validate request, err: {validation.custom_error(error)}",
    )


class InsertTodoCommand:
    """Creates a todo with a fresh identifier."""

    def __init__(
        self,
        todo_service: Any,
        validation: Validation,
        tracer: Any,
        log: Any,
        id_factory: Callable[[], str] = make_ulid,
    ) -> None:
        self._todo_service = todo_service
        self._validation = validation
        self._tracer = tracer
        self._log = log
        self._id_factory = id_factory

    def handle(self, request: TodoInput) -> None:
        with self._tracer.start_span("InsertTodoCommand.Handle"):
            todo = TodoRequest(
                todo_id=self._id_factory(),
                title=request.title,
                description=request.description,
                completed=request.completed,
                created_at=_from_unix(request.created_at),
                updated_at=_from_unix(request.updated_at),
            )
            try:
                self._validation.validate(todo)
            except ValidationError as exc:
                self._log.start_logger("InsertTodoCommand", "Handle").error(str(exc))
                raise _invalid(self._validation, exc) from exc
            self._todo_service.insert_todo(todo)


class UpdateTodoCommand:
    """Replaces the fields of an existing todo."""

    def __init__(self, todo_service: Any, validation: Validation, tracer: Any) -> None:
        self._todo_service = todo_service
        self._validation = validation
        self._tracer = tracer

    def handle(self, request: TodoUpdateInput) -> None:
        with self._tracer.start_span("UpdateTodoCommand.Handle"):
            todo = UpdateTodoRequest(
                todo_id=request.todo_id,
                title=request.title,
                description=request.description,
                completed=request.completed,
                updated_at=_from_unix(request.updated_at),
            )
            # The incoming message is what gets validated, as the service always has.
            try:
                self._validation.validate(request)
            except ValidationError as exc:
                raise _invalid(self._validation, exc) from exc
            self._todo_service.update_todo_by_id(todo)


class UpdateStatusTodoByIdCommand:
    """Toggles the completed flag of a todo."""

    def __init__(self, todo_service: Any, tracer: Any) -> None:
        self._todo_service = todo_service
        self._tracer = tracer

    def handle(self, request: TodoStatusInput) -> None:
        with self._tracer.start_span("UpdateStatusTodoByIdCommand.Handle"):
            self._todo_service.update_todo_status_by_id(request)


class DeleteTodoByIdCommand:
    """Removes a todo."""

    def __init__(self, todo_service: Any, tracer: Any) -> None:
        self._todo_service = todo_service
        self._tracer = tracer

    def handle(self, params: TodoParams) -> None:
        with self._tracer.start_span("DeleteTodoByIdCommand.Handle"):
            self._todo_service.delete_todo_by_id(params.todo_id)


@dataclass
class TodoCommand:
    """The set of write-side handlers."""

    insert_todo_command: InsertTodoCommand
    update_todo_command: UpdateTodoCommand
    update_status_todo_by_id_command: UpdateStatusTodoByIdCommand
    delete_todo_by_id_command: DeleteTodoByIdCommand