"""Conversions from service results to transport messages."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from todocqrs.contracts import GetAllTodoResponse, GetTodoByIdResponse, Response


@dataclass
class TodoView:
    """A todo as sent to clients, with times as Unix seconds."""

    todo_id: str = ""
    title: str = ""
    completed: bool = False
    created_at: int = 0
    updated_at: int = 0


@dataclass
class TodoList:
    todos: list[TodoView] = field(default_factory=list)


def _unix(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return math.floor(value.timestamp())


def _view(todo: GetAllTodoResponse | GetTodoByIdResponse) -> TodoView:
    return TodoView(
        todo_id=todo.todo_id,
        title=todo.title,
        completed=todo.completed,
        created_at=_unix(todo.created_at),
        updated_at=_unix(todo.updated_at),
    )


def to_todo_list(todos: Iterable[GetAllTodoResponse]) -> TodoList:
    return TodoList(todos=[_view(todo) for todo in todos])


def to_todo_view(todo: GetTodoByIdResponse) -> TodoView:
    return _view(todo)


def response_error(status_code: int, message: str, result: Any = None) -> Response:
    """Build a ``Response`` error carrying a status code and result."""
    return Response(message=message, code=status_code, result=result)