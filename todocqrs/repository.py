"""SQL access to the todos table."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from todocqrs.contracts import (
    GetAllTodoResponse,
    GetTodoByIdResponse,
    TodoRequest,
    UpdateTodoRequest,
    UpdateTodoStatusRequest,
)
from todocqrs.tracing import Tracer

_MARKS = {
    "format": lambda n: "%s",
    "qmark": lambda n: "?",
    "numeric": lambda n: f":{n}",
}

_INSERT = "INSERT INTO todos (todo_id, title, description, completed) VALUES ({0}, {1}, {2}, {3})"
_SELECT_ALL = "SELECT todo_id, title, completed, created_at, updated_at FROM todos"
_SELECT_ONE = (
    "SELECT todo_id, title, description, completed, created_at, updated_at "
    "FROM todos WHERE todo_id = {0}"
)
_UPDATE = (
    "UPDATE todos SET title = {0}, description = {1}, completed = {2}, updated_at = {3} "
    "WHERE todo_id = {4}"
)
_UPDATE_STATUS = "UPDATE todos SET completed = {0}, updated_at = {1} WHERE todo_id = {2}"
_DELETE = "DELETE FROM todos WHERE todo_id = {0}"


def _as_datetime(value: Any) -> datetime:
    if value is None:
        raise ValueError("cannot scan NULL into a timestamp")
    if isinstance(value, str):
        text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
        value = datetime.fromisoformat(text)
    if not isinstance(value, datetime):
        raise ValueError(f"cannot scan {type(value).__name__} into a timestamp")
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


class TodoRepository:
    """Reads and writes todos; writes go through a transaction."""

    def __init__(self, tracer: Tracer, paramstyle: str = "format") -> None:
        if paramstyle not in _MARKS:
            raise ValueError(f"unsupported paramstyle: {paramstyle!r}")
        self._tracer = tracer
        self._mark = _MARKS[paramstyle]

    def _sql(self, template: str, count: int) -> str:
        return template.format(*(self._mark(n) for n in range(1, count + 1)))

    def insert_todo(self, tx: Any, todo: TodoRequest) -> None:
        with self._tracer.start_span("Repository.InsertTodo"):
            tx.execute(
                self._sql(_INSERT, 4),
                (todo.todo_id, todo.title, todo.description, todo.completed),
            )

    def get_all_todos(self, db: Any) -> list[GetAllTodoResponse]:
        with self._tracer.start_span("Repository.GetAllTodos"):
            cursor = db.cursor()
            try:
                cursor.execute(_SELECT_ALL)
                rows = cursor.fetchall()
            finally:
                cursor.close()
            return [
                GetAllTodoResponse(
                    todo_id=todo_id,
                    title=title,
                    completed=bool(completed),
                    created_at=_as_datetime(created_at),
                    updated_at=_as_datetime(updated_at),
                )
                for todo_id, title, completed, created_at, updated_at in rows
            ]

    def get_todo_by_id(self, db: Any, todo_id: str) -> GetTodoByIdResponse:
        """Return one todo; raise LookupError when there is no such row."""
        with self._tracer.start_span("Repository.GetTodoById"):
            cursor = db.cursor()
            try:
                cursor.execute(self._sql(_SELECT_ONE, 1), (todo_id,))
                row = cursor.fetchone()
            finally:
                cursor.close()
            if row is None:
                raise LookupError("sql: no rows in result set")
            found_id, title, description, completed, created_at, updated_at = row
            return GetTodoByIdResponse(
                todo_id=found_id,
                title=title,
                completed=bool(completed),
                description=description,
                created_at=_as_datetime(created_at),
                updated_at=_as_datetime(updated_at),
            )

    def update_todo_by_id(self, tx: Any, todo: UpdateTodoRequest) -> None:
        with self._tracer.start_span("Repository.UpdateTodoById"):
            tx.execute(
                self._sql(_UPDATE, 5),
                (todo.title, todo.description, todo.completed, todo.updated_at, todo.todo_id),
            )

    def update_todo_status_by_id(self, tx: Any, todo: UpdateTodoStatusRequest) -> None:
        with self._tracer.start_span("Repository.UpdateTodoStatusById"):
            tx.execute(
                self._sql(_UPDATE_STATUS, 3),
                (todo.completed, todo.updated_at, todo.todo_id),
            )

    def delete_todo_by_id(self, tx: Any, todo_id: str) -> None:
        with self._tracer.start_span("Repository.DeleteTodoById"):
            tx.execute(self._sql(_DELETE, 1), (todo_id,))