"""Read-side handlers that map service results to transport messages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from todocqrs.contracts import TodoParams
from todocqrs.mappers import TodoList, TodoView, to_todo_list, to_todo_view


class GetAllTodoQuery:
    """Lists every todo."""

    def __init__(self, todo_service: Any, tracer: Any) -> None:
        self._todo_service = todo_service
        self._tracer = tracer

    def handle(self) -> TodoList:
        with self._tracer.start_span("GetAllTodoQuery.Handle"):
            return to_todo_list(self._todo_service.get_all_todo())


class GetTodoByIdQuery:
    """Fetches one todo by identifier."""

    def __init__(self, todo_service: Any, tracer: Any) -> None:
        self._todo_service = todo_service
        self._tracer = tracer

    def handle(self, params: TodoParams) -> TodoView:
        with self._tracer.start_span("GetTodoByIdQuery.Handle"):
            return to_todo_view(self._todo_service.get_todo_by_id(params.todo_id))


@dataclass
class TodoQuery:
    """The set of read-side handlers."""

    get_all_todo_query: GetAllTodoQuery
    get_todo_by_id_query: GetTodoByIdQuery