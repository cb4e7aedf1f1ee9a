"""Entry points for todo requests: count, trace and dispatch to handlers."""

from __future__ import annotations

from typing import Any

from todocqrs.contracts import TodoInput, TodoParams, TodoStatusInput, TodoUpdateInput
from todocqrs.handlers import TodoHandler
from todocqrs.mappers import TodoList, TodoView
from todocqrs.metrics import Metrics


class TodoController:
    """Implements the todo service endpoints."""

    def __init__(self, handler: TodoHandler, tracer: Any, metrics: Metrics) -> None:
        self._handler = handler
        self._tracer = tracer
        self._metrics = metrics

    def insert_todo(self, request: TodoInput) -> None:
        self._metrics.create_todo_requests.inc("POST")
        with self._tracer.start_span("Controllers.InsertTodo"):
            self._metrics.success_requests.inc("POST")
            self._handler.command.insert_todo_command.handle(request)

    def get_all_todos(self) -> TodoList:
        self._metrics.get_all_todo_requests.inc("GET")
        with self._tracer.start_span("Controllers.GetAllTodos"):
            self._metrics.success_requests.inc("GET")
            return self._handler.query.get_all_todo_query.handle()

    def get_todo_by_id(self, params: TodoParams) -> TodoView:
        self._metrics.get_todo_requests.inc("GET")
        with self._tracer.start_span("Controllers.GetTodoById"):
            self._metrics.success_requests.inc("GET")
            return self._handler.query.get_todo_by_id_query.handle(params)

    def update_todo_by_id(self, request: TodoUpdateInput) -> None:
        self._metrics.update_todo_requests.inc("PUT")
        with self._tracer.start_span("Controllers.UpdateTodoById"):
            self._metrics.success_requests.inc("PUT")
            self._handler.command.update_todo_command.handle(request)

    def update_todo_status_by_id(self, request: TodoStatusInput) -> None:
        self._metrics.update_status_todo_requests.inc("PATCH")
        with self._tracer.start_span("Controllers.UpdateTodoStatusById"):
            self._metrics.success_requests.inc("PATCH")
            self._handler.command.update_status_todo_by_id_command.handle(request)

    def delete_todo_by_id(self, params: TodoParams) -> None:
        self._metrics.delete_todo_requests.inc("DELETE")
        with self._tracer.start_span("Controllers.DeleteTodoById"):
            self._metrics.success_requests.inc("DELETE")
            self._handler.command.delete_todo_by_id_command.handle(params)