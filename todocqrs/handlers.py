"""Assembly of the query and command handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from todocqrs.commands import (
    DeleteTodoByIdCommand,
    InsertTodoCommand,
    TodoCommand,
    UpdateStatusTodoByIdCommand,
    UpdateTodoCommand,
)
from todocqrs.queries import GetAllTodoQuery, GetTodoByIdQuery, TodoQuery
from todocqrs.validator import Validation


@dataclass
class TodoHandler:
    """Read and write handlers for todos."""

    query: TodoQuery
    command: TodoCommand


def build_todo_handler(todo_service: Any, tracer: Any, log: Any) -> TodoHandler:
    """Wire every handler to the same service, tracer and validator."""
    validation = Validation()
    query = TodoQuery(
        get_all_todo_query=GetAllTodoQuery(todo_service, tracer),
        get_todo_by_id_query=GetTodoByIdQuery(todo_service, tracer),
    )
    command = TodoCommand(
        insert_todo_command=InsertTodoCommand(todo_service, validation, tracer, log),
        update_todo_command=UpdateTodoCommand(todo_service, validation, tracer),
        update_status_todo_by_id_command=UpdateStatusTodoByIdCommand(todo_service, tracer),
        delete_todo_by_id_command=DeleteTodoByIdCommand(todo_service, tracer),
    )
    return TodoHandler(query=query, command=command)