import io
from datetime import datetime, timezone

import pytest

from todocqrs.contracts import (
    GetAllTodoResponse,
    GetTodoByIdResponse,
    ServiceError,
    StatusCode,
    TodoInput,
    TodoParams,
    TodoStatusInput,
    TodoUpdateInput,
)
from todocqrs.handlers import build_todo_handler
from todocqrs.logger import Logger
from todocqrs.tracing import Tracer

WHEN = datetime(2021, 8, 1, tzinfo=timezone.utc)


class FakeService:
    def __init__(self):
        self.calls = []

    def insert_todo(self, request):
        self.calls.append(("insert", request.title))

    def update_todo_by_id(self, request):
        self.calls.append(("update", request.todo_id))

    def update_todo_status_by_id(self, request):
        self.calls.append(("status", request.todo_id))

    def delete_todo_by_id(self, todo_id):
        self.calls.append(("delete", todo_id))

    def get_all_todo(self):
        return [GetAllTodoResponse(todo_id="1", title="test", created_at=WHEN, updated_at=WHEN)]

    def get_todo_by_id(self, todo_id):
        return GetTodoByIdResponse(todo_id=todo_id, title="test", created_at=WHEN, updated_at=WHEN)


@pytest.fixture
def setup():
    service = FakeService()
    tracer = Tracer()
    handler = build_todo_handler(service, tracer, Logger(io.StringIO()))
    return service, tracer, handler


def test_commands_reach_service(setup):
    service, _, handler = setup
    handler.command.insert_todo_command.handle(TodoInput(title="a", description="b"))
    handler.command.update_todo_command.handle(TodoUpdateInput(todo_id="2"))
    handler.command.update_status_todo_by_id_command.handle(TodoStatusInput(todo_id="3"))
    handler.command.delete_todo_by_id_command.handle(TodoParams(todo_id="4"))
    assert service.calls == [("insert", "a"), ("update", "2"), ("status", "3"), ("delete", "4")]


def test_queries_reach_service(setup):
    _, tracer, handler = setup
    assert [v.todo_id for v in handler.query.get_all_todo_query.handle().todos] == ["1"]
    assert handler.query.get_todo_by_id_query.handle(TodoParams(todo_id="9")).todo_id == "9"
    assert [s.operation_name for s in tracer.finished] == [
        "GetAllTodoQuery.Handle",
        "GetTodoByIdQuery.Handle",
    ]


def test_insert_is_validated(setup):
    service, _, handler = setup
    with pytest.raises(ServiceError) as info:
        handler.command.insert_todo_command.handle(TodoInput(title="", description="b"))
    assert info.value.code == StatusCode.INVALID_ARGUMENT
    assert service.calls == []