from datetime import datetime, timezone

import pytest

from todocqrs.contracts import GetAllTodoResponse, GetTodoByIdResponse, ServiceError, StatusCode, TodoParams
from todocqrs.queries import GetAllTodoQuery, GetTodoByIdQuery, TodoQuery
from todocqrs.tracing import Tracer

CREATED = datetime(2021, 8, 1, tzinfo=timezone.utc)
UPDATED = datetime(2021, 8, 2, tzinfo=timezone.utc)


class FakeService:
    def __init__(self, todos=None, todo=None, error=None):
        self.todos = todos or []
        self.todo = todo
        self.error = error
        self.requested = []

    def get_all_todo(self):
        if self.error:
            raise self.error
        return self.todos

    def get_todo_by_id(self, todo_id):
        self.requested.append(todo_id)
        if self.error:
            raise self.error
        return self.todo


def test_get_all_maps_todos():
    todos = [
        GetAllTodoResponse(todo_id="1", title="test", completed=False, created_at=CREATED, updated_at=UPDATED),
        GetAllTodoResponse(todo_id="2", title="other", completed=True, created_at=CREATED, updated_at=CREATED),
    ]
    tracer = Tracer()
    result = GetAllTodoQuery(FakeService(todos=todos), tracer).handle()
    assert [v.todo_id for v in result.todos] == ["1", "2"]
    assert [v.title for v in result.todos] == ["test", "other"]
    assert [v.completed for v in result.todos] == [False, True]
    first = result.todos[0]
    assert datetime.fromtimestamp(first.created_at, tz=timezone.utc) == CREATED
    assert datetime.fromtimestamp(first.updated_at, tz=timezone.utc) == UPDATED
    assert tracer.finished[0].operation_name == "GetAllTodoQuery.Handle"


def test_get_all_empty():
    assert GetAllTodoQuery(FakeService(), Tracer()).handle().todos == []


def test_get_all_error_propagates():
    error = RuntimeError("db down")
    with pytest.raises(RuntimeError) as info:
        GetAllTodoQuery(FakeService(error=error), Tracer()).handle()
    assert info.value is error


def test_get_by_id_maps_todo():
    todo = GetTodoByIdResponse(
        todo_id="1", title="test", completed=True, description="test", created_at=CREATED, updated_at=UPDATED
    )
    service = FakeService(todo=todo)
    tracer = Tracer()
    view = GetTodoByIdQuery(service, tracer).handle(TodoParams(todo_id="1"))
    assert service.requested == ["1"]
    assert (view.todo_id, view.title, view.completed) == ("1", "test", True)
    assert datetime.fromtimestamp(view.updated_at, tz=timezone.utc) == UPDATED
    assert tracer.finished[0].operation_name == "GetTodoByIdQuery.Handle"


def test_get_by_id_not_found():
    error = ServiceError(StatusCode.NOT_FOUND, "sql: no rows in result set")
    with pytest.raises(ServiceError) as info:
        GetTodoByIdQuery(FakeService(error=error), Tracer()).handle(TodoParams(todo_id="0"))
    assert info.value.code == StatusCode.NOT_FOUND


def test_todo_query_groups_handlers():
    service = FakeService(todos=[GetAllTodoResponse(todo_id="7", created_at=CREATED, updated_at=CREATED)])
    tracer = Tracer()
    group = TodoQuery(GetAllTodoQuery(service, tracer), GetTodoByIdQuery(service, tracer))
    assert [v.todo_id for v in group.get_all_todo_query.handle().todos] == ["7"]