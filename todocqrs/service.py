"""Todo business logic: writes through the database, reads through the cache."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any

from todocqrs.cache import TODO_BY_ID_KEY, TODOS_KEY, CacheMiss
from todocqrs.contracts import (
    GetAllTodoResponse,
    GetTodoByIdResponse,
    ServiceError,
    StatusCode,
    TodoRequest,
    TodoStatusInput,
    UpdateTodoRequest,
    UpdateTodoStatusRequest,
)

CACHE_TTL = timedelta(minutes=5)
_LOG_FILE = "todo_service.go"


def _dump(payload: Any) -> str:
    return json.dumps(payload, separators=(",", ":"))


class TodoService:
    """Coordinates the repository, the transaction handling and the query cache."""

    def __init__(self, db: Any, log: Any, todo_repository: Any, cache: Any, tracer: Any) -> None:
        self._db = db
        self._log = log
        self._repo = todo_repository
        self._cache = cache
        self._tracer = tracer

    def _logger(self, func_name: str) -> Any:
        return self._log.start_logger(_LOG_FILE, func_name)

    def _invalidate(self, func_name: str, *keys: str) -> None:
        for key in keys:
            try:
                self._cache.delete(key)
            except Exception:
                self._logger(func_name).error(f"error deleting key: {key}")
                raise

    def _require_todo(self, func_name: str, todo_id: str) -> Any:
        try:
            return self._repo.get_todo_by_id(self._db.db(), todo_id)
        except Exception as exc:
            self._logger(func_name).error(f"error getting todos by id: {todo_id}")
            raise ServiceError(StatusCode.NOT_FOUND, str(exc)) from exc

    def _start_transaction(self, func_name: str) -> Any:
        try:
            return self._db.start_transaction()
        except Exception:
            self._logger(func_name).error("error starting transaction")
            raise

    def insert_todo(self, request: TodoRequest) -> None:
        """Store a new todo and drop the cached list."""
        with self._tracer.start_span("Service.InsertTodo"):
            tx = self._start_transaction("InsertTodo")
            try:
                self._repo.insert_todo(tx, request)
            except Exception:
                self._logger("InsertTodo").error("error inserting todos")
                self._db.rollback_transaction(tx)
                raise
            self._db.commit_transaction(tx)

            try:
                self._cache.delete(TODOS_KEY)
            except Exception:
                self._logger("InsertTodo").error("error deleting todos")
                raise

            self._logger("InsertTodo").info("success inserting todos")

    def get_all_todo(self) -> list[GetAllTodoResponse]:
        """Return every todo, from the cache when it holds them."""
        with self._tracer.start_span("Service.GetAllTodo"):
            try:
                data = self._cache.get(TODOS_KEY)
            except CacheMiss:
                return self._load_all_todos()

            try:
                items = json.loads(data) or []
                todos = [GetAllTodoResponse.from_dict(item) for item in items]
            except (ValueError, TypeError):
                self._logger("GetAllTodo").error("error unmarshal todos")
                raise

            self._logger("GetAllTodo").info("success getting all todos")
            return todos

    def _load_all_todos(self) -> list[GetAllTodoResponse]:
        try:
            todos = self._repo.get_all_todos(self._db.db())
        except Exception:
            self._logger("GetAllTodo").error("error getting all todos")
            raise

        payload = _dump([todo.to_dict() for todo in todos])
        try:
            self._cache.set(TODOS_KEY, payload, CACHE_TTL)
        except Exception as exc:
            self._logger("GetAllTodo").error(f"error setting todos to redis: {exc}")
            raise

        self._logger("GetAllTodo").info("success getting all todos")
        return todos

    def get_todo_by_id(self, todo_id: str) -> GetTodoByIdResponse:
        """Return one todo, from the cache when it holds one."""
        with self._tracer.start_span("Service.GetTodoById"):
            try:
                data = self._cache.get(TODO_BY_ID_KEY)
            except CacheMiss:
                return self._load_todo(todo_id)

            try:
                todo = GetTodoByIdResponse.from_dict(json.loads(data))
            except (ValueError, TypeError):
                self._logger("GetTodoById").error("error unmarshal todos")
                raise

            self._logger("GetTodoById").info(f"success getting todos by id: {todo_id}")
            return todo

    def _load_todo(self, todo_id: str) -> GetTodoByIdResponse:
        todo = self._require_todo("GetTodoById", todo_id)

        payload = _dump(todo.to_dict())
        try:
            self._cache.set(TODO_BY_ID_KEY, payload, CACHE_TTL)
        except Exception as exc:
            self._logger("GetTodoById").error(f"error setting todos to redis: {exc}")
            raise

        self._logger("GetTodoById").info(f"success getting todos by id: {todo_id}")
        return todo

    def update_todo_by_id(self, request: UpdateTodoRequest) -> None:
        """Replace a todo's fields and drop the cached reads."""
        with self._tracer.start_span("Service.UpdateTodoById"):
            self._require_todo("UpdateTodoById", request.todo_id)

            tx = self._start_transaction("UpdateTodoById")
            try:
                self._repo.update_todo_by_id(tx, request)
            except Exception as exc:
                self._logger("UpdateTodoById").error(
                    f"error updating todos by id: {request.todo_id}"
                )
                self._db.rollback_transaction(tx)
                raise ServiceError(StatusCode.INTERNAL, str(exc)) from exc
            self._db.commit_transaction(tx)

            self._invalidate("UpdateTodoById", TODOS_KEY, TODO_BY_ID_KEY)
            self._logger("UpdateTodoById").info(
                f"success updating todos by id: {request.todo_id}"
            )

    def update_todo_status_by_id(self, request: TodoStatusInput) -> None:
        """Flip a todo's completed flag; the requested value is not used."""
        with self._tracer.start_span("Service.UpdateTodoStatusById"):
            status = UpdateTodoStatusRequest(
                todo_id=request.todo_id,
                completed=request.completed,
                updated_at=datetime.fromtimestamp(request.updated_at, tz=timezone.utc),
            )

            todo = self._require_todo("UpdateTodoStatusById", status.todo_id)
            status.completed = not todo.completed

            tx = self._start_transaction("UpdateTodoStatusById")
            try:
                self._repo.update_todo_status_by_id(tx, status)
            except Exception as exc:
                self._logger("UpdateTodoStatusById").error(
                    f"error updating todos status by id: {status.todo_id}"
                )
                self._db.rollback_transaction(tx)
                raise ServiceError(StatusCode.INTERNAL, str(exc)) from exc
            self._db.commit_transaction(tx)

            self._invalidate("UpdateTodoStatusById", TODOS_KEY, TODO_BY_ID_KEY)
            self._logger("UpdateTodoStatusById").info(
                f"success updating todos status by id: {status.todo_id}"
            )

    def delete_todo_by_id(self, todo_id: str) -> None:
        """Remove a todo and drop the cached reads."""
        with self._tracer.start_span("Service.DeleteTodoById"):
            self._require_todo("DeleteTodoById", todo_id)

            tx = self._start_transaction("DeleteTodoById")
            try:
                self._repo.delete_todo_by_id(tx, todo_id)
            except Exception as exc:
                self._logger("DeleteTodoById").error(f"error deleting todos by id: {todo_id}")
                self._db.rollback_transaction(tx)
                raise ServiceError(StatusCode.INTERNAL, str(exc)) from exc
            self._db.commit_transaction(tx)

            self._invalidate("DeleteTodoById", TODOS_KEY, TODO_BY_ID_KEY)
            self._logger("DeleteTodoById").info(f"success deleting todos by id: {todo_id}")