import io
import json
import os
import sqlite3
import urllib.request
from datetime import datetime

import pytest

from todocqrs.application import Application, Module, main
from todocqrs.cache import RedisCache
from todocqrs.config import AppConfig
from todocqrs.contracts import TodoInput, TodoParams, TodoStatusInput
from todocqrs.logger import Logger
from todocqrs.metrics import Registry


class FakeRedis:
    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, ex=None):
        self.data[key] = value

    def delete(self, key):
        self.data.pop(key, None)

    def close(self):
        self.data.clear()


SCHEMA = """
CREATE TABLE todos (
    todo_id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT NOT NULL,
    completed BOOLEAN NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
)
"""


def sqlite_connect(_dsn):
    sqlite3.register_adapter(datetime, lambda value: value.isoformat(" "))
    connection = sqlite3.connect(":memory:", check_same_thread=False)
    connection.execute(SCHEMA)
    connection.commit()
    return connection


@pytest.fixture
def config():
    return AppConfig.from_env({"HTTP_PORT": "0", "SERVICE_NAME": "todo"})


@pytest.fixture
def module():
    cache = RedisCache(FakeRedis())
    return Module(
        db_connect=sqlite_connect,
        paramstyle="qmark",
        cache_connect=lambda config, log: cache,
        log=Logger(io.StringIO()),
    )


def test_module_wires_working_controller(module, config):
    controller = module.start_module(config, Registry())
    assert controller is module.controller

    controller.insert_todo(TodoInput(title="test", description="test"))
    todos = controller.get_all_todos().todos
    assert [t.title for t in todos] == ["test"]

    todo_id = todos[0].todo_id
    controller.update_todo_status_by_id(TodoStatusInput(todo_id=todo_id, updated_at=0))
    view = controller.get_todo_by_id(TodoParams(todo_id=todo_id))
    assert view.completed is True

    controller.delete_todo_by_id(TodoParams(todo_id=todo_id))
    assert controller.get_all_todos().todos == []


def test_module_without_database_connector(config):
    module = Module(cache_connect=lambda config, log: None, log=Logger(io.StringIO()))
    with pytest.raises(RuntimeError):
        module.start_module(config, Registry())


def test_start_metrics_sets_gauges(module, config):
    registry = Registry()
    gauge = module.start_metrics(registry, config)
    assert gauge.total_cpu.value("v1") == (os.cpu_count() or 0)
    assert gauge.total_memory.value("v1") >= 0
    assert "todo_total_cpu" in registry.render()


def test_start_and_stop_app(module, config):
    out = io.StringIO()
    app = Application(module, config, out)
    rest = app.start_app()
    host, port = rest.address
    base = f"http://{host}:{port}"
    try:
        request = urllib.request.Request(
            f"{base}/todos",
            data=json.dumps({"title": "test", "description": "test"}).encode(),
            method="POST",
            headers={"Content-Type": "application/json"},
        )
        with urllib.request.urlopen(request, timeout=5) as reply:
            assert json.loads(reply.read()) == {}
        with urllib.request.urlopen(f"{base}/todos", timeout=5) as reply:
            todos = json.loads(reply.read())["todos"]
    finally:
        app.stop_app()

    assert [t["title"] for t in todos] == ["test"]
    text = out.getvalue()
    assert "REST server running on port" in text
    assert "Server gracefully stopped" in text
    assert "Process clean up..." in text


def test_stop_app_before_start_raises(module, config):
    app = Application(module, config, io.StringIO())
    with pytest.raises(RuntimeError):
        app.stop_app()


def test_start_app_twice_raises(module, config):
    app = Application(module, config, io.StringIO())
    app.start_app()
    try:
        with pytest.raises(RuntimeError):
            app.start_app()
    finally:
        app.stop_app()


def test_main_requires_a_database(capsys):
    with pytest.raises(SystemExit) as info:
        main([])
    assert info.value.code == 2
    assert "--sqlite" in capsys.readouterr().err