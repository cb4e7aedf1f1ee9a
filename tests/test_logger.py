import io
import json
import logging

from todocqrs.logger import JsonFormatter, Logger


def _lines(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines()]


def test_start_logger_adds_fields():
    stream = io.StringIO()
    Logger(stream).start_logger("todo_service.go", "InsertTodo").info("success inserting todos")
    (entry,) = _lines(stream)
    assert entry["file"] == "todo_service.go"
    assert entry["func"] == "InsertTodo"
    assert entry["msg"] == "success inserting todos"
    assert entry["level"] == "info"


def test_debug_and_error_levels_emitted():
    stream = io.StringIO()
    log = Logger(stream).start_logger("a", "b")
    log.debug("d")
    log.error("e")
    assert [e["level"] for e in _lines(stream)] == ["debug", "error"]


def test_formatter_without_fields():
    record = logging.LogRecord("n", logging.WARNING, "p", 1, "hello %s", ("x",), None)
    entry = json.loads(JsonFormatter().format(record))
    assert entry["msg"] == "hello x"
    assert entry["level"] == "warning"
    assert "file" not in entry