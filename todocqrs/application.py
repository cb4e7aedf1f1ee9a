"""Process wiring: build the module, run the HTTP server, stop on a signal."""

from __future__ import annotations

import argparse
import signal
import sqlite3
import sys
import threading
from collections.abc import Callable
from datetime import datetime
from typing import Any, TextIO

from todocqrs.cache import connect_redis
from todocqrs.config import DEFAULT_ENV_FILE, AppConfig, load_config
from todocqrs.controllers import TodoController
from todocqrs.database import connect_database
from todocqrs.handlers import build_todo_handler
from todocqrs.logger import Logger
from todocqrs.metrics import Metrics, MetricsGauge, Registry
from todocqrs.repository import TodoRepository
from todocqrs.server import RestServer
from todocqrs.service import TodoService
from todocqrs.tracing import new_tracing

_RULE = "-" * 40
_GREEN = "\x1b[32m"
_RESET = "\x1b[0m"


class Module:
    """Builds the controller and everything it depends on."""

    def __init__(
        self,
        db_connect: Callable[[str], Any] | None = None,
        paramstyle: str = "format",
        cache_connect: Callable[[Any, Any], Any] = connect_redis,
        log: Logger | None = None,
    ) -> None:
        self._db_connect = db_connect
        self._paramstyle = paramstyle
        self._cache_connect = cache_connect
        self._log = log
        self.controller: TodoController | None = None

    def start_module(self, config: AppConfig, registry: Registry) -> TodoController:
        """Connect the cache and database and wire the todo controller."""
        if self._db_connect is None:
            raise RuntimeError("no database connector configured")
        log = self._log if self._log is not None else Logger()

        metrics = Metrics(registry, config.app.service_name)
        tracer = new_tracing(config, log)
        self.start_metrics(registry, config)

        cache = self._cache_connect(config, log)
        db = connect_database(config, log, self._db_connect)

        repository = TodoRepository(tracer, self._paramstyle)
        service = TodoService(db, log, repository, cache, tracer)
        handler = build_todo_handler(service, tracer, log)

        self.controller = TodoController(handler, tracer, metrics)
        return self.controller

    def start_metrics(self, registry: Registry, config: AppConfig) -> MetricsGauge:
        """Register and fill the process gauges."""
        gauge = MetricsGauge(registry, config.app.service_name)
        gauge.set_total_cpu()
        gauge.set_total_memory()
        return gauge


class Application:
    """Starts the HTTP server for a module and stops it again."""

    def __init__(
        self,
        module: Module | None = None,
        config: AppConfig | None = None,
        out: TextIO | None = None,
    ) -> None:
        self.module = module if module is not None else Module()
        self._config = config
        self._out = out if out is not None else sys.stdout
        self.rest: RestServer | None = None
        self._thread: threading.Thread | None = None

    def _paint(self, text: str) -> str:
        isatty = getattr(self._out, "isatty", None)
        return f"{_GREEN}{text}{_RESET}" if isatty is not None and isatty() else text

    def _say(self, text: str) -> None:
        print(text, file=self._out, flush=True)

    def start_app(self) -> RestServer:
        """Build the module and serve HTTP on a background thread."""
        if self._thread is not None:
            raise RuntimeError("application is already running")
        config = self._config if self._config is not None else load_config()
        registry = Registry()
        controller = self.module.start_module(config, registry)

        self.rest = RestServer(controller, registry, config.http.port)
        self._thread = threading.Thread(target=self.rest.serve_forever, name="rest", daemon=True)
        self._thread.start()

        self._say(self._paint(_RULE))
        self._say(f"REST server running on port {self._paint(config.http.port)}")
        self._say(self._paint(_RULE))
        return self.rest

    def stop_app(self) -> None:
        """Shut the server down and report it."""
        if self.rest is None or self._thread is None:
            raise RuntimeError("application is not running")
        self.rest.shutdown()
        self._thread.join()
        self._thread = None

        self._say(self._paint(_RULE))
        self._say("Server gracefully stopped")
        self._say("Process clean up...")
        self._say(self._paint(_RULE))


_SQLITE_SCHEMA = """
CREATE TABLE IF NOT EXISTS todos (
    todo_id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT NOT NULL,
    completed BOOLEAN NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
)
"""


def _sqlite_connector(path: str) -> Callable[[str], Any]:
    def connect(_dsn: str) -> sqlite3.Connection:
        sqlite3.register_adapter(datetime, lambda value: value.isoformat(" "))
        connection = sqlite3.connect(path, check_same_thread=False)
        connection.execute(_SQLITE_SCHEMA)
        connection.commit()
        return connection

    return connect


def main(argv: list[str] | None = None) -> int:
    """Run the todo service until SIGINT or SIGTERM."""
    parser = argparse.ArgumentParser(prog="todocqrs", description="Todo service over HTTP.")
    parser.add_argument("--env-file", default=DEFAULT_ENV_FILE, help="file of environment settings")
    parser.add_argument("--sqlite", metavar="PATH", help="store todos in a SQLite database file")
    args = parser.parse_args(argv)
    if args.sqlite is None:
        parser.error("no PostgreSQL driver is installed; use --sqlite PATH")

    config = load_config(args.env_file)
    module = Module(db_connect=_sqlite_connector(args.sqlite), paramstyle="qmark")
    app = Application(module, config)

    stop = threading.Event()
    previous = {sig: signal.signal(sig, lambda *_: stop.set()) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        app.start_app()
        while not stop.wait(0.5):
            pass
        app.stop_app()
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
    return 0


if __name__ == "__main__":
    sys.exit(main())