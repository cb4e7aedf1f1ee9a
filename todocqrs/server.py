"""HTTP front end that maps JSON requests onto the todo controller."""

from __future__ import annotations

import dataclasses
import json
import logging
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import unquote, urlsplit

from todocqrs.contracts import (
    ServiceError,
    StatusCode,
    TodoInput,
    TodoParams,
    TodoStatusInput,
    TodoUpdateInput,
    decode_request,
)
from todocqrs.metrics import Registry

JSON_CONTENT_TYPE = "application/json"
METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

_log = logging.getLogger(__name__)

# HTTP status used for each service status code.
_HTTP_STATUS = {
    StatusCode.OK: 200,
    StatusCode.CANCELLED: 499,
    StatusCode.UNKNOWN: 500,
    StatusCode.INVALID_ARGUMENT: 400,
    StatusCode.DEADLINE_EXCEEDED: 504,
    StatusCode.NOT_FOUND: 404,
    StatusCode.ALREADY_EXISTS: 409,
    StatusCode.PERMISSION_DENIED: 403,
    StatusCode.RESOURCE_EXHAUSTED: 429,
    StatusCode.FAILED_PRECONDITION: 400,
    StatusCode.ABORTED: 409,
    StatusCode.OUT_OF_RANGE: 400,
    StatusCode.UNIMPLEMENTED: 501,
    StatusCode.INTERNAL: 500,
    StatusCode.UNAVAILABLE: 503,
    StatusCode.DATA_LOSS: 500,
    StatusCode.UNAUTHENTICATED: 401,
}


class _RouteError(Exception):
    def __init__(self, status: int, code: StatusCode, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.message = message


def _not_found() -> _RouteError:
    return _RouteError(int(HTTPStatus.NOT_FOUND), StatusCode.NOT_FOUND, "Not Found")


def _not_allowed() -> _RouteError:
    return _RouteError(
        int(HTTPStatus.METHOD_NOT_ALLOWED), StatusCode.UNIMPLEMENTED, "Method Not Allowed"
    )


def _error_reply(status: int, code: StatusCode, message: str) -> tuple[int, str, bytes]:
    payload = {"code": int(code), "message": message, "details": []}
    return status, JSON_CONTENT_TYPE, json.dumps(payload).encode()


class RestServer:
    """Serves the todo endpoints and the metrics page over HTTP.

    Routes: ``GET/POST /todos``, ``GET/PUT/PATCH/DELETE /todos/<id>`` and
    ``GET /metrics``. Replies are ``(status, content type, body)`` tuples.
    """

    def __init__(self, controller: Any, registry: Registry, port: str | int = "", host: str = "") -> None:
        self._controller = controller
        self._registry = registry
        self._serving = False
        self._closed = False
        self._httpd = ThreadingHTTPServer((host, int(port) if port else 0), self._handler_class())

    @property
    def address(self) -> tuple[str, int]:
        """The host and port the server is bound to."""
        host, port = self._httpd.server_address[:2]
        return str(host), int(port)

    def _handler_class(self) -> type[BaseHTTPRequestHandler]:
        server = self

        class _Handler(BaseHTTPRequestHandler):
            protocol_version = "HTTP/1.1"

            def _handle(self) -> None:
                length = int(self.headers.get("Content-Length") or 0)
                body = self.rfile.read(length) if length else b""
                status, content_type, payload = server.dispatch(self.command, self.path, body)
                self.send_response(status)
                self.send_header("Content-Type", content_type)
                self.send_header("Content-Length", str(len(payload)))
                self.end_headers()
                self.wfile.write(payload)

            do_GET = do_POST = do_PUT = do_PATCH = do_DELETE = _handle

            def log_message(self, format: str, *args: Any) -> None:
                _log.debug("%s - %s", self.address_string(), format % args)

        return _Handler

    def dispatch(self, method: str, path: str, body: bytes | str = b"") -> tuple[int, str, bytes]:
        """Handle one request and return its status, content type and body."""
        method = method.upper()
        route = urlsplit(path).path
        try:
            if route == "/metrics":
                if method != "GET":
                    raise _not_allowed()
                return int(HTTPStatus.OK), METRICS_CONTENT_TYPE, self._registry.render().encode()
            result = self._route(method, route, body)
        except _RouteError as exc:
            return _error_reply(exc.status, exc.code, exc.message)
        except ServiceError as exc:
            return _error_reply(_HTTP_STATUS.get(exc.code, 500), exc.code, exc.message)
        except Exception as exc:
            _log.exception("unhandled error for %s %s", method, route)
            return _error_reply(int(HTTPStatus.INTERNAL_SERVER_ERROR), StatusCode.UNKNOWN, str(exc))
        payload = {} if result is None else dataclasses.asdict(result)
        return int(HTTPStatus.OK), JSON_CONTENT_TYPE, json.dumps(payload).encode()

    def _route(self, method: str, route: str, body: bytes | str) -> Any:
        parts = route.strip("/").split("/")
        if parts[0] != "todos" or len(parts) > 2:
            raise _not_found()
        controller = self._controller
        if len(parts) == 1:
            if method == "GET":
                return controller.get_all_todos()
            if method == "POST":
                controller.insert_todo(self._decode(body, TodoInput))
                return None
            raise _not_allowed()

        todo_id = unquote(parts[1])
        if not todo_id:
            raise _not_found()
        if method == "GET":
            return controller.get_todo_by_id(TodoParams(todo_id=todo_id))
        if method == "DELETE":
            controller.delete_todo_by_id(TodoParams(todo_id=todo_id))
            return None
        if method == "PUT":
            request = dataclasses.replace(self._decode(body, TodoUpdateInput), todo_id=todo_id)
            controller.update_todo_by_id(request)
            return None
        if method == "PATCH":
            request = dataclasses.replace(self._decode(body, TodoStatusInput), todo_id=todo_id)
            controller.update_todo_status_by_id(request)
            return None
        raise _not_allowed()

    @staticmethod
    def _decode(body: bytes | str, cls: type) -> Any:
        if not body.strip():
            return cls()
        try:
            return decode_request(body, cls)
        except (ValueError, TypeError) as exc:
            raise _RouteError(int(HTTPStatus.BAD_REQUEST), StatusCode.INVALID_ARGUMENT, str(exc)) from exc

    def serve_forever(self) -> None:
        """Serve requests until :meth:`shutdown` is called."""
        if self._closed:
            raise RuntimeError("server is closed")
        self._serving = True
        self._httpd.serve_forever()

    def shutdown(self) -> None:
        """Stop serving and release the socket; later calls have no effect."""
        if self._closed:
            return
        self._closed = True
        if self._serving:
            self._httpd.shutdown()
        self._httpd.server_close()