"""Lightweight span tracing."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Span:
    operation_name: str
    tracer: "Tracer"
    parent: "Span | None" = None
    start_time: float = field(default_factory=time.time)
    finish_time: float | None = None

    def finish(self) -> None:
        """Mark the span as finished; later calls have no effect."""
        if self.finish_time is None:
            self.finish_time = time.time()
            self.tracer.finished.append(self)

    def __enter__(self) -> "Span":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.finish()


class Tracer:
    """Creates spans and keeps the finished ones for reporting."""

    def __init__(self, service_name: str = "", collector_endpoint: str = "") -> None:
        self.service_name = service_name
        self.collector_endpoint = collector_endpoint
        self.finished: list[Span] = []

    def start_span(self, operation_name: str, parent: Span | None = None) -> Span:
        return Span(operation_name, self, parent)


def new_tracing(config: Any, log: Any) -> Tracer:
    """Build the service tracer from the application configuration."""
    endpoint = f"http://{config.jaeger.host}:{config.jaeger.port}/api/traces"
    tracer = Tracer(config.app.service_name, endpoint)
    log.start_logger("jaeger.go", "NewTracing").info("connected to jaeger")
    return tracer