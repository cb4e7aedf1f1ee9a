"""Counter and gauge metrics with a text exposition registry."""

from __future__ import annotations

import os


def _full_name(namespace: str, name: str) -> str:
    return f"{namespace}_{name}" if namespace else name


def _format_value(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else repr(float(value))


class _LabelledVec:
    kind = ""

    def __init__(self, namespace: str, name: str, help: str, label_names: list[str]) -> None:
        self.name = _full_name(namespace, name)
        self.help = help
        self.label_names = tuple(label_names)
        self._values: dict[tuple[str, ...], float] = {}

    def _key(self, labels: tuple[str, ...]) -> tuple[str, ...]:
        if len(labels) != len(self.label_names):
            raise ValueError(
                f"{self.name}: expected {len(self.label_names)} label values, got {len(labels)}"
            )
        return tuple(str(v) for v in labels)

    def _read(self, labels: tuple[str, ...]) -> float:
        return self._values.get(self._key(labels), 0.0)

    def samples(self):
        for labels, value in sorted(self._values.items()):
            pairs = ",".join(f'{n}="{v}"' for n, v in zip(self.label_names, labels))
            suffix = "{" + pairs + "}" if pairs else ""
            yield f"{self.name}{suffix} {_format_value(value)}"


class CounterVec(_LabelledVec):
    kind = "counter"

    def inc(self, *args: str) -> None:
        key = self._key(args)
        self._values[key] = self._values.get(key, 0.0) + 1

    def value(self, *args: str) -> float:
        """Current count for the given label values."""
        return self._read(args)


class GaugeVec(_LabelledVec):
    kind = "gauge"

    def set(self, value: float, *args: str) -> None:
        self._values[self._key(args)] = float(value)

    def value(self, *args: str) -> float:
        """Current gauge value for the given label values."""
        return self._read(args)


class Registry:
    """Holds collectors by name and renders them as text."""

    def __init__(self) -> None:
        self._collectors: dict[str, _LabelledVec] = {}

    def register(self, *args: _LabelledVec) -> None:
        for collector in args:
            if collector.name in self._collectors:
                raise ValueError(f"duplicate metrics collector registration: {collector.name}")
            self._collectors[collector.name] = collector

    def render(self) -> str:
        lines: list[str] = []
        for name in sorted(self._collectors):
            c = self._collectors[name]
            lines.append(f"# HELP {name} {c.help}")
            lines.append(f"# TYPE {name} {c.kind}")
            lines.extend(c.samples())
        return "\n".join(lines) + ("\n" if lines else "")


class Metrics:
    """Request counters for the todo endpoints."""

    def __init__(self, registry: Registry, service: str) -> None:
        def counter(name: str, help: str) -> CounterVec:
            return CounterVec(service, name, help, ["method"])

        self.success_requests = counter("todo_success_requests", "The total number of successful requests")
        self.fail_requests = counter("todo_fail_requests", "The total number of failed requests")
        self.get_all_todo_requests = counter("todo_get_all_todo_requests", "The total number of get all todo requests")
        self.get_todo_requests = counter("todo_get_todo_requests", "The total number of get todo requests")
        self.create_todo_requests = counter("todo_create_todo_requests", "The total number of create todo requests")
        self.update_todo_requests = counter("todo_update_todo_requests", "The total number of update todo requests")
        self.update_status_todo_requests = counter(
            "todo_update_status_todo_requests", "The total number of update status todo requests"
        )
        self.delete_todo_requests = counter("todo_delete_todo_requests", "The total number of delete todo requests")
        registry.register(
            self.success_requests,
            self.fail_requests,
            self.get_all_todo_requests,
            self.get_todo_requests,
            self.create_todo_requests,
            self.update_todo_requests,
            self.update_status_todo_requests,
            self.delete_todo_requests,
        )


def _allocated_bytes() -> int:
    try:
        import resource
    except ImportError:
        import tracemalloc

        return tracemalloc.get_traced_memory()[1]
    return resource.getrusage(resource.RUSAGE_SELF).ru_maxrss * 1024


class MetricsGauge:
    """Gauges describing the host process."""

    def __init__(self, registry: Registry, service: str) -> None:
        self.total_cpu = GaugeVec(service, "total_cpu", "The total number of cpu", ["version"])
        self.total_memory = GaugeVec(service, "total_memory", "The total number of memory", ["version"])
        registry.register(self.total_cpu, self.total_memory)

    def set_total_cpu(self) -> None:
        self.total_cpu.set(os.cpu_count() or 0, "v1")

    def set_total_memory(self) -> None:
        self.total_memory.set(_allocated_bytes(), "v1")