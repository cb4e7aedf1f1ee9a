"""Todo HTTP service with separate command and query handlers, a Redis read cache, metrics and tracing spans."""

__version__ = "0.1.0"