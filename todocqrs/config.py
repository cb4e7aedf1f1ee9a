"""Application configuration read from environment variables."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from dotenv import load_dotenv

_log = logging.getLogger(__name__)

_KNOWN_ENVIRONMENTS = ("development", "staging", "testing", "production")
DEFAULT_ENV_FILE = "../.env"


@dataclass
class _AppSection:
    env: str = ""
    service_name: str = ""


@dataclass
class _PortSection:
    port: str = ""


@dataclass
class _PostgresSection:
    name: str = ""
    user: str = ""
    password: str = ""
    host: str = ""
    port: str = ""
    ssl: str = ""


@dataclass
class _RedisSection:
    host: str = ""
    port: str = ""
    password: str = ""


@dataclass
class _JaegerSection:
    host: str = ""
    port: str = ""


def resolve_environment(env: str) -> str:
    """Return the recognised environment name for ``env``, logging the choice."""
    name = env.lower()
    if name in _KNOWN_ENVIRONMENTS:
        _log.info("App environment is set to %s", name)
        return name
    _log.info("App environment is not set. Using default environment development")
    return "development"


@dataclass
class AppConfig:
    """All settings the service needs, grouped by subsystem."""

    app: _AppSection = field(default_factory=_AppSection)
    grpc: _PortSection = field(default_factory=_PortSection)
    http: _PortSection = field(default_factory=_PortSection)
    postgres: _PostgresSection = field(default_factory=_PostgresSection)
    redis: _RedisSection = field(default_factory=_RedisSection)
    jaeger: _JaegerSection = field(default_factory=_JaegerSection)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        """Build a configuration from ``environ`` (``os.environ`` by default)."""
        env = os.environ if environ is None else environ

        def get(key: str) -> str:
            return env.get(key, "")

        raw_env = get("GO_ENV")
        resolve_environment(raw_env)
        return cls(
            # The raw value is kept, as the service always has.
            app=_AppSection(env=raw_env, service_name=get("SERVICE_NAME")),
            grpc=_PortSection(port=get("GRPC_PORT")),
            http=_PortSection(port=get("HTTP_PORT")),
            postgres=_PostgresSection(
                name=get("DB_NAME"),
                user=get("DB_USER"),
                password=get("DB_PASS"),
                host=get("DB_HOST"),
                port=get("DB_PORT"),
                ssl=get("DB_SSL_MODE"),
            ),
            redis=_RedisSection(
                host=get("REDIS_HOST"),
                port=get("REDIS_PORT"),
                password=get("REDIS_PASS"),
            ),
            jaeger=_JaegerSection(host=get("JAEGER_HOST"), port=get("JAEGER_PORT")),
        )


_cached: AppConfig | None = None


def load_config(env_file: str | os.PathLike[str] | None = DEFAULT_ENV_FILE) -> AppConfig:
    """Load ``env_file`` into the environment and return the shared configuration."""
    global _cached
    if env_file is not None:
        load_dotenv(env_file)
    if _cached is None:
        _cached = AppConfig.from_env()
    return _cached