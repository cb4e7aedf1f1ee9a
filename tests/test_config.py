from todocqrs.config import AppConfig, load_config, resolve_environment


def test_resolve_known_environment_is_case_insensitive():
    assert resolve_environment("PRODUCTION") == "production"
    assert resolve_environment("Staging") == "staging"


def test_resolve_unknown_defaults_to_development():
    assert resolve_environment("") == "development"
    assert resolve_environment("nonsense") == "development"


def test_from_env_reads_every_section():
    environ = {
        "GO_ENV": "testing",
        "SERVICE_NAME": "todos",
        "GRPC_PORT": "9000",
        "HTTP_PORT": "8000",
        "DB_HOST": "localhost",
        "DB_PORT": "5432",
        "DB_USER": "user",
        "DB_PASS": "password",
        "DB_NAME": "todos_db",
        "DB_SSL_MODE": "disable",
        "REDIS_HOST": "cachehost",
        "REDIS_PORT": "6379",
        "REDIS_PASS": "secret",
        "JAEGER_HOST": "tracehost",
        "JAEGER_PORT": "14268",
    }
    conf = AppConfig.from_env(environ)
    assert conf.app.env == "testing"
    assert conf.app.service_name == "todos"
    assert conf.grpc.port == "9000"
    assert conf.http.port == "8000"
    assert conf.postgres.host == "localhost"
    assert conf.postgres.password == "password"
    assert conf.postgres.ssl == "disable"
    assert conf.redis.password == "secret"
    assert conf.jaeger.host == "tracehost"


def test_from_env_keeps_raw_environment_and_empty_defaults():
    conf = AppConfig.from_env({"GO_ENV": "Staging"})
    assert conf.app.env == "Staging"
    assert conf.redis.host == ""


def test_load_config_returns_shared_instance(tmp_path):
    first = load_config(tmp_path / "missing.env")
    assert load_config(None) is first