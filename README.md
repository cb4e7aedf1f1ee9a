# todocqrs

A small todo service that runs over HTTP. Writes (create, update, toggle
status, delete) go through command handlers. Reads (list all, fetch one) go
through query handlers. The query handlers serve from a Redis cache when it
holds an entry and fall back to the database when it does not. Cached
entries live for five minutes. Every update, status change and delete
clears both the cached list and the cached single item. A create clears
only the cached list.

Each request is counted in Prometheus-style counters and wrapped in a
tracing span. The HTTP server serves the counters as text at `/metrics`.

## Installing

```
pip install .
```

To run the test suite as well:

```
pip install ".[test]"
pytest
```

## Running

```
todocqrs --sqlite todos.db
```

This command stores todos in the SQLite file you name. It creates the
`todos` table if the table does not exist. A Redis server must be reachable
as configured (see below).

The command prints the HTTP port and serves until it receives SIGINT or
SIGTERM. It then shuts the server down and prints a short message.

Options:

- `--sqlite PATH`: the SQLite database file. This option is required. If
  you leave it out, the command exits with an error.
- `--env-file FILE`: a file of environment settings to load first. The
  default is `../.env`, relative to the current directory. A missing file is
  ignored.

## Configuration

`todocqrs.config.load_config(env_file)` loads the env file into the process
environment. It then builds a `todocqrs.config.AppConfig` from the variables
below. The first configuration built is cached and returned on later calls.
`AppConfig.from_env(environ)` builds one from any mapping.

| Variable       | Used for                                       |
|----------------|------------------------------------------------|
| `GO_ENV`       | deployment environment name, stored as given   |
| `SERVICE_NAME` | service name and metrics namespace             |
| `HTTP_PORT`    | port of the HTTP server (empty: any free port) |
| `GRPC_PORT`    | read into the configuration, otherwise unused  |
| `DB_HOST`, `DB_PORT`, `DB_USER`, `DB_PASS`, `DB_NAME`, `DB_SSL_MODE` | connection string from `todocqrs.database.build_dsn` |
| `REDIS_HOST`, `REDIS_PORT` | Redis address (defaults `localhost`, `6379`) |
| `REDIS_PASS`   | read into the configuration, not used to connect |
| `JAEGER_HOST`, `JAEGER_PORT` | collector address recorded on the tracer |

`todocqrs.config.resolve_environment(env)` lower-cases an environment name.
It accepts `development`, `staging`, `testing` and `production`, and
returns `development` for anything else. It logs the choice.
`AppConfig.app.env` keeps the raw `GO_ENV` value.

## HTTP API

Request and response bodies are JSON. Times in requests and replies are
Unix seconds.

| Method and path        | Action                                           |
|------------------------|--------------------------------------------------|
| `GET /todos`           | `{"todos": [...]}` with every todo              |
| `POST /todos`          | create from `title`, `description`, `completed`, `created_at`, `updated_at` |
| `GET /todos/<id>`      | one todo                                         |
| `PUT /todos/<id>`      | replace `title`, `description`, `completed`, `updated_at` |
| `PATCH /todos/<id>`    | flip `completed`; any `completed` in the body is ignored |
| `DELETE /todos/<id>`   | remove the todo                                  |
| `GET /metrics`         | counters and gauges in text exposition format    |

A successful write returns `{}`. An error returns an HTTP status and the
body `{"code": <status code>, "message": ..., "details": []}`. For example:

- A missing title or description gives 400 with
  `failed to validate request, err: title is required`.
- An unknown id gives 404.
- A failed write gives 500.

New todos get a ULID identifier from `todocqrs.commands.make_ulid`.

The single-item cache uses one key, `todoById`, for every id. Once an item
is cached, `GET /todos/<id>` returns that cached item for any id. This
lasts until the entry expires or a write clears it.

`todocqrs.server.RestServer.dispatch(method, path, body)` handles one
request without opening a socket. It returns a tuple of status, content
type and body.

## Using the pieces directly

The layers are plain Python objects, so you can assemble them yourself:

- `todocqrs.database.connect_database(config, log, connect)` takes any
  DB-API `connect` callable. It checks the connection with `SELECT 1` and
  returns a `todocqrs.database.Database`.
- `todocqrs.repository.TodoRepository(tracer, paramstyle)` runs the SQL.
  `paramstyle` is `"format"`, `"qmark"` or `"numeric"`, to match your
  driver.
- `todocqrs.cache.connect_redis(config, log)` returns a
  `todocqrs.cache.RedisCache`. On a missing key, `RedisCache.get` raises
  `todocqrs.cache.CacheMiss`.
- `todocqrs.service.TodoService` holds the business rules. Lookups of an
  unknown id raise `todocqrs.contracts.ServiceError` with
  `StatusCode.NOT_FOUND`.
- `todocqrs.handlers.build_todo_handler(todo_service, tracer, log)` wires up
  the commands and queries.
- `todocqrs.controllers.TodoController` is the entry point for each
  operation. It also updates the counters in `todocqrs.metrics.Metrics`.
- `todocqrs.application.Module(db_connect=..., paramstyle=...)` builds all
  of the above from an `AppConfig`.
- `todocqrs.application.Application` runs a `RestServer` on a background
  thread. Start it with `start_app()` and stop it with `stop_app()`.

Logs are JSON lines on standard output. `todocqrs.logger.Logger` writes
them, with `file` and `func` fields added to each line.

## What it does not do

- There is no RPC listener. Only the HTTP server runs.
- No PostgreSQL driver is included. The `todocqrs` command stores todos
  only in SQLite. To use PostgreSQL, pass your own driver's `connect` to
  `Module` or `connect_database`.
- Tracing spans are not sent anywhere. Finished spans are kept in memory on
  `todocqrs.tracing.Tracer.finished`.
- The `fail_requests` counter is registered but never incremented.