# todolab

A small todo HTTP API built on Flask. Todos are kept behind a storage
interface, so the service layer works with any backend, and the API shows
three kinds of concurrent work:

- **Batch creation** through a fixed pool of worker threads sharing a job
  queue, or with one thread per item limited by a semaphore.
- **Background notifications**: the request returns at once and a worker
  thread "sends" the message after the requested delay.
- **Thread-safe statistics**: request counters and timings protected by a lock.

## Running the server

```
todolab-server [--host HOST] [--port PORT]
```

By default the server listens on `0.0.0.0:8080`. It prints a banner and the
list of endpoints when it starts, and on Ctrl+C or SIGTERM it stops the
notification worker and exits.

### Endpoints

| Method | Path | Purpose |
| ------ | ---- | ------- |
| GET    | `/health` | Health check |
| POST   | `/api/v1/todos` | Create a todo |
| GET    | `/api/v1/todos` | List all todos |
| GET    | `/api/v1/todos/<id>` | Fetch one todo |
| PUT    | `/api/v1/todos/<id>` | Update a todo |
| DELETE | `/api/v1/todos/<id>` | Delete a todo |
| PATCH  | `/api/v1/todos/<id>/toggle` | Toggle completion |
| POST   | `/api/v1/todos/<id>/notify` | Queue a delayed notification (202) |
| POST   | `/api/v1/todos/batch` | Create many todos with a worker pool |
| POST   | `/api/v1/todos/batch-v2` | Create many todos with a semaphore |
| GET    | `/api/v1/stats` | Todo counts, completion rate, thread count |
| GET    | `/api/v1/stats/detailed` | Request counters and average response time |
| GET    | `/api/v1/stats/storage` | Backend-specific statistics |
| GET    | `/api/v1/stats/goroutines` | Number of running threads |
| POST   | `/api/v1/stats/reset` | Reset request statistics |
| GET    | `/api/v1/notifications/stats` | Notification worker statistics |
| POST   | `/api/v1/admin/switch-storage` | Build a `memory` or `cache` backend and describe it |
| GET    | `/api/v1/admin/storage-info` | Describe the current backend |

A todo has a `title` (required), a `description` and a `priority` from 1 (low)
to 3 (high). Every response is a JSON object with `success` and either `data`
and/or `message`, or `error`. Malformed or invalid request bodies get a 400
reply; unknown todo ids get a 404.

Example request bodies:

```json
{"title": "Learn threads", "description": "Pools and queues", "priority": 3}
```

```json
{"todos": [{"title": "Task 1", "priority": 2}, {"title": "Task 2", "priority": 1}]}
```

```json
{"message": "Don't forget this task!", "delay_seconds": 3}
```

A batch holds between 1 and 100 todos; items of a batch are validated one by
one and failures are reported per item. A notification delay is between 0 and
300 seconds.

## Using the library

The application can be assembled in code:

```python
from todolab.server import build_app

app = build_app()
client = app.test_client()
client.post("/api/v1/todos", json={"title": "Write docs", "priority": 2})

app.extensions["notifier"].stop()  # stop the background notification worker
```

The pieces are usable on their own:

- `todolab.entity` – the `Todo` dataclass, the `TodoRepository` and
  `StorageInfo` contracts and `TodoNotFoundError`.
- `todolab.memory.InMemoryTodoRepository` – storage with sequential ids and
  access statistics.
- `todolab.cache.CachedTodoRepository(max_size)` – bounded storage that evicts
  the least recently updated todo and counts hits, misses and evictions.
- `todolab.dto` – request classes with `from_dict` validation raising
  `RequestValidationError`, and response classes with `to_dict`.
- `todolab.todo_service.TodoService` – create, read, update, delete and toggle.
- `todolab.stats_service.StatsService` – request counters and todo statistics.
- `todolab.batch.BatchProcessor(todo_service, worker_count)` –
  `process_batch` and `process_batch_v2`.
- `todolab.notifier.Notifier(todo_service)` – `send_async`,
  `send_batch_async`, `send_with_timeout`, `stats` and `stop`.
- `todolab.responses` – `success_response` and `error_response` envelopes.
- `todolab.web.create_app(todo_service, stats_service, batch_processor, notifier)`
  – wires the services into a Flask application.

## Optional capabilities demo

```
todolab-demo [--file PATH]
```

runs a short console walk-through of a repository interface with optional
capabilities (`todolab.demo`). It exercises an in-memory store, a JSON file
store (by default `todos.json` in the system temporary directory) and a
simulated Redis cache held in process, and shows how code checks at run time
whether a backend offers storage statistics (`StorageInfo`), batch operations
(`BatchCapable`) or cache management (`CacheCapable`), falling back to plain
calls when it does not.

## What it does not do

- The server keeps todos in memory only; they are gone when it stops.
  `switch-storage` builds a new backend to show what it reports, but the
  running server keeps using its original store.
- Notifications are printed to the console; nothing is e-mailed or pushed.
- There is no database backend, and no backend in the package implements
  `BatchCapable`, so the demo's bulk import always falls back to one-by-one
  creation. The Redis backend talks to no Redis server.