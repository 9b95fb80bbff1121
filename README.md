# commonkit

This package collects a few pieces that backend services often need.

- **`commonkit.logger`** provides one process-wide logger. It writes JSON lines to daily
  files and can also write to the console. It can copy fields in from a request context.
- **`commonkit.sqllog`** provides `SqlLogger`. It sends query traces (errors, slow
  queries, plain statements) to that logger and filters them by a `LogLevel`.
- **`commonkit.eslog`** provides `EsLogger`. It logs the request body of an HTTP round
  trip to a search engine, one entry for each non-empty line of the body.
- **`commonkit.writer`** provides `SafeWriter` and `safe_writer(ctx)`. A `SafeWriter` is
  a file-like sink, and every line written to it becomes an info entry.
- **`commonkit.crontab`** is an `argparse` command tree for job commands. Each job is
  described by a `Runner` with typed `Flag`s.
- **`commonkit.redisclient`** and **`commonkit.rediscollections`** provide `RedisClient`.
  It works the same way against a single Redis server or a Redis cluster.

## Logging

Call `init_log` once, before any logging function, with an `Options` value. Logging
before that raises `RuntimeError`.

| Option          | Default        | Meaning                                                       |
|-----------------|----------------|---------------------------------------------------------------|
| `ctx_fields`    | `[]`           | context keys whose values are added to each entry             |
| `filename`      | `"app.log"`    | base name of the log file                                     |
| `max_count`     | `0`            | number of daily files to keep (`0` keeps all of them)         |
| `caller_enable` | `False`        | add a `file` field of the form `name.py:line`                 |
| `log_level`     | `logging.INFO` | the lowest level that is written                              |
| `close_console` | `False`        | write to the file only, not to stdout                         |

File output goes to `<filename>.YYYYMMDD.log`. A new file is started when the day
changes. `<filename>` is made a symbolic link to the current file where the system
allows it. Each file line is a JSON object with `level`, `timestamp` (`%Y-%m-%d %H:%M:%S`),
the optional `file`, `message` and the entry's fields. Console lines hold the same values
separated by tabs, and the fields follow as JSON.

Keyword arguments given to `init_log` become fields on every entry.

```python
from commonkit import logger

logger.init_log(logger.Options(filename="service.log", ctx_fields=["trace_id"]), service="billing")

ctx = {"trace_id": "abc123", "other": "not logged"}
logger.info(ctx, "started", port=8080)        # fields as keyword arguments
logger.infow(ctx, "retrying", "attempt", 3)   # alternating keys and values
logger.infof(ctx, "processed %d items", 42)   # %-style template
logger.sync()
```

The context is a mapping, or `None`. Only the keys named in `ctx_fields` are copied,
and their values are converted to strings.

The functions `debug`/`debugw`/`debugf`, `info`/`infow`/`infof`,
`warn`/`warnw`/`warnf` and `error`/`errorw`/`errorf` all work as shown above.
If a `*w` call gets an odd number of arguments, the last one is stored under
`ignored`. The other functions are:

- `with_infof(ctx, field, template, *args)`: like `infof`, and it also adds the
  fields of the mapping `field`.
- `panic`/`panicf`: log the entry, then raise `RuntimeError`.
- `fatal`/`fatalf`: log the entry, flush, then raise `SystemExit(1)`.
- `bind(**fields)`: returns a logger that adds those fields to each entry. It has
  `debug`, `info`, `warn`, `error` and a further `bind`.
- `sync()`: flushes every output.

### SQL tracing

```python
import time
from commonkit.sqllog import LogLevel, SqlLogger

sql_log = SqlLogger(log_level=LogLevel.WARN, slow_threshold=0.2)
begin = time.monotonic()
# ... run the query ...
sql_log.trace(None, begin, lambda: ("SELECT 1", 1), None)
```

`trace` chooses the first case below that applies:

1. There is an error and the level is at least `ERROR`: the trace is logged as an error.
   With `ignore_record_not_found_error=True`, a `RecordNotFoundError` does not count here.
2. The query ran longer than `slow_threshold` seconds, and the level is at least `WARN`:
   the trace is logged as a warning.
3. The level is `INFO`: the trace is logged as info.

Each trace is logged as `err=... elapsed=... rows=... sql=...`. The `info`, `warn` and
`error` methods forward `%`-style messages when the level allows it. `log_mode(level)`
returns a copy of the logger with a different level.

### Search request bodies

`EsLogger(request_enabled=True).log_round_trip(request, response, err, start, elapsed)`
reads the body from `request.get_body()` if that method exists, or from `request.body`
otherwise. The body may be `bytes`, `str` or a readable object. Each non-empty line is
logged with `start` and `elapsed`. If the body cannot be read, an error entry is logged
instead. `response_enabled` is only reported through `response_body_enabled()`.

### Writer

```python
from commonkit.writer import safe_writer

with safe_writer({"trace_id": "abc123"}) as out:
    print("hello", file=out)
```

Each complete line is logged at info level, and so is each chunk of 32768 bytes that has
no line break. Lines made only of spaces are skipped. A partial line is logged when the
writer is closed. Writing after `close()` raises `ValueError`.

## Job commands

```python
from commonkit import crontab

def rebuild(options, args):
    print(options.date, options.limit, args)

crontab.new()
crontab.add_command(crontab.Runner(
    cmd="rebuild",
    remark="Rebuild the daily report",
    run=rebuild,
    flags=[crontab.Flag(name="limit", short_name="l", type=crontab.ArgType.INT, remark="row limit")],
))
crontab.execute(["rebuild", "--date", "2024-01-31", "-l", "100", "extra"])
```

`new()` returns the root `argparse.ArgumentParser` and creates it on the first call.
It has these global options, which are also accepted after the command name:

- `-d/--date`: a date string. Default `""`.
- `-f/--date-flag`: an integer from 0 to 255. Default `0`.
- `-a/--app-list`: comma-separated values. It may be repeated. Default `[]`.
- `-c/--conf`: the configuration file. Default `config.yaml`.

A `Flag` of type `ArgType.STRING`, `INT` or `SLICE` becomes an option with the default
`""`, `0` or `[]`. Remaining positional words are passed to `run(namespace, args)`.
If `execute` is called without a command, it prints the help text.

This module only parses and dispatches commands. It does not schedule or repeat jobs:
use the system's cron or another scheduler to invoke your program.

## Redis

```python
from commonkit.rediscollections import Z, ZRangeBy
from commonkit.redisclient import Mode, RedisOptions, init_redis

client = init_redis(RedisOptions(host=["localhost:6379"], mode=Mode.CLIENT))
client.set("greeting", "hello", 60)
client.get("greeting")                      # b"hello"
client.zadd("scores", Z(score=1, member="a"), Z(score=2, member="b"))
client.zrange_with_scores("scores", 0, -1)  # [Z(1.0, b"a"), Z(2.0, b"b")]
client.zrangebyscore("scores", ZRangeBy(min="1", max="2"))
```

`RedisOptions` has these fields:

- `host`: a list of `host:port` strings. The port defaults to 6379. `Mode.CLIENT` uses
  the first address. `Mode.CLUSTER` uses all of them as start-up nodes.
- `db`: the database number.
- `password`: the password.
- `mode`: `Mode.CLIENT` or `Mode.CLUSTER`.
- `read_timeout` and `write_timeout`: in seconds. `0` uses the default of 3 seconds,
  and `-1` turns the timeout off.

`init_redis` raises `ValueError` if no host is given. It pings the server before it
returns, and the ping raises if the server cannot be reached. To use a connection you
already have, pass it in directly with `RedisClient(backend, mode)`.

Expirations are given in seconds (a number or a `timedelta`). An expiration of `0`
sets no expiry. `redisclient.KEEP_TTL` keeps the key's existing expiry.

Commands:

- **Keys**: `eval(script, keys, *args)`, `delete`, `expire`, `exists`, `ttl`.
- **Strings**: `set`, `setnx`, `get`, `mget`, `incr`, `incrby`, `incrbyfloat`,
  `getset`, `rename`.
- **Hashes**: `hset`/`hmset`, which take a mapping or field/value pairs (an odd count
  raises `ValueError`); `hsetnx`, `hexists`, `hgetall`, `hget`, `hmget`, `hdel`,
  `hlen`, `hincrby`, `hincrbyfloat`, `hkeys`; `hscan(key, cursor, match, count)`, which
  returns `(next_cursor, fields)`.
- **Lists**: `lpop`, `rpop`, `lpush`, `rpush`, `ltrim`.
- **Pub/sub**: `publish`; `subscribe(*channels)`, which returns the pub/sub handle.
- **Sets**: `sadd`, `smembers`, `srem`, `sismember`, `srandmember`, `scard`.
- **Sorted sets**: `zadd`, `zincrby`, `zrem`, `zcard`, `zscore`, `zrank`, `zrevrank`,
  `zrange`, `zrevrange`, `zrange_with_scores`, `zrevrange_with_scores`,
  `zrangebyscore`, `zrevrangebyscore`, `zcount`.
- **HyperLogLog**: `pf_add`, `pf_count`.
- **Bloom filters**: `bf_add`, `bf_exists`, `bf_card`, and
  `bf_reserve_with_args(key, BFReserveOptions(...))`. These need a server with the
  Bloom filter module loaded.

## Running the tests

Install the `test` extra, then run `pytest` from the project root.