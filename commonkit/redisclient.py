"""A Redis client that talks to a single node or a cluster through one interface."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import IntEnum
from typing import Any, Mapping

import redis
from redis.cluster import ClusterNode, RedisCluster

from commonkit.rediscollections import CollectionCommands

KEEP_TTL = -1
"""Pass as an expiration to keep the key's existing time to live."""

DEFAULT_PORT = 6379
_PING_TIMEOUT = 5.0
_DEFAULT_READ_TIMEOUT = 3.0


class Mode(IntEnum):
    CLIENT = 1
    CLUSTER = 2


@dataclass
class RedisOptions:
    """Connection settings; timeouts are in seconds, 0 picks the default, -1 disables."""

    host: list[str] = field(default_factory=list)
    db: int = 0
    password: str = ""
    mode: int = Mode.CLIENT
    write_timeout: float = 0.0
    read_timeout: float = 0.0


def _split_host(address: str) -> tuple[str, int]:
    host, sep, port = address.rpartition(":")
    if not sep:
        return address, DEFAULT_PORT
    return host or "localhost", int(port)


def _timeout(value: float, default: float | None) -> float | None:
    if value == 0:
        return default
    if value < 0:
        return None
    return float(value)


def _socket_timeout(options: RedisOptions) -> float | None:
    read = _timeout(options.read_timeout, _DEFAULT_READ_TIMEOUT)
    write = _timeout(options.write_timeout, read)
    if read is None or write is None:
        return None
    return max(read, write)


def _millis(expiration: float | timedelta) -> int:
    if isinstance(expiration, timedelta):
        return int(expiration / timedelta(milliseconds=1))
    return int(round(float(expiration) * 1000))


def _seconds(expiration: float | timedelta) -> int:
    ms = _millis(expiration)
    if 0 < ms < 1000:
        return 1
    return int(ms / 1000)


def _flatten(values: tuple[Any, ...]) -> list[Any]:
    flat: list[Any] = []
    for value in values:
        if isinstance(value, (list, tuple)):
            flat.extend(value)
        else:
            flat.append(value)
    return flat


def _expiry_kwargs(expiration: float | timedelta | None) -> dict[str, Any]:
    if expiration is None:
        return {}
    ms = _millis(expiration)
    if ms > 0:
        return {"px": ms} if ms % 1000 else {"ex": ms // 1000}
    if ms == KEEP_TTL * 1000:
        return {"keepttl": True}
    return {}


class RedisClient(CollectionCommands):
    """Commands forwarded to the single-node or cluster connection chosen by ``mode``."""

    def __init__(self, backend: Any, mode: int = Mode.CLIENT) -> None:
        super().__init__(backend)
        self.mode = Mode.CLUSTER if mode == Mode.CLUSTER else Mode.CLIENT

    @property
    def backend(self) -> Any:
        return self._backend

    # Keys

    def eval(self, script: str, keys: list[str], *args: Any) -> Any:
        keys = list(keys)
        return self._backend.eval(script, len(keys), *keys, *args)

    def delete(self, *args: str) -> int:
        return self._backend.delete(*args)

    def expire(self, key: str, expiration: float | timedelta) -> bool:
        return bool(self._backend.expire(key, _seconds(expiration)))

    def exists(self, *args: str) -> int:
        return self._backend.exists(*args)

    def ttl(self, key: str) -> int:
        """Remaining seconds; -1 if the key has no expiry, -2 if it does not exist."""
        return self._backend.ttl(key)

    # Strings

    def set(self, key: str, value: Any, expiration: float | timedelta | None = 0) -> bool:
        return bool(self._backend.set(key, value, **_expiry_kwargs(expiration)))

    def setnx(self, key: str, value: Any, expiration: float | timedelta | None = 0) -> bool:
        return bool(self._backend.set(key, value, nx=True, **_expiry_kwargs(expiration)))

    def get(self, key: str) -> Any:
        return self._backend.get(key)

    def mget(self, *args: str) -> list[Any]:
        return list(self._backend.mget(list(args)))

    def incr(self, key: str) -> int:
        return self._backend.incr(key)

    def incrby(self, key: str, value: int) -> int:
        return self._backend.incrby(key, value)

    def incrbyfloat(self, key: str, value: float) -> float:
        return self._backend.incrbyfloat(key, value)

    def getset(self, key: str, value: Any) -> Any:
        return self._backend.getset(key, value)

    def rename(self, key: str, new_key: str) -> bool:
        return bool(self._backend.rename(key, new_key))

    # Hashes

    @staticmethod
    def _mapping(args: tuple[Any, ...]) -> dict[Any, Any]:
        if len(args) == 1 and isinstance(args[0], Mapping):
            return dict(args[0])
        flat = _flatten(args)
        if len(flat) % 2:
            raise ValueError("hash values must be given as field/value pairs")
        return dict(zip(flat[0::2], flat[1::2]))

    def hset(self, key: str, *args: Any) -> int:
        return self._backend.hset(key, mapping=self._mapping(args))

    def hsetnx(self, key: str, field: str, value: Any) -> bool:
        return bool(self._backend.hsetnx(key, field, value))

    def hmset(self, key: str, *args: Any) -> bool:
        self._backend.hset(key, mapping=self._mapping(args))
        return True

    def hexists(self, key: str, field: str) -> bool:
        return bool(self._backend.hexists(key, field))

    def hgetall(self, key: str) -> dict[Any, Any]:
        return dict(self._backend.hgetall(key))

    def hget(self, key: str, field: str) -> Any:
        return self._backend.hget(key, field)

    def hmget(self, key: str, *args: str) -> list[Any]:
        return list(self._backend.hmget(key, list(args)))

    def hdel(self, key: str, *args: str) -> int:
        return self._backend.hdel(key, *args)

    def hlen(self, key: str) -> int:
        return self._backend.hlen(key)

    def hincrby(self, key: str, field: str, value: int) -> int:
        return self._backend.hincrby(key, field, value)

    def hincrbyfloat(self, key: str, field: str, value: float) -> float:
        return self._backend.hincrbyfloat(key, field, value)

    def hscan(self, key: str, cursor: int, match: str = "", count: int = 0) -> tuple[int, dict[Any, Any]]:
        """Return the next cursor and the fields found in this step."""
        next_cursor, found = self._backend.hscan(key, cursor, match=match or None, count=count or None)
        return int(next_cursor), dict(found)

    def hkeys(self, key: str) -> list[Any]:
        return list(self._backend.hkeys(key))

    # Lists

    def lpop(self, key: str) -> Any:
        return self._backend.lpop(key)

    def rpop(self, key: str) -> Any:
        return self._backend.rpop(key)

    def rpush(self, key: str, *args: Any) -> int:
        return self._backend.rpush(key, *_flatten(args))

    def lpush(self, key: str, *args: Any) -> int:
        return self._backend.lpush(key, *_flatten(args))

    def ltrim(self, key: str, start: int, stop: int) -> bool:
        return bool(self._backend.ltrim(key, start, stop))

    # Publish / subscribe

    def publish(self, channel: str, message: Any) -> int:
        return self._backend.publish(channel, message)

    def subscribe(self, *args: str) -> Any:
        """Subscribe to the channels and return the pub/sub handle."""
        pubsub = self._backend.pubsub()
        pubsub.subscribe(*args)
        return pubsub


def init_redis(options: RedisOptions) -> RedisClient:
    """Connect according to ``options`` and check the connection with a ping."""
    if not options.host:
        raise ValueError("at least one host is required")
    timeout = _socket_timeout(options)
    password = options.password or None
    if options.mode == Mode.CLUSTER:
        nodes = [ClusterNode(*_split_host(address)) for address in options.host]
        backend: Any = RedisCluster(
            startup_nodes=nodes,
            password=password,
            socket_timeout=timeout,
            socket_connect_timeout=_PING_TIMEOUT,
        )
        mode = Mode.CLUSTER
    else:
        host, port = _split_host(options.host[0])
        backend = redis.Redis(
            host=host,
            port=port,
            db=options.db,
            password=password,
            socket_timeout=timeout,
            socket_connect_timeout=_PING_TIMEOUT,
        )
        mode = Mode.CLIENT
    backend.ping()
    return RedisClient(backend, mode)