"""Set, sorted-set, HyperLogLog and Bloom filter commands over a Redis connection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable


@dataclass(frozen=True)
class Z:
    """A sorted-set member with its score."""

    score: float
    member: Any


@dataclass
class ZRangeBy:
    """Score bounds and an optional LIMIT for range-by-score queries."""

    min: str = "-inf"
    max: str = "+inf"
    offset: int = 0
    count: int = 0

    def _limit(self) -> dict[str, int]:
        if self.offset or self.count:
            return {"start": self.offset, "num": self.count}
        return {}


@dataclass
class BFReserveOptions:
    """Arguments to ``BF.RESERVE``."""

    capacity: int
    error_rate: float
    expansion: int = 0
    non_scaling: bool = False


def _to_z(pairs: Iterable[tuple[Any, Any]]) -> list[Z]:
    return [Z(score=float(score), member=member) for member, score in pairs]


class CollectionCommands:
    """Collection commands that forward to a single-node or cluster connection."""

    def __init__(self, backend: Any) -> None:
        self._backend = backend

    # Bloom filter

    def bf_add(self, key: str, element: Any) -> bool:
        return bool(self._backend.execute_command("BF.ADD", key, element))

    def bf_exists(self, key: str, element: Any) -> bool:
        return bool(self._backend.execute_command("BF.EXISTS", key, element))

    def bf_reserve_with_args(self, key: str, options: BFReserveOptions) -> Any:
        args: list[Any] = ["BF.RESERVE", key, options.error_rate, options.capacity]
        if options.expansion:
            args += ["EXPANSION", options.expansion]
        if options.non_scaling:
            args.append("NONSCALING")
        return self._backend.execute_command(*args)

    def bf_card(self, key: str) -> int:
        return int(self._backend.execute_command("BF.CARD", key))

    # HyperLogLog

    def pf_add(self, key: str, *args: Any) -> int:
        return self._backend.pfadd(key, *args)

    def pf_count(self, *args: str) -> int:
        return self._backend.pfcount(*args)

    # Sets

    def sadd(self, key: str, *args: Any) -> int:
        return self._backend.sadd(key, *args)

    def smembers(self, key: str) -> list[Any]:
        return list(self._backend.smembers(key))

    def srem(self, key: str, *args: Any) -> int:
        return self._backend.srem(key, *args)

    def sismember(self, key: str, member: Any) -> bool:
        return bool(self._backend.sismember(key, member))

    def srandmember(self, key: str) -> Any:
        return self._backend.srandmember(key)

    def scard(self, key: str) -> int:
        return self._backend.scard(key)

    # Sorted sets

    def zincrby(self, key: str, increment: float, member: str) -> float:
        return self._backend.zincrby(key, increment, member)

    def zrevrange(self, key: str, start: int, stop: int) -> list[Any]:
        return self._backend.zrevrange(key, start, stop)

    def zrem(self, key: str, *args: Any) -> int:
        return self._backend.zrem(key, *args)

    def zcard(self, key: str) -> int:
        return self._backend.zcard(key)

    def zscore(self, key: str, member: str) -> float | None:
        return self._backend.zscore(key, member)

    def zrank(self, key: str, member: str) -> int | None:
        return self._backend.zrank(key, member)

    def zrevrank(self, key: str, member: str) -> int | None:
        return self._backend.zrevrank(key, member)

    def zrange(self, key: str, start: int, stop: int) -> list[Any]:
        return self._backend.zrange(key, start, stop)

    def zrange_with_scores(self, key: str, start: int, stop: int) -> list[Z]:
        return _to_z(self._backend.zrange(key, start, stop, withscores=True))

    def zrevrange_with_scores(self, key: str, start: int, stop: int) -> list[Z]:
        return _to_z(self._backend.zrevrange(key, start, stop, withscores=True))

    def zrangebyscore(self, key: str, opt: ZRangeBy) -> list[Any]:
        return self._backend.zrangebyscore(key, opt.min, opt.max, **opt._limit())

    def zadd(self, key: str, *args: Z) -> int:
        return self._backend.zadd(key, {z.member: z.score for z in args})

    def zrevrangebyscore(self, key: str, opt: ZRangeBy) -> list[Any]:
        return self._backend.zrevrangebyscore(key, opt.max, opt.min, **opt._limit())

    def zcount(self, key: str, min: str, max: str) -> int:
        return self._backend.zcount(key, min, max)