from unittest.mock import MagicMock

import pytest

from commonkit.rediscollections import BFReserveOptions, CollectionCommands, Z, ZRangeBy


@pytest.fixture
def backend():
    return MagicMock()


@pytest.fixture
def cmds(backend):
    return CollectionCommands(backend)


def test_bf_add_returns_bool(cmds, backend):
    backend.execute_command.return_value = 1
    assert cmds.bf_add("bf", "x") is True
    backend.execute_command.assert_called_once_with("BF.ADD", "bf", "x")


def test_bf_exists_false(cmds, backend):
    backend.execute_command.return_value = 0
    assert cmds.bf_exists("bf", "y") is False
    backend.execute_command.assert_called_once_with("BF.EXISTS", "bf", "y")


def test_bf_reserve_plain(cmds, backend):
    backend.execute_command.return_value = "OK"
    result = cmds.bf_reserve_with_args("bf", BFReserveOptions(capacity=1000, error_rate=0.01))
    assert result == "OK"
    backend.execute_command.assert_called_once_with("BF.RESERVE", "bf", 0.01, 1000)


def test_bf_reserve_with_expansion_and_nonscaling(cmds, backend):
    backend.execute_command.return_value = "OK"
    opts = BFReserveOptions(capacity=500, error_rate=0.1, expansion=2, non_scaling=True)
    result = cmds.bf_reserve_with_args("bf", opts)
    assert result == "OK"
    args = backend.execute_command.call_args.args
    assert args == ("BF.RESERVE", "bf", 0.1, 500, "EXPANSION", 2, "NONSCALING")


def test_bf_card(cmds, backend):
    backend.execute_command.return_value = 7
    assert cmds.bf_card("bf") == 7
    backend.execute_command.assert_called_once_with("BF.CARD", "bf")


def test_pf_add_and_count(cmds, backend):
    backend.pfadd.return_value = 1
    backend.pfcount.return_value = 3
    assert cmds.pf_add("hll", "a", "b", "c") == 1
    assert cmds.pf_count("hll", "other") == 3
    backend.pfadd.assert_called_once_with("hll", "a", "b", "c")
    backend.pfcount.assert_called_once_with("hll", "other")


def test_set_commands(cmds, backend):
    backend.sadd.return_value = 2
    backend.smembers.return_value = {"a", "b"}
    backend.sismember.return_value = 1
    backend.scard.return_value = 2
    assert cmds.sadd("s", "a", "b") == 2
    assert sorted(cmds.smembers("s")) == ["a", "b"]
    assert cmds.sismember("s", "a") is True
    assert cmds.scard("s") == 2
    backend.sadd.assert_called_once_with("s", "a", "b")


def test_srem_and_srandmember(cmds, backend):
    backend.srem.return_value = 1
    backend.srandmember.return_value = "a"
    assert cmds.srem("s", "b") == 1
    assert cmds.srandmember("s") == "a"
    backend.srem.assert_called_once_with("s", "b")


def test_zadd_builds_mapping(cmds, backend):
    backend.zadd.return_value = 2
    assert cmds.zadd("z", Z(1.5, "a"), Z(2.0, "b")) == 2
    backend.zadd.assert_called_once_with("z", {"a": 1.5, "b": 2.0})


def test_zrange_with_scores_converts(cmds, backend):
    backend.zrange.return_value = [("a", 1.0), ("b", 2)]
    result = cmds.zrange_with_scores("z", 0, -1)
    assert result == [Z(1.0, "a"), Z(2.0, "b")]
    backend.zrange.assert_called_once_with("z", 0, -1, withscores=True)


def test_zrevrange_with_scores_converts(cmds, backend):
    backend.zrevrange.return_value = [("b", 2.0), ("a", 1.0)]
    result = cmds.zrevrange_with_scores("z", 0, 1)
    assert [z.member for z in result] == ["b", "a"]
    assert all(isinstance(z.score, float) for z in result)


def test_zrangebyscore_without_limit(cmds, backend):
    backend.zrangebyscore.return_value = ["a"]
    assert cmds.zrangebyscore("z", ZRangeBy(min="0", max="10")) == ["a"]
    backend.zrangebyscore.assert_called_once_with("z", "0", "10")


def test_zrangebyscore_with_limit(cmds, backend):
    backend.zrangebyscore.return_value = ["c", "d"]
    result = cmds.zrangebyscore("z", ZRangeBy(offset=2, count=5))
    assert result == ["c", "d"]
    backend.zrangebyscore.assert_called_once_with("z", "-inf", "+inf", start=2, num=5)


def test_zrevrangebyscore_swaps_bounds(cmds, backend):
    backend.zrevrangebyscore.return_value = ["b", "a"]
    assert cmds.zrevrangebyscore("z", ZRangeBy(min="1", max="9")) == ["b", "a"]
    backend.zrevrangebyscore.assert_called_once_with("z", "9", "1")


def test_zincrby_argument_order(cmds, backend):
    backend.zincrby.return_value = 3.5
    assert cmds.zincrby("z", 1.5, "m") == 3.5
    backend.zincrby.assert_called_once_with("z", 1.5, "m")


def test_zset_queries_forward(cmds, backend):
    backend.zcard.return_value = 4
    backend.zscore.return_value = 2.0
    backend.zrank.return_value = 1
    backend.zrevrank.return_value = 2
    backend.zcount.return_value = 3
    assert cmds.zcard("z") == 4
    assert cmds.zscore("z", "m") == 2.0
    assert cmds.zrank("z", "m") == 1
    assert cmds.zrevrank("z", "m") == 2
    assert cmds.zcount("z", "-inf", "+inf") == 3
    backend.zcount.assert_called_once_with("z", "-inf", "+inf")


def test_zrem_and_ranges(cmds, backend):
    backend.zrem.return_value = 1
    backend.zrange.return_value = ["a", "b"]
    backend.zrevrange.return_value = ["b", "a"]
    assert cmds.zrem("z", "a") == 1
    assert cmds.zrange("z", 0, -1) == ["a", "b"]
    assert cmds.zrevrange("z", 0, -1) == list(reversed(cmds.zrange("z", 0, -1)))