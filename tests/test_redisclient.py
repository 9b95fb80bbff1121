from datetime import timedelta
from unittest import mock

import pytest
import redis

from commonkit import redisclient
from commonkit.redisclient import KEEP_TTL, Mode, RedisClient, RedisOptions, init_redis


@pytest.fixture
def backend():
    return mock.MagicMock()


@pytest.fixture
def client(backend):
    return RedisClient(backend)


def test_init_redis_single_node_parses_host():
    with mock.patch.object(redisclient.redis, "Redis") as factory:
        result = init_redis(RedisOptions(host=["cache.example.com:6380"], db=2))
    kwargs = factory.call_args.kwargs
    assert kwargs["host"] == "cache.example.com"
    assert kwargs["port"] == 6380
    assert kwargs["db"] == 2
    assert result.mode is Mode.CLIENT
    factory.return_value.ping.assert_called_once()


def test_init_redis_default_port():
    with mock.patch.object(redisclient.redis, "Redis") as factory:
        result = init_redis(RedisOptions(host=["localhost"]))
    assert result.mode is Mode.CLIENT
    assert factory.call_args.kwargs["port"] == redisclient.DEFAULT_PORT


def test_init_redis_cluster_mode():
    with mock.patch.object(redisclient, "RedisCluster") as factory:
        result = init_redis(RedisOptions(host=["a:7000", "b:7001"], mode=Mode.CLUSTER))
    nodes = factory.call_args.kwargs["startup_nodes"]
    assert [(n.host, n.port) for n in nodes] == [("a", 7000), ("b", 7001)]
    assert result.mode is Mode.CLUSTER


def test_init_redis_ping_failure_raises():
    with mock.patch.object(redisclient.redis, "Redis") as factory:
        factory.return_value.ping.side_effect = redis.exceptions.ConnectionError("down")
        with pytest.raises(redis.exceptions.ConnectionError):
            init_redis(RedisOptions(host=["localhost:6379"]))


def test_init_redis_requires_host():
    with pytest.raises(ValueError):
        init_redis(RedisOptions(host=[]))


def test_timeout_uses_larger_of_read_and_write():
    with mock.patch.object(redisclient.redis, "Redis") as factory:
        result = init_redis(RedisOptions(host=["h:1"], read_timeout=2.0, write_timeout=4.0))
    assert result.mode is Mode.CLIENT
    assert factory.call_args.kwargs["socket_timeout"] == 4.0


def test_negative_timeout_disables():
    with mock.patch.object(redisclient.redis, "Redis") as factory:
        result = init_redis(RedisOptions(host=["h:1"], read_timeout=-1))
    assert result.mode is Mode.CLIENT
    assert factory.call_args.kwargs["socket_timeout"] is None


def test_eval_passes_key_count(client, backend):
    backend.eval.return_value = 7
    assert client.eval("return 1", ["k1", "k2"], "a") == 7
    backend.eval.assert_called_once_with("return 1", 2, "k1", "k2", "a")


def test_expire_whole_seconds(client, backend):
    backend.expire.return_value = True
    assert client.expire("k", timedelta(seconds=30)) is True
    backend.expire.assert_called_once_with("k", 30)


def test_expire_sub_second_rounds_up_to_one(client, backend):
    backend.expire.return_value = True
    assert client.expire("k", 0.2) is True
    backend.expire.assert_called_once_with("k", 1)


def test_set_without_expiration(client, backend):
    backend.set.return_value = True
    assert client.set("k", "v", 0) is True
    backend.set.assert_called_once_with("k", "v")


def test_set_with_seconds_and_millis(client, backend):
    backend.set.return_value = True
    assert client.set("k", "v", 10) is True
    assert client.set("k", "v", 1.5) is True
    assert backend.set.call_args_list[0].kwargs == {"ex": 10}
    assert backend.set.call_args_list[1].kwargs == {"px": 1500}


def test_set_keep_ttl(client, backend):
    backend.set.return_value = True
    assert client.set("k", "v", KEEP_TTL) is True
    assert backend.set.call_args.kwargs == {"keepttl": True}


def test_setnx_reports_failure(client, backend):
    backend.set.return_value = None
    assert client.setnx("k", "v", 5) is False
    assert backend.set.call_args.kwargs == {"nx": True, "ex": 5}


def test_mget_returns_list(client, backend):
    backend.mget.return_value = ["1", None]
    assert client.mget("a", "b") == ["1", None]
    backend.mget.assert_called_once_with(["a", "b"])


def test_hset_pairs_and_mapping(client, backend):
    backend.hset.return_value = 2
    assert client.hset("h", "f1", 1, "f2", 2) == 2
    assert backend.hset.call_args.kwargs["mapping"] == {"f1": 1, "f2": 2}
    backend.hset.return_value = 1
    assert client.hset("h", {"x": "y"}) == 1
    assert backend.hset.call_args.kwargs["mapping"] == {"x": "y"}


def test_hset_odd_pairs_rejected(client):
    with pytest.raises(ValueError):
        client.hset("h", "f1", 1, "f2")


def test_hmset_returns_true(client, backend):
    assert client.hmset("h", "a", "b") is True
    assert backend.hset.call_args.kwargs["mapping"] == {"a": "b"}


def test_hscan_defaults_become_none(client, backend):
    backend.hscan.return_value = (0, {"f": "v"})
    assert client.hscan("h", 0, "", 0) == (0, {"f": "v"})
    backend.hscan.assert_called_once_with("h", 0, match=None, count=None)


def test_hmget_forwards_fields(client, backend):
    backend.hmget.return_value = ["v1", "v2"]
    assert client.hmget("h", "a", "b") == ["v1", "v2"]
    backend.hmget.assert_called_once_with("h", ["a", "b"])


def test_push_flattens_lists(client, backend):
    backend.rpush.return_value = 3
    assert client.rpush("l", ["a", "b"], "c") == 3
    backend.rpush.assert_called_once_with("l", "a", "b", "c")


def test_subscribe_returns_pubsub(client, backend):
    pubsub = client.subscribe("news", "alerts")
    assert pubsub is backend.pubsub.return_value
    pubsub.subscribe.assert_called_once_with("news", "alerts")


def test_collection_commands_available(client, backend):
    backend.sadd.return_value = 2
    assert client.sadd("s", "a", "b") == 2
    backend.sadd.assert_called_once_with("s", "a", "b")