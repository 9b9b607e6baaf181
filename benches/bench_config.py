from __future__ import annotations

import json

from mining_agent.config import AgentConfig
from mining_agent.pool import PoolInfo, decode_pool, encode_pool

_DOC = json.dumps(
    {
        "agent_listen_ip": "0.0.0.0",
        "agent_listen_port": 3333,
        "multi_user_mode": True,
        "pools": [[f"pool{i}.example.com", 1800 + i, f"sub{i}"] for i in range(16)],
    }
).encode()


def test_bench_pool_decode(benchmark):
    benchmark(decode_pool, ["stratum.example.com", 3333, "subaccount"])


def test_bench_pool_encode(benchmark):
    benchmark(encode_pool, PoolInfo("stratum.example.com", 3333, "subaccount"))


def test_bench_config_load(benchmark):
    benchmark(AgentConfig.from_bytes, _DOC)
