import logging

from mining_agent.config import AgentConfig, PoolInfo, is_enabled


class CaptureSink:
    def __init__(self):
        self.lines = []

    def info(self, msg, *args):
        self.lines.append(msg % args if args else msg)


def _conf(multi_user_mode):
    return AgentConfig(
        multi_user_mode=multi_user_mode,
        pools=[PoolInfo("a", 1, "x"), PoolInfo("b", 2, "y")],
    )


def test_is_enabled():
    assert is_enabled(True) == "Enabled"
    assert is_enabled(False) == "Disabled"


def test_init_multi_user_mode_clears_sub_accounts():
    conf = _conf(True)
    sink = CaptureSink()
    conf.init(sink)

    assert conf.pools == [PoolInfo("a", 1, ""), PoolInfo("b", 2, "")]
    assert sink.lines[0] == "[OPTION] Multi user mode: Enabled. Sub-accounts in config file will be ignored."
    assert sink.lines[-2:] == ["add pool: a:1, multi user mode", "add pool: b:2, multi user mode"]


def test_init_without_multi_user_mode_keeps_sub_accounts():
    conf = _conf(False)
    sink = CaptureSink()
    conf.init(sink)

    assert conf.pools == [PoolInfo("a", 1, "x"), PoolInfo("b", 2, "y")]
    assert sink.lines[0] == "[OPTION] Multi user mode: Disabled. Sub-accounts in config file will be used."
    assert sink.lines[-2:] == ["add pool: a:1, sub-account: x", "add pool: b:2, sub-account: y"]


def test_init_reports_options_in_order():
    conf = AgentConfig(pool_use_tls=True)
    sink = CaptureSink()
    conf.init(sink)

    assert sink.lines == [
        "[OPTION] Multi user mode: Disabled. Sub-accounts in config file will be used.",
        "[OPTION] Connect to pool server with SSL/TLS encryption: Enabled",
        "[OPTION] Always keep miner connections even if pool disconnected: Disabled",
        "[OPTION] Disconnect if a miner lost its AsicBoost mid-way: Enabled",
    ]


def test_init_reports_fixed_worker_name():
    conf = AgentConfig(fixed_worker_name="rig01")
    sink = CaptureSink()
    conf.init(sink)

    assert sink.lines[4] == (
        "[OPTION] Fixed worker name enabled, all worker name will be replaced to rig01 on the server."
    )


def test_init_is_idempotent():
    once = _conf(True)
    once.init(CaptureSink())

    twice = _conf(True)
    twice.init(CaptureSink())
    twice.init(CaptureSink())

    assert twice.pools == once.pools


def test_init_default_sink_is_logging(caplog):
    conf = _conf(False)
    with caplog.at_level(logging.INFO, logger="mining_agent.config"):
        conf.init()

    messages = [r.getMessage() for r in caplog.records if r.name == "mining_agent.config"]
    assert "add pool: b:2, sub-account: y" in messages
    assert len(messages) == 6
