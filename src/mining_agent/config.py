from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, Union

from .pool import (
    ConfigDecodeError,
    PoolInfo,
    decode_bool,
    decode_str,
    decode_uint16,
    encode_pool,
    parse_pools,
)

log = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "agent_conf.json"

# {1}..{4} are the octets of the miner's IPv4 address
DEFAULT_IP_WORKER_NAME_FORMAT = "{1}x{2}x{3}x{4}"


class ReportSink(Protocol):
    """Where init() writes the effective settings. A logging.Logger fits."""

    def info(self, msg: str, *args: Any) -> None:
        ...


def is_enabled(flag: bool) -> str:
    return "Enabled" if flag else "Disabled"


@dataclass
class HttpDebugConfig:
    enable: bool = False
    listen: str = ""


# json key -> (attribute, value decoder); pools and http_debug are handled apart
_SCALAR_FIELDS: Tuple[Tuple[str, Callable[[Any, str], Any]], ...] = (
    ("multi_user_mode", decode_bool),
    ("agent_type", decode_str),
    ("always_keep_downconn", decode_bool),
    ("disconnect_when_lost_asicboost", decode_bool),
    ("use_ip_as_worker_name", decode_bool),
    ("ip_worker_name_format", decode_str),
    ("submit_response_from_server", decode_bool),
    ("agent_listen_ip", decode_str),
    ("agent_listen_port", decode_uint16),
    ("pool_use_tls", decode_bool),
    ("use_iocp", decode_bool),
    ("fixed_worker_name", decode_str),
)

_HTTP_DEBUG_FIELDS: Tuple[Tuple[str, Callable[[Any, str], Any]], ...] = (
    ("enable", decode_bool),
    ("listen", decode_str),
)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _fold_keys(obj: Dict[str, Any]) -> Dict[str, Any]:
    """Keys compared case-insensitively; on duplicates the later one wins."""
    return {k.casefold(): v for k, v in obj.items()}


@dataclass
class AgentConfig:
    """
    Runtime settings of the mining agent.

    Lifecycle: AgentConfig() -> load_from_file()/load_from_bytes() -> init().
    After init() the object is shared read-only; init() itself mutates pools
    and is not thread-safe.
    """
    multi_user_mode: bool = False
    agent_type: str = ""
    always_keep_downconn: bool = False
    disconnect_when_lost_asicboost: bool = True
    use_ip_as_worker_name: bool = False
    ip_worker_name_format: str = DEFAULT_IP_WORKER_NAME_FORMAT
    submit_response_from_server: bool = False
    agent_listen_ip: str = ""
    agent_listen_port: int = 0
    pool_use_tls: bool = False
    use_iocp: bool = False
    fixed_worker_name: str = ""
    pools: List[PoolInfo] = field(default_factory=list)
    http_debug: HttpDebugConfig = field(default_factory=HttpDebugConfig)

    @classmethod
    def from_bytes(cls, raw: Union[bytes, str]) -> "AgentConfig":
        return cls().load_from_bytes(raw)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "AgentConfig":
        return cls().load_from_file(path)

    def load_from_file(self, path: Union[str, Path]) -> "AgentConfig":
        """Read a JSON config file. OSError from the read propagates as is."""
        raw = Path(path).read_bytes()
        return self.load_from_bytes(raw)

    def load_from_bytes(self, raw: Union[bytes, str]) -> "AgentConfig":
        """
        Overwrite the fields present in a JSON document; absent keys keep
        their current value. Raises ConfigDecodeError, in which case nothing
        on self has been changed.
        """
        try:
            text = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
            doc = json.loads(text, parse_constant=_reject_constant)
        except (UnicodeDecodeError, ValueError) as e:
            raise ConfigDecodeError(f"invalid config document: {e}") from e

        # a bare null document loads nothing
        if doc is None:
            return self
        if not isinstance(doc, dict):
            raise ConfigDecodeError(f"config must be a JSON object, got {type(doc).__name__}")
        doc = _fold_keys(doc)

        updates: Dict[str, Any] = {}
        for key, decode in _SCALAR_FIELDS:
            value = doc.get(key)
            if value is not None:
                updates[key] = decode(value, key)

        if "pools" in doc:
            updates["pools"] = parse_pools(doc["pools"])

        http_debug: Optional[HttpDebugConfig] = None
        raw_debug = doc.get("http_debug")
        if raw_debug is not None:
            if not isinstance(raw_debug, dict):
                raise ConfigDecodeError(f"http_debug: expected object, got {raw_debug!r}")
            raw_debug = _fold_keys(raw_debug)
            http_debug = HttpDebugConfig(self.http_debug.enable, self.http_debug.listen)
            for key, decode in _HTTP_DEBUG_FIELDS:
                value = raw_debug.get(key)
                if value is not None:
                    setattr(http_debug, key, decode(value, f"http_debug.{key}"))

        for key, value in updates.items():
            setattr(self, key, value)
        if http_debug is not None:
            self.http_debug = http_debug
        return self

    def init(self, sink: Optional[ReportSink] = None) -> None:
        """
        Report the effective options and, in multi user mode, drop the
        sub-accounts configured on the pools. Safe to call more than once.
        """
        out = log if sink is None else sink

        if self.multi_user_mode:
            out.info("[OPTION] Multi user mode: Enabled. Sub-accounts in config file will be ignored.")
        else:
            out.info("[OPTION] Multi user mode: Disabled. Sub-accounts in config file will be used.")

        out.info("[OPTION] Connect to pool server with SSL/TLS encryption: %s", is_enabled(self.pool_use_tls))
        out.info(
            "[OPTION] Always keep miner connections even if pool disconnected: %s",
            is_enabled(self.always_keep_downconn),
        )
        out.info(
            "[OPTION] Disconnect if a miner lost its AsicBoost mid-way: %s",
            is_enabled(self.disconnect_when_lost_asicboost),
        )

        if self.fixed_worker_name:
            out.info(
                "[OPTION] Fixed worker name enabled, all worker name will be replaced to %s on the server.",
                self.fixed_worker_name,
            )

        for pool in self.pools:
            if self.multi_user_mode:
                pool.sub_account = ""
                out.info("add pool: %s:%d, multi user mode", pool.host, pool.port)
            else:
                out.info("add pool: %s:%d, sub-account: %s", pool.host, pool.port, pool.sub_account)

    def to_dict(self) -> Dict[str, Any]:
        obj: Dict[str, Any] = {key: getattr(self, key) for key, _ in _SCALAR_FIELDS}
        obj["pools"] = [encode_pool(p) for p in self.pools]
        obj["http_debug"] = {"enable": self.http_debug.enable, "listen": self.http_debug.listen}
        return obj

    def to_json_bytes(self, indent: Optional[int] = 2) -> bytes:
        return (json.dumps(self.to_dict(), indent=indent) + "\n").encode("utf-8")


def new_config() -> AgentConfig:
    """Config with defaults applied, ready to be loaded."""
    return AgentConfig()


__all__ = [
    "AgentConfig",
    "ConfigDecodeError",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_IP_WORKER_NAME_FORMAT",
    "HttpDebugConfig",
    "PoolInfo",
    "ReportSink",
    "is_enabled",
    "new_config",
]
