from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List


UINT16_MAX = 0xFFFF


class ConfigDecodeError(ValueError):
    """Config content is malformed or a value has the wrong type."""


@dataclass
class PoolInfo:
    """
    One upstream pool.

    On the wire a pool is a positional array, not an object:
      ["stratum.example.com", 3333, "subaccount"]
    """
    host: str = ""
    port: int = 0
    sub_account: str = ""

    @classmethod
    def from_json(cls, raw: Any) -> "PoolInfo":
        return decode_pool(raw)

    def to_json(self) -> List[Any]:
        return encode_pool(self)


def decode_str(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise ConfigDecodeError(f"{what}: expected string, got {value!r}")
    return value


def decode_uint16(value: Any, what: str) -> int:
    # bool is an int subclass; JSON true/false is never a port
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigDecodeError(f"{what}: expected integer, got {value!r}")
    if value < 0 or value > UINT16_MAX:
        raise ConfigDecodeError(f"{what}: {value} out of range for uint16")
    return value


def decode_bool(value: Any, what: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigDecodeError(f"{what}: expected boolean, got {value!r}")
    return value


# position -> (attribute, element decoder)
_POSITIONS = (
    ("host", decode_str),
    ("port", decode_uint16),
    ("sub_account", decode_str),
)


def decode_pool(raw: Any) -> PoolInfo:
    """
    Decode a positional pool array. Raises ConfigDecodeError on a wrong shape.

    Short arrays are accepted: missing trailing fields stay at their zero
    value. Elements after sub_account are ignored. A null element (or a null
    pool) leaves the field untouched.
    """
    pool = PoolInfo()
    if raw is None:
        return pool
    if not isinstance(raw, (list, tuple)):
        raise ConfigDecodeError(f"pool must be an array, got {raw!r}")

    for idx, (attr, decode) in enumerate(_POSITIONS):
        if idx >= len(raw):
            break
        if raw[idx] is None:
            continue
        setattr(pool, attr, decode(raw[idx], f"pool[{idx}] ({attr})"))
    return pool


def encode_pool(pool: PoolInfo) -> List[Any]:
    """Always the full [host, port, sub_account] triple."""
    return [pool.host, pool.port, pool.sub_account]


def parse_pools(raw: Any) -> List[PoolInfo]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConfigDecodeError(f"pools must be an array, got {raw!r}")

    pools: List[PoolInfo] = []
    for i, item in enumerate(raw):
        try:
            pools.append(decode_pool(item))
        except ConfigDecodeError as e:
            raise ConfigDecodeError(f"pools[{i}]: {e}") from e
    return pools
