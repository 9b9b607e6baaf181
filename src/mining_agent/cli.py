from __future__ import annotations

import argparse
import logging
import sys

from .config import DEFAULT_CONFIG_FILE, AgentConfig, ConfigDecodeError

log = logging.getLogger("mining_agent")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="mining-agent")
    p.add_argument("-c", "--config", default=DEFAULT_CONFIG_FILE, help="Path to JSON config.")
    p.add_argument("--dump", action="store_true", help="Print the effective config as JSON and exit.")
    p.add_argument(
        "--log-level",
        default="INFO",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level.",
    )

    args = p.parse_args(argv)
    _setup_logging(args.log_level)

    try:
        conf = AgentConfig.from_file(args.config)
    except OSError as e:
        log.error("cannot read config file %s: %s", args.config, e)
        return 1
    except ConfigDecodeError as e:
        log.error("cannot parse config file %s: %s", args.config, e)
        return 1

    conf.init()

    if args.dump:
        sys.stdout.buffer.write(conf.to_json_bytes())
        sys.stdout.flush()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
