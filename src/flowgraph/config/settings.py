from __future__ import annotations

import os
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from flowgraph.core.errors import ConfigurationError
from flowgraph.core.models import FlowConfig, Period

# ---- Environment ----
ENV_RPC_URL = "BLOCKVISION_RPC_URL"
ENV_TOKEN_ADDRESS = "MON_TOKEN_ADDRESS"
ENV_PROTOCOLS_FILE = "PROTOCOLS_FILE"
ENV_OUTPUT_DIR = "FLOW_OUTPUT_DIR"
ENV_OUTPUT_PREFIX = "FLOW_OUTPUT_PREFIX"
ENV_TOKEN_DECIMALS = "TOKEN_DECIMALS"
ENV_RPC_TIMEOUT_SEC = "RPC_TIMEOUT_SEC"
ENV_MAX_BLOCK_RANGE = "MAX_BLOCK_RANGE"

# ---- Chain ----
# Transfer(address,address,uint256)
TRANSFER_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"

# ~1s block time
BLOCKS_24H = 24 * 60 * 60       # 86,400
BLOCKS_7D = 7 * BLOCKS_24H

PERIOD_24H = Period(label="24h", blocks_back=BLOCKS_24H)
PERIOD_7D = Period(label="7d", blocks_back=BLOCKS_7D)
PERIODS = (PERIOD_24H, PERIOD_7D)

# ---- Defaults ----
DEFAULT_TOKEN_DECIMALS = 18
RPC_TIMEOUT_SEC = 30
MAX_BLOCK_RANGE = 0             # 0 = single eth_getLogs call per period
DEFAULT_PROTOCOLS_FILE = "config/protocols.json"
DEFAULT_OUTPUT_DIR = "client/src/data"
DEFAULT_OUTPUT_PREFIX = "mon"

INT_FIELDS = ("decimals", "rpc_timeout_sec", "max_block_range")


def _required(env: Mapping[str, str], name: str) -> str:
    value = (env.get(name) or "").strip()
    if not value:
        raise ConfigurationError(f"{name} is not set.")
    return value


def _non_negative_int(name: str, raw: Any) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e
    if value < 0:
        raise ConfigurationError(f"{name} must be >= 0, got {value}")
    return value


def _int_value(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    return _non_negative_int(name, raw)


def load_flow_config(environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> FlowConfig:
    """
    Build the run configuration from the environment (and a .env file when
    reading the real process environment). Keyword overrides set to None are
    ignored, so CLI flags can be passed straight through.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    values = dict(
        rpc_url=_required(environ, ENV_RPC_URL),
        token_address=_required(environ, ENV_TOKEN_ADDRESS).lower(),
        protocols_path=environ.get(ENV_PROTOCOLS_FILE) or DEFAULT_PROTOCOLS_FILE,
        output_dir=environ.get(ENV_OUTPUT_DIR) or DEFAULT_OUTPUT_DIR,
        output_prefix=environ.get(ENV_OUTPUT_PREFIX) or DEFAULT_OUTPUT_PREFIX,
        decimals=_int_value(environ, ENV_TOKEN_DECIMALS, DEFAULT_TOKEN_DECIMALS),
        rpc_timeout_sec=_int_value(environ, ENV_RPC_TIMEOUT_SEC, RPC_TIMEOUT_SEC),
        max_block_range=_int_value(environ, ENV_MAX_BLOCK_RANGE, MAX_BLOCK_RANGE),
    )
    for key, value in overrides.items():
        if value is None:
            continue
        if key in INT_FIELDS:
            value = _non_negative_int(key, value)
        values[key] = value
    return FlowConfig(**values)
