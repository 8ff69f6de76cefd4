from __future__ import annotations

from typing import Optional

from flowgraph.core.errors import ParseError


def raw_to_decimal(raw: int, decimals: int = 18) -> float:
    """
    Scale a raw token amount down by 10**decimals.

    Integer and fractional parts are split with integer arithmetic first, so
    amounts far beyond float precision keep their whole-token part exact.
    """
    if raw < 0:
        raise ValueError("raw amount must be >= 0")
    if decimals < 0:
        raise ValueError("decimals must be >= 0")
    if raw == 0:
        return 0.0

    base = 10 ** decimals
    whole, fraction = divmod(raw, base)
    return float(whole) + float(fraction) / float(base)


def block_range_start(latest_block: int, blocks_back: int) -> int:
    if latest_block < 0 or blocks_back < 0:
        raise ValueError("block numbers must be >= 0")
    return max(latest_block - blocks_back, 0)


def hex_to_int(value: Optional[str]) -> int:
    if not value or value in ("0x", "0X"):
        return 0
    try:
        return int(value, 16)
    except (TypeError, ValueError) as e:
        raise ParseError(f"Invalid hex quantity: {value!r}") from e


def int_to_hex(value: int) -> str:
    if value < 0:
        raise ValueError("value must be >= 0")
    return hex(value)
