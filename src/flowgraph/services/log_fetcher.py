from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from flowgraph.config.settings import TRANSFER_TOPIC
from flowgraph.core.amounts import block_range_start, hex_to_int
from flowgraph.core.dto import RawLog, TransferEvent
from flowgraph.ports.chain_data_port import ChainDataPort

ProgressCallback = Callable[[str, Dict[str, Any]], None]


_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def is_address_topic(topic: str) -> bool:
    # 0x + 64 hex chars
    return (
        isinstance(topic, str)
        and len(topic) == 66
        and topic[:2] in ("0x", "0X")
        and all(c in _HEX_DIGITS for c in topic[2:])
    )


def topic_to_address(topic: str) -> str:
    # indexed address = low 20 bytes of the 32-byte topic (last 40 hex chars)
    return "0x" + topic[-40:].lower()


def decode_transfer(log: RawLog) -> Optional[TransferEvent]:
    if len(log.topics) < 3:
        return None
    topic0, topic_from, topic_to = log.topics[:3]
    if topic0.lower() != TRANSFER_TOPIC:
        return None
    if not is_address_topic(topic_from) or not is_address_topic(topic_to):
        return None

    return TransferEvent(
        token_address=log.address.lower(),
        from_address=topic_to_address(topic_from),
        to_address=topic_to_address(topic_to),
        value_raw=hex_to_int(log.data),
        block_number=log.block_number,
        tx_hash=log.tx_hash,
    )


def iter_block_chunks(from_block: int, to_block: int, max_range: int) -> Iterable[Tuple[int, int]]:
    """
    Split an inclusive block range into consecutive inclusive chunks of at
    most `max_range` blocks. `max_range` <= 0 yields the whole range once.
    """
    if max_range <= 0:
        yield from_block, to_block
        return

    start = from_block
    while start <= to_block:
        end = min(start + max_range - 1, to_block)
        yield start, end
        start = end + 1


def fetch_transfer_events(
    chain: ChainDataPort,
    token_address: str,
    blocks_back: int,
    max_block_range: int = 0,
    on_progress: Optional[ProgressCallback] = None,
) -> List[TransferEvent]:
    token = token_address.lower()
    latest = chain.get_block_number()
    from_block = block_range_start(latest, blocks_back)
    to_block = latest

    if on_progress:
        on_progress("fetch", {
            "token": token,
            "from_block": from_block,
            "to_block": to_block,
            "blocks_back": blocks_back,
        })

    logs: List[RawLog] = []
    for start, end in iter_block_chunks(from_block, to_block, max_block_range):
        logs.extend(chain.get_logs(token, start, end, [TRANSFER_TOPIC]))

    events: List[TransferEvent] = []
    for log in logs:
        ev = decode_transfer(log)
        if ev is not None:
            events.append(ev)

    if on_progress:
        on_progress("fetch_done", {
            "blocks_back": blocks_back,
            "count": len(logs),
            "transfers": len(events),
        })

    return events
