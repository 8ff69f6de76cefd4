from typing import List

from flowgraph.config.settings import TRANSFER_TOPIC
from flowgraph.core.dto import RawLog, TransferEvent

TOKEN = "0x" + "70" * 20

ALPHA = "0x" + "aa" * 20
ALPHA_2 = "0x" + "ab" * 20
BETA = "0x" + "bb" * 20
WALLET_1 = "0x" + "01" * 20
WALLET_2 = "0x" + "02" * 20

ONE_TOKEN = 10**18


def address_topic(addr: str) -> str:
    return "0x" + "0" * 24 + addr[2:].lower()


def transfer_log(
    from_addr: str,
    to_addr: str,
    value: int,
    block_number: int = 10,
    tx_hash: str = "0xtx",
    token: str = TOKEN,
    topics: List[str] = None,
) -> RawLog:
    return RawLog(
        address=token,
        topics=topics if topics is not None else [
            TRANSFER_TOPIC,
            address_topic(from_addr),
            address_topic(to_addr),
        ],
        data=hex(value),
        block_number=block_number,
        tx_hash=tx_hash,
    )


def transfer(from_addr: str, to_addr: str, value: int, tx_hash: str = "0xtx") -> TransferEvent:
    return TransferEvent(
        token_address=TOKEN,
        from_address=from_addr,
        to_address=to_addr,
        value_raw=value,
        block_number=10,
        tx_hash=tx_hash,
    )
