from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class RawLog:
    address: str
    topics: List[str]
    data: str
    block_number: int
    tx_hash: str


@dataclass(frozen=True)
class TransferEvent:
    token_address: str
    from_address: str
    to_address: str
    value_raw: int          # token amount in raw units (before decimals)
    block_number: int
    tx_hash: str
