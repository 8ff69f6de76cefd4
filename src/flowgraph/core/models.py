from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple


WALLETS_LABEL = "Wallets"


# Configuration model

@dataclass(frozen=True)
class FlowConfig:
    """
    Run configuration, built once at startup and passed to every component.
    """

    rpc_url: str
    token_address: str
    protocols_path: str
    output_dir: str
    decimals: int = 18
    rpc_timeout_sec: int = 30

    # optional knobs (keep defaults sane)
    max_block_range: int = 0          # 0 = single eth_getLogs call
    strict_registry: bool = False
    output_prefix: str = "mon"

    def report_path(self, period: Period) -> Path:
        return Path(self.output_dir) / f"{self.output_prefix}_flows_{period.label}.json"


@dataclass(frozen=True)
class Period:
    label: str
    blocks_back: int



# Registry models

@dataclass(frozen=True)
class ProtocolEntry:

    name: str
    contracts: Tuple[str, ...] = ()
    category: Optional[str] = None


@dataclass(frozen=True)
class ProtocolRegistry:

    protocols: Dict[str, ProtocolEntry] = field(default_factory=dict)

    @property
    def names(self) -> List[str]:
        return list(self.protocols.keys())

    def __len__(self) -> int:
        return len(self.protocols)



# Flow graph models

@dataclass(frozen=True)
class FlowEdge:

    source: str
    target: str
    volume: float


@dataclass(frozen=True)
class FlowReport:

    period: str
    last_updated: datetime
    total_volume: float
    flows: Tuple[FlowEdge, ...] = ()
