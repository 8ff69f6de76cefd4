from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from flowgraph.core.amounts import raw_to_decimal
from flowgraph.core.dto import TransferEvent
from flowgraph.core.models import WALLETS_LABEL, FlowEdge, FlowReport


FlowKey = Tuple[str, str]


def classify(from_protocol: Optional[str], to_protocol: Optional[str]) -> Optional[FlowKey]:
    """
    Map the protocols on either side of a transfer to a (source, target) edge.

    - Wallet -> Protocol (deposit, swap into protocol)
    - Protocol -> Wallet (withdraw, swap out)
    - Protocol A -> Protocol B
    Wallet -> Wallet and transfers inside one protocol give no edge.
    """
    if from_protocol is None and to_protocol is not None:
        return WALLETS_LABEL, to_protocol
    if from_protocol is not None and to_protocol is None:
        return from_protocol, WALLETS_LABEL
    if from_protocol is not None and to_protocol is not None and from_protocol != to_protocol:
        return from_protocol, to_protocol
    return None


class FlowAggregator:
    """
    Accumulates transfer volume per directed (source, target) edge.

    Edges keep first-encountered order; only strictly positive volumes count.
    """

    def __init__(self, reverse_index: Mapping[str, str], decimals: int = 18) -> None:
        self.reverse_index = reverse_index
        self.decimals = decimals
        self._volumes: Dict[FlowKey, float] = {}

    def add(self, event: TransferEvent) -> Optional[FlowKey]:
        key = classify(
            self.reverse_index.get(event.from_address.lower()),
            self.reverse_index.get(event.to_address.lower()),
        )
        if key is None:
            return None

        volume = raw_to_decimal(event.value_raw, self.decimals)
        if volume <= 0:
            return None

        self._volumes[key] = self._volumes.get(key, 0.0) + volume
        return key

    def edges(self) -> List[FlowEdge]:
        return [
            FlowEdge(source=source, target=target, volume=volume)
            for (source, target), volume in self._volumes.items()
        ]

    def report(self, period: str, generated_at: Optional[datetime] = None) -> FlowReport:
        flows = self.edges()
        # summed once over finalized edges
        total = sum((f.volume for f in flows), 0.0)
        return FlowReport(
            period=period,
            last_updated=generated_at or datetime.now(timezone.utc),
            total_volume=total,
            flows=tuple(flows),
        )


def aggregate(
    events: Iterable[TransferEvent],
    reverse_index: Mapping[str, str],
    period: str,
    decimals: int = 18,
    generated_at: Optional[datetime] = None,
) -> FlowReport:
    agg = FlowAggregator(reverse_index, decimals=decimals)
    for ev in events:
        agg.add(ev)
    return agg.report(period, generated_at=generated_at)
