from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Sequence

from flowgraph.config.settings import PERIODS
from flowgraph.core.dto import TransferEvent
from flowgraph.core.models import FlowConfig, FlowReport, Period
from flowgraph.io.output_writer import write_report_json
from flowgraph.ports.chain_data_port import ChainDataPort
from flowgraph.services.flow_aggregator import aggregate
from flowgraph.services.log_fetcher import ProgressCallback, fetch_transfer_events


class FlowService:
    """
    Builds the per-period flow reports for one token.

    - Periods: each is fetched + aggregated independently (no shared state)
    - Reads: one log query per period (or per chunk, if max_block_range > 0)
    - Writes: only after every period succeeded
    """

    def __init__(
        self,
        chain: ChainDataPort,
        reverse_index: Mapping[str, str],
        cfg: FlowConfig,
    ) -> None:
        self.chain = chain
        self.reverse_index = dict(reverse_index)
        self.cfg = cfg

    def _fetch(self, period: Period, on_progress: Optional[ProgressCallback] = None) -> List[TransferEvent]:
        return fetch_transfer_events(
            self.chain,
            self.cfg.token_address,
            period.blocks_back,
            max_block_range=self.cfg.max_block_range,
            on_progress=on_progress,
        )

    def _aggregate(self, events: List[TransferEvent], period: Period) -> FlowReport:
        return aggregate(
            events,
            self.reverse_index,
            period=period.label,
            decimals=self.cfg.decimals,
            generated_at=datetime.now(timezone.utc),
        )

    async def build_report(
        self,
        period: Period,
        on_progress: Optional[ProgressCallback] = None,
    ) -> FlowReport:
        # the blocking RPC round-trips run off the event loop
        events = await asyncio.to_thread(self._fetch, period, on_progress)
        report = self._aggregate(events, period)
        if on_progress:
            on_progress("aggregated", {
                "period": period.label,
                "flows": len(report.flows),
                "total_volume": report.total_volume,
            })
        return report

    async def run(
        self,
        periods: Sequence[Period] = PERIODS,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Dict[str, str]:
        reports = await asyncio.gather(
            *(self.build_report(p, on_progress=on_progress) for p in periods)
        )

        written: Dict[str, str] = {}
        for period, report in zip(periods, reports):
            path = await asyncio.to_thread(write_report_json, report, self.cfg.report_path(period))
            written[period.label] = path
            if on_progress:
                on_progress("write", {"period": period.label, "path": path})
        return written
