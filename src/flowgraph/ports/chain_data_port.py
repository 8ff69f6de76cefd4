from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Sequence
from flowgraph.core.dto import RawLog

class ChainDataPort(ABC):
    """
    Abstract Class for fetching chain-related facts for flow aggregation.
    """

    # --- Chain head ---

    @abstractmethod
    def get_block_number(self) -> int:
        raise NotImplementedError

    # --- Event logs (inclusive block range) ---

    @abstractmethod
    def get_logs(
        self,
        address: str,
        from_block: int,
        to_block: int,
        topics: Sequence[str],
    ) -> List[RawLog]:
        raise NotImplementedError
