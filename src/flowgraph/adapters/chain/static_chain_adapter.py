from flowgraph.ports.chain_data_port import ChainDataPort
from flowgraph.core.dto import RawLog
from typing import Optional, List, Tuple

class StaticChainAdapter(ChainDataPort):
    def __init__(self,
                 head: int = 0,
                 logs: Optional[List[RawLog]] = None,
                 ):
        self._head = head
        self._logs = logs or []
        self.calls: List[Tuple[str, int, int]] = []

    def get_block_number(self):
        return self._head

    def get_logs(self, address, from_block, to_block, topics):
        ad = address.lower()
        topic0 = topics[0].lower() if topics else None
        self.calls.append((ad, from_block, to_block))
        items = [
            log for log in self._logs
            if log.address.lower() == ad
            and log.block_number >= from_block
            and log.block_number <= to_block
            and (topic0 is None or (log.topics and log.topics[0].lower() == topic0))
        ]
        items.sort(key=lambda x: x.block_number)
        return items
