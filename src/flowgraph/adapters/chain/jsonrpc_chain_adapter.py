import itertools
import logging
import threading
from typing import Any, Dict, List, Sequence

import requests

from flowgraph.config.settings import RPC_TIMEOUT_SEC
from flowgraph.core.amounts import hex_to_int, int_to_hex
from flowgraph.core.dto import RawLog
from flowgraph.core.errors import ParseError, TransportError
from flowgraph.ports.chain_data_port import ChainDataPort

logger = logging.getLogger(__name__)


class JsonRpcChainAdapter(ChainDataPort):

    def __init__(self, rpc_url: str, timeout_sec: int = RPC_TIMEOUT_SEC) -> None:
        self._rpc_url = rpc_url
        self._timeout = timeout_sec
        self._ids = itertools.count(1)

        # requests.Session is not thread-safe; one per worker thread
        self._local = threading.local()

    # ---------- internal ----------

    def _session(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers.update({"Content-Type": "application/json"})
            self._local.session = session
        return session

    def _call(self, method: str, params: List[Any]) -> Any:
        body = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        logger.debug("RPC %s %s", method, params)

        try:
            resp = self._session().post(self._rpc_url, json=body, timeout=self._timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as e:
            raise TransportError(f"RPC {method} failed: {e}") from e
        except ValueError as e:
            raise TransportError(f"RPC {method} returned a non-JSON body") from e

        if not isinstance(data, dict):
            raise TransportError(f"Invalid RPC response for {method}: {data!r}")

        err = data.get("error")
        if err:
            if isinstance(err, dict):
                raise TransportError(f"RPC error {err.get('code')}: {err.get('message')}")
            raise TransportError(f"RPC error: {err}")

        if data.get("result") is None:
            raise TransportError(f"No result for method {method}")

        return data["result"]

    @staticmethod
    def _to_raw_log(r: Dict[str, Any]) -> RawLog:
        try:
            return RawLog(
                address=str(r["address"]).lower(),
                topics=[str(t) for t in r.get("topics") or []],
                data=str(r.get("data") or "0x"),
                block_number=hex_to_int(r.get("blockNumber")),
                tx_hash=str(r.get("transactionHash") or ""),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ParseError(f"Malformed log record: {r!r}") from e

    # ---------- port methods ----------

    def get_block_number(self) -> int:
        result = self._call("eth_blockNumber", [])
        if not isinstance(result, str) or result.strip() in ("", "0x", "0X"):
            raise TransportError(f"Invalid block number result: {result!r}")
        return hex_to_int(result)

    def get_logs(
        self,
        address: str,
        from_block: int,
        to_block: int,
        topics: Sequence[str],
    ) -> List[RawLog]:
        result = self._call("eth_getLogs", [{
            "address": address,
            "fromBlock": int_to_hex(from_block),
            "toBlock": int_to_hex(to_block),
            "topics": list(topics),
        }])
        if not isinstance(result, list):
            raise TransportError(f"Invalid eth_getLogs result: {result!r}")

        return [self._to_raw_log(r) for r in result]
