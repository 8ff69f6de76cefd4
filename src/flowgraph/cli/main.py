from __future__ import annotations

import argparse
import asyncio
import datetime as dt
import logging
import sys
import time
from typing import Optional, Sequence

from flowgraph.config import settings
from flowgraph.core.errors import ConfigurationError
from flowgraph.core.models import FlowConfig
from flowgraph.io.protocol_registry import build_reverse_index, load_protocol_registry
from flowgraph.services.flow_service import FlowService

from flowgraph.adapters.chain.jsonrpc_chain_adapter import JsonRpcChainAdapter


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="flowgraph", description="Token flow aggregator (Wallets <-> Protocols)")
    p.add_argument("--protocols", help=f"Protocols JSON file (default: ${settings.ENV_PROTOCOLS_FILE} or {settings.DEFAULT_PROTOCOLS_FILE})")
    p.add_argument("--out", help=f"Output folder (default: ${settings.ENV_OUTPUT_DIR} or {settings.DEFAULT_OUTPUT_DIR})")
    p.add_argument("--decimals", type=int, help="Token decimals (default: 18)")
    p.add_argument("--max-block-range", type=int, help="Split eth_getLogs into chunks of this many blocks (0=single call)")
    p.add_argument("--strict-registry", action="store_true", help="Fail when two protocols declare the same contract")
    p.add_argument("--verbose", action="store_true", help="Debug logging")
    return p


def _make_progress_reporter(cfg: FlowConfig):
    start_time = time.time()

    def _short_addr(addr: str) -> str:
        if not addr:
            return ""
        if len(addr) <= 12:
            return addr
        return f"{addr[:6]}...{addr[-4:]}"

    def _ts() -> str:
        return dt.datetime.now().strftime("%H:%M:%S")

    def progress(event: str, data: dict) -> None:
        if event == "start":
            print(f"[{_ts()}] Aggregating {_short_addr(cfg.token_address)} flows • {data['protocols']} protocol(s)")
            return
        if event == "fetch":
            print(
                f"[{_ts()}] Fetching logs from block {hex(data['from_block'])} "
                f"to {hex(data['to_block'])} (~{data['blocks_back']} blocks)"
            )
            return
        if event == "fetch_done":
            print(f"[{_ts()}] Got {data['count']} logs for period ~{data['blocks_back']} blocks.")
            return
        if event == "aggregated":
            print(f"[{_ts()}] {data['period']}: {data['flows']} flow(s) • volume {data['total_volume']:.4f}")
            return
        if event == "write":
            print(f"Wrote: {data['path']}")
            return
        if event == "done":
            elapsed = time.time() - start_time
            print(f"[{_ts()}] Done in {elapsed:.1f}s")
            return
        if event == "error":
            print(f"[{_ts()}] Error: {data.get('message', 'Unknown error')}", file=sys.stderr)

    return progress


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Config is checked before anything touches the network
    try:
        cfg = settings.load_flow_config(
            protocols_path=args.protocols,
            output_dir=args.out,
            decimals=args.decimals,
            max_block_range=args.max_block_range,
            strict_registry=args.strict_registry or None,
        )
    except ConfigurationError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    progress = _make_progress_reporter(cfg)

    try:
        registry = load_protocol_registry(cfg.protocols_path)
        reverse_index = build_reverse_index(registry, strict=cfg.strict_registry)
        progress("start", {"protocols": len(registry)})
        print("Loaded protocols:", registry.names)

        chain = JsonRpcChainAdapter(cfg.rpc_url, timeout_sec=cfg.rpc_timeout_sec)
        svc = FlowService(chain=chain, reverse_index=reverse_index, cfg=cfg)
        asyncio.run(svc.run(on_progress=progress))
    except Exception as exc:
        progress("error", {"message": f"Fatal error: {exc.__class__.__name__}: {exc}"})
        return 1

    progress("done", {})
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
