from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from flowgraph.core.errors import ConfigurationError, ParseError
from flowgraph.core.models import ProtocolEntry, ProtocolRegistry

logger = logging.getLogger(__name__)


def _parse_entry(name: str, cfg: Any) -> ProtocolEntry:
    if not isinstance(cfg, dict):
        raise ParseError(f"Protocol {name!r}: expected an object, got {type(cfg).__name__}")

    contracts = cfg.get("contracts") or []
    if not isinstance(contracts, list) or not all(isinstance(a, str) for a in contracts):
        raise ParseError(f"Protocol {name!r}: 'contracts' must be a list of address strings")

    category = cfg.get("category")
    if category is not None and not isinstance(category, str):
        raise ParseError(f"Protocol {name!r}: 'category' must be a string")

    addrs: List[str] = []
    for a in contracts:
        addr = a.strip().lower()
        if addr and addr not in addrs:
            addrs.append(addr)

    return ProtocolEntry(name=name, contracts=tuple(addrs), category=category)


def load_protocol_registry(path: str) -> ProtocolRegistry:
    """
    Read protocol name -> {contracts, category?} from a JSON file.

    A missing file is a valid empty registry; a broken one is not.
    """
    p = Path(path)
    if not p.exists():
        logger.warning("%s not found, using empty protocol registry", p)
        return ProtocolRegistry()

    with p.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ParseError(f"{p} is not valid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise ParseError(f"{p}: expected an object of protocols, got {type(raw).__name__}")

    protocols = {name: _parse_entry(name, cfg) for name, cfg in raw.items()}
    return ProtocolRegistry(protocols=protocols)


def build_reverse_index(registry: ProtocolRegistry, strict: bool = False) -> Dict[str, str]:
    """
    Map contract address -> protocol name.

    An address claimed by two protocols goes to the one declared last; the
    collision is logged, or raised as ConfigurationError when strict.
    """
    index: Dict[str, str] = {}
    for name, entry in registry.protocols.items():
        for addr in entry.contracts:
            prev = index.get(addr)
            if prev is not None and prev != name:
                msg = f"Address {addr} is declared by both {prev!r} and {name!r}"
                if strict:
                    raise ConfigurationError(msg)
                logger.warning("%s; using %r", msg, name)
            index[addr] = name
    return index
