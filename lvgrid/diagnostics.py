"""
Engine Warnings
===============

Structured, informational diagnostics. Warnings never stop a calculation;
they are collected in order and deduplicated on (kind, node_id). Kinds marked
global are keyed on the kind alone, so they are reported once per network.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple

from loguru import logger

# Warning kinds
THERMAL_OVERLOAD = "thermal_overload"
REVERSE_FLOW = "reverse_flow"
SOLAR_OVERVOLTAGE = "solar_overvoltage"


@dataclass(frozen=True)
class EngineWarning:
    kind: str
    node_id: Optional[str]
    detail: str

    def to_dict(self) -> dict:
        return {"kind": self.kind, "node_id": self.node_id, "detail": self.detail}

    def __str__(self) -> str:
        return self.detail


class WarningLog:
    """Ordered warning collection with (kind, node_id) deduplication."""

    def __init__(self, global_kinds: Iterable[str] = (REVERSE_FLOW,)):
        self.global_kinds: FrozenSet[str] = frozenset(global_kinds)
        self._seen: Dict[Tuple[str, Optional[str]], EngineWarning] = {}
        self._items: List[EngineWarning] = []

    def _key(self, kind: str, node_id: Optional[str]) -> Tuple[str, Optional[str]]:
        return (kind, None) if kind in self.global_kinds else (kind, node_id)

    def add(self, kind: str, node_id: Optional[str], detail: str) -> bool:
        """
        Record a warning.

        Returns:
            True if recorded, False if an equivalent warning already exists
        """
        key = self._key(kind, node_id)
        if key in self._seen:
            return False
        warning = EngineWarning(kind=kind, node_id=node_id, detail=detail)
        self._seen[key] = warning
        self._items.append(warning)
        logger.debug(f"warning [{kind}] {detail}")
        return True

    def to_list(self) -> List[EngineWarning]:
        return list(self._items)

    def __iter__(self) -> Iterator[EngineWarning]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)
