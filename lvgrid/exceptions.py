"""Exceptions raised by the engine and its runner."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .topology.validation import ValidationReport


class LvgridError(Exception):
    """Base class for engine errors."""


class NetworkValidationError(LvgridError, ValueError):
    """Raised in strict mode when the network fails validation before the physics pass."""

    def __init__(self, report: "ValidationReport"):
        self.report = report
        lines = [f"{i.code} ({i.node_id or '-'}): {i.detail}" for i in report.issues]
        super().__init__("Network validation failed:\n" + "\n".join(lines))


class EngineTimeoutError(LvgridError, TimeoutError):
    """Raised by the runner when an engine call exceeds its time budget."""
