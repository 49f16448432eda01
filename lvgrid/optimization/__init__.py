"""
Optimization Module
===================

Automatic conductor sizing:
- Catalog ranked by ampacity
- Upgrade loop bounded by an iteration cap
- Optional report of upgrades and residual violations
"""

from .conductor_sizing import (
    OptimizationReport,
    Upgrade,
    optimize,
    rank_conductors,
    size_conductors,
    span_violations,
)

__all__ = [
    "OptimizationReport",
    "Upgrade",
    "optimize",
    "rank_conductors",
    "size_conductors",
    "span_violations",
]
