"""
Normative Standards
===================

Diversification tables used to turn residence counts into demand:
- PRODIST (default)
- ABNT
- Caller-supplied tables, looked up by name
"""

from .base import (
    ABNT,
    BUILTIN_TABLES,
    DEFAULT_STANDARD,
    DEMAND_CLASSES,
    PRODIST,
    DemandStandard,
    get_standard,
    has_standard,
)

__all__ = [
    "ABNT",
    "BUILTIN_TABLES",
    "DEFAULT_STANDARD",
    "DEMAND_CLASSES",
    "PRODIST",
    "DemandStandard",
    "get_standard",
    "has_standard",
]
