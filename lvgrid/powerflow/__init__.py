"""
Power Flow
==========

Radial load flow for LV networks:
- Top-down propagation of current, voltage drop and solar voltage rise
- Reverse-flow detection and Joule losses
- Scenario KPIs, sustainability and DG impact bundles
"""

from .engine import calculate
from .propagator import PropagationResult, lookup_conductor, propagate
from .results import EngineResult, GdImpact, KPIs, NodeResult, Sustainability

__all__ = [
    "calculate",
    "PropagationResult",
    "lookup_conductor",
    "propagate",
    "EngineResult",
    "GdImpact",
    "KPIs",
    "NodeResult",
    "Sustainability",
]
