"""
Resource Models
===============

Load definitions for radial LV networks:
- Residential units (diversified with a normative table)
- Explicit point loads
- Public lighting fixtures
- Distributed solar generation
"""

from .demand import DemandSummary, NodeDemand, aggregate_demand, node_demand, resolve_demand_class

__all__ = ["DemandSummary", "NodeDemand", "aggregate_demand", "node_demand", "resolve_demand_class"]
