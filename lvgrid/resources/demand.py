"""
Demand Model
============

Per-point demand and its bottom-up accumulation over the network tree.

Each point carries residential units, explicit point loads, public
lighting and distributed solar. Residential demand is diversified with a
single network-wide factor taken from the active normative table.
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from ..models import NormativeTable, Point, ScenarioParams
from ..standards import get_standard
from ..topology import NetworkTree


@dataclass
class NodeDemand:
    """
    Demand at one point (own values) and of everything it feeds (accumulated).

    Attributes:
        residences: mono + bi + tri
        diversified_kva: residences * diversification factor
        lighting_kva: fixtures * unit rating
        point_kva: explicit point loads
        solar_kva: installed distributed generation
        qt_kva: demand used for thermal and voltage checks (optionally net of solar)
    """
    residences: int = 0
    diversified_kva: float = 0.0
    lighting_kva: float = 0.0
    point_kva: float = 0.0
    solar_kva: float = 0.0
    qt_kva: float = 0.0

    accumulated_kva: float = 0.0
    accumulated_solar_kva: float = 0.0
    accumulated_lighting_kva: float = 0.0

    @property
    def thermal_kva(self) -> float:
        """Gross demand before any solar netting."""
        return self.diversified_kva + self.lighting_kva + self.point_kva


@dataclass
class DemandSummary:
    """Demand of every arena node plus network totals over the connected tree."""
    nodes: List[NodeDemand]
    factor: float
    demand_class: str
    standard: str
    total_residences: int
    total_customers: int
    diversified_kva: float = 0.0
    lighting_kva: float = 0.0
    point_kva: float = 0.0
    solar_kva: float = 0.0
    qt_kva: float = 0.0  # sum of own qt-loads; equals total_load_kva unless solar is netted

    @property
    def total_load_kva(self) -> float:
        return self.diversified_kva + self.lighting_kva + self.point_kva


def resolve_demand_class(params: ScenarioParams) -> str:
    # Automatic selection has no rule of its own; both modes use the class letter.
    return params.manual_class


def node_demand(
    point: Point,
    factor: float,
    lighting: Mapping[str, float],
    net_solar: bool = False,
) -> NodeDemand:
    loads = point.loads
    residences = loads.residences
    diversified = residences * factor
    lighting_kva = loads.ip_qty * float(lighting.get(loads.ip_type, 0.0))
    point_kva = float(loads.point_kva)
    solar = float(loads.solar_kva)

    qt = diversified + lighting_kva + point_kva
    if net_solar:
        qt = max(0.0, qt - 0.5 * solar)

    return NodeDemand(
        residences=residences,
        diversified_kva=diversified,
        lighting_kva=lighting_kva,
        point_kva=point_kva,
        solar_kva=solar,
        qt_kva=qt,
    )


def aggregate_demand(
    tree: NetworkTree,
    params: ScenarioParams,
    lighting: Mapping[str, float],
    tables: Optional[Dict[str, NormativeTable]] = None,
) -> DemandSummary:
    """
    Bottom-up pass.

    Every node gets its own demand; nodes hanging from the source also get
    the sums of qt-load, solar and lighting over their subtree. Totals cover
    the connected tree only, except customers and the residence count used
    for the diversification factor, which cover every point.

    Args:
        tree: Network arena
        params: Scenario parameters
        lighting: Fixture type -> unit kVA
        tables: Extra normative tables

    Returns:
        DemandSummary indexed like tree.nodes
    """
    points = [n.point for n in tree.nodes]
    standard = get_standard(params.normative_table, tables)
    demand_class = resolve_demand_class(params)
    total_residences = sum(p.loads.residences for p in points)
    factor = standard.factor(total_residences, demand_class)

    demands = [
        node_demand(p, factor, lighting, net_solar=params.net_solar_in_thermal) for p in points
    ]

    summary = DemandSummary(
        nodes=demands,
        factor=factor,
        demand_class=demand_class,
        standard=standard.name,
        total_residences=total_residences,
        total_customers=total_residences + sum(p.loads.point_qty for p in points),
    )

    for idx in tree.postorder():
        d = demands[idx]
        d.accumulated_kva = d.qt_kva
        d.accumulated_solar_kva = d.solar_kva
        d.accumulated_lighting_kva = d.lighting_kva
        for child in tree.nodes[idx].children:
            c = demands[child]
            d.accumulated_kva += c.accumulated_kva
            d.accumulated_solar_kva += c.accumulated_solar_kva
            d.accumulated_lighting_kva += c.accumulated_lighting_kva

        summary.diversified_kva += d.diversified_kva
        summary.lighting_kva += d.lighting_kva
        summary.point_kva += d.point_kva
        summary.solar_kva += d.solar_kva
        summary.qt_kva += d.qt_kva

    return summary
