"""
Physics Propagation
===================

Top-down pass over the network tree. Each span carries the qt-load and
solar capacity accumulated below it; voltage drop and solar voltage rise
are added span by span from the source, so both are non-decreasing along
any source-to-leaf path.

    I_night   = S_acc / (sqrt3 * V_LL)
    dV_seg    = S_acc * (L / 100) * coef * 0.5
    S_day     = (S_acc - lighting share) * day factor - solar_acc
    dRise_seg = |min(0, S_day)| * (L / 100) * coef * 0.5
    P_loss    = 3 * R * (L / 1000) * I_night^2
"""

from dataclasses import dataclass
from typing import List, Mapping

from loguru import logger

from ..config import EngineConfig
from ..diagnostics import REVERSE_FLOW, SOLAR_OVERVOLTAGE, THERMAL_OVERLOAD, WarningLog
from ..models import Conductor
from ..resources import DemandSummary
from ..topology import NetworkTree
from .results import NodeResult

_MISSING = Conductor(r=0.0, x=0.0, coef=0.0, ampacity=0.0)


@dataclass
class PropagationResult:
    nodes: List[NodeResult]
    total_loss_w: float = 0.0
    max_voltage_rise: float = 0.0
    has_reverse_flow: bool = False
    reverse_flow_amps: float = 0.0

    @property
    def max_cqt(self) -> float:
        return max([n.accumulated_cqt for n in self.nodes] + [0.0])


def lookup_conductor(catalog: Mapping[str, Conductor], key: str) -> Conductor:
    """Catalog entry, or an all-zero conductor for unknown keys (reported by validation)."""
    return catalog.get(key, _MISSING)


def propagate(
    tree: NetworkTree,
    demand: DemandSummary,
    conductors: Mapping[str, Conductor],
    config: EngineConfig,
    warnings: WarningLog,
) -> PropagationResult:
    """
    Compute currents, drops, rises and losses for every connected span.

    Args:
        tree: Network arena
        demand: Output of the demand aggregation for the same tree
        conductors: Conductor catalog
        config: Engine constants
        warnings: Log receiving overload, reverse-flow and overvoltage warnings

    Returns:
        PropagationResult with one NodeResult per arena node (input order)
    """
    results = [NodeResult(point=n.point.model_copy(deep=True)) for n in tree.nodes]
    out = PropagationResult(nodes=results)

    order = tree.preorder()
    if not order:
        return out

    divisor = config.current_divisor
    network_lighting_share = demand.lighting_kva / len(tree) if len(tree) else 0.0

    for idx in order:
        node = tree.nodes[idx]
        d = demand.nodes[idx]
        res = results[idx]
        res.connected = True
        res.accumulated_kva = d.accumulated_kva
        res.accumulated_solar_kva = d.accumulated_solar_kva
        res.calculated_load = d.accumulated_kva / divisor

        if idx == tree.source:
            continue

        parent = results[node.parent]
        cable = lookup_conductor(conductors, node.point.cable)
        hm = node.point.meters / 100.0
        night_current = res.calculated_load

        if cable.ampacity > 0 and night_current > cable.ampacity:
            warnings.add(
                THERMAL_OVERLOAD,
                node.id,
                f"Thermal overload at {node.id}: {night_current:.1f} A > {cable.ampacity:.0f} A.",
            )

        res.calculated_cqt = d.accumulated_kva * hm * cable.coef * config.drop_factor
        res.accumulated_cqt = parent.accumulated_cqt + res.calculated_cqt

        if config.lighting_share == "subtree":
            lighting_share = d.accumulated_lighting_kva
        else:
            lighting_share = network_lighting_share
        day_demand = (d.accumulated_kva - lighting_share) * config.day_load_factor
        net_day = day_demand - d.accumulated_solar_kva
        res.net_current_day = net_day / divisor

        if res.net_current_day < 0:
            out.has_reverse_flow = True
            out.reverse_flow_amps = max(out.reverse_flow_amps, abs(res.net_current_day))
            warnings.add(
                REVERSE_FLOW,
                node.id,
                "Reverse power flow detected: distributed generation exceeds daytime demand.",
            )

        segment_rise = abs(min(0.0, net_day)) * hm * cable.coef * config.drop_factor
        res.solar_voltage_rise = parent.solar_voltage_rise + segment_rise
        out.max_voltage_rise = max(out.max_voltage_rise, res.solar_voltage_rise)
        if res.solar_voltage_rise > config.rise_limit_pct:
            warnings.add(
                SOLAR_OVERVOLTAGE,
                node.id,
                f"Solar voltage rise at {node.id}: {res.solar_voltage_rise:.2f}% > {config.rise_limit_pct:.1f}%.",
            )

        res.thermal_loss_w = 3.0 * cable.r * (node.point.meters / 1000.0) * night_current ** 2
        out.total_loss_w += res.thermal_loss_w

    logger.debug(
        f"propagated {len(order)} of {len(tree)} points; "
        f"max drop {out.max_cqt:.3f}%, losses {out.total_loss_w:.1f} W"
    )
    return out
