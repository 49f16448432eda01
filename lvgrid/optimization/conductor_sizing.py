"""
Conductor Sizing
================

Fixed-point upgrade loop: recalculate the network, step every violating
span one conductor up the ampacity-ranked catalog, repeat until a pass
changes nothing or the iteration cap is reached.

A span violates when its night current exceeds the conductor ampacity,
its cumulative voltage drop exceeds the profile ceiling, or its cumulative
solar voltage rise exceeds the rise limit. Catalog ranks only ever go up,
so the loop terminates; whatever still violates at the cap is returned
as is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from loguru import logger

from ..catalogs import get_profile
from ..config import EngineConfig
from ..models import (
    Conductor,
    LoadProfile,
    NormativeTable,
    Point,
    coerce_conductors,
    coerce_lighting,
    coerce_params,
    coerce_points,
)
from ..powerflow import EngineResult, NodeResult, calculate, lookup_conductor
from ..topology import NetworkTree


@dataclass(frozen=True)
class Upgrade:
    iteration: int
    node_id: str
    from_cable: str
    to_cable: str
    reasons: tuple


@dataclass
class OptimizationReport:
    """
    Outcome of size_conductors().

    Attributes:
        nodes: Resulting points (new objects; inputs are untouched)
        iterations: Number of calculate passes that drove upgrades
        converged: True when the last pass made no change
        upgrades: Every conductor step taken, in order
        violations: Node id -> reasons still violated by the returned topology
    """
    nodes: List[Point]
    iterations: int
    converged: bool
    upgrades: List[Upgrade] = field(default_factory=list)
    violations: Dict[str, List[str]] = field(default_factory=dict)

    def upgrades_for(self, node_id: str) -> List[Upgrade]:
        return [u for u in self.upgrades if u.node_id == node_id]


def rank_conductors(catalog: Mapping[str, Conductor]) -> List[str]:
    """Catalog keys by ascending ampacity (ties keep catalog order)."""
    return [k for k, _ in sorted(catalog.items(), key=lambda kv: kv[1].ampacity)]


def span_violations(
    res: NodeResult,
    cable: Conductor,
    profile: LoadProfile,
    config: EngineConfig,
) -> List[str]:
    reasons = []
    if res.calculated_load > cable.ampacity:
        reasons.append("ampacity")
    if res.accumulated_cqt > profile.cqt_max:
        reasons.append("voltage_drop")
    if res.solar_voltage_rise > config.rise_limit_pct:
        reasons.append("voltage_rise")
    return reasons


def _collect_violations(
    tree: NetworkTree,
    result: EngineResult,
    cables: Mapping[str, Conductor],
    profile: LoadProfile,
    config: EngineConfig,
) -> Dict[int, List[str]]:
    found: Dict[int, List[str]] = {}
    for idx in tree.preorder():
        if idx == tree.source:
            continue
        node = tree.nodes[idx]
        reasons = span_violations(
            result.nodes[idx], lookup_conductor(cables, node.point.cable), profile, config
        )
        if reasons:
            found[idx] = reasons
    return found


def size_conductors(
    scenario_id: str,
    nodes: Sequence,
    params,
    conductors: Mapping,
    lighting: Mapping,
    config: Optional[EngineConfig] = None,
    standards: Optional[Dict[str, NormativeTable]] = None,
    profiles: Optional[Mapping[str, LoadProfile]] = None,
) -> OptimizationReport:
    """
    Upgrade undersized conductors until constraints hold or the cap is hit.

    Args:
        scenario_id: Passed through to calculate()
        nodes: Points (Point instances or dicts)
        params: ScenarioParams or dict
        conductors: Conductor catalog
        lighting: Lighting catalog
        config: Engine constants (max_iterations, rise_limit_pct)
        standards: Extra normative tables
        profiles: Extra load profiles

    Returns:
        OptimizationReport
    """
    config = config or EngineConfig()
    current = coerce_points(nodes)
    scenario = coerce_params(params)
    cables = coerce_conductors(conductors)
    ips = coerce_lighting(lighting)

    ranked = rank_conductors(cables)
    profile = get_profile(scenario.profile, profiles)

    upgrades: List[Upgrade] = []
    iteration = 0
    changed = True
    result: Optional[EngineResult] = None

    while changed and iteration < config.max_iterations:
        changed = False
        result = calculate(scenario_id, current, scenario, cables, ips, config=config, standards=standards)
        tree = NetworkTree.build(current)
        violations = _collect_violations(tree, result, cables, profile, config)

        for idx, reasons in violations.items():
            point = current[idx]
            rank = ranked.index(point.cable) if point.cable in ranked else -1
            if rank >= len(ranked) - 1:
                continue
            new_cable = ranked[rank + 1]
            upgrades.append(Upgrade(iteration + 1, point.id, point.cable, new_cable, tuple(reasons)))
            current[idx] = point.model_copy(update={"cable": new_cable})
            changed = True

        iteration += 1
        logger.debug(f"optimize[{scenario_id}] pass {iteration}: {len(violations)} violating spans")

    converged = not changed
    if changed or result is None:
        result = calculate(scenario_id, current, scenario, cables, ips, config=config, standards=standards)
    tree = NetworkTree.build(current)
    residual = {
        tree.nodes[idx].id: reasons
        for idx, reasons in _collect_violations(tree, result, cables, profile, config).items()
    }

    logger.info(
        f"optimize[{scenario_id}]: {len(upgrades)} upgrades in {iteration} passes, "
        f"{'converged' if converged else 'iteration cap reached'}, {len(residual)} spans still violating"
    )
    return OptimizationReport(
        nodes=current,
        iterations=iteration,
        converged=converged,
        upgrades=upgrades,
        violations=residual,
    )


def optimize(
    scenario_id: str,
    nodes: Sequence,
    params,
    conductors: Mapping,
    lighting: Mapping,
    config: Optional[EngineConfig] = None,
    standards: Optional[Dict[str, NormativeTable]] = None,
    profiles: Optional[Mapping[str, LoadProfile]] = None,
) -> List[Point]:
    """Points with upgraded conductors. Callers needing diagnostics use size_conductors()."""
    report = size_conductors(
        scenario_id, nodes, params, conductors, lighting,
        config=config, standards=standards, profiles=profiles,
    )
    return report.nodes
