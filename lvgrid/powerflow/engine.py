"""
Calculate Pipeline
==================

points + parameters + catalogs
    -> arena tree -> validation -> aggregated demand -> propagated physics
    -> KPIs, sustainability and DG impact

calculate() is a pure function of its arguments: inputs are copied on the
way in and the result shares no objects with them.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Sequence

from loguru import logger

from ..config import EngineConfig
from ..diagnostics import WarningLog
from ..exceptions import NetworkValidationError
from ..models import (
    NormativeTable,
    coerce_conductors,
    coerce_lighting,
    coerce_params,
    coerce_points,
)
from ..resources import aggregate_demand
from ..topology import NetworkTree, validate_network
from .kpis import build_gd_impact, build_kpis, build_sustainability
from .propagator import propagate
from .results import EngineResult


def calculate(
    scenario_id: str,
    nodes: Sequence,
    params,
    conductors: Mapping,
    lighting: Mapping,
    config: Optional[EngineConfig] = None,
    standards: Optional[Dict[str, NormativeTable]] = None,
    profiles: Optional[Mapping] = None,
) -> EngineResult:
    """
    Run one load-flow / voltage-drop calculation.

    Args:
        scenario_id: Identifier echoed in the result
        nodes: Points (Point instances or dicts)
        params: ScenarioParams or dict
        conductors: Conductor key -> Conductor (or dict)
        lighting: Fixture type -> unit kVA
        config: Engine constants; defaults when None
        standards: Extra normative tables by name
        profiles: Known load profiles, only used to validate params.profile

    Returns:
        EngineResult

    Raises:
        NetworkValidationError: config.strict and the network has validation issues
        pydantic.ValidationError: malformed input values (e.g. negative counts)
    """
    config = config or EngineConfig()
    points = coerce_points(nodes)
    scenario = coerce_params(params)
    cables = coerce_conductors(conductors)
    ips = coerce_lighting(lighting)

    tree = NetworkTree.build(points)
    report = validate_network(tree, scenario, cables, ips, tables=standards, profiles=profiles)
    if config.strict and not report.ok:
        raise NetworkValidationError(report)

    warnings = WarningLog(config.global_warning_kinds)
    for issue in report.issues:
        warnings.add(issue.code, issue.node_id, issue.detail)

    demand = aggregate_demand(tree, scenario, ips, tables=standards)
    flow = propagate(tree, demand, cables, config, warnings)

    kpis = build_kpis(demand, flow, scenario)
    result = EngineResult(
        scenario_id=scenario_id,
        nodes=flow.nodes,
        kpis=kpis,
        sustainability=build_sustainability(flow, config),
        gd_impact=build_gd_impact(demand, flow, config),
        warnings=warnings.to_list(),
        validation=report,
    )

    logger.debug(
        f"calculate[{scenario_id}]: {len(points)} points, factor {demand.factor:.2f} ({demand.standard}/"
        f"{demand.demand_class}), load {kpis.total_load:.2f} kVA, max drop {kpis.max_cqt:.3f}%"
    )
    return result
