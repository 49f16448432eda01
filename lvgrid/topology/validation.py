"""
Network Validation
==================

Checks run before the physics pass. A missing catalog key, a dangling parent
or a cycle is reported here instead of being masked by zero-valued physics.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from ..models import Conductor, NormativeTable, ScenarioParams
from ..standards import has_standard
from .tree import NetworkTree

MISSING_SOURCE = "missing_source"
MULTIPLE_SOURCES = "multiple_sources"
ORPHAN = "orphan"
CYCLE = "cycle"
DUPLICATE_ID = "duplicate_id"
UNKNOWN_CONDUCTOR = "unknown_conductor"
UNKNOWN_FIXTURE = "unknown_fixture"
UNKNOWN_PROFILE = "unknown_profile"
UNKNOWN_TABLE = "unknown_table"


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    node_id: Optional[str]
    detail: str

    def to_dict(self) -> dict:
        return {"code": self.code, "node_id": self.node_id, "detail": self.detail}


@dataclass
class ValidationReport:
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def add(self, code: str, node_id: Optional[str], detail: str) -> None:
        self.issues.append(ValidationIssue(code=code, node_id=node_id, detail=detail))

    def codes(self) -> List[str]:
        return [i.code for i in self.issues]

    def by_code(self, code: str) -> List[ValidationIssue]:
        return [i for i in self.issues if i.code == code]

    def to_dict(self) -> dict:
        return {"ok": self.ok, "issues": [i.to_dict() for i in self.issues]}


def validate_tree(tree: NetworkTree, report: Optional[ValidationReport] = None) -> ValidationReport:
    """Structural checks: source, duplicates, cycles, orphans."""
    report = report if report is not None else ValidationReport()

    if tree.source is None:
        report.add(MISSING_SOURCE, None, "No source node (id 'TRAFO' or empty parent) found.")

    for node in tree.nodes:
        if node.index != tree.source and not node.point.parent_id:
            report.add(MULTIPLE_SOURCES, node.id, f"{node.id} has no parent but is not the source.")

    for node_id in tree.duplicate_ids:
        report.add(DUPLICATE_ID, node_id, f"Id {node_id} is used by more than one point.")

    in_cycle = set()
    for cycle in tree.find_cycles():
        in_cycle.update(cycle)
        report.add(CYCLE, cycle[0], "Parent cycle: " + " -> ".join(cycle + [cycle[0]]))

    if tree.source is not None:
        for idx in tree.orphans():
            node = tree.nodes[idx]
            if node.id in in_cycle or not node.point.parent_id:
                continue
            report.add(
                ORPHAN,
                node.id,
                f"{node.id} is not connected to the source (parent '{node.point.parent_id}').",
            )
    return report


def validate_network(
    tree: NetworkTree,
    params: ScenarioParams,
    conductors: Mapping[str, Conductor],
    lighting: Mapping[str, float],
    tables: Optional[Dict[str, NormativeTable]] = None,
    profiles: Optional[Mapping[str, object]] = None,
) -> ValidationReport:
    """
    Full pre-physics validation.

    Args:
        tree: Built network tree
        params: Scenario parameters
        conductors: Conductor catalog
        lighting: Lighting fixture catalog
        tables: Extra normative tables known to the caller
        profiles: Known load profiles; profile check skipped when None

    Returns:
        ValidationReport (empty when the network is consistent)
    """
    report = validate_tree(tree)

    for node in tree.nodes:
        if node.index == tree.source:
            continue
        if node.point.cable not in conductors:
            report.add(
                UNKNOWN_CONDUCTOR,
                node.id,
                f"Conductor '{node.point.cable}' of {node.id} is not in the catalog.",
            )
        loads = node.point.loads
        if loads.ip_qty > 0 and loads.ip_type not in lighting:
            report.add(
                UNKNOWN_FIXTURE,
                node.id,
                f"Lighting fixture '{loads.ip_type}' of {node.id} is not in the catalog.",
            )

    if not has_standard(params.normative_table, tables):
        report.add(UNKNOWN_TABLE, None, f"Normative table '{params.normative_table}' is unknown; using PRODIST.")
    if profiles is not None and params.profile not in profiles:
        report.add(UNKNOWN_PROFILE, None, f"Load profile '{params.profile}' is unknown; using Massivos.")

    return report
