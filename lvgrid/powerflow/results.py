"""
Calculation Results
===================

Structured containers for one calculate() run: annotated points,
scenario KPIs, sustainability and distributed-generation bundles,
warnings and the validation report.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import pandas as pd

from ..diagnostics import EngineWarning
from ..models import Point
from ..topology import ValidationReport

if TYPE_CHECKING:
    from ..simulation import MonteCarloResult


@dataclass
class NodeResult:
    """
    A copy of an input point annotated with its electrical state.

    Attributes:
        point: Independent copy of the input point
        connected: False when the point does not hang from the source
        calculated_load: Night current through the span to the parent (A)
        calculated_cqt: Voltage drop of this span (%)
        accumulated_cqt: Voltage drop from the source to this point (%)
        solar_voltage_rise: Voltage rise from the source to this point (%)
        net_current_day: Daytime current, negative when the subtree injects (A)
        thermal_loss_w: Joule losses of this span (W)
        accumulated_kva: qt-load of the subtree (kVA)
        accumulated_solar_kva: Installed solar of the subtree (kVA)
    """
    point: Point
    connected: bool = False
    calculated_load: float = 0.0
    calculated_cqt: float = 0.0
    accumulated_cqt: float = 0.0
    solar_voltage_rise: float = 0.0
    net_current_day: float = 0.0
    thermal_loss_w: float = 0.0
    accumulated_kva: float = 0.0
    accumulated_solar_kva: float = 0.0

    @property
    def id(self) -> str:
        return self.point.id

    def to_dict(self) -> dict:
        return {
            **self.point.model_dump(),
            "connected": self.connected,
            "calculated_load": self.calculated_load,
            "calculated_cqt": self.calculated_cqt,
            "accumulated_cqt": self.accumulated_cqt,
            "solar_voltage_rise": self.solar_voltage_rise,
            "net_current_day": self.net_current_day,
            "thermal_loss_w": self.thermal_loss_w,
            "accumulated_kva": self.accumulated_kva,
            "accumulated_solar_kva": self.accumulated_solar_kva,
        }


@dataclass
class KPIs:
    total_load: float
    diversified_load: float
    point_load: float
    ip_load: float
    trafo_occupation: float
    max_cqt: float
    total_customers: int
    global_dmdi_factor: float
    total_losses_w: float = 0.0
    qt_load: float = 0.0


@dataclass
class Sustainability:
    annual_energy_loss_kwh: float
    annual_financial_loss: float
    annual_co2_kg: float
    projected_savings: float
    co2_prevented_kg: float
    trees_equivalent: float
    projection_years: int = 10


@dataclass
class GdImpact:
    total_installed_kva: float
    max_voltage_rise: float
    has_reverse_flow: bool
    reverse_flow_amps: float
    self_consumption_rate: float


@dataclass
class EngineResult:
    """Everything calculate() returns. Independent of the inputs it was built from."""
    scenario_id: str
    nodes: List[NodeResult]
    kpis: KPIs
    sustainability: Sustainability
    gd_impact: GdImpact
    warnings: List[EngineWarning] = field(default_factory=list)
    validation: ValidationReport = field(default_factory=ValidationReport)
    stochastic: Optional[MonteCarloResult] = None

    def node(self, node_id: str) -> Optional[NodeResult]:
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def warnings_of(self, kind: str) -> List[EngineWarning]:
        return [w for w in self.warnings if w.kind == kind]

    def to_frame(self) -> pd.DataFrame:
        """One row per point, loads flattened, in input order."""
        rows = []
        for n in self.nodes:
            row = n.to_dict()
            loads = row.pop("loads")
            row.update({f"loads_{k}": v for k, v in loads.items()})
            rows.append(row)
        return pd.DataFrame(rows)

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "scenario_id": self.scenario_id,
            "nodes": [n.to_dict() for n in self.nodes],
            "kpis": asdict(self.kpis),
            "sustainability": asdict(self.sustainability),
            "gd_impact": asdict(self.gd_impact),
            "warnings": [w.to_dict() for w in self.warnings],
            "validation": self.validation.to_dict(),
        }
        if self.stochastic is not None:
            out["stochastic"] = self.stochastic.to_dict()
        return out
