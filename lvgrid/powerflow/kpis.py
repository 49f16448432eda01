"""
Scenario KPIs
=============

Summary metrics, loss-based sustainability projections and the
distributed-generation impact of a propagated network.
"""

from ..config import EngineConfig
from ..models import ScenarioParams
from ..resources import DemandSummary
from .propagator import PropagationResult
from .results import GdImpact, KPIs, Sustainability


def build_kpis(demand: DemandSummary, flow: PropagationResult, params: ScenarioParams) -> KPIs:
    total_load = demand.total_load_kva
    # Occupancy uses the qt-load, net of solar when netting is on
    occupation = (demand.qt_kva / params.trafo_kva) * 100 if params.trafo_kva > 0 else 0.0

    return KPIs(
        total_load=total_load,
        diversified_load=demand.diversified_kva,
        point_load=demand.point_kva,
        ip_load=demand.lighting_kva,
        trafo_occupation=occupation,
        max_cqt=flow.max_cqt,
        total_customers=demand.total_customers,
        global_dmdi_factor=demand.factor,
        total_losses_w=flow.total_loss_w,
        qt_load=demand.qt_kva,
    )


def build_sustainability(flow: PropagationResult, config: EngineConfig) -> Sustainability:
    """
    Annualize peak Joule losses and project what reconductoring would avoid.

    Peak losses are scaled by the load-loss factor to an average, then
    priced and converted to CO2. The projection assumes a fixed share of
    those losses is avoided every year of the horizon.
    """
    annual_kwh = flow.total_loss_w / 1000.0 * config.hours_per_year * config.loss_load_factor
    annual_cost = annual_kwh * config.energy_price_per_kwh
    annual_co2 = annual_kwh * config.co2_kg_per_kwh

    years = config.projection_years
    savings = annual_cost * config.mitigation_rate * years
    co2_prevented = annual_co2 * config.mitigation_rate * years
    trees = co2_prevented / (config.tree_co2_kg_per_year * years)

    return Sustainability(
        annual_energy_loss_kwh=annual_kwh,
        annual_financial_loss=annual_cost,
        annual_co2_kg=annual_co2,
        projected_savings=savings,
        co2_prevented_kg=co2_prevented,
        trees_equivalent=trees,
        projection_years=years,
    )


def build_gd_impact(demand: DemandSummary, flow: PropagationResult, config: EngineConfig) -> GdImpact:
    installed = demand.solar_kva
    if installed > 0:
        day_demand = (demand.total_load_kva - demand.lighting_kva) * config.day_load_factor
        self_consumption = min(100.0, max(0.0, day_demand / installed * 100))
    else:
        self_consumption = 0.0

    return GdImpact(
        total_installed_kva=installed,
        max_voltage_rise=flow.max_voltage_rise,
        has_reverse_flow=flow.has_reverse_flow,
        reverse_flow_amps=flow.reverse_flow_amps,
        self_consumption_rate=self_consumption,
    )
