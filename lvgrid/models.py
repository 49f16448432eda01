"""
Input Models
============

Pydantic models for network points, their loads, conductor and profile
catalog entries, normative tables and scenario parameters.
"""

from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel, Field, NonNegativeFloat, NonNegativeInt, field_validator


class LoadSpec(BaseModel):
    mono: NonNegativeInt = Field(0, description="Single-phase residential units.")
    bi: NonNegativeInt = Field(0, description="Two-phase residential units.")
    tri: NonNegativeInt = Field(0, description="Three-phase residential units.")
    point_qty: NonNegativeInt = Field(0, description="Number of explicit point-load customers.")
    point_kva: NonNegativeFloat = Field(0.0, description="Total point-load demand at this point (kVA).")
    ip_type: str = Field("Sem IP", description="Public-lighting fixture type (key into the lighting catalog).")
    ip_qty: NonNegativeInt = Field(0, description="Number of public-lighting fixtures.")
    solar_kva: NonNegativeFloat = Field(0.0, description="Installed distributed solar capacity (kVA).")
    solar_qty: NonNegativeInt = Field(0, description="Number of solar installations.")

    @property
    def residences(self) -> int:
        return self.mono + self.bi + self.tri


class Point(BaseModel):
    """A pole/point of the radial network. The source has an empty parent_id."""

    id: str = Field(..., min_length=1, description="Unique point identifier.")
    parent_id: str = Field("", description="Identifier of the upstream point; empty for the source.")
    meters: NonNegativeFloat = Field(0.0, description="Span length to the parent (m).")
    cable: str = Field("", description="Conductor key into the conductor catalog.")
    loads: LoadSpec = Field(default_factory=LoadSpec)


class Conductor(BaseModel):
    r: NonNegativeFloat = Field(..., description="Resistance (ohm/km).")
    x: NonNegativeFloat = Field(0.0, description="Reactance (ohm/km).")
    coef: NonNegativeFloat = Field(..., description="Voltage-drop coefficient (% per kVA.hm, before the 0.5 factor).")
    ampacity: NonNegativeFloat = Field(..., description="Continuous current rating (A).")


class LoadProfile(BaseModel):
    cqt_max: NonNegativeFloat = Field(..., description="Cumulative voltage-drop ceiling (%).")
    load_max: NonNegativeFloat = Field(100.0, description="Transformer loading ceiling (%), informational.")


class NormativeRow(BaseModel):
    min: NonNegativeInt
    max: NonNegativeInt
    A: NonNegativeFloat
    B: NonNegativeFloat
    C: NonNegativeFloat
    D: NonNegativeFloat

    def factor(self, demand_class: str) -> float:
        return float(getattr(self, demand_class))


class NormativeTable(BaseModel):
    name: str
    rows: List[NormativeRow] = Field(..., min_length=1)

    @field_validator("rows")
    @classmethod
    def _ordered(cls, rows: List[NormativeRow]) -> List[NormativeRow]:
        for prev, row in zip(rows, rows[1:]):
            if row.min <= prev.max:
                raise ValueError("normative rows must be ordered and non-overlapping")
        for row in rows:
            if row.max < row.min:
                raise ValueError(f"row {row.min}-{row.max}: max must be >= min")
        return rows


class ScenarioParams(BaseModel):
    trafo_kva: NonNegativeFloat = Field(..., description="Transformer rated power (kVA).")
    profile: str = Field("Massivos", description="Load profile name (voltage-drop ceiling).")
    class_type: Literal["Automatic", "Manual"] = Field("Manual", description="Demand-class selection mode.")
    manual_class: Literal["A", "B", "C", "D"] = Field("B", description="Demand class letter.")
    normative_table: str = Field("PRODIST", description="Normative demand table name.")
    net_solar_in_thermal: bool = Field(
        False, description="Subtract half the installed solar from the node demand used for thermal checks."
    )


ConductorCatalog = Dict[str, Conductor]
LightingCatalog = Dict[str, float]


def coerce_points(nodes) -> List[Point]:
    """Accept Point instances or plain dicts; always return fresh copies."""
    return [Point.model_validate(n.model_dump() if isinstance(n, Point) else n) for n in nodes]


def coerce_conductors(catalog) -> ConductorCatalog:
    return {
        str(k): Conductor.model_validate(v.model_dump() if isinstance(v, Conductor) else v)
        for k, v in (catalog or {}).items()
    }


def coerce_lighting(catalog) -> LightingCatalog:
    return {str(k): float(v) for k, v in (catalog or {}).items()}


def coerce_params(params) -> ScenarioParams:
    if isinstance(params, ScenarioParams):
        return params.model_copy()
    return ScenarioParams.model_validate(params)
