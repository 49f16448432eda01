"""
Engine Configuration
====================

Physical and economic constants used by the calculation, gathered in one
caller-supplied structure. Defaults reproduce the values the engine has always
used, so passing no configuration changes nothing.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, FrozenSet, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, PositiveFloat, PositiveInt, confloat

DEFAULT_GLOBAL_WARNING_KINDS = frozenset({"reverse_flow"})


class EngineConfig(BaseModel):
    # Electrical
    line_voltage_kv: PositiveFloat = Field(0.380, description="Line-to-line voltage (kV).")
    sqrt3: PositiveFloat = Field(1.732, description="Three-phase factor used in I = S / (sqrt3 * V).")
    drop_factor: PositiveFloat = Field(0.5, description="Multiplier applied to kVA.hm * coef.")
    day_load_factor: confloat(ge=0, le=1) = Field(0.30, description="Daytime fraction of night demand.")
    rise_limit_pct: PositiveFloat = Field(5.0, description="Solar voltage-rise ceiling (%).")
    lighting_share: Literal["network", "subtree"] = Field(
        "network",
        description="How lighting is removed from daytime demand: even network-wide share or the node's own subtree.",
    )

    # Losses and sustainability
    hours_per_year: PositiveFloat = Field(8760.0)
    loss_load_factor: confloat(ge=0, le=1) = Field(0.25, description="Load-loss factor applied to peak losses.")
    energy_price_per_kwh: confloat(ge=0) = Field(0.85, description="Energy price (currency/kWh).")
    co2_kg_per_kwh: confloat(ge=0) = Field(0.0817, description="Grid emission factor (kgCO2/kWh).")
    mitigation_rate: confloat(ge=0, le=1) = Field(0.35, description="Share of losses avoided by reconductoring.")
    projection_years: PositiveInt = Field(10)
    tree_co2_kg_per_year: PositiveFloat = Field(22.0, description="CO2 absorbed by one tree in a year (kg).")

    # Behaviour
    strict: bool = Field(False, description="Raise on validation issues instead of degrading silently.")
    global_warning_kinds: FrozenSet[str] = Field(
        DEFAULT_GLOBAL_WARNING_KINDS,
        description="Warning kinds reported once per network instead of once per node.",
    )
    max_iterations: PositiveInt = Field(10, description="Optimizer iteration cap.")

    @property
    def current_divisor(self) -> float:
        return self.sqrt3 * self.line_voltage_kv


def load_config(path: Union[str, Path, None] = None, overrides: Optional[Dict[str, Any]] = None) -> EngineConfig:
    """
    Load an EngineConfig from a YAML or JSON file.

    Args:
        path: File to read. If None, defaults are used.
        overrides: Optional values applied on top of the file contents.

    Returns:
        Validated EngineConfig
    """
    data: Dict[str, Any] = {}
    if path is not None:
        data = read_mapping(path)
    if overrides:
        data.update(overrides)
    return EngineConfig.model_validate(data)


def read_mapping(path: Union[str, Path]) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Configuration file not found: {p}")

    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"{p}: invalid YAML: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{p}: expected a mapping at the top level")
    return data
