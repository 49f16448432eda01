"""
Radial LV Network Engine
========================

Deterministic engineering engine for low-voltage distribution trees:
- Load flow and cumulative voltage drop from the transformer down
- Distributed solar: reverse flow and voltage rise screening
- Automatic conductor sizing under normative limits
- Monte Carlo risk estimate for the voltage-drop ceiling

Architecture:
- topology/: Arena tree built from a flat list of points, plus validation
- resources/: Demand aggregation (residential, point loads, lighting, solar)
- standards/: Normative diversification tables (PRODIST, ABNT)
- powerflow/: Physics propagation, KPIs and the calculate pipeline
- optimization/: Conductor upgrade loop
- simulation/: Stochastic resampling of loads
"""

__version__ = "1.0.0"

from loguru import logger

from .config import EngineConfig
from .models import Conductor, LoadProfile, LoadSpec, Point, ScenarioParams
from .powerflow import EngineResult, calculate
from .optimization import optimize, size_conductors
from .simulation import MonteCarloResult, run_monte_carlo

__all__ = [
    "EngineConfig",
    "Conductor",
    "LoadProfile",
    "LoadSpec",
    "Point",
    "ScenarioParams",
    "EngineResult",
    "calculate",
    "optimize",
    "size_conductors",
    "MonteCarloResult",
    "run_monte_carlo",
]

# Silent until the application calls logger.enable("lvgrid").
logger.disable(__name__)
