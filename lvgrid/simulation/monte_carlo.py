"""
Monte Carlo Risk
================

Resamples residential counts, point loads and solar around their nominal
values, reruns calculate() for each trial and summarizes how often the
profile voltage-drop ceiling is exceeded.
"""

from __future__ import annotations

import math
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np
from loguru import logger

from ..catalogs import get_profile
from ..config import EngineConfig
from ..models import (
    LoadProfile,
    NormativeTable,
    Point,
    ScenarioParams,
    coerce_conductors,
    coerce_lighting,
    coerce_params,
    coerce_points,
)
from ..powerflow import calculate

HISTOGRAM_BINS = 20
RESIDENTIAL_SPREAD = (0.85, 1.15)
POINT_LOAD_SPREAD = (0.90, 1.10)
SOLAR_SPREAD = (0.95, 1.05)


@dataclass(frozen=True)
class HistogramBin:
    x: float  # bin start, rounded to 2 decimals
    y: int    # trials in the bin


@dataclass
class MonteCarloResult:
    stability_index: float
    failure_risk: float
    distribution: List[HistogramBin]
    avg_max_cqt: float
    p95_cqt: float
    iterations: int
    failures: int
    cqt_limit: float
    samples: List[float] = field(default_factory=list, repr=False)

    def to_dict(self) -> dict:
        return {
            "stability_index": self.stability_index,
            "failure_risk": self.failure_risk,
            "distribution": [{"x": b.x, "y": b.y} for b in self.distribution],
            "avg_max_cqt": self.avg_max_cqt,
            "p95_cqt": self.p95_cqt,
            "iterations": self.iterations,
            "failures": self.failures,
            "cqt_limit": self.cqt_limit,
        }


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def perturb_points(points: Sequence[Point], rng: np.random.Generator) -> List[Point]:
    """
    One randomized copy of the network loads.

    Residential counts get independent factors per phase class and are
    rounded to whole units; point loads and solar keep fractional kVA.
    """
    out = []
    for p in points:
        loads = p.loads
        lo, hi = RESIDENTIAL_SPREAD
        new_loads = loads.model_copy(update={
            "mono": _round_half_up(loads.mono * rng.uniform(lo, hi)),
            "bi": _round_half_up(loads.bi * rng.uniform(lo, hi)),
            "tri": _round_half_up(loads.tri * rng.uniform(lo, hi)),
            "point_kva": loads.point_kva * rng.uniform(*POINT_LOAD_SPREAD),
            "solar_kva": loads.solar_kva * rng.uniform(*SOLAR_SPREAD),
        })
        out.append(p.model_copy(update={"loads": new_loads}))
    return out


def sample_max_drops(
    points: Sequence[Point],
    params: ScenarioParams,
    cables: Mapping,
    ips: Mapping[str, float],
    trials: int,
    seed,
    config: EngineConfig,
    standards: Optional[Dict[str, NormativeTable]] = None,
) -> np.ndarray:
    """Maximum cumulative voltage drop of each perturbed trial."""
    rng = np.random.default_rng(seed)
    out = np.empty(trials, dtype=float)
    for i in range(trials):
        trial = perturb_points(points, rng)
        res = calculate("sim", trial, params, cables, ips, config=config, standards=standards)
        out[i] = res.kpis.max_cqt
    return out


def summarize(samples: np.ndarray, limit: float) -> MonteCarloResult:
    """
    Statistics over per-trial maxima. Trial order does not matter.

    Args:
        samples: Max cumulative drop of each trial (%)
        limit: Profile voltage-drop ceiling (%)

    Returns:
        MonteCarloResult
    """
    values = np.sort(np.asarray(samples, dtype=float))
    n = int(values.size)
    if n < 1:
        raise ValueError("at least one trial is required")

    failures = int(np.count_nonzero(values > limit))
    lo, hi = float(values[0]), float(values[-1])

    if hi > lo:
        counts, edges = np.histogram(values, bins=HISTOGRAM_BINS, range=(lo, hi))
        starts = edges[:-1]
    else:
        counts = np.zeros(HISTOGRAM_BINS, dtype=int)
        counts[0] = n
        starts = np.full(HISTOGRAM_BINS, lo)

    distribution = [HistogramBin(x=round(float(s), 2), y=int(c)) for s, c in zip(starts, counts)]

    stability = (n - failures) / n * 100
    return MonteCarloResult(
        stability_index=stability,
        failure_risk=100 - stability,
        distribution=distribution,
        avg_max_cqt=float(values.mean()),
        p95_cqt=float(values[math.floor(n * 0.95)]),
        iterations=n,
        failures=failures,
        cqt_limit=float(limit),
        samples=values.tolist(),
    )


def run_monte_carlo(
    nodes: Sequence,
    params,
    conductors: Mapping,
    lighting: Mapping,
    iterations: int = 500,
    *,
    config: Optional[EngineConfig] = None,
    standards: Optional[Dict[str, NormativeTable]] = None,
    profiles: Optional[Mapping[str, LoadProfile]] = None,
    seed: Optional[int] = None,
    workers: int = 1,
) -> MonteCarloResult:
    """
    Stochastic risk of exceeding the profile voltage-drop ceiling.

    Args:
        nodes: Points (Point instances or dicts)
        params: ScenarioParams or dict
        conductors: Conductor catalog
        lighting: Lighting catalog
        iterations: Number of trials (>= 1)
        config: Engine constants
        standards: Extra normative tables
        profiles: Extra load profiles
        seed: RNG seed; None draws fresh entropy
        workers: Processes to shard trials over. Results are reproducible
            for a given (seed, workers) pair.

    Returns:
        MonteCarloResult
    """
    if iterations < 1:
        raise ValueError("iterations must be >= 1")
    if workers < 1:
        raise ValueError("workers must be >= 1")

    config = config or EngineConfig()
    points = coerce_points(nodes)
    scenario = coerce_params(params)
    cables = coerce_conductors(conductors)
    ips = coerce_lighting(lighting)
    limit = get_profile(scenario.profile, profiles).cqt_max

    n_shards = min(workers, iterations)
    seeds = np.random.SeedSequence(seed).spawn(n_shards)
    sizes = [len(chunk) for chunk in np.array_split(np.arange(iterations), n_shards)]

    logger.info(f"Monte Carlo: {iterations} trials over {n_shards} shard(s), limit {limit:.2f}%")

    if n_shards == 1:
        samples = sample_max_drops(points, scenario, cables, ips, iterations, seeds[0], config, standards)
    else:
        with ProcessPoolExecutor(max_workers=n_shards) as executor:
            futures = [
                executor.submit(sample_max_drops, points, scenario, cables, ips, size, s, config, standards)
                for size, s in zip(sizes, seeds)
            ]
            samples = np.concatenate([f.result() for f in futures])

    result = summarize(samples, limit)
    logger.info(
        f"Monte Carlo done: stability {result.stability_index:.1f}%, "
        f"mean max drop {result.avg_max_cqt:.3f}%, p95 {result.p95_cqt:.3f}%"
    )
    return result
