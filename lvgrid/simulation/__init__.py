"""
Stochastic simulation.

Monte Carlo resampling of network loads to estimate how often the
voltage-drop ceiling would be exceeded.
"""

from .monte_carlo import HistogramBin, MonteCarloResult, perturb_points, run_monte_carlo, summarize

__all__ = ["HistogramBin", "MonteCarloResult", "perturb_points", "run_monte_carlo", "summarize"]
