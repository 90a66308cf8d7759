"""Internal rate of return for dated cash flows.

Pure functions. No I/O.

Sign convention: negative flows leave the investor (purchases, opening
valuations), positive flows return to the investor (sales, dividends,
closing valuations). The result is an annual rate as a fraction
(0.1 == 10% p.a.).
"""

from __future__ import annotations

import logging
import math
import warnings
from datetime import date
from typing import Optional, Sequence

import numpy as np
from scipy.optimize import brentq, newton

from security_performance_engine import config

logger = logging.getLogger(__name__)


def _year_fractions(dates: Sequence[date], days_per_year: float) -> np.ndarray:
    zero = dates[0]
    return np.array([(d - zero).days / days_per_year for d in dates], dtype=float)


def _is_degenerate(values: np.ndarray) -> bool:
    non_zero = values[values != 0]
    if len(non_zero) < 2:
        return True
    return bool(np.all(non_zero > 0) or np.all(non_zero < 0))


def _rate_grid(low: float, high: float, steps: int = 200) -> np.ndarray:
    """Candidate rates on [low, high]: linear below zero, log-spaced above."""
    return np.concatenate(
        [
            np.linspace(low, 0.0, steps, endpoint=False),
            np.geomspace(1e-6, high, steps),
        ]
    )


def _find_bracket(npv, grid: np.ndarray) -> Optional[tuple]:
    """Scan ``grid`` for a sign change of ``npv``."""
    previous_rate = grid[0]
    previous_value = npv(previous_rate)
    for rate in grid[1:]:
        value = npv(rate)
        if not (math.isfinite(previous_value) and math.isfinite(value)):
            previous_rate, previous_value = rate, value
            continue
        if previous_value == 0:
            return previous_rate, previous_rate
        if previous_value * value < 0:
            return previous_rate, rate
        previous_rate, previous_value = rate, value
    return None


def _closest_to_root(npv, candidates) -> Optional[float]:
    """Candidate rate with the smallest finite ``|npv|``."""
    best_rate, best_value = None, math.inf
    for rate in candidates:
        value = abs(npv(rate))
        if math.isfinite(value) and value < best_value:
            best_rate, best_value = float(rate), value
    return best_rate


def calculate_irr(dates: Sequence[date], values: Sequence[float]) -> float:
    """
    Solve ``sum(v_i / (1 + r) ** t_i) == 0`` for ``r``.

    ``t_i`` is the year fraction between the first date and ``dates[i]``.
    Returns 0.0 for empty, mismatched or single-signed input. Iterations are
    capped; on non-convergence the best estimate is returned, which is the
    bracket end nearest the root when the root lies outside the bracket.
    """
    if not dates or len(dates) != len(values):
        return 0.0

    settings = config.IRR_DEFAULTS
    flows = np.asarray(values, dtype=float)
    if _is_degenerate(flows):
        return 0.0

    years = _year_fractions(dates, float(settings["days_per_year"]))

    def npv(rate: float) -> float:
        if rate <= -1.0:
            return math.nan
        with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
            return float(np.sum(flows / np.power(1.0 + rate, years)))

    guess = float(settings["initial_guess"])
    max_iterations = int(settings["max_iterations"])
    tolerance = float(settings["tolerance"])

    estimate = math.nan
    try:
        with warnings.catch_warnings():
            # scipy warns on every non-converged secant run even with disp=False
            warnings.simplefilter("ignore", RuntimeWarning)
            estimate, result = newton(
                npv,
                guess,
                tol=tolerance,
                maxiter=max_iterations,
                full_output=True,
                disp=False,
            )
        estimate = float(estimate)
        if result.converged and math.isfinite(estimate) and estimate > -1.0:
            return estimate
    except (RuntimeError, OverflowError, ZeroDivisionError, FloatingPointError) as exc:
        logger.debug("IRR newton iteration failed: %s", exc)

    grid = _rate_grid(float(settings["bracket_low"]), float(settings["bracket_high"]))
    bracket = _find_bracket(npv, grid)
    if bracket is not None:
        low, high = bracket
        if low == high:
            return float(low)
        try:
            return float(brentq(npv, low, high, xtol=tolerance, maxiter=max_iterations))
        except (RuntimeError, ValueError) as exc:
            logger.debug("IRR bisection fallback failed: %s", exc)

    candidates = [estimate] if math.isfinite(estimate) and estimate > -1.0 else []
    best = _closest_to_root(npv, candidates + list(grid))
    if best is None:
        return 0.0
    logger.debug("IRR did not converge, returning best estimate %.6f", best)
    return best
