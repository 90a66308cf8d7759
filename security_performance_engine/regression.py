"""Logarithmic (exponential growth) regression.

Fits ``y ~ exp(a + b * x)`` by ordinary least squares on ``ln(y)``.
"""

from __future__ import annotations

from typing import List

import numpy as np
import statsmodels.api as sm


class LogarithmicRegression:
    """
    Accumulate ``(x, y)`` samples and fit ``ln(y) = a + b * x``.

    ``slope`` is ``b``, ``intercept`` is ``a`` and ``correlation`` is the
    Pearson correlation of ``(x, ln y)``. Degenerate samples (fewer than two
    points, or no spread in x or ln y) yield zeros instead of a fit.
    """

    _EPS = 1e-12

    def __init__(self) -> None:
        self._x: List[float] = []
        self._y: List[float] = []
        self._fitted = False
        self._slope = 0.0
        self._intercept = 0.0
        self._correlation = 0.0

    def add(self, x: float, y: float) -> None:
        if y <= 0:
            raise ValueError(f"Logarithmic regression requires y > 0 (got {y})")
        self._x.append(float(x))
        self._y.append(float(y))
        self._fitted = False

    @property
    def count(self) -> int:
        return len(self._x)

    @property
    def slope(self) -> float:
        self._fit()
        return self._slope

    @property
    def intercept(self) -> float:
        self._fit()
        return self._intercept

    @property
    def correlation(self) -> float:
        self._fit()
        return self._correlation

    def _fit(self) -> None:
        if self._fitted:
            return
        self._fitted = True
        self._slope = 0.0
        self._intercept = 0.0
        self._correlation = 0.0

        if len(self._x) < 2:
            return

        x = np.asarray(self._x, dtype=float)
        log_y = np.log(np.asarray(self._y, dtype=float))

        if float(np.std(x)) <= self._EPS:
            return
        if float(np.std(log_y)) <= self._EPS:
            # flat series: zero growth, intercept is the common level
            self._intercept = float(log_y.mean())
            return

        model = sm.OLS(log_y, sm.add_constant(x)).fit()
        self._intercept = float(model.params[0])
        self._slope = float(model.params[1])
        self._correlation = float(np.corrcoef(x, log_y)[0, 1])
