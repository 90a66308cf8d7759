"""Provider protocol and registry for the time-weighted return index."""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence, Union, runtime_checkable

import numpy as np
import pandas as pd


AccumulatedSeries = Union[Sequence[float], np.ndarray, pd.Series]


@runtime_checkable
class PerformanceIndexProvider(Protocol):
    def accumulated_percentage(self, security: Any, period: Any) -> AccumulatedSeries: ...


_performance_index_provider: Optional[PerformanceIndexProvider] = None


def set_performance_index_provider(provider: Optional[PerformanceIndexProvider]) -> None:
    global _performance_index_provider
    _performance_index_provider = provider


def get_performance_index_provider() -> Optional[PerformanceIndexProvider]:
    return _performance_index_provider


def last_accumulated_return(series: Optional[AccumulatedSeries]) -> float:
    """Last cumulative return of an index series; 0.0 when empty."""
    if series is None:
        return 0.0
    if isinstance(series, pd.Series):
        values = series.dropna()
        return float(values.iloc[-1]) if len(values) > 0 else 0.0
    values = np.asarray(series, dtype=float)
    return float(values[-1]) if values.size > 0 else 0.0
