"""Result objects for structured service layer responses.

    from core.result_objects import SecurityPerformanceResult
"""

from .security_performance import SecurityPerformanceResult

__all__ = [
    "SecurityPerformanceResult",
]
