#!/usr/bin/env python3
# coding: utf-8

"""
Core security performance business logic.

Agent orientation:
    This is the canonical entrypoint for per-security performance and
    dividend income metrics. Start here when a reported IRR, cost basis or
    dividend projection looks wrong.

Primary flow:
    1) Collect the security's transactions for the period into a record.
    2) Run the record's calculation passes.
    3) Return ``SecurityPerformanceResult``.

An inconsistent transaction history does not raise: the result carries
``status="error"`` and zeroed metrics so one bad security does not break a
whole report.
"""

import time
from typing import Any, Iterable, Optional

from core.result_objects import SecurityPerformanceResult
from security_performance_engine._logging import (
    log_errors,
    log_operation,
    log_performance_operation,
    log_timing,
    performance_logger,
)
from security_performance_engine.ledger import NegativeSharesError
from security_performance_engine.performance_record import (
    ReportingPeriod,
    SecurityPerformanceRecord,
)
from security_performance_engine.providers import PerformanceIndexProvider
from security_performance_engine.transactions import (
    Transaction,
    UnsupportedTransactionError,
)


@log_errors("high")
@log_operation("security_performance")
@log_timing(3.0)
def analyze_security_performance(
    security: Any,
    transactions: Iterable[Transaction],
    period: ReportingPeriod,
    *,
    performance_index: Optional[PerformanceIndexProvider] = None,
) -> SecurityPerformanceResult:
    """
    Calculate performance and dividend metrics for one security.

    Contract notes:
    - ``transactions`` is the security's slice for ``period`` in any order;
      the record sorts it. Choosing the slice is the caller's job.
    - ``performance_index`` supplies the time-weighted return series; the
      registered global provider is used when omitted.

    Parameters
    ----------
    security : Any
        Opaque security reference, passed through to the index provider.
    transactions : Iterable[Transaction]
        Transactions of the security within the reporting period.
    period : ReportingPeriod
        Reporting period; its end date anchors the dividend windows.
    performance_index : Optional[PerformanceIndexProvider]
        Time-weighted return provider override.

    Returns
    -------
    SecurityPerformanceResult
        Grouped metrics, or an error result with zeroed metrics when the
        transaction history is inconsistent.
    """
    started = time.perf_counter()
    record = SecurityPerformanceRecord(security)

    try:
        record.add_transactions(transactions)
        record.calculate(period, performance_index)
    except (NegativeSharesError, UnsupportedTransactionError) as exc:
        performance_logger.warning(
            "security_performance: %s could not be computed: %s", record.security_name, exc
        )
        return SecurityPerformanceResult.from_error(record, period, exc)

    result = SecurityPerformanceResult.from_record(record, period)
    log_performance_operation(
        "security_performance_calculated",
        {
            "security": result.security,
            "transactions": result.transaction_count,
            "periodicity": result.periodicity.value,
        },
        execution_time=time.perf_counter() - started,
    )
    return result
