"""Public API for security_performance_engine."""

from security_performance_engine.constants import Periodicity
from security_performance_engine.ledger import NegativeSharesError, StockLedger
from security_performance_engine.money import amount_per_share, amount_times_shares
from security_performance_engine.irr import calculate_irr
from security_performance_engine.regression import LogarithmicRegression
from security_performance_engine.performance_record import (
    ReportingPeriod,
    SecurityPerformanceRecord,
)
from security_performance_engine.providers import (
    PerformanceIndexProvider,
    set_performance_index_provider,
    get_performance_index_provider,
)
from security_performance_engine.transactions import (
    DividendFinalTransaction,
    DividendInitialTransaction,
    DividendTransaction,
    PortfolioTransaction,
    PortfolioTransactionType,
    UnsupportedTransactionError,
)

__all__ = [
    "Periodicity",
    "NegativeSharesError",
    "StockLedger",
    "amount_per_share",
    "amount_times_shares",
    "calculate_irr",
    "LogarithmicRegression",
    "ReportingPeriod",
    "SecurityPerformanceRecord",
    "PerformanceIndexProvider",
    "set_performance_index_provider",
    "get_performance_index_provider",
    "DividendFinalTransaction",
    "DividendInitialTransaction",
    "DividendTransaction",
    "PortfolioTransaction",
    "PortfolioTransactionType",
    "UnsupportedTransactionError",
]
