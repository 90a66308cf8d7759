"""
Per-security performance record.

One ``SecurityPerformanceRecord`` per (security, reporting period). The
caller appends the security's transactions for the period in any order and
calls ``calculate(period)`` once; the record sorts the slice and runs every
pass in a fixed sequence:

    1) money-weighted IRR
    2) true time-weighted return (external index provider)
    3) delta
    4) cost basis and shares held
    5) dividend totals
    6) dividend events and dividend-adjusted IRR
    7) trailing-12-month income and cadence
    8) dividend growth trend and projections

Each pass keeps its own running state. The only state shared between passes
is the record's ``DividendAnnotations`` side table (event ids written by 6,
read by 7 and 8; trailing flags written by 7).

An inconsistent history (more shares sold than held, unknown transaction
variant) aborts the calculation: all derived values are reset to their
defaults and the error is re-raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

import pandas as pd

from security_performance_engine._logging import log_errors, log_timing
from security_performance_engine._vendor import make_json_safe
from security_performance_engine.calculations import (
    CostCalculation,
    DeltaCalculation,
    DividendCalculation,
    IRRCalculation,
)
from security_performance_engine.constants import Periodicity
from security_performance_engine.dividend_events import calculate_dividend_events
from security_performance_engine.dividend_growth import (
    calculate_dividend_growth,
    project_dividends,
)
from security_performance_engine.money import amount_per_share, amount_times_shares
from security_performance_engine.providers import (
    PerformanceIndexProvider,
    get_performance_index_provider,
    last_accumulated_return,
)
from security_performance_engine.trailing_income import calculate_trailing_income
from security_performance_engine.transactions import (
    DividendAnnotations,
    DividendFinalTransaction,
    DividendInitialTransaction,
    DividendTransaction,
    PortfolioTransaction,
    Transaction,
    sort_by_date,
    transaction_kind,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportingPeriod:
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise ValueError(f"Reporting period ends before it starts: {self.start_date} > {self.end_date}")


class SecurityPerformanceRecord:
    def __init__(self, security: Any) -> None:
        self._security = security
        self._transactions: List[Transaction] = []
        self._annotations = DividendAnnotations()
        self._market_value = 0
        self._calculated = False
        self._reset()

    def _reset(self) -> None:
        self._annotations.clear()
        self._calculated = False

        # internal rate of return of the slice
        self._irr = 0.0
        # true time-weighted rate of return
        self._twror = 0.0
        # market value + sells + dividends - purchase costs
        self._delta = 0
        # cost basis and shares held at period end
        self._fifo_cost = 0
        self._shares_held = 0
        self._fifo_cost_per_shares_held = 0
        self._realized_delta = 0
        # unwindowed dividend totals
        self._sum_of_dividends = 0
        self._dividend_event_count = 0
        self._last_dividend_payment: Optional[date] = None
        # dividend replay
        self._irr_div = 0.0
        self._div_event_count = 0
        self._stock_amount = 0
        self._stock_shares = 0
        # trailing twelve months
        self._div_amount = 0
        self._div12_amount = 0
        self._div12_shares = 0
        self._div12_cost = 0
        self._div12_event_count = 0
        self._date_from: Optional[date] = None
        self._date_to: Optional[date] = None
        self._periodicity = Periodicity.UNKNOWN
        # growth and projections
        self._div24_amount = 0
        self._div60_amount = 0
        self._div120_amount = 0
        self._div_increasing_rate = 0.0
        self._div_increasing_reliability = 0.0
        self._div_increasing_years = 0

    # ------------------------------------------------------------------
    # construction
    # ------------------------------------------------------------------

    def add_transaction(self, transaction: Transaction) -> None:
        transaction_kind(transaction)
        self._transactions.append(transaction)
        if isinstance(transaction, DividendFinalTransaction):
            self._market_value = transaction.amount

    def add_transactions(self, transactions) -> None:
        for transaction in transactions:
            self.add_transaction(transaction)

    @log_errors("high")
    @log_timing(1.0)
    def calculate(self, period: ReportingPeriod, performance_index: Optional[PerformanceIndexProvider] = None) -> None:
        """
        Derive every metric from the transaction slice.

        Re-running recomputes the record from scratch. With an empty slice
        all metrics keep their defaults.

        Raises:
            NegativeSharesError: the history removes more shares than held.
            UnsupportedTransactionError: unknown transaction variant.
        """
        self._reset()
        self._transactions = sort_by_date(self._transactions)

        if self._transactions:
            try:
                self._calculate_irr()
                self._calculate_performance(period, performance_index)
                self._calculate_delta()
                self._calculate_fifo_costs()
                self._calculate_dividends()
                self._calculate_irr_div(period.end_date)
                self._calculate_div12(period.end_date)
            except Exception:
                self._reset()
                raise

        self._calculated = True
        logger.debug(
            "calculated %s: %d transactions, periodicity %s",
            self.security_name,
            len(self._transactions),
            self._periodicity.name,
        )

    def _calculate_irr(self) -> None:
        self._irr = IRRCalculation.perform(self._transactions).get_irr()

    def _calculate_performance(self, period: ReportingPeriod, performance_index: Optional[PerformanceIndexProvider]) -> None:
        provider = performance_index if performance_index is not None else get_performance_index_provider()
        if provider is None:
            self._twror = 0.0
            return
        self._twror = last_accumulated_return(provider.accumulated_percentage(self._security, period))

    def _calculate_delta(self) -> None:
        self._delta = DeltaCalculation.perform(self._transactions).delta

    def _calculate_fifo_costs(self) -> None:
        cost = CostCalculation.perform(self._transactions)
        self._fifo_cost = cost.fifo_cost
        self._shares_held = cost.shares_held
        self._realized_delta = cost.realized_delta
        self._fifo_cost_per_shares_held = amount_per_share(self._fifo_cost, self._shares_held)

    def _calculate_dividends(self) -> None:
        dividends = DividendCalculation.perform(self._transactions)
        self._sum_of_dividends = dividends.sum
        self._dividend_event_count = dividends.num_of_events
        self._last_dividend_payment = dividends.last_dividend_payment

    def _calculate_irr_div(self, end_date: date) -> None:
        events = calculate_dividend_events(self._transactions, self._annotations, end_date)
        self._irr_div = events.irr_div
        self._div_event_count = events.div_event_count
        self._stock_amount = events.stock_amount
        self._stock_shares = events.stock_shares

    def _calculate_div12(self, end_date: date) -> None:
        trailing = calculate_trailing_income(
            self._transactions,
            self._annotations,
            end_date,
            self._stock_amount,
            self._stock_shares,
        )
        self._div_amount = trailing.div_amount
        self._date_to = trailing.date_to
        self._date_from = trailing.date_from
        self._div12_amount = trailing.div12_amount
        self._div12_shares = trailing.div12_shares
        self._div12_cost = trailing.div12_cost
        self._div12_event_count = trailing.event_count
        self._periodicity = trailing.periodicity

        if trailing.date_to is None or self._stock_amount == 0:
            return

        growth = calculate_dividend_growth(self._transactions, self._annotations, self._periodicity)
        self._div_increasing_rate = growth.rate
        self._div_increasing_reliability = growth.reliability
        self._div_increasing_years = growth.years

        projection = project_dividends(trailing.div24_amount, growth)
        self._div24_amount = projection.div24_amount
        self._div60_amount = projection.div60_amount
        self._div120_amount = projection.div120_amount

    # ------------------------------------------------------------------
    # read-only results
    # ------------------------------------------------------------------

    @property
    def security(self) -> Any:
        return self._security

    @property
    def security_name(self) -> str:
        name = getattr(self._security, "name", None)
        return str(name) if name is not None else str(self._security)

    @property
    def transactions(self) -> List[Transaction]:
        return list(self._transactions)

    @property
    def is_calculated(self) -> bool:
        return self._calculated

    @property
    def irr(self) -> float:
        return self._irr

    @property
    def true_time_weighted_rate_of_return(self) -> float:
        return self._twror

    @property
    def delta(self) -> int:
        return self._delta

    @property
    def market_value(self) -> int:
        return self._market_value

    @property
    def fifo_cost(self) -> int:
        return self._fifo_cost

    @property
    def shares_held(self) -> int:
        return self._shares_held

    @property
    def fifo_cost_per_shares_held(self) -> int:
        return self._fifo_cost_per_shares_held

    @property
    def realized_delta(self) -> int:
        return self._realized_delta

    @property
    def sum_of_dividends(self) -> int:
        return self._sum_of_dividends

    @property
    def dividend_event_count(self) -> int:
        return self._dividend_event_count

    @property
    def last_dividend_payment(self) -> Optional[date]:
        return self._last_dividend_payment

    @property
    def irr_div(self) -> float:
        return self._irr_div

    @property
    def total_rate_of_return_div(self) -> float:
        if self._shares_held > 0 and self._fifo_cost != 0:
            return self._sum_of_dividends / self._fifo_cost
        return 0.0

    @property
    def div_amount(self) -> int:
        return self._div_amount

    @property
    def div12_amount(self) -> int:
        return self._div12_amount

    @property
    def div12_mean_shares(self) -> int:
        return self._div12_shares

    @property
    def div12_per_share(self) -> int:
        return amount_per_share(self._div12_amount, self._div12_shares)

    @property
    def div12_cost(self) -> int:
        return self._div12_cost

    @property
    def div12_event_count(self) -> int:
        return self._div12_event_count

    @property
    def cost12_amount(self) -> int:
        return amount_times_shares(self.stock_price, self._div12_shares)

    @property
    def div24_amount(self) -> int:
        return self._div24_amount

    @property
    def expected_div12_amount(self) -> int:
        return self._div24_amount

    @property
    def div60_amount(self) -> int:
        return self._div60_amount

    @property
    def div120_amount(self) -> int:
        return self._div120_amount

    @property
    def div_increasing_rate(self) -> float:
        return self._div_increasing_rate

    @property
    def div_increasing_reliability(self) -> float:
        return self._div_increasing_reliability

    @property
    def div_increasing_years(self) -> int:
        return self._div_increasing_years

    @property
    def stock_amount(self) -> int:
        return self._stock_amount

    @property
    def stock_shares(self) -> int:
        return self._stock_shares

    @property
    def stock_price(self) -> int:
        return amount_per_share(self._stock_amount, self._stock_shares)

    @property
    def date_from(self) -> Optional[date]:
        return self._date_from

    @property
    def date_to(self) -> Optional[date]:
        return self._date_to

    @property
    def div_event_count(self) -> int:
        return self._div_event_count

    @property
    def personal_div(self) -> float:
        """Trailing dividend yield on the cost of the shares that earned it."""
        if self.stock_price > 0 and self._div12_cost != 0:
            return self._div12_amount / self._div12_cost
        return 0.0

    @property
    def periodicity(self) -> Periodicity:
        return self._periodicity

    @property
    def periodicity_sort(self) -> int:
        return self._periodicity.sort_rank

    @property
    def has_div12(self) -> bool:
        return self._periodicity.has_dividends

    # ------------------------------------------------------------------
    # annotations and views
    # ------------------------------------------------------------------

    def div_event_id(self, transaction: Transaction) -> int:
        return self._annotations.event_id(transaction)

    def is_div12(self, transaction: Transaction) -> bool:
        return self._annotations.is_div12(transaction)

    def transactions_frame(self) -> pd.DataFrame:
        """Sorted slice with the derived event id and trailing flag per row."""
        rows = []
        for t in self._transactions:
            row: Dict[str, Any] = {
                "date": t.date,
                "kind": transaction_kind(t),
                "type": None,
                "shares": None,
                "amount": t.amount,
                "div_event_id": 0,
                "is_div12": False,
            }
            if isinstance(t, PortfolioTransaction):
                row["type"] = t.type.value
                row["shares"] = t.shares
            elif isinstance(t, (DividendTransaction, DividendInitialTransaction, DividendFinalTransaction)):
                row["shares"] = t.shares
            if isinstance(t, DividendTransaction):
                row["div_event_id"] = self._annotations.event_id(t)
                row["is_div12"] = self._annotations.is_div12(t)
            rows.append(row)
        columns = ["date", "kind", "type", "shares", "amount", "div_event_id", "is_div12"]
        return pd.DataFrame(rows, columns=columns)

    def to_dict(self) -> Dict[str, Any]:
        return make_json_safe({
            "security": self.security_name,
            "irr": self.irr,
            "irr_div": self.irr_div,
            "true_time_weighted_rate_of_return": self.true_time_weighted_rate_of_return,
            "delta": self.delta,
            "market_value": self.market_value,
            "fifo_cost": self.fifo_cost,
            "shares_held": self.shares_held,
            "fifo_cost_per_shares_held": self.fifo_cost_per_shares_held,
            "realized_delta": self.realized_delta,
            "sum_of_dividends": self.sum_of_dividends,
            "dividend_event_count": self.dividend_event_count,
            "last_dividend_payment": self.last_dividend_payment,
            "total_rate_of_return_div": self.total_rate_of_return_div,
            "div_amount": self.div_amount,
            "div12_amount": self.div12_amount,
            "div12_mean_shares": self.div12_mean_shares,
            "div12_per_share": self.div12_per_share,
            "div12_cost": self.div12_cost,
            "div12_event_count": self.div12_event_count,
            "cost12_amount": self.cost12_amount,
            "div24_amount": self.div24_amount,
            "div60_amount": self.div60_amount,
            "div120_amount": self.div120_amount,
            "div_increasing_rate": self.div_increasing_rate,
            "div_increasing_reliability": self.div_increasing_reliability,
            "div_increasing_years": self.div_increasing_years,
            "stock_amount": self.stock_amount,
            "stock_shares": self.stock_shares,
            "stock_price": self.stock_price,
            "date_from": self.date_from,
            "date_to": self.date_to,
            "div_event_count": self.div_event_count,
            "personal_div": self.personal_div,
            "periodicity": self.periodicity,
            "periodicity_sort": self.periodicity_sort,
            "has_div12": self.has_div12,
        })
