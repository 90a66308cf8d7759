"""
Dividend event clustering and the dividend-adjusted rate of return.

A single replay over the sorted slice that:

1. keeps its own ``StockLedger`` (purchases net of pooled profit, sales at
   average cost) and turns each booking into a dated cash flow;
2. groups regular dividend payments into events: a payment more than
   ``event_gap_days`` after the previous regular payment opens a new event.
   Payments of one event may arrive on different days (several accounts,
   late bookings). Special payments (``shares <= 0``) get no event id;
3. books the remaining cost basis, not the market value, as the closing
   flow, so ``irr_div`` measures the return earned from dividends alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Tuple

from security_performance_engine import config
from security_performance_engine.calculations import LedgerCalculation
from security_performance_engine.irr import calculate_irr
from security_performance_engine.money import to_currency_units
from security_performance_engine.transactions import (
    DividendAnnotations,
    DividendFinalTransaction,
    DividendInitialTransaction,
    DividendTransaction,
    PortfolioTransaction,
    Transaction,
)

logger = logging.getLogger(__name__)


class DividendEventReplay(LedgerCalculation):
    def __init__(self, annotations: DividendAnnotations, valuation_date: date, gap_days: Optional[int] = None) -> None:
        super().__init__()
        self.annotations = annotations
        self.valuation_date = valuation_date
        self.gap_days = int(config.DIVIDEND_DEFAULTS["event_gap_days"]) if gap_days is None else gap_days
        self.div_event_count = 0
        self.dates: List[date] = []
        self.values: List[float] = []
        self._last_regular_date: Optional[date] = None

    def _add(self, when: date, amount: int) -> None:
        if amount != 0:
            self.dates.append(when)
            self.values.append(to_currency_units(amount))

    def on_initial(self, t: DividendInitialTransaction) -> None:
        self._add(t.date, -t.amount)

    def visit_final(self, t: DividendFinalTransaction) -> None:
        # booked in finish() at cost basis instead of market value
        self.valuation_date = t.date

    def visit_dividend(self, t: DividendTransaction) -> None:
        self._add(t.date, t.amount)

        if not t.is_regular:
            return

        if self._last_regular_date is None or (t.date - self._last_regular_date).days > self.gap_days:
            self.div_event_count += 1
        self._last_regular_date = t.date
        self.annotations.set_event_id(t, self.div_event_count)

    def on_acquisition(self, t: PortfolioTransaction, net_amount: int) -> None:
        self._add(t.date, -net_amount)

    def on_disposal(self, t: PortfolioTransaction, cost: int) -> None:
        self._add(t.date, cost)

    def finish(self) -> None:
        # closing flow is always booked, even when zero
        self.dates.append(self.valuation_date)
        self.values.append(to_currency_units(self.ledger.stock_amount))

    @property
    def cash_flows(self) -> List[Tuple[date, float]]:
        return list(zip(self.dates, self.values))

    def get_irr(self) -> float:
        return calculate_irr(self.dates, self.values)


@dataclass
class DividendEventResult:
    irr_div: float = 0.0
    div_event_count: int = 0
    stock_amount: int = 0
    stock_shares: int = 0
    cash_flows: List[Tuple[date, float]] = field(default_factory=list)


def calculate_dividend_events(
    transactions: Iterable[Transaction],
    annotations: DividendAnnotations,
    valuation_date: date,
) -> DividendEventResult:
    """
    Assign dividend event ids into ``annotations`` and compute ``irr_div``.

    ``valuation_date`` is used for the closing flow unless the slice carries
    a closing valuation entry, whose date then wins.

    Raises:
        NegativeSharesError: if the history removes more shares than held.
    """
    replay = DividendEventReplay.perform(transactions, annotations, valuation_date)
    logger.debug(
        "dividend events: %d events, %d cash flows, closing cost %d",
        replay.div_event_count,
        len(replay.dates),
        replay.ledger.stock_amount,
    )
    return DividendEventResult(
        irr_div=replay.get_irr(),
        div_event_count=replay.div_event_count,
        stock_amount=replay.ledger.stock_amount,
        stock_shares=replay.ledger.stock_shares,
        cash_flows=replay.cash_flows,
    )
