"""
Trailing-12-month dividend income and payment cadence.

Two windows anchored at the end of the reporting period:

- freshness window ``[end - 410d, end]``: the latest dividend in it becomes
  ``date_to``. Without one there is no current income and the cadence is
  ``NONE``.
- accrual window ``(date_to - 320d, date_to]``: the regular dividends in it
  make up the trailing-12-month income and are flagged in the record's
  annotations.

Payment dates drift from year to year, hence one year plus/minus half a
quarter instead of exactly 365 days.

While replaying, a share counter (opening lots, buys and transfers in minus
sells and transfers out) is sampled at each trailing payment and weighted by
the days since the previous sample, which gives the mean number of shares
that earned the trailing income.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from security_performance_engine import config
from security_performance_engine.constants import (
    PROJECTABLE_PERIODICITIES,
    Periodicity,
    classify_periodicity,
)
from security_performance_engine.money import amount_per_share, amount_times_shares
from security_performance_engine.transactions import (
    DividendAnnotations,
    DividendInitialTransaction,
    DividendTransaction,
    PortfolioTransaction,
    PortfolioTransactionType,
    Transaction,
)

logger = logging.getLogger(__name__)

_SHARE_INCREASING = frozenset({PortfolioTransactionType.BUY, PortfolioTransactionType.TRANSFER_IN})
_SHARE_DECREASING = frozenset({PortfolioTransactionType.SELL, PortfolioTransactionType.TRANSFER_OUT})


@dataclass
class TrailingIncome:
    div_amount: int = 0
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    div12_amount: int = 0
    div12_shares: int = 0
    div12_cost: int = 0
    div24_amount: int = 0
    event_count: int = 0
    current_event_id: int = 0
    last_event_before_window: int = 0
    periodicity: Periodicity = Periodicity.NONE

    @property
    def div12_per_share(self) -> int:
        return amount_per_share(self.div12_amount, self.div12_shares)


def find_latest_dividend(transactions: Iterable[Transaction], end_date: date, freshness_days: int) -> Optional[date]:
    """Latest dividend date within ``[end_date - freshness_days, end_date]``."""
    ref_date = end_date - timedelta(days=freshness_days)
    latest = None
    for t in transactions:
        if not isinstance(t, DividendTransaction):
            continue
        if ref_date <= t.date <= end_date and (latest is None or t.date > latest):
            latest = t.date
    return latest


def calculate_trailing_income(
    transactions: Iterable[Transaction],
    annotations: DividendAnnotations,
    end_date: date,
    stock_amount: int,
    stock_shares: int,
) -> TrailingIncome:
    """
    Compute trailing income, mean shares and cadence for a sorted slice.

    ``annotations`` must already carry the dividend event ids; in-window
    payments get their trailing-12-month flag set there. ``stock_amount`` and
    ``stock_shares`` are the closing ledger values of the dividend replay.
    """
    transactions = list(transactions)
    defaults = config.DIVIDEND_DEFAULTS
    result = TrailingIncome()

    result.div_amount = sum(t.amount for t in transactions if isinstance(t, DividendTransaction))
    result.date_to = find_latest_dividend(transactions, end_date, int(defaults["freshness_window_days"]))

    if result.date_to is None:
        logger.debug("no dividend within the freshness window ending %s", end_date)
        return result
    if stock_amount == 0:
        # nothing held at the end of the period, nothing to extrapolate
        return result

    date_to = result.date_to
    date_from = date_to - timedelta(days=int(defaults["accrual_window_days"]))
    result.date_from = date_from

    held_shares = 0
    weighted_shares = 0
    weighted_days = 0
    last_sample = date_to - timedelta(days=int(defaults["share_weighting_anchor_days"]))

    for t in transactions:
        if isinstance(t, DividendTransaction):
            event_id = annotations.event_id(t)
            if event_id == 0 or t.date > date_to:
                continue
            result.current_event_id = event_id
            if t.date > date_from:
                result.div12_amount += t.amount
                annotations.set_div12(t)
                days = (t.date - last_sample).days
                weighted_shares += days * held_shares
                weighted_days += days
                last_sample = t.date
            else:
                result.last_event_before_window = event_id
        elif isinstance(t, DividendInitialTransaction):
            held_shares += t.shares
        elif isinstance(t, PortfolioTransaction):
            if t.type in _SHARE_INCREASING:
                held_shares += t.shares
            elif t.type in _SHARE_DECREASING:
                held_shares -= t.shares

    if weighted_days > 0:
        result.div12_shares = weighted_shares // weighted_days
        result.div12_cost = amount_times_shares(amount_per_share(stock_amount, stock_shares), result.div12_shares)
        result.event_count = result.current_event_id - result.last_event_before_window
        result.periodicity = classify_periodicity(result.event_count, result.last_event_before_window)

    if result.periodicity in PROJECTABLE_PERIODICITIES:
        result.div24_amount = amount_times_shares(result.div12_per_share, stock_shares)

    logger.debug(
        "trailing income %s..%s: amount=%d events=%d periodicity=%s",
        date_from,
        date_to,
        result.div12_amount,
        result.event_count,
        result.periodicity.name,
    )
    return result
