"""
Dividend growth trend and multi-year income projection.

Each dividend event contributes its dividend per share, placed at the years
elapsed since the first dividend, to a logarithmic regression. The fitted
annual growth rate is discounted by the fit's correlation (its reliability)
before being compounded onto the expected annual income.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from security_performance_engine import config
from security_performance_engine.constants import Periodicity
from security_performance_engine.money import amount_per_share, round_half_up
from security_performance_engine.regression import LogarithmicRegression
from security_performance_engine.transactions import (
    DividendAnnotations,
    DividendTransaction,
    Transaction,
)

logger = logging.getLogger(__name__)


@dataclass
class DividendGrowth:
    rate: float = 0.0
    reliability: float = 0.0
    years: int = 0
    samples: int = 0


@dataclass
class DividendProjection:
    div24_amount: int = 0
    div60_amount: int = 0
    div120_amount: int = 0


def calculate_dividend_growth(
    transactions: Iterable[Transaction],
    annotations: DividendAnnotations,
    periodicity: Periodicity,
) -> DividendGrowth:
    """
    Fit the dividend growth trend over the dividend events of a sorted slice.

    Only runs for a confirmed annual, semiannual or quarterly cadence and
    needs at least ``min_years_for_growth`` years between the first dividend
    and the last completed event; otherwise every field stays 0.

    Fitted rates are accepted whatever their sign: a shrinking dividend
    projects shrinking income.
    """
    growth = DividendGrowth()
    if periodicity.events_per_year == 0:
        return growth

    defaults = config.DIVIDEND_DEFAULTS
    days_per_year = float(defaults["growth_days_per_year"])
    regression = LogarithmicRegression()

    base_date: Optional[date] = None
    block_date: Optional[date] = None
    block_event = 0
    block_amount = 0
    block_shares = 0
    year = 0.0

    for t in transactions:
        if not isinstance(t, DividendTransaction):
            continue

        event_id = annotations.event_id(t)
        if base_date is None:
            base_date = t.date
        if block_date is None:
            block_date = t.date

        if event_id != block_event:
            if block_amount != 0 and block_shares != 0:
                year = (block_date - base_date).days / days_per_year
                per_share = amount_per_share(block_amount, block_shares)
                if per_share > 0:
                    regression.add(year, per_share)

            block_event = event_id
            block_date = t.date
            block_amount = 0
            block_shares = 0

        # special payments only close blocks, they never add to one
        if t.is_regular:
            block_amount += t.amount
            block_shares += t.shares

    if year < int(defaults["min_years_for_growth"]):
        logger.debug("dividend history of %.2f years too short for a growth trend", year)
        return growth

    growth.rate = math.exp(regression.slope) - 1
    growth.reliability = regression.correlation
    growth.years = round_half_up(year)
    growth.samples = regression.count
    return growth


def project_dividends(expected12: int, growth: DividendGrowth) -> DividendProjection:
    """Compound the reliable part of the growth rate onto the expected income."""
    projection = DividendProjection(div24_amount=expected12)
    if growth.years > 0:
        factor = 1 + growth.rate * growth.reliability
        projection.div60_amount = round_half_up(expected12 * factor ** 5)
        projection.div120_amount = round_half_up(expected12 * factor ** 10)
    else:
        # no reliable trend: flat income
        projection.div60_amount = expected12
        projection.div120_amount = expected12
    return projection
