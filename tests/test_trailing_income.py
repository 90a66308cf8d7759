from datetime import date, timedelta

import pytest

from security_performance_engine.constants import Periodicity, classify_periodicity
from security_performance_engine.dividend_events import calculate_dividend_events
from security_performance_engine.trailing_income import (
    calculate_trailing_income,
    find_latest_dividend,
)
from security_performance_engine.transactions import DividendAnnotations
from tests.factories import buy, delivery_in, dividend, initial, sell, shares


def _trailing(history, end_date):
    history = sorted(history, key=lambda t: t.date)
    annotations = DividendAnnotations()
    events = calculate_dividend_events(history, annotations, end_date)
    result = calculate_trailing_income(
        history, annotations, end_date, events.stock_amount, events.stock_shares
    )
    return result, annotations


class TestClassifyPeriodicity:
    @pytest.mark.parametrize(
        "count, before, expected",
        [
            (0, 0, Periodicity.NONE),
            (0, 3, Periodicity.NONE),
            (1, 0, Periodicity.INDEFINITE),
            (4, 0, Periodicity.INDEFINITE),
            (1, 3, Periodicity.ANNUAL),
            (2, 1, Periodicity.SEMIANNUAL),
            (4, 2, Periodicity.QUARTERLY),
            (3, 1, Periodicity.IRREGULAR),
            (5, 1, Periodicity.IRREGULAR),
            (12, 7, Periodicity.IRREGULAR),
        ],
    )
    def test_mapping(self, count, before, expected):
        assert classify_periodicity(count, before) is expected
        assert classify_periodicity(count, before) is classify_periodicity(count, before)

    def test_sort_order_follows_declaration(self):
        ranks = [p.sort_rank for p in Periodicity]
        assert ranks == sorted(ranks)
        assert Periodicity.UNKNOWN.sort_rank < Periodicity.QUARTERLY.sort_rank


class TestFindLatestDividend:
    def test_latest_within_freshness_window(self):
        history = [dividend(date(2021, 1, 1), 100), dividend(date(2021, 7, 1), 100)]
        assert find_latest_dividend(history, date(2021, 12, 31), 410) == date(2021, 7, 1)

    def test_ignores_dividends_after_end(self):
        history = [dividend(date(2021, 7, 1), 100), dividend(date(2022, 3, 1), 100)]
        assert find_latest_dividend(history, date(2021, 12, 31), 410) == date(2021, 7, 1)

    def test_stale_dividend_is_ignored(self):
        history = [dividend(date(2019, 1, 1), 100)]
        assert find_latest_dividend(history, date(2021, 12, 31), 410) is None


class TestQuarterlyIncome:
    def test_quarterly_with_prior_history(self, quarterly_history):
        history, payments, end_date = quarterly_history
        result, annotations = _trailing(history, end_date)

        assert result.date_to == payments[-1].date
        assert result.date_from == payments[-1].date - timedelta(days=320)
        assert result.periodicity is Periodicity.QUARTERLY
        assert result.event_count == 4
        assert result.div12_amount == 10_000
        assert result.div12_shares == shares(100)
        assert result.div12_per_share == 100
        assert result.div12_cost == 100_000
        assert result.div24_amount == 10_000
        assert [annotations.is_div12(t) for t in payments] == [False, True, True, True, True]

    def test_four_payments_without_history_are_indefinite(self, quarterly_history):
        history, payments, end_date = quarterly_history
        history = [t for t in history if t is not payments[0]]
        result, _ = _trailing(history, end_date)

        assert result.periodicity is Periodicity.INDEFINITE
        assert result.last_event_before_window == 0
        assert result.div12_amount == 10_000
        assert result.div24_amount == 10_000

    def test_mean_shares_weighted_by_days(self, quarterly_history):
        history, payments, end_date = quarterly_history
        # doubles the position right after the second payment in the window
        history = history + [buy(payments[2].date + timedelta(days=1), 100, 120_000)]
        result, _ = _trailing(history, end_date)

        assert result.div12_shares == (183 * shares(100) + 182 * shares(200)) // 365

    def test_deliveries_are_not_counted_as_earning_shares(self, quarterly_history):
        history, payments, end_date = quarterly_history
        history = history + [delivery_in(payments[2].date + timedelta(days=1), 100, 120_000)]
        result, _ = _trailing(history, end_date)

        assert result.div12_shares == shares(100)

    def test_total_includes_payments_outside_window(self, quarterly_history):
        history, _, end_date = quarterly_history
        result, _ = _trailing(history, end_date)
        assert result.div_amount == 12_500


class TestOtherCadences:
    def test_annual(self):
        history = [
            initial(date(2021, 1, 1), 100, 100_000),
            dividend(date(2021, 6, 1), 4_000),
            dividend(date(2022, 6, 1), 5_000),
        ]
        result, _ = _trailing(history, date(2022, 12, 31))
        assert result.periodicity is Periodicity.ANNUAL
        assert result.div12_amount == 5_000
        assert result.div24_amount == 5_000

    def test_semiannual(self):
        history = [
            initial(date(2021, 1, 1), 100, 100_000),
            dividend(date(2021, 1, 15), 2_000),
            dividend(date(2021, 7, 15), 2_000),
            dividend(date(2022, 1, 15), 2_000),
        ]
        result, _ = _trailing(history, date(2022, 2, 28))
        assert result.periodicity is Periodicity.SEMIANNUAL
        assert result.div12_amount == 4_000

    def test_irregular_is_not_extrapolated(self):
        first = date(2021, 1, 10)
        history = [initial(date(2021, 1, 1), 100, 100_000)] + [
            dividend(first + timedelta(days=offset), 1_000) for offset in (0, 100, 200, 250, 300, 364)
        ]
        result, _ = _trailing(history, date(2022, 1, 31))
        assert result.periodicity is Periodicity.IRREGULAR
        assert result.event_count == 5
        assert result.div12_amount == 5_000
        assert result.div24_amount == 0

    def test_special_payments_stay_out_of_trailing_income(self, quarterly_history):
        history, payments, end_date = quarterly_history
        special = dividend(payments[3].date + timedelta(days=5), 9_999, 0)
        result, annotations = _trailing(history + [special], end_date)
        assert result.div12_amount == 10_000
        assert not annotations.is_div12(special)
        assert result.periodicity is Periodicity.QUARTERLY


class TestNoCurrentIncome:
    def test_stale_dividends(self):
        history = [initial(date(2018, 1, 1), 100, 100_000), dividend(date(2019, 1, 1), 1_000)]
        result, _ = _trailing(history, date(2021, 12, 31))
        assert result.date_to is None
        assert result.periodicity is Periodicity.NONE
        assert result.div_amount == 1_000
        assert result.div12_amount == 0

    def test_position_sold_before_end(self):
        history = [
            buy(date(2021, 1, 1), 100, 100_000),
            dividend(date(2021, 6, 1), 1_000),
            sell(date(2021, 9, 1), 100, 110_000),
        ]
        result, _ = _trailing(history, date(2021, 12, 31))
        assert result.date_to == date(2021, 6, 1)
        assert result.date_from is None
        assert result.periodicity is Periodicity.NONE


class TestWindowBoundaries:
    def test_accrual_window_excludes_its_start(self):
        first = date(2021, 2, 1)
        first_payment = dividend(first, 1_000)
        latest = dividend(first + timedelta(days=320), 1_000)
        history = [initial(date(2021, 1, 1), 100, 100_000), first_payment, latest]
        result, annotations = _trailing(history, latest.date + timedelta(days=10))

        assert result.date_to == latest.date
        assert result.date_from == first
        assert not annotations.is_div12(first_payment)
        assert annotations.is_div12(latest)
        assert result.last_event_before_window == 1
        assert result.div12_amount == 1_000
        assert result.periodicity is Periodicity.ANNUAL

    def test_freshness_window_includes_its_start(self):
        end_date = date(2021, 12, 31)
        payment = dividend(end_date - timedelta(days=410), 1_000)
        history = [initial(date(2020, 1, 1), 100, 100_000), payment]

        assert find_latest_dividend(history, end_date, 410) == payment.date
        assert find_latest_dividend(history, end_date + timedelta(days=1), 410) is None
        result, _ = _trailing(history, end_date)
        assert result.date_to == payment.date
