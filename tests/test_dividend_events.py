from datetime import date, timedelta

import pytest

from security_performance_engine.dividend_events import calculate_dividend_events
from security_performance_engine.ledger import NegativeSharesError
from security_performance_engine.transactions import DividendAnnotations
from tests.factories import buy, dividend, final, initial, sell, transfer_in


START = date(2021, 2, 1)


def _day(offset):
    return START + timedelta(days=offset)


class TestEventClustering:
    def test_gap_opens_new_event(self):
        payments = [dividend(_day(offset), 1_000) for offset in (0, 10, 45, 75, 106)]
        special = dividend(_day(60), 5_000, 0)
        history = [initial(date(2021, 1, 1), 100, 100_000)] + payments[:4] + [special] + payments[4:]
        history.sort(key=lambda t: t.date)
        annotations = DividendAnnotations()

        result = calculate_dividend_events(history, annotations, date(2021, 12, 31))

        assert [annotations.event_id(t) for t in payments] == [1, 1, 2, 2, 3]
        assert annotations.event_id(special) == 0
        assert result.div_event_count == 3

    def test_event_ids_never_decrease(self):
        payments = [dividend(_day(offset), 1_000) for offset in (0, 31, 40, 100, 101, 300)]
        annotations = DividendAnnotations()
        calculate_dividend_events(payments, annotations, date(2022, 1, 1))
        ids = [annotations.event_id(t) for t in payments]
        assert ids == sorted(ids)
        assert ids[0] == 1

    def test_special_payment_alone_creates_no_event(self):
        annotations = DividendAnnotations()
        result = calculate_dividend_events(
            [initial(date(2021, 1, 1), 10, 1_000), dividend(date(2021, 6, 1), 50, 0)],
            annotations,
            date(2021, 12, 31),
        )
        assert result.div_event_count == 0


class TestDividendIRR:
    def test_closing_flow_is_cost_basis(self):
        history = [
            initial(date(2021, 1, 1), 100, 100_000),
            dividend(date(2022, 1, 1), 5_000),
            final(date(2022, 1, 1), 100, 999_999),
        ]
        result = calculate_dividend_events(history, DividendAnnotations(), date(2022, 6, 30))

        assert result.cash_flows == [
            (date(2021, 1, 1), -1000.0),
            (date(2022, 1, 1), 50.0),
            (date(2022, 1, 1), 1000.0),
        ]
        assert result.irr_div == pytest.approx(0.05, abs=1e-6)

    def test_valuation_date_defaults_to_given_date(self):
        result = calculate_dividend_events(
            [initial(date(2021, 1, 1), 100, 100_000)],
            DividendAnnotations(),
            date(2021, 12, 31),
        )
        assert result.cash_flows[-1] == (date(2021, 12, 31), 1000.0)

    def test_sale_booked_at_cost(self):
        history = [
            buy(date(2021, 1, 1), 100, 100_000),
            sell(date(2021, 6, 1), 50, 80_000),
        ]
        result = calculate_dividend_events(history, DividendAnnotations(), date(2021, 12, 31))
        assert result.cash_flows == [
            (date(2021, 1, 1), -1000.0),
            (date(2021, 6, 1), 500.0),
            (date(2021, 12, 31), 500.0),
        ]
        assert result.irr_div == pytest.approx(0.0, abs=1e-6)

    def test_transfers_produce_no_flow(self):
        history = [
            buy(date(2021, 1, 1), 100, 100_000),
            transfer_in(date(2021, 3, 1), 10, 12_000),
        ]
        result = calculate_dividend_events(history, DividendAnnotations(), date(2021, 12, 31))
        assert len(result.cash_flows) == 2
        assert result.stock_amount == 100_000

    def test_overselling_raises(self):
        history = [buy(date(2021, 1, 1), 10, 10_000), sell(date(2021, 2, 1), 20, 25_000)]
        with pytest.raises(NegativeSharesError):
            calculate_dividend_events(history, DividendAnnotations(), date(2021, 12, 31))

    def test_fully_sold_position_books_zero_closing_flow(self):
        history = [buy(date(2021, 1, 1), 10, 10_000), sell(date(2021, 2, 1), 10, 12_000)]
        result = calculate_dividend_events(history, DividendAnnotations(), date(2021, 12, 31))
        assert result.cash_flows[-1] == (date(2021, 12, 31), 0.0)
        assert result.stock_shares == 0
