from datetime import date

import pytest

from security_performance_engine.calculations import (
    CostCalculation,
    DeltaCalculation,
    DividendCalculation,
    IRRCalculation,
)
from security_performance_engine.transactions import (
    PortfolioTransaction,
    PortfolioTransactionType,
    Transaction,
    UnsupportedTransactionError,
    sort_by_date,
    transaction_kind,
)
from tests.factories import (
    buy,
    delivery_in,
    delivery_out,
    dividend,
    final,
    initial,
    sell,
    shares,
    transfer_in,
    transfer_out,
)


@pytest.fixture
def mixed_history():
    return [
        initial(date(2021, 1, 1), 100, 100_000),
        buy(date(2021, 3, 1), 50, 50_000),
        dividend(date(2021, 6, 1), 3_000, 150),
        sell(date(2021, 9, 1), 50, 70_000),
        final(date(2022, 1, 1), 100, 90_000),
    ]


class TestTransactions:
    def test_type_strings_are_coerced(self):
        t = PortfolioTransaction(date=date(2021, 1, 1), amount=100, type="sell", shares=1)
        assert t.type is PortfolioTransactionType.SELL

    def test_unknown_type_string_is_rejected(self):
        with pytest.raises(UnsupportedTransactionError):
            PortfolioTransaction(date=date(2021, 1, 1), amount=100, type="split", shares=1)

    def test_sort_is_stable_for_same_day(self):
        first = buy(date(2021, 1, 5), 1, 100)
        second = sell(date(2021, 1, 5), 1, 120)
        earlier = buy(date(2021, 1, 1), 1, 90)
        assert sort_by_date([first, second, earlier]) == [earlier, first, second]

    def test_kind_of_plain_transaction_is_unsupported(self):
        with pytest.raises(UnsupportedTransactionError):
            transaction_kind(Transaction(date=date(2021, 1, 1), amount=1))

    def test_transactions_hash_by_identity(self):
        a = dividend(date(2021, 1, 1), 100)
        b = dividend(date(2021, 1, 1), 100)
        assert a != b
        assert len({a, b}) == 2


class TestIRRCalculation:
    def test_opening_and_closing_valuation(self):
        calc = IRRCalculation.perform([
            initial(date(2021, 1, 1), 100, 100_000),
            final(date(2022, 1, 1), 100, 110_000),
        ])
        assert calc.values == [-1000.0, 1100.0]
        assert calc.get_irr() == pytest.approx(0.1, abs=1e-6)

    def test_cash_flow_signs(self):
        calc = IRRCalculation.perform([
            buy(date(2021, 1, 1), 10, 1_000),
            delivery_in(date(2021, 1, 2), 10, 2_000),
            transfer_in(date(2021, 1, 3), 10, 3_000),
            dividend(date(2021, 1, 4), 400),
            transfer_out(date(2021, 1, 5), 5, 500),
            delivery_out(date(2021, 1, 6), 5, 600),
            sell(date(2021, 1, 7), 5, 700),
        ])
        assert calc.values == [-10.0, -20.0, -30.0, 4.0, 5.0, 6.0, 7.0]

    def test_unknown_variant_is_rejected(self):
        with pytest.raises(UnsupportedTransactionError):
            IRRCalculation.perform([Transaction(date=date(2021, 1, 1), amount=1)])


class TestDeltaCalculation:
    def test_delta(self, mixed_history):
        assert DeltaCalculation.perform(mixed_history).delta == 13_000

    def test_transfers_count(self):
        calc = DeltaCalculation.perform([
            transfer_in(date(2021, 1, 1), 10, 10_000),
            transfer_out(date(2021, 6, 1), 10, 12_500),
        ])
        assert calc.delta == 2_500


class TestCostCalculation:
    def test_cost_basis_after_partial_sale(self, mixed_history):
        calc = CostCalculation.perform(mixed_history)
        assert calc.fifo_cost == 100_000
        assert calc.shares_held == shares(100)
        assert calc.realized_delta == 20_000

    def test_sell_and_rebuy_keeps_original_cost(self):
        calc = CostCalculation.perform([
            buy(date(2021, 1, 1), 100, 100_000),
            sell(date(2021, 6, 1), 100, 120_000),
            buy(date(2021, 9, 1), 100, 110_000),
        ])
        assert calc.fifo_cost == 90_000
        assert calc.shares_held == shares(100)

    def test_transfers_leave_cost_untouched(self):
        calc = CostCalculation.perform([
            buy(date(2021, 1, 1), 10, 10_000),
            transfer_out(date(2021, 2, 1), 10, 11_000),
            transfer_in(date(2021, 3, 1), 10, 11_000),
        ])
        assert (calc.fifo_cost, calc.shares_held) == (10_000, shares(10))

    def test_empty(self):
        calc = CostCalculation.perform([])
        assert (calc.fifo_cost, calc.shares_held, calc.realized_delta) == (0, 0, 0)


class TestDividendCalculation:
    def test_totals_include_special_payments(self):
        calc = DividendCalculation.perform([
            dividend(date(2021, 3, 1), 1_000),
            dividend(date(2021, 6, 1), 2_500, 0),
            dividend(date(2021, 9, 1), 1_000),
        ])
        assert calc.sum == 4_500
        assert calc.num_of_events == 3
        assert calc.last_dividend_payment == date(2021, 9, 1)

    def test_no_dividends(self):
        calc = DividendCalculation.perform([buy(date(2021, 1, 1), 1, 100)])
        assert (calc.sum, calc.num_of_events, calc.last_dividend_payment) == (0, 0, None)
