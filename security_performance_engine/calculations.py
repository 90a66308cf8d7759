"""
Replay passes over a date-sorted transaction slice.

Each calculation is a visitor: ``Calculation.perform(transactions)`` builds a
fresh instance, feeds every transaction to the matching ``visit_*`` hook and
returns the instance so callers read its results. Running state is local to
the instance; passes never share state.

Passes:
- IRRCalculation: money-weighted rate of return of the slice.
- DeltaCalculation: closing value + sales + dividends - purchases.
- CostCalculation: average-cost basis and shares held (``StockLedger``).
- DividendCalculation: unwindowed dividend totals.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional, Type, TypeVar

from security_performance_engine.irr import calculate_irr
from security_performance_engine.ledger import StockLedger
from security_performance_engine.money import to_currency_units
from security_performance_engine.transactions import (
    ACQUISITION_TYPES,
    DISPOSAL_TYPES,
    TRANSFER_TYPES,
    DividendFinalTransaction,
    DividendInitialTransaction,
    DividendTransaction,
    PortfolioTransaction,
    PortfolioTransactionType,
    Transaction,
    UnsupportedTransactionError,
)

C = TypeVar("C", bound="Calculation")


class Calculation:
    """Base visitor. Unknown transaction variants are rejected."""

    @classmethod
    def perform(cls: Type[C], transactions: Iterable[Transaction], *args, **kwargs) -> C:
        calculation = cls(*args, **kwargs)
        for transaction in transactions:
            calculation.visit(transaction)
        calculation.finish()
        return calculation

    def visit(self, transaction: Transaction) -> None:
        if isinstance(transaction, DividendInitialTransaction):
            self.visit_initial(transaction)
        elif isinstance(transaction, DividendFinalTransaction):
            self.visit_final(transaction)
        elif isinstance(transaction, DividendTransaction):
            self.visit_dividend(transaction)
        elif isinstance(transaction, PortfolioTransaction):
            self.visit_portfolio(transaction)
        else:
            raise UnsupportedTransactionError(
                f"Unsupported transaction: {type(transaction).__name__}"
            )

    def visit_initial(self, t: DividendInitialTransaction) -> None:
        pass

    def visit_final(self, t: DividendFinalTransaction) -> None:
        pass

    def visit_dividend(self, t: DividendTransaction) -> None:
        pass

    def visit_portfolio(self, t: PortfolioTransaction) -> None:
        if t.type in ACQUISITION_TYPES:
            self.visit_acquisition(t)
        elif t.type in DISPOSAL_TYPES:
            self.visit_disposal(t)
        elif t.type in TRANSFER_TYPES:
            self.visit_transfer(t)
        else:
            raise UnsupportedTransactionError(f"Unsupported portfolio transaction type: {t.type!r}")

    def visit_acquisition(self, t: PortfolioTransaction) -> None:
        pass

    def visit_disposal(self, t: PortfolioTransaction) -> None:
        pass

    def visit_transfer(self, t: PortfolioTransaction) -> None:
        pass

    def finish(self) -> None:
        pass


class LedgerCalculation(Calculation):
    """
    Replay primitive that keeps a ``StockLedger`` in sync with the slice.

    Opening positions are booked as purchases, acquisitions net out pooled
    profit, disposals park realized profit in the pool. Transfers move shares
    between portfolios of the same owner and leave the ledger untouched.
    Subclasses extend the ``on_*`` hooks to act on each booking.
    """

    def __init__(self) -> None:
        self.ledger = StockLedger()

    def visit_initial(self, t: DividendInitialTransaction) -> None:
        self.ledger.book_initial(t.shares, t.amount)
        self.on_initial(t)

    def visit_acquisition(self, t: PortfolioTransaction) -> None:
        net_amount = self.ledger.acquire(t.shares, t.amount)
        self.on_acquisition(t, net_amount)

    def visit_disposal(self, t: PortfolioTransaction) -> None:
        cost = self.ledger.dispose(t.shares, t.amount)
        self.on_disposal(t, cost)

    def on_initial(self, t: DividendInitialTransaction) -> None:
        pass

    def on_acquisition(self, t: PortfolioTransaction, net_amount: int) -> None:
        pass

    def on_disposal(self, t: PortfolioTransaction, cost: int) -> None:
        pass


class IRRCalculation(Calculation):
    """Money-weighted return: every booking is a dated cash flow."""

    def __init__(self) -> None:
        self.dates: List[date] = []
        self.values: List[float] = []

    def _add(self, when: date, amount: int) -> None:
        self.dates.append(when)
        self.values.append(to_currency_units(amount))

    def visit_initial(self, t: DividendInitialTransaction) -> None:
        self._add(t.date, -t.amount)

    def visit_final(self, t: DividendFinalTransaction) -> None:
        self._add(t.date, t.amount)

    def visit_dividend(self, t: DividendTransaction) -> None:
        self._add(t.date, t.amount)

    def visit_acquisition(self, t: PortfolioTransaction) -> None:
        self._add(t.date, -t.amount)

    def visit_disposal(self, t: PortfolioTransaction) -> None:
        self._add(t.date, t.amount)

    def visit_transfer(self, t: PortfolioTransaction) -> None:
        if t.type == PortfolioTransactionType.TRANSFER_IN:
            self._add(t.date, -t.amount)
        else:
            self._add(t.date, t.amount)

    def get_irr(self) -> float:
        return calculate_irr(self.dates, self.values)


class DeltaCalculation(Calculation):
    """delta = market value + sells + dividends - purchase costs"""

    def __init__(self) -> None:
        self.delta = 0

    def visit_initial(self, t: DividendInitialTransaction) -> None:
        self.delta -= t.amount

    def visit_final(self, t: DividendFinalTransaction) -> None:
        self.delta += t.amount

    def visit_dividend(self, t: DividendTransaction) -> None:
        self.delta += t.amount

    def visit_acquisition(self, t: PortfolioTransaction) -> None:
        self.delta -= t.amount

    def visit_disposal(self, t: PortfolioTransaction) -> None:
        self.delta += t.amount

    def visit_transfer(self, t: PortfolioTransaction) -> None:
        if t.type == PortfolioTransactionType.TRANSFER_IN:
            self.delta -= t.amount
        else:
            self.delta += t.amount


class CostCalculation(LedgerCalculation):
    """Cost basis and shares held at the end of the slice."""

    def __init__(self) -> None:
        super().__init__()
        self.realized_delta = 0

    def on_disposal(self, t: PortfolioTransaction, cost: int) -> None:
        self.realized_delta += t.amount - cost

    @property
    def fifo_cost(self) -> int:
        return self.ledger.stock_amount

    @property
    def shares_held(self) -> int:
        return self.ledger.stock_shares


class DividendCalculation(Calculation):
    """Sum, count and latest date of all dividend payments."""

    def __init__(self) -> None:
        self.sum = 0
        self.num_of_events = 0
        self.last_dividend_payment: Optional[date] = None

    def visit_dividend(self, t: DividendTransaction) -> None:
        self.sum += t.amount
        self.num_of_events += 1
        if self.last_dividend_payment is None or t.date > self.last_dividend_payment:
            self.last_dividend_payment = t.date
