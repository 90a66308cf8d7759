"""Transaction builders for tests. Amounts in cents, shares in whole shares."""

from datetime import date

from security_performance_engine import config
from security_performance_engine.transactions import (
    DividendFinalTransaction,
    DividendInitialTransaction,
    DividendTransaction,
    PortfolioTransaction,
    PortfolioTransactionType,
)


def shares(n) -> int:
    return int(round(n * config.SHARE_FACTOR))


def initial(d: date, n, amount: int) -> DividendInitialTransaction:
    return DividendInitialTransaction(date=d, amount=amount, shares=shares(n))


def final(d: date, n, amount: int) -> DividendFinalTransaction:
    return DividendFinalTransaction(date=d, amount=amount, shares=shares(n))


def dividend(d: date, amount: int, n=100) -> DividendTransaction:
    return DividendTransaction(date=d, amount=amount, shares=shares(n))


def _portfolio(kind: PortfolioTransactionType, d: date, n, amount: int) -> PortfolioTransaction:
    return PortfolioTransaction(date=d, amount=amount, type=kind, shares=shares(n))


def buy(d: date, n, amount: int) -> PortfolioTransaction:
    return _portfolio(PortfolioTransactionType.BUY, d, n, amount)


def sell(d: date, n, amount: int) -> PortfolioTransaction:
    return _portfolio(PortfolioTransactionType.SELL, d, n, amount)


def delivery_in(d: date, n, amount: int) -> PortfolioTransaction:
    return _portfolio(PortfolioTransactionType.DELIVERY_INBOUND, d, n, amount)


def delivery_out(d: date, n, amount: int) -> PortfolioTransaction:
    return _portfolio(PortfolioTransactionType.DELIVERY_OUTBOUND, d, n, amount)


def transfer_in(d: date, n, amount: int) -> PortfolioTransaction:
    return _portfolio(PortfolioTransactionType.TRANSFER_IN, d, n, amount)


def transfer_out(d: date, n, amount: int) -> PortfolioTransaction:
    return _portfolio(PortfolioTransactionType.TRANSFER_OUT, d, n, amount)
