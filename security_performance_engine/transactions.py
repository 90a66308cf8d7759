"""
Transaction data model consumed by the performance calculations.

The calculations receive a per-security slice of transactions for one
reporting period. Amounts are integers in minor currency units, shares are
integers in the fractional share unit (see ``config.SHARE_FACTOR``).

Variants:
- DividendInitialTransaction: opening valuation of a position held at the
  start of the reporting period (treated like a purchase).
- DividendFinalTransaction: closing valuation at the end of the period
  (market value of the holding).
- DividendTransaction: a dividend payment. ``shares > 0`` marks a regular
  payment; ``shares <= 0`` marks a special payment that is counted in totals
  but excluded from event clustering.
- PortfolioTransaction: buy, sell, inbound/outbound delivery, transfer in/out.

Transactions are immutable and hashed by identity, so the same object can be
referenced from several records while each record keeps its own derived
annotations (see ``DividendAnnotations``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List


class UnsupportedTransactionError(ValueError):
    """Raised for a transaction variant or type the calculations cannot book."""


class PortfolioTransactionType(Enum):
    BUY = "buy"
    SELL = "sell"
    DELIVERY_INBOUND = "delivery_inbound"
    DELIVERY_OUTBOUND = "delivery_outbound"
    TRANSFER_IN = "transfer_in"
    TRANSFER_OUT = "transfer_out"


ACQUISITION_TYPES = frozenset({PortfolioTransactionType.BUY, PortfolioTransactionType.DELIVERY_INBOUND})
DISPOSAL_TYPES = frozenset({PortfolioTransactionType.SELL, PortfolioTransactionType.DELIVERY_OUTBOUND})
TRANSFER_TYPES = frozenset({PortfolioTransactionType.TRANSFER_IN, PortfolioTransactionType.TRANSFER_OUT})


@dataclass(frozen=True, eq=False)
class Transaction:
    date: date
    amount: int


@dataclass(frozen=True, eq=False)
class DividendInitialTransaction(Transaction):
    """Opening position valued at the period start; ``shares`` held then."""

    shares: int = 0


@dataclass(frozen=True, eq=False)
class DividendFinalTransaction(Transaction):
    """Closing market value of the position at the period end."""

    shares: int = 0


@dataclass(frozen=True, eq=False)
class DividendTransaction(Transaction):
    shares: int = 0

    @property
    def is_regular(self) -> bool:
        return self.shares > 0


@dataclass(frozen=True, eq=False)
class PortfolioTransaction(Transaction):
    type: PortfolioTransactionType = PortfolioTransactionType.BUY
    shares: int = 0

    def __post_init__(self):
        if not isinstance(self.type, PortfolioTransactionType):
            try:
                object.__setattr__(self, "type", PortfolioTransactionType(self.type))
            except ValueError as exc:
                raise UnsupportedTransactionError(f"Unknown portfolio transaction type: {self.type!r}") from exc


def sort_by_date(transactions: Iterable[Transaction]) -> List[Transaction]:
    """Stable sort by date; same-day transactions keep insertion order."""
    return sorted(transactions, key=lambda t: t.date)


def transaction_kind(transaction: Transaction) -> str:
    if isinstance(transaction, DividendInitialTransaction):
        return "initial"
    if isinstance(transaction, DividendFinalTransaction):
        return "final"
    if isinstance(transaction, DividendTransaction):
        return "dividend"
    if isinstance(transaction, PortfolioTransaction):
        return "portfolio"
    raise UnsupportedTransactionError(f"Unsupported transaction: {type(transaction).__name__}")


@dataclass
class DividendAnnotation:
    event_id: int = 0
    is_div12: bool = False


@dataclass
class DividendAnnotations:
    """
    Per-record side table of derived dividend annotations.

    Keyed by transaction identity: the record never writes to the transaction
    objects, so several records may share one transaction without clobbering
    each other's event ids or trailing-12-month flags.
    """

    _entries: Dict[Transaction, DividendAnnotation] = field(default_factory=dict)

    def _entry(self, transaction: Transaction) -> DividendAnnotation:
        entry = self._entries.get(transaction)
        if entry is None:
            entry = DividendAnnotation()
            self._entries[transaction] = entry
        return entry

    def event_id(self, transaction: Transaction) -> int:
        entry = self._entries.get(transaction)
        return entry.event_id if entry is not None else 0

    def set_event_id(self, transaction: Transaction, event_id: int) -> None:
        self._entry(transaction).event_id = event_id

    def is_div12(self, transaction: Transaction) -> bool:
        entry = self._entries.get(transaction)
        return entry.is_div12 if entry is not None else False

    def set_div12(self, transaction: Transaction, flag: bool = True) -> None:
        self._entry(transaction).is_div12 = flag

    def clear(self) -> None:
        self._entries.clear()
