"""
Average-cost stock ledger with a profit/loss pool.

The ledger tracks the cost basis (``stock_amount``) and the number of shares
held (``stock_shares``). A sale removes ``shares * average price`` from the
cost basis and parks the realized profit or loss, together with the sold
shares, in a pool. The next purchases take over the pooled result pro rata
to their shares, so a sell-and-rebuy keeps the original acquisition cost
instead of resetting it to the new purchase price.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from security_performance_engine.money import amount_per_share, amount_times_shares

logger = logging.getLogger(__name__)


class NegativeSharesError(ValueError):
    """Raised when the transaction history removes more shares than are held."""


@dataclass
class StockLedger:
    stock_amount: int = 0
    stock_shares: int = 0
    pool_amount: int = 0
    pool_shares: int = 0

    @property
    def stock_price(self) -> int:
        """Average cost per share of the current holding (0 when flat)."""
        return amount_per_share(self.stock_amount, self.stock_shares)

    def book_initial(self, shares: int, amount: int) -> None:
        """Book an opening position; no pool netting."""
        self.stock_amount += amount
        self.stock_shares += shares
        if self.stock_shares <= 0:
            raise NegativeSharesError(
                f"Opening position leaves {self.stock_shares} shares held"
            )

    def acquire(self, shares: int, amount: int) -> int:
        """
        Add a purchase or inbound delivery and return its net cost.

        Pooled profit is deducted (pooled loss added) pro rata to the shares
        bought; once the pool is used up its rounding residual goes with the
        last share.
        """
        if self.pool_shares > 0:
            taken_shares = min(shares, self.pool_shares)
            taken_amount = amount_times_shares(
                amount_per_share(self.pool_amount, self.pool_shares), taken_shares
            )

            self.pool_shares -= taken_shares
            self.pool_amount -= taken_amount
            if self.pool_shares == 0:
                taken_amount += self.pool_amount
                self.pool_amount = 0
            amount -= taken_amount

        self.stock_shares += shares
        self.stock_amount += amount
        return amount

    def dispose(self, shares: int, amount: int) -> int:
        """
        Remove a sale or outbound delivery and return the cost basis removed.

        Raises:
            NegativeSharesError: if more shares are removed than are held.
        """
        if shares > self.stock_shares:
            raise NegativeSharesError(
                f"Cannot remove {shares} shares, only {self.stock_shares} held"
            )

        cost = amount_times_shares(self.stock_price, shares)
        profit = amount - cost
        self.stock_shares -= shares
        self.stock_amount -= cost
        self.pool_shares += shares
        self.pool_amount += profit

        if self.stock_shares == 0:
            # position closed: leftover cost basis is a realized loss, so it is subtracted from the pool
            self.pool_amount -= self.stock_amount
            self.stock_amount = 0

        logger.debug("disposed %d shares: cost=%d profit=%d", shares, cost, profit)
        return cost
