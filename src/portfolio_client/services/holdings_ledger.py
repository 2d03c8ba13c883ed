"""Average-cost holdings ledger for the offline portfolio.

Holdings are a fold over the transaction history in date order. The
moving-average update cannot be reversed without per-lot history, so
holdings are always recomputed from the stored transactions.
"""

from decimal import Decimal
from typing import Iterable

from portfolio_client.core.money import ZERO
from portfolio_client.domain.models import Holding, LocalTransaction, LocalTransactionType


def apply_transaction(holding: Holding, txn: LocalTransaction) -> Holding:
    """
    Return the holding after applying one transaction.

    - Buy: total cost grows by ``quantity * price``; the average is the new
      total over the new quantity.
    - Sell: quantity drops, clamped at zero; the average is unchanged and
      cost basis is the remaining quantity at that average.
    - Dividend: no effect.
    """
    if txn.txn_type == LocalTransactionType.BUY:
        new_total_cost = holding.quantity * holding.average_cost + txn.quantity * txn.price
        new_quantity = holding.quantity + txn.quantity
        average_cost = new_total_cost / new_quantity if new_quantity > ZERO else ZERO
        return Holding(
            ticker_id=holding.ticker_id,
            quantity=new_quantity,
            average_cost=average_cost,
            total_cost_basis=new_total_cost,
        )

    if txn.txn_type == LocalTransactionType.SELL:
        new_quantity = max(ZERO, holding.quantity - txn.quantity)
        return Holding(
            ticker_id=holding.ticker_id,
            quantity=new_quantity,
            average_cost=holding.average_cost,
            total_cost_basis=new_quantity * holding.average_cost,
        )

    return Holding(
        ticker_id=holding.ticker_id,
        quantity=holding.quantity,
        average_cost=holding.average_cost,
        total_cost_basis=holding.total_cost_basis,
    )


def rebuild_holdings(transactions: Iterable[LocalTransaction]) -> dict[str, Holding]:
    """
    Replay every transaction in ascending date order into fresh holdings.

    Transactions on the same date keep their given order.
    """
    holdings: dict[str, Holding] = {}
    for txn in sorted(transactions, key=lambda t: t.txn_date):
        current = holdings.get(txn.ticker_id) or Holding(ticker_id=txn.ticker_id)
        holdings[txn.ticker_id] = apply_transaction(current, txn)
    return holdings


def total_cash_impact(transactions: Iterable[LocalTransaction]) -> Decimal:
    """Sum of the cash effect of every transaction."""
    return sum((txn.cash_impact for txn in transactions), ZERO)
