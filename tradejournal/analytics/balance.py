"""Portfolio balance reconciliation and bulk reassignment.

The trade ledger is the single source of truth: a portfolio's balance
is its initial balance plus the net P&L of its closed trades, computed
on every read.
"""

import logging
from typing import Iterable, NamedTuple, Optional

from tradejournal.analytics.statistics import realized_trades, summarize
from tradejournal.errors import PortfolioNotEmptyError
from tradejournal.models import Portfolio, PortfolioStats, Trade

logger = logging.getLogger(__name__)


class Reassignment(NamedTuple):
    """Trades after a bulk move, and how many of them moved."""

    trades: list[Trade]
    moved_ids: list[int]

    @property
    def count(self) -> int:
        return len(self.moved_ids)


def current_balance(portfolio: Portfolio, trades: Iterable[Trade]) -> float:
    """Initial balance plus the net P&L of the portfolio's closed trades.

    Trades assigned elsewhere are ignored, so the caller may pass a
    user's whole trade history.
    """
    assigned = (t for t in trades if t.portfolio_id == portfolio.id)
    return portfolio.initial_balance + sum(t.net_pnl for t in realized_trades(assigned))


def reassign_trades(
    from_portfolio_id: Optional[int],
    to_portfolio_id: int,
    trades: Iterable[Trade],
) -> Reassignment:
    """Point every trade assigned to ``from_portfolio_id`` at ``to_portfolio_id``.

    Ownership of both portfolios must already be checked. P&L is
    untouched; only portfolio membership changes.

    Args:
        from_portfolio_id: Source portfolio, or None for unassigned trades.
        to_portfolio_id: Target portfolio.
        trades: The requesting user's trades.

    Returns:
        Reassignment with the updated trade list and the ids that moved.
    """
    updated = []
    moved = []
    for trade in trades:
        if trade.portfolio_id == from_portfolio_id:
            updated.append(trade.model_copy(update={"portfolio_id": to_portfolio_id}))
            moved.append(trade.id)
        else:
            updated.append(trade)
    logger.debug(
        "Reassigning %d trade(s) from %s to %s", len(moved), from_portfolio_id, to_portfolio_id
    )
    return Reassignment(updated, moved)


def assign_unassigned(portfolio_id: int, trades: Iterable[Trade]) -> Reassignment:
    """Assign every trade without a portfolio to ``portfolio_id``."""
    return reassign_trades(None, portfolio_id, trades)


def ensure_deletable(portfolio_id: int, assigned_count: int) -> None:
    """Refuse to delete a portfolio that still has trades.

    Raises:
        PortfolioNotEmptyError: If any trade is still assigned.
    """
    if assigned_count > 0:
        raise PortfolioNotEmptyError(portfolio_id, assigned_count)


def portfolio_statistics(portfolio: Portfolio, trades: Iterable[Trade]) -> PortfolioStats:
    """Statistics and reconciled balance for one portfolio.

    Money totals are rounded to cents for reporting.
    """
    assigned = [t for t in trades if t.portfolio_id == portfolio.id]
    closed = realized_trades(assigned)
    stats = summarize(closed)
    balance = current_balance(portfolio, closed)

    return PortfolioStats(
        portfolio=portfolio.model_copy(
            update={"current_balance": balance, "trade_count": len(assigned)}
        ),
        statistics=stats,
        current_balance=round(balance, 2),
        total_gross_pnl=round(sum(t.gross_pnl or 0.0 for t in closed), 2),
        total_commission=round(sum(t.commission for t in closed), 2),
        average_pnl=round(stats.total_profit_loss / stats.total_trades, 2)
        if stats.total_trades
        else 0.0,
    )
