"""Portfolio bulk operations.

Return ``{"message": str, "count": int}`` payloads. Lookup failures
propagate as ``NotFoundError`` / ``ForbiddenError``.
"""

import logging

from tradejournal.db.store import JournalStore
from tradejournal.models import BulkResult

logger = logging.getLogger(__name__)


def move_trades(
    store: JournalStore, user_id: str, from_portfolio_id: int, to_portfolio_id: int
) -> dict:
    """Move all trades from one portfolio to another."""
    source = store.get_portfolio(user_id, from_portfolio_id)
    target = store.get_portfolio(user_id, to_portfolio_id)

    result = store.move_trades(user_id, from_portfolio_id, to_portfolio_id)
    if result.count == 0:
        return BulkResult(message="No trades to move", count=0).model_dump()

    logger.info("Moved %d trade(s) from %s to %s", result.count, source.name, target.name)
    return BulkResult(
        message=f"Successfully moved {result.count} trade(s) from {source.name} to {target.name}",
        count=result.count,
    ).model_dump()


def assign_unassigned_trades(store: JournalStore, user_id: str, portfolio_id: int) -> dict:
    """Assign every trade without a portfolio to the given one."""
    target = store.get_portfolio(user_id, portfolio_id)

    result = store.assign_unassigned_trades(user_id, portfolio_id)
    if result.count == 0:
        return BulkResult(message="No unassigned trades found", count=0).model_dump()

    logger.info("Assigned %d trade(s) to %s", result.count, target.name)
    return BulkResult(
        message=f"Successfully assigned {result.count} trades to {target.name}",
        count=result.count,
    ).model_dump()


def get_unassigned_count(store: JournalStore, user_id: str) -> dict:
    return {"count": store.count_unassigned_trades(user_id)}


def delete_portfolio(store: JournalStore, user_id: str, portfolio_id: int) -> dict:
    """Delete an empty portfolio.

    Raises:
        PortfolioNotEmptyError: If trades are still assigned.
    """
    store.delete_portfolio(user_id, portfolio_id)
    return {"message": "Portfolio deleted successfully"}
