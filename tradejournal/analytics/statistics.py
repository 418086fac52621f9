"""Win/loss statistics over closed trades."""

import logging
import math
from functools import reduce
from typing import Iterable, NamedTuple

from tradejournal.models import Statistics, Trade, TradeStatus

logger = logging.getLogger(__name__)


def is_realized(trade: Trade) -> bool:
    """True for a closed trade with a known net P&L."""
    if trade.status is TradeStatus.CLOSED:
        return trade.net_pnl is not None
    if trade.status in (TradeStatus.OPEN, TradeStatus.CANCELLED):
        return False
    raise ValueError(f"Unknown trade status: {trade.status!r}")


def realized_trades(trades: Iterable[Trade]) -> list[Trade]:
    """Keep only the trades aggregation may use, preserving order."""
    trades = list(trades)
    realized = [t for t in trades if is_realized(t)]
    dropped = len(trades) - len(realized)
    if dropped:
        logger.debug("Ignoring %d open, cancelled or unvalued trade(s)", dropped)
    return realized


class _Tally(NamedTuple):
    count: int = 0
    wins: int = 0
    losses: int = 0
    total: float = 0.0
    win_sum: float = 0.0
    loss_sum: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0


def _fold(tally: _Tally, pnl: float) -> _Tally:
    if pnl > 0:
        return tally._replace(
            count=tally.count + 1,
            wins=tally.wins + 1,
            total=tally.total + pnl,
            win_sum=tally.win_sum + pnl,
            largest_win=max(tally.largest_win, pnl),
        )
    if pnl < 0:
        return tally._replace(
            count=tally.count + 1,
            losses=tally.losses + 1,
            total=tally.total + pnl,
            loss_sum=tally.loss_sum + pnl,
            largest_loss=min(tally.largest_loss, pnl),
        )
    # Breakeven counts toward the total only
    return tally._replace(count=tally.count + 1)


def profit_factor(total_wins: float, total_losses: float) -> float:
    """Gross wins over gross losses.

    Args:
        total_wins: Sum of winning P&L.
        total_losses: Magnitude of summed losing P&L.

    Returns:
        The ratio, ``math.inf`` when there are wins but no losses,
        0 when there are neither.
    """
    if total_losses > 0:
        return total_wins / total_losses
    if total_wins > 0:
        return math.inf
    return 0.0


def summarize(trades: Iterable[Trade]) -> Statistics:
    """Compute win/loss statistics for closed trades.

    Trades that are not closed or have no net P&L are dropped. A trade
    with a net P&L of exactly 0 counts toward ``total_trades`` but is
    neither a win nor a loss.

    Args:
        trades: Trades to summarize.

    Returns:
        Statistics; all zeros for an empty input.
    """
    tally = reduce(_fold, (t.net_pnl for t in realized_trades(trades)), _Tally())
    if tally.count == 0:
        return Statistics()

    total_losses = abs(tally.loss_sum)
    return Statistics(
        total_trades=tally.count,
        winning_trades=tally.wins,
        losing_trades=tally.losses,
        win_rate=tally.wins / tally.count * 100,
        total_profit_loss=tally.total,
        total_wins=tally.win_sum,
        total_losses=total_losses,
        average_win=tally.win_sum / tally.wins if tally.wins else 0.0,
        average_loss=total_losses / tally.losses if tally.losses else 0.0,
        profit_factor=profit_factor(tally.win_sum, total_losses),
        largest_win=tally.largest_win,
        largest_loss=tally.largest_loss,
    )
