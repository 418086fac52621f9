"""Distribution of trade outcomes."""

import math
from collections import Counter
from typing import Iterable

from tradejournal.analytics.statistics import realized_trades
from tradejournal.errors import PreconditionError
from tradejournal.models import DistributionBin, DurationPoint, Trade


def pnl_distribution(trades: Iterable[Trade], bin_size: float = 100.0) -> list[DistributionBin]:
    """Count closed trades per net-P&L range.

    Args:
        trades: Trades to bin.
        bin_size: Width of each range.

    Returns:
        Non-empty bins ordered from the most negative range upwards.
    """
    if bin_size <= 0:
        raise PreconditionError(f"Bin size must be positive, got {bin_size}")

    pnls = [t.net_pnl for t in realized_trades(trades)]
    if not pnls:
        return []

    counts = Counter(math.floor(pnl / bin_size) for pnl in pnls)
    return [
        DistributionBin(
            lower=index * bin_size,
            upper=(index + 1) * bin_size,
            count=count,
            percentage=count / len(pnls) * 100,
        )
        for index, count in sorted(counts.items())
    ]


def duration_points(trades: Iterable[Trade]) -> list[DurationPoint]:
    """Holding time in hours against net P&L for each closed trade."""
    return [
        DurationPoint(
            trade_id=t.id,
            symbol=t.symbol,
            duration_hours=t.duration_hours,
            pnl=t.net_pnl,
        )
        for t in realized_trades(trades)
        if t.duration_hours is not None
    ]
