"""Per-trade profit and loss valuation.

Valuation happens at write time: the store calls ``valuate`` when a trade
is created and ``revaluate`` when it is updated, and persists the result.
Aggregation never recomputes per-trade arithmetic.
"""

import logging
from enum import Enum
from typing import NamedTuple, Optional

from tradejournal.errors import PreconditionError
from tradejournal.models import Trade, TradeSide

logger = logging.getLogger(__name__)

# Fields whose change invalidates a price-derived valuation
VALUATION_FIELDS = frozenset(
    {"exit_price", "entry_price", "quantity", "side", "commission", "swap"}
)


class ValuationSource(str, Enum):
    """Which inputs a valuation was derived from."""

    BROKER = "BROKER"
    PRICE = "PRICE"
    UNVALUED = "UNVALUED"


class Valuation(NamedTuple):
    """Gross and net P&L of one trade. Both are None when unvalued."""

    gross_pnl: Optional[float]
    net_pnl: Optional[float]
    source: ValuationSource


def classify(
    exit_price: Optional[float], explicit_net_pnl: Optional[float]
) -> ValuationSource:
    """Decide which valuation rule applies given the optional inputs."""
    if explicit_net_pnl is not None:
        return ValuationSource.BROKER
    if exit_price is not None:
        return ValuationSource.PRICE
    return ValuationSource.UNVALUED


def price_difference(side: TradeSide, entry_price: float, exit_price: float) -> float:
    """Per-unit move in the trade's favour."""
    if side is TradeSide.LONG:
        return exit_price - entry_price
    if side is TradeSide.SHORT:
        return entry_price - exit_price
    raise PreconditionError(f"Unknown trade side: {side!r}")


def valuate(
    side: TradeSide,
    entry_price: float,
    exit_price: Optional[float],
    quantity: float,
    commission: Optional[float] = 0.0,
    swap: Optional[float] = 0.0,
    explicit_net_pnl: Optional[float] = None,
    explicit_gross_pnl: Optional[float] = None,
) -> Valuation:
    """Compute gross and net P&L for a trade.

    Rules, in priority order:

    1. A broker-supplied net P&L is used as-is. Gross falls back to net
       when the broker did not supply it.
    2. With an exit price, gross is the favourable price move times
       quantity and net subtracts commission and swap. A negative swap
       is a credit and raises net P&L.
    3. Otherwise the trade stays unvalued.

    Args:
        side: LONG or SHORT.
        entry_price: Entry price.
        exit_price: Exit price, if the trade has one.
        quantity: Position size, must be positive.
        commission: Commission cost, None is treated as 0.
        swap: Swap cost, None is treated as 0.
        explicit_net_pnl: Broker net P&L override.
        explicit_gross_pnl: Broker gross P&L override.

    Returns:
        Valuation with gross P&L, net P&L and the rule that produced them.

    Raises:
        PreconditionError: If quantity is not positive, or a gross P&L
            override comes without a net P&L.
    """
    if quantity <= 0:
        raise PreconditionError(f"Quantity must be positive, got {quantity}")
    if explicit_gross_pnl is not None and explicit_net_pnl is None:
        raise PreconditionError("A gross P&L override requires a net P&L")

    source = classify(exit_price, explicit_net_pnl)

    if source is ValuationSource.BROKER:
        gross = explicit_gross_pnl if explicit_gross_pnl is not None else explicit_net_pnl
        return Valuation(gross, explicit_net_pnl, source)

    if source is ValuationSource.PRICE:
        gross = price_difference(TradeSide(side), entry_price, exit_price) * quantity
        net = gross - (commission or 0.0) - (swap or 0.0)
        return Valuation(gross, net, source)

    if source is ValuationSource.UNVALUED:
        return Valuation(None, None, source)

    raise PreconditionError(f"Unhandled valuation source: {source!r}")


def revaluate(trade: Trade, changes: dict) -> Optional[Valuation]:
    """Valuation for a partial update of a persisted trade.

    Fields missing from ``changes`` (or set to None) are read from the
    persisted trade.

    Returns:
        The new valuation, or None when the stored P&L should be kept:
        nothing valuation-related changed, or the merged trade still has
        no exit price to value against.

    Raises:
        PreconditionError: If ``changes`` sets a gross P&L without a net P&L.
    """
    explicit_net = changes.get("net_pnl")
    if changes.get("gross_pnl") is not None and explicit_net is None:
        raise PreconditionError("A gross P&L override requires a net P&L")
    if explicit_net is not None:
        return valuate(
            side=changes.get("side") or trade.side,
            entry_price=_merged(changes, trade, "entry_price"),
            exit_price=_merged(changes, trade, "exit_price"),
            quantity=_merged(changes, trade, "quantity"),
            explicit_net_pnl=explicit_net,
            explicit_gross_pnl=changes.get("gross_pnl"),
        )

    if not VALUATION_FIELDS.intersection(changes):
        return None

    exit_price = _merged(changes, trade, "exit_price")
    if exit_price is None:
        logger.debug("Trade %s has no exit price, keeping stored P&L", trade.id)
        return None

    return valuate(
        side=changes.get("side") or trade.side,
        entry_price=_merged(changes, trade, "entry_price"),
        exit_price=exit_price,
        quantity=_merged(changes, trade, "quantity"),
        commission=_merged(changes, trade, "commission"),
        swap=_merged(changes, trade, "swap"),
    )


def _merged(changes: dict, trade: Trade, field: str):
    value = changes.get(field)
    return value if value is not None else getattr(trade, field)
