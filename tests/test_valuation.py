"""Property-based tests for trade valuation.

**Feature: trade-journal**
"""

from datetime import datetime

import pytest
from hypothesis import given, settings, assume
from hypothesis import strategies as st

from tradejournal.analytics.valuation import (
    ValuationSource,
    classify,
    revaluate,
    valuate,
)
from tradejournal.errors import PreconditionError
from tradejournal.models import Trade, TradeSide, TradeStatus


prices = st.floats(min_value=0.01, max_value=100000.0, allow_nan=False, allow_infinity=False)
quantities = st.floats(min_value=0.001, max_value=1000.0, allow_nan=False, allow_infinity=False)
costs = st.floats(min_value=-100.0, max_value=100.0, allow_nan=False, allow_infinity=False)


def make_trade(**overrides) -> Trade:
    values = dict(
        id=1,
        user_id="alice",
        symbol="EURUSD",
        side=TradeSide.LONG,
        status=TradeStatus.CLOSED,
        entry_price=100.0,
        entry_date=datetime(2024, 5, 1, 9, 30),
        quantity=2.0,
        exit_price=110.0,
        exit_date=datetime(2024, 5, 1, 15, 0),
        commission=1.0,
        swap=0.5,
        gross_pnl=20.0,
        net_pnl=18.5,
    )
    values.update(overrides)
    return Trade(**values)


class TestValuationExamples:
    """Worked examples for the price-based rule."""

    def test_long_trade(self):
        result = valuate(TradeSide.LONG, 45000, 46500, 0.1, commission=10, swap=0)

        assert result.gross_pnl == pytest.approx(150.0)
        assert result.net_pnl == pytest.approx(140.0)
        assert result.source is ValuationSource.PRICE

    def test_short_trade(self):
        result = valuate(TradeSide.SHORT, 3000, 3100, 1, commission=5)

        assert result.gross_pnl == pytest.approx(-100.0)
        assert result.net_pnl == pytest.approx(-105.0)

    def test_negative_swap_is_a_credit(self):
        result = valuate(TradeSide.LONG, 100, 101, 1, commission=0, swap=-2)

        assert result.net_pnl == pytest.approx(3.0)

    def test_missing_costs_default_to_zero(self):
        result = valuate(TradeSide.LONG, 100, 105, 2, commission=None, swap=None)

        assert result.gross_pnl == pytest.approx(10.0)
        assert result.net_pnl == pytest.approx(10.0)

    def test_side_accepts_string(self):
        result = valuate("SHORT", 50, 40, 1)

        assert result.gross_pnl == pytest.approx(10.0)

    def test_unvalued_without_exit(self):
        result = valuate(TradeSide.LONG, 100, None, 1, commission=3)

        assert result.gross_pnl is None
        assert result.net_pnl is None
        assert result.source is ValuationSource.UNVALUED

    @pytest.mark.parametrize("quantity", [0, -1.5])
    def test_non_positive_quantity_rejected(self, quantity):
        with pytest.raises(PreconditionError):
            valuate(TradeSide.LONG, 100, 110, quantity)


class TestExplicitOverride:
    """
    *For any* broker-supplied net P&L, the price formula is not applied.
    """

    def test_net_only_sets_gross_to_net(self):
        result = valuate(TradeSide.LONG, 100, None, 1, explicit_net_pnl=-42.5)

        assert result.net_pnl == -42.5
        assert result.gross_pnl == -42.5
        assert result.source is ValuationSource.BROKER

    def test_gross_and_net_used_verbatim(self):
        result = valuate(
            TradeSide.LONG, 100, None, 1, explicit_net_pnl=95.0, explicit_gross_pnl=100.0
        )

        assert result.gross_pnl == 100.0
        assert result.net_pnl == 95.0

    @given(entry=prices, exit_=prices, qty=quantities, override=costs)
    @settings(max_examples=100)
    def test_override_beats_exit_price(self, entry, exit_, qty, override):
        result = valuate(
            TradeSide.LONG, entry, exit_, qty, commission=1.0, explicit_net_pnl=override
        )

        assert result.net_pnl == override
        assert result.source is ValuationSource.BROKER

    def test_gross_without_net_rejected(self):
        with pytest.raises(PreconditionError):
            valuate(TradeSide.LONG, 100, 110, 1, explicit_gross_pnl=10.0)

    def test_classify_decision_table(self):
        assert classify(None, None) is ValuationSource.UNVALUED
        assert classify(1.0, None) is ValuationSource.PRICE
        assert classify(None, 5.0) is ValuationSource.BROKER
        assert classify(1.0, 5.0) is ValuationSource.BROKER
        assert classify(0.0, None) is ValuationSource.PRICE


class TestValuationProperties:
    """
    *For any* trade, net P&L moves with the exit price in the trade's favour.
    """

    @given(entry=prices, a=prices, b=prices, qty=quantities, commission=costs, swap=costs)
    @settings(max_examples=100)
    def test_long_monotonic_increasing(self, entry, a, b, qty, commission, swap):
        assume(a < b)
        low = valuate(TradeSide.LONG, entry, a, qty, commission, swap)
        high = valuate(TradeSide.LONG, entry, b, qty, commission, swap)

        assert low.net_pnl <= high.net_pnl

    @given(entry=prices, a=prices, b=prices, qty=quantities, commission=costs, swap=costs)
    @settings(max_examples=100)
    def test_short_monotonic_decreasing(self, entry, a, b, qty, commission, swap):
        assume(a < b)
        low = valuate(TradeSide.SHORT, entry, a, qty, commission, swap)
        high = valuate(TradeSide.SHORT, entry, b, qty, commission, swap)

        assert low.net_pnl >= high.net_pnl

    @given(
        side=st.sampled_from(list(TradeSide)),
        entry=prices,
        exit_=st.one_of(st.none(), prices),
        qty=quantities,
        commission=costs,
        swap=costs,
    )
    @settings(max_examples=100)
    def test_valuation_is_idempotent(self, side, entry, exit_, qty, commission, swap):
        first = valuate(side, entry, exit_, qty, commission, swap)
        second = valuate(side, entry, exit_, qty, commission, swap)

        assert first == second

    @given(side=st.sampled_from(list(TradeSide)), entry=prices, exit_=prices, qty=quantities)
    @settings(max_examples=100)
    def test_net_equals_gross_minus_costs(self, side, entry, exit_, qty):
        result = valuate(side, entry, exit_, qty, commission=2.5, swap=-1.0)

        assert result.net_pnl == pytest.approx(result.gross_pnl - 2.5 + 1.0)


class TestRevaluation:
    """Valuation of partial updates against the persisted trade."""

    def test_unrelated_change_keeps_stored_pnl(self):
        assert revaluate(make_trade(), {"notes": "textbook breakout"}) is None

    def test_quantity_change_reuses_persisted_prices(self):
        result = revaluate(make_trade(), {"quantity": 3.0})

        assert result.gross_pnl == pytest.approx(30.0)
        assert result.net_pnl == pytest.approx(28.5)

    def test_side_change_flips_sign(self):
        result = revaluate(make_trade(), {"side": TradeSide.SHORT})

        assert result.gross_pnl == pytest.approx(-20.0)
        assert result.net_pnl == pytest.approx(-21.5)

    def test_closing_an_open_trade(self):
        trade = make_trade(
            status=TradeStatus.OPEN, exit_price=None, exit_date=None, gross_pnl=None, net_pnl=None
        )

        result = revaluate(trade, {"exit_price": 95.0, "status": TradeStatus.CLOSED})

        assert result.gross_pnl == pytest.approx(-10.0)
        assert result.net_pnl == pytest.approx(-11.5)

    def test_no_exit_price_keeps_broker_pnl(self):
        trade = make_trade(exit_price=None, gross_pnl=-40.0, net_pnl=-42.5)

        assert revaluate(trade, {"quantity": 5.0}) is None

    def test_explicit_net_override_on_update(self):
        result = revaluate(make_trade(), {"quantity": 3.0, "net_pnl": 7.0})

        assert result.net_pnl == 7.0
        assert result.gross_pnl == 7.0
        assert result.source is ValuationSource.BROKER

    def test_gross_only_update_rejected(self):
        trade = make_trade(
            status=TradeStatus.OPEN, exit_price=None, exit_date=None, gross_pnl=None, net_pnl=None
        )

        with pytest.raises(PreconditionError):
            revaluate(trade, {"gross_pnl": 50.0})

    def test_gross_with_net_update_accepted(self):
        result = revaluate(make_trade(), {"gross_pnl": 60.0, "net_pnl": 55.0})

        assert result.gross_pnl == 60.0
        assert result.net_pnl == 55.0
