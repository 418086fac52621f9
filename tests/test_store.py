"""Property-based tests for the journal store.

**Feature: trade-journal**
"""

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tradejournal.db.store import JournalStore
from tradejournal.errors import (
    ForbiddenError,
    NotFoundError,
    PortfolioNotEmptyError,
    PreconditionError,
)
from tradejournal.models import (
    AccountType,
    TagType,
    TradeInput,
    TradeSide,
    TradeStatus,
    TradeUpdate,
)

UTC = timezone.utc


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        yield JournalStore(db_path)


def trade_input(**overrides) -> TradeInput:
    values = dict(
        symbol="BTCUSD",
        side=TradeSide.LONG,
        status=TradeStatus.CLOSED,
        entry_price=45000.0,
        entry_date=datetime(2024, 1, 15, 10, 0, tzinfo=UTC),
        quantity=0.1,
        exit_price=46500.0,
        exit_date=datetime(2024, 1, 15, 16, 0, tzinfo=UTC),
        commission=10.0,
    )
    values.update(overrides)
    return TradeInput(**values)


class TestSchemaCompleteness:
    """
    *For any* fresh database, all required tables should exist.
    """

    def test_schema_completeness(self, temp_db: JournalStore):
        tables = temp_db.get_tables()

        for table in JournalStore.REQUIRED_TABLES:
            assert table in tables, f"Required table '{table}' is missing"

    def test_reopening_keeps_data(self, temp_db: JournalStore):
        temp_db.create_trade("alice", trade_input())

        reopened = JournalStore(temp_db.db_path)

        assert reopened.get_stats()["trades"] == 1


class TestTradeValuation:
    """Trades are valued when written."""

    def test_create_values_from_prices(self, temp_db: JournalStore):
        trade = temp_db.create_trade("alice", trade_input())

        assert trade.id is not None
        assert trade.user_id == "alice"
        assert trade.gross_pnl == pytest.approx(150.0)
        assert trade.net_pnl == pytest.approx(140.0)

    def test_create_with_broker_pnl(self, temp_db: JournalStore):
        trade = temp_db.create_trade("alice", trade_input(exit_price=None, net_pnl=-12.5))

        assert trade.net_pnl == -12.5
        assert trade.gross_pnl == -12.5

    def test_open_trade_is_unvalued(self, temp_db: JournalStore):
        trade = temp_db.create_trade(
            "alice", trade_input(status=TradeStatus.OPEN, exit_price=None, exit_date=None)
        )

        assert trade.net_pnl is None
        assert trade.gross_pnl is None
        assert not trade.is_valued

    def test_update_merges_persisted_fields(self, temp_db: JournalStore):
        trade = temp_db.create_trade("alice", trade_input())

        updated = temp_db.update_trade("alice", trade.id, TradeUpdate(quantity=0.2))

        assert updated.gross_pnl == pytest.approx(300.0)
        assert updated.net_pnl == pytest.approx(290.0)
        assert updated.exit_price == 46500.0

    def test_update_closes_open_trade(self, temp_db: JournalStore):
        trade = temp_db.create_trade(
            "alice",
            trade_input(
                symbol="ETHUSD",
                side=TradeSide.SHORT,
                status=TradeStatus.OPEN,
                entry_price=3000.0,
                quantity=1.0,
                exit_price=None,
                exit_date=None,
                commission=5.0,
            ),
        )

        closed = temp_db.update_trade(
            "alice",
            trade.id,
            TradeUpdate(
                exit_price=3100.0,
                exit_date=datetime(2024, 1, 16, tzinfo=UTC),
                status=TradeStatus.CLOSED,
            ),
        )

        assert closed.status is TradeStatus.CLOSED
        assert closed.gross_pnl == pytest.approx(-100.0)
        assert closed.net_pnl == pytest.approx(-105.0)

    def test_update_with_explicit_net(self, temp_db: JournalStore):
        trade = temp_db.create_trade("alice", trade_input())

        updated = temp_db.update_trade("alice", trade.id, TradeUpdate(net_pnl=99.0))

        assert updated.net_pnl == 99.0

    def test_gross_only_update_rejected(self, temp_db: JournalStore):
        trade = temp_db.create_trade(
            "alice", trade_input(status=TradeStatus.OPEN, exit_price=None, exit_date=None)
        )

        with pytest.raises(PreconditionError):
            temp_db.update_trade("alice", trade.id, TradeUpdate(gross_pnl=50.0))

        stored = temp_db.get_trade("alice", trade.id)
        assert stored.gross_pnl is None
        assert stored.net_pnl is None

    def test_notes_only_update_keeps_pnl(self, temp_db: JournalStore):
        trade = temp_db.create_trade("alice", trade_input(exit_price=None, net_pnl=77.0))

        updated = temp_db.update_trade("alice", trade.id, TradeUpdate(notes="held overnight"))

        assert updated.net_pnl == 77.0
        assert updated.notes == "held overnight"

    @given(
        side=st.sampled_from(list(TradeSide)),
        entry=st.floats(min_value=1, max_value=1000, allow_nan=False),
        exit_=st.floats(min_value=1, max_value=1000, allow_nan=False),
        qty=st.floats(min_value=0.01, max_value=100, allow_nan=False),
    )
    @settings(max_examples=20, deadline=None)
    def test_stored_pnl_matches_formula(self, side, entry, exit_, qty):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = JournalStore(Path(tmpdir) / "test.db")
            trade = store.create_trade(
                "alice",
                trade_input(side=side, entry_price=entry, exit_price=exit_, quantity=qty, commission=0),
            )

            move = exit_ - entry if side is TradeSide.LONG else entry - exit_
            assert store.get_trade("alice", trade.id).net_pnl == pytest.approx(move * qty)


class TestTimestamps:
    """
    *For any* mix of naive and offset timestamps, trades store UTC times
    and durations stay computable.
    """

    def test_close_with_naive_exit_after_aware_entry(self, temp_db: JournalStore):
        trade = temp_db.create_trade(
            "alice",
            trade_input(
                status=TradeStatus.OPEN,
                entry_date=datetime(2024, 5, 1, 9, 0, tzinfo=UTC),
                exit_price=None,
                exit_date=None,
            ),
        )

        closed = temp_db.update_trade(
            "alice",
            trade.id,
            TradeUpdate(
                status=TradeStatus.CLOSED,
                exit_price=46000.0,
                exit_date=datetime(2024, 5, 2, 15, 30),
            ),
        )

        assert closed.exit_date == datetime(2024, 5, 2, 15, 30, tzinfo=UTC)
        assert closed.duration_hours == pytest.approx(30.5)

    def test_offsets_are_converted_to_utc(self, temp_db: JournalStore):
        plus_five = timezone(timedelta(hours=5))
        trade = temp_db.create_trade(
            "alice",
            trade_input(
                entry_date=datetime(2024, 5, 1, 9, 0, tzinfo=plus_five),
                exit_date=datetime(2024, 5, 1, 12, 0),
            ),
        )

        stored = temp_db.get_trade("alice", trade.id)

        assert stored.entry_date == datetime(2024, 5, 1, 4, 0, tzinfo=UTC)
        assert stored.entry_date.utcoffset() == timedelta(0)
        assert stored.duration_hours == pytest.approx(8.0)

    def test_date_filter_across_offsets(self, temp_db: JournalStore):
        plus_five = timezone(timedelta(hours=5))
        # 02:00 at +05:00 is 21:00 UTC on the previous day
        early = temp_db.create_trade(
            "alice", trade_input(entry_date=datetime(2024, 5, 2, 2, 0, tzinfo=plus_five))
        )
        late = temp_db.create_trade(
            "alice", trade_input(entry_date=datetime(2024, 5, 2, 1, 0))
        )

        found = temp_db.get_trades("alice", from_date=datetime(2024, 5, 2))
        ordered = temp_db.get_trades("alice", sort_order="asc")

        assert [t.id for t in found] == [late.id]
        assert [t.id for t in ordered] == [early.id, late.id]


class TestOwnership:
    """Records of another user are forbidden; missing records are not found."""

    def test_trade_not_found(self, temp_db: JournalStore):
        with pytest.raises(NotFoundError):
            temp_db.get_trade("alice", 404)

    def test_foreign_trade_is_forbidden(self, temp_db: JournalStore):
        trade = temp_db.create_trade("alice", trade_input())

        with pytest.raises(ForbiddenError):
            temp_db.get_trade("bob", trade.id)
        with pytest.raises(ForbiddenError):
            temp_db.update_trade("bob", trade.id, TradeUpdate(notes="mine now"))
        with pytest.raises(ForbiddenError):
            temp_db.delete_trade("bob", trade.id)

    def test_foreign_portfolio_is_forbidden(self, temp_db: JournalStore):
        portfolio = temp_db.create_portfolio("alice", "Main", 1000)

        with pytest.raises(ForbiddenError):
            temp_db.get_portfolio("bob", portfolio.id)
        with pytest.raises(ForbiddenError):
            temp_db.create_trade("bob", trade_input(portfolio_id=portfolio.id))

    def test_trade_lists_are_scoped(self, temp_db: JournalStore):
        temp_db.create_trade("alice", trade_input())
        temp_db.create_trade("bob", trade_input())

        assert len(temp_db.get_trades("alice")) == 1
        assert temp_db.get_trades("carol") == []


class TestTradeQueries:
    def test_filters(self, temp_db: JournalStore):
        temp_db.create_trade("alice", trade_input(strategy="breakout"))
        temp_db.create_trade(
            "alice", trade_input(symbol="ETHUSD", side=TradeSide.SHORT, strategy="fade")
        )
        temp_db.create_trade(
            "alice", trade_input(symbol="SOLUSD", status=TradeStatus.OPEN, exit_price=None)
        )

        assert {t.symbol for t in temp_db.get_trades("alice", symbol="eth")} == {"ETHUSD"}
        assert len(temp_db.get_trades("alice", side=TradeSide.SHORT)) == 1
        assert len(temp_db.get_trades("alice", status=TradeStatus.OPEN)) == 1
        assert len(temp_db.get_trades("alice", strategy="break")) == 1
        assert {t.symbol for t in temp_db.get_trades("alice", profitability="winning")} == {
            "BTCUSD"
        }
        assert {t.symbol for t in temp_db.get_trades("alice", profitability="losing")} == {
            "ETHUSD"
        }
        assert len(temp_db.get_trades("alice", limit=2)) == 2

    def test_rejects_unknown_sort_field(self, temp_db: JournalStore):
        with pytest.raises(ValueError):
            temp_db.get_trades("alice", sort_by="symbol; DROP TABLE trades")

    def test_delete_trade(self, temp_db: JournalStore):
        trade = temp_db.create_trade("alice", trade_input())

        temp_db.delete_trade("alice", trade.id)

        with pytest.raises(NotFoundError):
            temp_db.get_trade("alice", trade.id)


class TestPortfolios:
    """
    *For any* portfolio, the reported balance reconciles with its trades.
    """

    def test_balance_reconciles_on_read(self, temp_db: JournalStore):
        portfolio = temp_db.create_portfolio("alice", "Main", 10000, account_type=AccountType.REAL)
        temp_db.create_trade("alice", trade_input(portfolio_id=portfolio.id))
        temp_db.create_trade(
            "alice", trade_input(portfolio_id=portfolio.id, exit_price=None, net_pnl=-40.0)
        )
        temp_db.create_trade(
            "alice",
            trade_input(portfolio_id=portfolio.id, status=TradeStatus.OPEN, exit_price=None),
        )

        reloaded = temp_db.get_portfolio("alice", portfolio.id)

        assert reloaded.trade_count == 3
        assert reloaded.current_balance == pytest.approx(10100.0)
        assert reloaded.account_type is AccountType.REAL

    def test_update_portfolio(self, temp_db: JournalStore):
        portfolio = temp_db.create_portfolio("alice", "Main", 1000)

        updated = temp_db.update_portfolio(
            "alice", portfolio.id, name="Swing", initial_balance=2000, description=None
        )

        assert updated.name == "Swing"
        assert updated.current_balance == 2000

    def test_update_rejects_unknown_field(self, temp_db: JournalStore):
        portfolio = temp_db.create_portfolio("alice", "Main", 1000)

        with pytest.raises(ValueError):
            temp_db.update_portfolio("alice", portfolio.id, current_balance=5)

    def test_list_by_account_type(self, temp_db: JournalStore):
        temp_db.create_portfolio("alice", "Live", 1000, account_type=AccountType.REAL)
        temp_db.create_portfolio("alice", "Paper", 1000)

        assert [p.name for p in temp_db.get_portfolios("alice", AccountType.DEMO)] == ["Paper"]
        assert len(temp_db.get_portfolios("alice")) == 2

    def test_delete_guard(self, temp_db: JournalStore):
        portfolio = temp_db.create_portfolio("alice", "Main", 1000)
        temp_db.create_trade("alice", trade_input(portfolio_id=portfolio.id))

        with pytest.raises(PortfolioNotEmptyError):
            temp_db.delete_portfolio("alice", portfolio.id)

        assert temp_db.get_portfolio("alice", portfolio.id).trade_count == 1

    def test_delete_empty_portfolio(self, temp_db: JournalStore):
        portfolio = temp_db.create_portfolio("alice", "Main", 1000)

        temp_db.delete_portfolio("alice", portfolio.id)

        with pytest.raises(NotFoundError):
            temp_db.get_portfolio("alice", portfolio.id)


class TestBulkMoves:
    def test_move_trades(self, temp_db: JournalStore):
        source = temp_db.create_portfolio("alice", "Old", 1000)
        target = temp_db.create_portfolio("alice", "New", 500)
        for _ in range(3):
            temp_db.create_trade("alice", trade_input(portfolio_id=source.id))
        temp_db.create_trade("alice", trade_input())

        result = temp_db.move_trades("alice", source.id, target.id)

        assert result.count == 3
        assert temp_db.get_portfolio("alice", source.id).trade_count == 0
        assert temp_db.get_portfolio("alice", target.id).trade_count == 3
        assert temp_db.get_portfolio("alice", target.id).current_balance == pytest.approx(920.0)
        assert temp_db.count_unassigned_trades("alice") == 1

    def test_move_requires_owned_portfolios(self, temp_db: JournalStore):
        mine = temp_db.create_portfolio("alice", "Mine", 1000)
        theirs = temp_db.create_portfolio("bob", "Theirs", 1000)

        with pytest.raises(ForbiddenError):
            temp_db.move_trades("alice", mine.id, theirs.id)
        with pytest.raises(NotFoundError):
            temp_db.move_trades("alice", mine.id, 999)

    def test_assign_unassigned(self, temp_db: JournalStore):
        portfolio = temp_db.create_portfolio("alice", "Main", 1000)
        temp_db.create_trade("alice", trade_input())
        temp_db.create_trade("alice", trade_input())
        temp_db.create_trade("bob", trade_input())

        result = temp_db.assign_unassigned_trades("alice", portfolio.id)

        assert result.count == 2
        assert temp_db.count_unassigned_trades("alice") == 0
        assert temp_db.count_unassigned_trades("bob") == 1

        again = temp_db.assign_unassigned_trades("alice", portfolio.id)
        assert again.count == 0


class TestTags:
    def test_trade_tags_round_trip(self, temp_db: JournalStore):
        trade = temp_db.create_trade("alice", trade_input(tags=["scalp", "news"]))

        assert trade.tags == ["news", "scalp"]
        assert {t.name for t in temp_db.get_tags("alice")} == {"news", "scalp"}

    def test_replacing_tags(self, temp_db: JournalStore):
        trade = temp_db.create_trade("alice", trade_input(tags=["scalp"]))

        updated = temp_db.update_trade("alice", trade.id, TradeUpdate(tags=["swing"]))

        assert updated.tags == ["swing"]

    def test_create_tag_upserts_type(self, temp_db: JournalStore):
        temp_db.create_tag("alice", "breakout")
        tag = temp_db.create_tag("alice", "breakout", TagType.SETUP)

        assert tag.type is TagType.SETUP
        assert len(temp_db.get_tags("alice")) == 1

    def test_delete_tag_detaches(self, temp_db: JournalStore):
        trade = temp_db.create_trade("alice", trade_input(tags=["scalp"]))

        temp_db.delete_tag("alice", "scalp")

        assert temp_db.get_trade("alice", trade.id).tags == []
        with pytest.raises(NotFoundError):
            temp_db.delete_tag("alice", "scalp")
