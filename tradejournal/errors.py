"""Exceptions raised by TradeJournal.

Every failure the journal surfaces to a caller derives from
``JournalError`` so the command line (or any other boundary) can catch
them in one place and map them to a user-facing message.
"""


class JournalError(Exception):
    """Base class for journal failures."""


class NotFoundError(JournalError):
    """A trade, portfolio or tag does not exist."""

    def __init__(self, kind: str, identifier: object):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class ForbiddenError(JournalError):
    """The requesting user does not own the record, or the action is not allowed."""


class PortfolioNotEmptyError(ForbiddenError):
    """A portfolio still has trades assigned and cannot be deleted."""

    def __init__(self, portfolio_id: int, count: int):
        self.portfolio_id = portfolio_id
        self.count = count
        super().__init__(
            f"Cannot delete portfolio with {count} assigned trade(s). "
            "Please reassign or delete the trades first."
        )


class PreconditionError(JournalError, ValueError):
    """The caller passed input the analytics core does not accept."""
