"""
Ledger and Rollover Engine

The ledger owns cards, expenses and the budget map, and answers the one
question the UI cares about: how much is available on a card this month.

ROLLOVER:
    rollover(m) = budget(m) + rollover(prev(m)) - spent(m)
    available(m) = budget(m) + rollover(prev(m))

The recursion stops at the card's start month (rollover of any earlier
month is 0) and, as a last resort, after rollover_max_depth months.
Each available() call builds its own month cache; nothing is cached
across calls, so mutations never leave stale balances behind.

Unset months use the default budget, not zero. That default silently
participates in every rollover sum, which is why "touched" months get
their budget materialized (ensure_budget) when viewed or spent in.
"""

from decimal import Decimal
from typing import Iterator, Optional

from budget_recus.models.ledger import (
    Card,
    Expense,
    LedgerState,
    MonthSummary,
)
from budget_recus.months import is_month_token, month_of, prev_month


ZERO = Decimal("0")


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class UnknownCardError(LedgerError):
    """Referenced card does not exist."""

    def __init__(self, card_id: Optional[str]):
        self.card_id = card_id
        super().__init__(f"Card not found: {card_id}")


class UnknownExpenseError(LedgerError):
    """Referenced expense does not exist."""

    def __init__(self, expense_id: str):
        self.expense_id = expense_id
        super().__init__(f"Expense not found: {expense_id}")


class Ledger:
    """
    Cards, expenses and budgets, plus the derived balances.

    Mutations here only touch in-memory state; the controller persists
    after each one.
    """

    def __init__(
        self,
        state: LedgerState,
        default_budget: Decimal,
        max_depth: int = 120,
    ):
        self.state = state
        self.default_budget = Decimal(default_budget)
        self.max_depth = max_depth

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def card(self, card_id: Optional[str]) -> Card:
        card = self.state.find_card(card_id) if card_id else None
        if card is None:
            raise UnknownCardError(card_id)
        return card

    def expense(self, expense_id: str) -> Expense:
        expense = self.state.find_expense(expense_id)
        if expense is None:
            raise UnknownExpenseError(expense_id)
        return expense

    def get_budget(self, card_id: str, month: str) -> Decimal:
        """Stored budget for the month, else the default. No side effects."""
        value = self.state.budgets.get(card_id, {}).get(month)
        return value if value is not None else self.default_budget

    def expenses_for(self, card_id: str, month: str) -> Iterator[Expense]:
        """Expenses of one card dated in one month, in storage order."""
        return (
            e for e in self.state.expenses
            if e.card_id == card_id and month_of(e.date_iso) == month
        )

    def sum_expenses(self, card_id: str, month: str) -> Decimal:
        return sum(
            (e.amount or ZERO for e in self.expenses_for(card_id, month)),
            ZERO,
        )

    def rollover(self, card_id: str, month: str) -> Decimal:
        """What is left over (or overspent) at the end of month."""
        return self._rollover_fn(card_id)(month)

    def available(self, card_id: str, month: str) -> Decimal:
        """Budget of the month plus everything carried in from before."""
        roll = self._rollover_fn(card_id)
        return self.get_budget(card_id, month) + roll(prev_month(month))

    def _rollover_fn(self, card_id: str):
        """Build a memoized rollover for one card, valid for one computation."""
        start_month = self.card(card_id).start_month
        memo: dict[str, Decimal] = {}

        def roll(month: str, depth: int = 0) -> Decimal:
            # Tokens are zero-padded, so string order is chronological
            if month < start_month:
                return ZERO
            if depth > self.max_depth:
                return ZERO
            if month in memo:
                return memo[month]
            carried = roll(prev_month(month), depth + 1)
            out = (
                self.get_budget(card_id, month)
                + carried
                - self.sum_expenses(card_id, month)
            )
            memo[month] = out
            return out

        return roll

    def summarize(self, card_id: str, month: str) -> MonthSummary:
        """Figures for one card and month, newest expense first."""
        items = sorted(
            self.expenses_for(card_id, month),
            key=lambda e: e.date_iso,
            reverse=True,
        )
        return MonthSummary(
            card_id=card_id,
            month=month,
            budget=self.get_budget(card_id, month),
            available=self.available(card_id, month),
            spent=sum((e.amount for e in items), ZERO),
            expenses=items,
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def ensure_budget(self, card_id: str, month: str) -> bool:
        """
        Materialize the budget entry of a touched month.

        Returns True if an entry was created.
        """
        months = self.state.budgets.setdefault(card_id, {})
        if month in months:
            return False
        months[month] = self.get_budget(card_id, month)
        return True

    def add_card(self, card: Card) -> Card:
        self.state.cards.append(card)
        self.state.budgets.setdefault(card.id, {})
        self.ensure_budget(card.id, card.start_month)
        return card

    def set_budget(self, card_id: str, month: str, amount: Decimal) -> None:
        self.card(card_id)
        if not is_month_token(month):
            raise ValueError(f"Invalid month token: {month!r}")
        if amount < 0:
            raise ValueError("Budget cannot be negative")
        self.state.budgets.setdefault(card_id, {})[month] = amount

    def add_expense(self, expense: Expense) -> Expense:
        self.card(expense.card_id)
        self.state.expenses.append(expense)
        self.ensure_budget(expense.card_id, month_of(expense.date_iso))
        return expense

    def update_expense(self, expense_id: str, **changes) -> Expense:
        """Replace fields of an expense in place, revalidating the record."""
        current = self.expense(expense_id)
        updated = Expense.model_validate({**current.model_dump(), **changes})
        index = next(
            i for i, e in enumerate(self.state.expenses) if e.id == expense_id
        )
        self.state.expenses[index] = updated
        self.ensure_budget(updated.card_id, month_of(updated.date_iso))
        return updated

    def remove_expense(self, expense_id: str) -> Expense:
        expense = self.expense(expense_id)
        self.state.expenses = [
            e for e in self.state.expenses if e.id != expense_id
        ]
        return expense
