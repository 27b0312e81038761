"""
Ledger Repository

Maps the in-memory LedgerState onto five keys of a KeyValueStore:

    cards, expenses, budgets, currentCardId, currentMonth

Every key is read at startup (a missing key means its default) and all
five are written wholesale, in that order, after every mutation. The
draft is never persisted.
"""

from typing import Any, Iterable

from pydantic import TypeAdapter, ValidationError

from budget_recus.models.ledger import (
    BudgetMap,
    Card,
    Expense,
    LedgerState,
)
from budget_recus.months import is_month_token
from budget_recus.services.storage.interface import (
    CorruptValueError,
    KeyValueStore,
)

CARDS_KEY = "cards"
EXPENSES_KEY = "expenses"
BUDGETS_KEY = "budgets"
CURRENT_CARD_KEY = "currentCardId"
CURRENT_MONTH_KEY = "currentMonth"

PERSISTED_KEYS = (
    CARDS_KEY,
    EXPENSES_KEY,
    BUDGETS_KEY,
    CURRENT_CARD_KEY,
    CURRENT_MONTH_KEY,
)

_CARDS = TypeAdapter(list[Card])
_EXPENSES = TypeAdapter(list[Expense])
_BUDGETS = TypeAdapter(BudgetMap)


def fill_missing_start_months(
    cards: list[dict],
    expenses: Iterable[Any],
    budgets: Any,
    fallback_month: str,
) -> list[dict]:
    """
    Give a start month to cards saved before cards had one.

    The earliest month the card has a budget or an expense in is used,
    else fallback_month. Cards that already have one are untouched.
    """
    budgets = budgets if isinstance(budgets, dict) else {}
    filled = []
    for raw in cards:
        if not isinstance(raw, dict) or raw.get("startMonth") or raw.get("start_month"):
            filled.append(raw)
            continue
        card_id = raw.get("id")
        if card_id is not None and not isinstance(card_id, str):
            # Left for validation to reject
            filled.append(raw)
            continue
        card_budgets = budgets.get(card_id)
        months = [
            m for m in (card_budgets if isinstance(card_budgets, dict) else {})
            if is_month_token(m)
        ]
        for expense in expenses:
            if not isinstance(expense, dict):
                continue
            if expense.get("cardId", expense.get("card_id")) != card_id:
                continue
            stamp = str(expense.get("dateISO", expense.get("date_iso", "")))
            if is_month_token(stamp[:7]):
                months.append(stamp[:7])
        filled.append({**raw, "startMonth": min(months, default=fallback_month)})
    return filled


class LedgerRepository:
    """Loads and saves LedgerState through a KeyValueStore."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    async def load(self, default_month: str) -> LedgerState:
        """
        Read the persisted state.

        Raises:
            CorruptValueError: If a stored key does not hold a valid value
        """
        raw_cards = await self._store.get(CARDS_KEY) or []
        raw_expenses = await self._store.get(EXPENSES_KEY) or []
        raw_budgets = await self._store.get(BUDGETS_KEY) or {}
        current_card_id = await self._store.get(CURRENT_CARD_KEY)
        current_month = await self._store.get(CURRENT_MONTH_KEY)

        if isinstance(raw_cards, list) and isinstance(raw_expenses, list):
            raw_cards = fill_missing_start_months(
                raw_cards, raw_expenses, raw_budgets, default_month
            )

        cards = self._decode(CARDS_KEY, _CARDS, raw_cards)
        expenses = self._decode(EXPENSES_KEY, _EXPENSES, raw_expenses)
        budgets = self._decode(BUDGETS_KEY, _BUDGETS, raw_budgets)

        return LedgerState(
            cards=cards,
            expenses=expenses,
            budgets=budgets,
            current_card_id=current_card_id or None,
            current_month=(
                current_month if is_month_token(current_month) else default_month
            ),
        )

    @staticmethod
    def _decode(key: str, adapter: TypeAdapter, raw: Any) -> Any:
        try:
            return adapter.validate_python(raw)
        except ValidationError as e:
            raise CorruptValueError(key, f"{e.error_count()} invalid field(s)")

    async def save(self, state: LedgerState) -> None:
        """Write every persisted key, one after another."""
        await self._store.set(
            CARDS_KEY,
            _CARDS.dump_python(state.cards, mode="json", by_alias=True),
        )
        await self._store.set(
            EXPENSES_KEY,
            _EXPENSES.dump_python(state.expenses, mode="json", by_alias=True),
        )
        await self._store.set(
            BUDGETS_KEY,
            _BUDGETS.dump_python(state.budgets, mode="json"),
        )
        await self._store.set(CURRENT_CARD_KEY, state.current_card_id)
        await self._store.set(CURRENT_MONTH_KEY, state.current_month)
