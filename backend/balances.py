# backend/balances.py
from __future__ import annotations
import math
from typing import Dict, Iterable, List

from errors import InvalidAmountError, UnknownMemberError
from models import Balance, Expense


def _check_amount(expense: Expense):
    if not math.isfinite(expense.amount) or expense.amount <= 0:
        raise InvalidAmountError(
            "Expense amount must be a positive number",
            {"description": expense.description, "amount": expense.amount},
        )


def _require_member(paid, owed, member, permissive):
    if member in paid:
        return
    if not permissive:
        raise UnknownMemberError(f"{member} is not a member of this group", {"member": member})
    paid[member] = 0.0
    owed[member] = 0.0


def calculate_balances(
    members: Iterable[str],
    expenses: Iterable[Expense],
    permissive: bool = False,
) -> Dict[str, Balance]:
    """
    Work out how much each member paid, owes and is owed.

    Returns dict mapping member -> Balance, in roster order. Members that
    were never involved in an expense still show up with a zero balance.
    With permissive=True, names missing from the roster are added after the
    roster in the order they are first seen instead of raising.
    """
    paid = {m: 0.0 for m in members}
    owed = {m: 0.0 for m in paid}

    for expense in expenses:
        _check_amount(expense)
        split_amount = expense.per_person

        _require_member(paid, owed, expense.paid_by, permissive)
        paid[expense.paid_by] += expense.amount

        for person in expense.split_between:
            _require_member(paid, owed, person, permissive)
            owed[person] += split_amount

    return {m: Balance(paid=paid[m], owed=owed[m]) for m in paid}


def total_expenses(expenses: List[Expense]) -> float:
    return sum(e.amount for e in expenses)
