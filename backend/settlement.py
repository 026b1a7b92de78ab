# backend/settlement.py
from __future__ import annotations
from typing import Dict, Iterable, List, Mapping, Tuple

from balances import calculate_balances
from errors import UnbalancedLedgerError
from models import Balance, Expense, Settlement

# Anything this close to zero is float dust from uneven splits. Exact zero
# would leave 100/3-style residues behind as extra sub-cent payments.
ZERO_TOLERANCE = 1e-9
DEFAULT_EPSILON = 0.01


def _net_of(value) -> float:
    if isinstance(value, Balance):
        return value.net
    if isinstance(value, Mapping):
        return float(value["net"])
    return float(value)


def plan_settlements(balances: Mapping, epsilon: float = DEFAULT_EPSILON) -> List[Settlement]:
    """
    Greedy settlement: debtors pay creditors until every net is zero.

    balances maps member -> Balance (or anything with a net amount). Both
    debtors and creditors are walked in the mapping's order, not by size, so
    the same roster always gives the same payments.
    """
    # 1. Separate Debtors and Creditors
    debtors = []
    creditors = []

    for person, value in balances.items():
        net = _net_of(value)
        if net < -ZERO_TOLERANCE:
            debtors.append({'person': person, 'amount': -net})
        elif net > ZERO_TOLERANCE:
            creditors.append({'person': person, 'amount': net})

    # 2. Match them up
    settlements = []
    i = 0
    j = 0

    while i < len(debtors) and j < len(creditors):
        debtor = debtors[i]
        creditor = creditors[j]

        amount = min(debtor['amount'], creditor['amount'])
        settlements.append(Settlement(debtor['person'], creditor['person'], amount))

        debtor['amount'] -= amount
        creditor['amount'] -= amount

        if debtor['amount'] <= ZERO_TOLERANCE: i += 1
        if creditor['amount'] <= ZERO_TOLERANCE: j += 1

    # 3. Whatever is left over means the balances never added up
    unpaid = sum(d['amount'] for d in debtors[i:])
    uncollected = sum(c['amount'] for c in creditors[j:])
    if unpaid > epsilon or uncollected > epsilon:
        raise UnbalancedLedgerError(
            "Balances do not sum to zero",
            {"unpaid": round(unpaid, 2), "uncollected": round(uncollected, 2)},
        )

    return settlements


def settle_up(
    members: Iterable[str],
    expenses: Iterable[Expense],
    permissive: bool = False,
    epsilon: float = DEFAULT_EPSILON,
) -> Tuple[Dict[str, Balance], List[Settlement]]:
    """Balances and the payments that clear them, in one go"""
    balances = calculate_balances(members, expenses, permissive=permissive)
    return balances, plan_settlements(balances, epsilon=epsilon)
