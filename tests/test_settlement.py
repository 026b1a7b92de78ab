import random

import pytest

from balances import calculate_balances
from errors import InvalidSplitError, UnbalancedLedgerError
from models import Balance, Expense, Settlement
from settlement import ZERO_TOLERANCE, plan_settlements, settle_up


def apply(balances, settlements):
    after = {m: (b.net if isinstance(b, Balance) else b) for m, b in balances.items()}
    for s in settlements:
        after[s.from_member] += s.amount
        after[s.to_member] -= s.amount
    return after


def test_debtors_pay_the_single_creditor(dinner):
    balances = calculate_balances(["A", "B", "C"], [dinner])

    settlements = plan_settlements(balances)

    assert settlements == [
        Settlement(from_member="B", to_member="A", amount=100),
        Settlement(from_member="C", to_member="A", amount=100),
    ]


def test_fully_settled_group_needs_no_payments():
    expenses = [
        Expense(amount=100, paid_by="A", split_between=("A", "B")),
        Expense(amount=100, paid_by="B", split_between=("A", "B")),
    ]

    assert plan_settlements(calculate_balances(["A", "B"], expenses)) == []


def test_matching_follows_roster_order_not_size():
    balances = {"A": 50, "B": -30, "C": 10, "D": -30}

    settlements = plan_settlements(balances)

    assert [(s.from_member, s.to_member, s.amount) for s in settlements] == [
        ("B", "A", 30),
        ("D", "A", 20),
        ("D", "C", 10),
    ]


def test_equal_amounts_advance_both_sides():
    settlements = plan_settlements({"A": 40, "B": -40, "C": 25, "D": -25})

    assert [(s.from_member, s.to_member) for s in settlements] == [("B", "A"), ("D", "C")]


def test_accepts_net_mappings():
    settlements = plan_settlements({"A": {"net": 10}, "B": {"net": -10}, "C": {"net": 0}})

    assert settlements == [Settlement("B", "A", 10)]


def test_odd_split_still_zeroes_out():
    expense = Expense(amount=100, paid_by="A", split_between=("A", "B", "C"))
    balances = calculate_balances(["A", "B", "C"], [expense])

    settlements = plan_settlements(balances)

    assert [(s.from_member, s.to_member) for s in settlements] == [("B", "A"), ("C", "A")]
    assert all(s.amount > 0 for s in settlements)
    assert all(net == pytest.approx(0, abs=0.01) for net in apply(balances, settlements).values())
    assert settlements[0].describe("₹") == "B owes A ₹33.33"


def test_float_dust_is_not_a_debt():
    settlements = plan_settlements({"A": 1e-12, "B": -1e-12})

    assert settlements == []


def test_leftover_credit_is_an_error():
    with pytest.raises(UnbalancedLedgerError) as exc_info:
        plan_settlements({"A": 100, "B": -50})

    assert exc_info.value.details["uncollected"] == 50


def test_leftover_debt_is_an_error():
    with pytest.raises(UnbalancedLedgerError):
        plan_settlements({"A": -75, "B": 20})


def test_leftover_within_epsilon_is_tolerated():
    settlements = plan_settlements({"A": 100.005, "B": -100})

    assert settlements == [Settlement("B", "A", 100)]


def test_settle_up_runs_both_steps(dinner):
    balances, settlements = settle_up(["A", "B", "C"], [dinner])

    assert balances["A"].net == 200
    assert len(settlements) == 2


def test_settle_up_propagates_split_errors():
    with pytest.raises(InvalidSplitError):
        settle_up(["A"], [Expense(amount=5, paid_by="A", split_between=[])])


def random_expenses(seed, members, count=12):
    rng = random.Random(seed)
    expenses = []
    for _ in range(count):
        split = rng.sample(members, rng.randint(1, len(members)))
        expenses.append(Expense(
            amount=rng.randint(1, 50000) / 100,
            paid_by=rng.choice(members),
            split_between=tuple(split),
        ))
    return expenses


@pytest.mark.parametrize("seed", range(20))
def test_settlement_properties(seed):
    members = ["Asha", "Ben", "Chen", "Dara", "Eli", "Fay", "Gus"]
    expenses = random_expenses(seed, members)

    balances = calculate_balances(members, expenses)
    settlements = plan_settlements(balances)

    # conservation
    assert sum(b.paid for b in balances.values()) == pytest.approx(sum(b.owed for b in balances.values()))
    assert sum(b.net for b in balances.values()) == pytest.approx(0, abs=0.01)

    # validity
    assert all(s.amount > 0 for s in settlements)
    assert all(balances[s.from_member].net < 0 < balances[s.to_member].net for s in settlements)
    assert all(net == pytest.approx(0, abs=0.01) for net in apply(balances, settlements).values())

    # minimality bound
    debtors = [m for m, b in balances.items() if b.net < -ZERO_TOLERANCE]
    creditors = [m for m, b in balances.items() if b.net > ZERO_TOLERANCE]
    if debtors or creditors:
        assert len(settlements) <= len(debtors) + len(creditors) - 1

    # idempotence
    assert calculate_balances(members, expenses) == balances
    assert plan_settlements(balances) == settlements
