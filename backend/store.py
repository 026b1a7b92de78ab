# backend/store.py
"""
In-memory groups and expenses for the API.
"""
from __future__ import annotations
import itertools
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List

from errors import DuplicateMemberError, MemberInUseError
from models import Expense


class GroupStore:
    def __init__(self):
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._groups: Dict[int, dict] = {}
        self._expenses: List[Expense] = []  # newest first

    def create_group(self, name: str, members: List[str]) -> dict:
        with self._lock:
            group = {
                "id": next(self._ids),
                "name": name,
                "members": list(dict.fromkeys(members)),
            }
            self._groups[group["id"]] = group
        return dict(group, members=list(group["members"]))

    def get_group(self, group_id: int) -> dict:
        group = self._groups[group_id]  # KeyError if unknown
        return dict(group, members=list(group["members"]))

    def list_groups(self) -> List[dict]:
        return [self.get_group(group_id) for group_id in list(self._groups)]

    def delete_group(self, group_id: int):
        with self._lock:
            del self._groups[group_id]
            self._expenses = [e for e in self._expenses if e.group_id != group_id]

    def add_member(self, group_id: int, name: str) -> dict:
        with self._lock:
            group = self._groups[group_id]
            if name in group["members"]:
                raise DuplicateMemberError("Member already in group", {"member": name, "group": group_id})
            group["members"].append(name)
        return self.get_group(group_id)

    def remove_member(self, group_id: int, name: str) -> dict:
        """Members still named in an expense stay, or balances would break."""
        with self._lock:
            group = self._groups[group_id]
            for e in self._expenses:
                if e.group_id == group_id and (e.paid_by == name or name in e.split_between):
                    raise MemberInUseError(
                        f"{name} still appears in expenses",
                        {"member": name, "expense": e.id},
                    )
            group["members"] = [m for m in group["members"] if m != name]
        return self.get_group(group_id)

    def add_expense(self, group_id: int, data: dict) -> Expense:
        self.get_group(group_id)
        expense = Expense.from_dict(data)
        with self._lock:
            expense = replace(
                expense,
                id=next(self._ids),
                group_id=group_id,
                timestamp=datetime.now(timezone.utc).isoformat(),
            )
            self._expenses.insert(0, expense)
        return expense

    def list_expenses(self, group_id: int) -> List[Expense]:
        self.get_group(group_id)
        return [e for e in self._expenses if e.group_id == group_id]

    def delete_expense(self, expense_id: int) -> bool:
        with self._lock:
            before = len(self._expenses)
            self._expenses = [e for e in self._expenses if e.id != expense_id]
            return len(self._expenses) < before

    def clear_expenses(self, group_id: int) -> int:
        self.get_group(group_id)
        with self._lock:
            before = len(self._expenses)
            self._expenses = [e for e in self._expenses if e.group_id != group_id]
            return before - len(self._expenses)
