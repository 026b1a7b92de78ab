# backend/models.py
"""
Data models for expense splitting
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Tuple

from errors import InvalidSplitError


@dataclass(frozen=True)
class Expense:
    """One shared expense, paid by one member and split equally"""
    amount: float
    paid_by: str
    split_between: Tuple[str, ...] = field(default_factory=tuple)
    description: str = ""
    timestamp: Optional[str] = None  # ISO-8601
    id: Optional[int] = None
    group_id: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "amount", float(self.amount))
        # a split is a set of members; keep first-seen order
        object.__setattr__(self, "split_between", tuple(dict.fromkeys(self.split_between)))

    @property
    def per_person(self) -> float:
        if not self.split_between:
            raise InvalidSplitError(
                "Expense is not split between anyone",
                {"description": self.description, "amount": self.amount},
            )
        return self.amount / len(self.split_between)

    @classmethod
    def from_dict(cls, data: dict) -> "Expense":
        if not isinstance(data, dict):
            raise TypeError("expense must be an object")
        paid_by = data["paidBy"]
        split_between = data.get("splitBetween")
        if split_between is None:
            split_between = []
        if not isinstance(split_between, list):
            raise TypeError("splitBetween must be a list of names")
        if not all(isinstance(m, str) for m in [paid_by, *split_between]):
            raise TypeError("member names must be strings")

        return cls(
            amount=data["amount"],
            paid_by=paid_by,
            split_between=tuple(split_between),
            description=data.get("description", ""),
            timestamp=data.get("timestamp"),
            id=data.get("id"),
            group_id=data.get("groupId"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "groupId": self.group_id,
            "description": self.description,
            "amount": self.amount,
            "paidBy": self.paid_by,
            "splitBetween": list(self.split_between),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class Balance:
    paid: float = 0.0
    owed: float = 0.0

    @property
    def net(self) -> float:
        """Positive: should get money back. Negative: should pay."""
        return self.paid - self.owed

    def to_dict(self) -> dict:
        return {"paid": self.paid, "owed": self.owed, "net": self.net}


@dataclass(frozen=True)
class Settlement:
    from_member: str
    to_member: str
    amount: float

    def describe(self, symbol: str = "$") -> str:
        return f"{self.from_member} owes {self.to_member} {symbol}{self.amount:.2f}"

    def to_dict(self) -> dict:
        return {"from": self.from_member, "to": self.to_member, "amount": self.amount}
