# backend/errors.py
"""
Errors raised while splitting expenses and planning settlements.

All of them inherit from SplitError so the API layer can catch one type.
"""


class SplitError(Exception):
    """Base exception for all splitting errors"""

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class InvalidSplitError(SplitError):
    """Raised when an expense is split between nobody"""
    pass


class InvalidAmountError(SplitError):
    """Raised when an expense amount is not a positive number"""
    pass


class UnknownMemberError(SplitError):
    """Raised when an expense names someone who is not in the group"""
    pass


class UnbalancedLedgerError(SplitError):
    """Raised when debts and credits do not cancel out"""
    pass


class DuplicateMemberError(SplitError):
    """Raised when a name is added to a group that already has it"""
    pass


class MemberInUseError(SplitError):
    """Raised when removing a member who still appears in expenses"""
    pass
