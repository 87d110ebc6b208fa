"""Custom exceptions for SplitSafe.

The balance and settlement functions in ``calc`` never raise; these errors
belong to the expense-entry and ledger layers that sit around them.
"""

from decimal import Decimal


class SplitSafeError(Exception):
    """Base exception for all SplitSafe errors."""

    pass


class ConfigurationError(SplitSafeError):
    """Raised when configuration is invalid or missing."""

    pass


class GroupNotFoundError(SplitSafeError):
    """Raised when a group ID does not exist in the ledger."""

    def __init__(self, group_id: str):
        self.group_id = group_id
        super().__init__(f"Group '{group_id}' not found")


class InvalidGroupError(SplitSafeError):
    """Raised when a group is created without a name or members."""

    pass


class InvalidExpenseError(SplitSafeError):
    """Base class for expense-entry validation errors."""

    pass


class InvalidAmountError(InvalidExpenseError):
    """Raised when an expense total is not a positive amount."""

    pass


class UnknownMemberError(InvalidExpenseError):
    """Raised when a payer or split member is not part of the group."""

    def __init__(self, member: str, group_id: str):
        self.member = member
        self.group_id = group_id
        super().__init__(f"'{member}' is not a member of group '{group_id}'")


class SplitMismatchError(InvalidExpenseError):
    """Raised when custom split amounts don't add up to the expense total."""

    def __init__(self, split_total: Decimal, expected_total: Decimal):
        self.split_total = split_total
        self.expected_total = expected_total
        super().__init__(
            f"Split amounts must equal total:\n"
            f"  Split total: ${split_total:.2f}\n"
            f"  Expected:    ${expected_total:.2f}"
        )
