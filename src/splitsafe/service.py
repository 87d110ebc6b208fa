"""Service layer that composes the ledger store and balance computations.

Balances and transfers are recomputed from the stored expenses on every
call, so reads always reflect the latest expense list.
"""

import logging
from decimal import Decimal

from .calc import (
    calculate_balances,
    calculate_settlements,
    equal_splits,
    round_money,
    split_total,
    splits_match_total,
)
from .config import Settings
from .db import Database
from .exceptions import (
    GroupNotFoundError,
    InvalidAmountError,
    InvalidGroupError,
    SplitMismatchError,
    UnknownMemberError,
)
from .models import (
    Balance,
    Expense,
    Group,
    GroupSummary,
    Split,
    SplitMode,
    Transfer,
)

logger = logging.getLogger(__name__)


class LedgerService:
    """Service for recording group expenses and computing settlements."""

    def __init__(self, settings: Settings, database: Database):
        """Initialize the ledger service."""
        self.settings = settings
        self.db = database

    def create_group(self, name: str, members: list[str]) -> Group:
        """
        Create a group with an ordered member roster.

        Member identifiers are stripped of surrounding whitespace and
        de-duplicated, keeping the first occurrence.

        Raises:
            InvalidGroupError: If the name is empty or no members are given
        """
        name = name.strip()
        if not name:
            raise InvalidGroupError("Group name cannot be empty")

        roster = list(dict.fromkeys(m.strip() for m in members if m.strip()))
        if not roster:
            raise InvalidGroupError("A group needs at least one member")

        group = Group(name=name, members=roster)
        self.db.add_group(group)

        logger.info(f"Created group {group.id} ({name}) with {len(roster)} members")
        return group

    def get_group(self, group_id: str) -> Group:
        """Get a group, raising if it doesn't exist."""
        group = self.db.get_group(group_id)
        if group is None:
            raise GroupNotFoundError(group_id)
        return group

    def list_groups(self) -> list[Group]:
        """Get all groups."""
        return self.db.list_groups()

    def add_expense(
        self,
        group_id: str,
        title: str,
        payer: str,
        total: Decimal,
        split_mode: SplitMode = "equal",
        custom_splits: dict[str, Decimal] | None = None,
    ) -> Expense:
        """
        Record an expense for a group.

        In "equal" mode the total is shared evenly across the whole roster.
        In "custom" mode every roster member owes the amount given for them in
        ``custom_splits`` (zero when absent) and the amounts must add up to the
        total within one cent.

        Args:
            group_id: Group the expense belongs to
            title: Short description
            payer: Member who paid
            total: Full cost
            split_mode: "equal" or "custom"
            custom_splits: Per-member amounts for "custom" mode

        Returns:
            The saved expense

        Raises:
            GroupNotFoundError: If the group doesn't exist
            InvalidAmountError: If the total is not positive
            UnknownMemberError: If the payer or a split member isn't in the group
            SplitMismatchError: If custom splits don't add up to the total
        """
        group = self.get_group(group_id)

        if total <= 0:
            raise InvalidAmountError(f"Invalid total amount: {total}")

        if payer not in group.members:
            raise UnknownMemberError(payer, group_id)

        splits: list[Split]
        if split_mode == "equal":
            splits = equal_splits(total, group.members)
        else:
            custom_splits = custom_splits or {}
            for member in custom_splits:
                if member not in group.members:
                    raise UnknownMemberError(member, group_id)

            splits = [
                Split(member=member, amount=custom_splits.get(member, Decimal("0")))
                for member in group.members
            ]
            if not splits_match_total(total, splits):
                raise SplitMismatchError(split_total(splits), total)

        expense = Expense(
            group_id=group_id,
            title=title.strip() or "Untitled expense",
            payer=payer,
            total=total,
            splits=tuple(splits),
        )
        self.db.add_expense(expense)

        logger.info(
            f"Added expense {expense.id} to group {group_id}: "
            f"{payer} paid ${total:.2f} ({split_mode} split)"
        )
        return expense

    def get_expenses(self, group_id: str) -> list[Expense]:
        """Get a group's expenses in the order they were recorded."""
        self.get_group(group_id)
        return self.db.get_expenses_by_group(group_id)

    def get_balances(self, group_id: str) -> list[Balance]:
        """Compute current balances for a group."""
        group = self.get_group(group_id)
        expenses = self.db.get_expenses_by_group(group_id)
        return calculate_balances(expenses, group.members)

    def get_settlements(self, group_id: str) -> list[Transfer]:
        """Compute the suggested transfers that settle a group."""
        return calculate_settlements(self.get_balances(group_id))

    def get_group_summary(self, group_id: str) -> GroupSummary:
        """Collect a group's expenses, balances and suggested transfers."""
        group = self.get_group(group_id)
        expenses = self.db.get_expenses_by_group(group_id)

        balances = calculate_balances(expenses, group.members)
        transfers = calculate_settlements(balances)
        total_spent = round_money(
            sum((expense.total for expense in expenses), Decimal("0"))
        )

        logger.debug(
            f"Group {group_id}: {len(expenses)} expenses, "
            f"{len(transfers)} suggested transfers"
        )

        return GroupSummary(
            group=group,
            expenses=expenses,
            balances=balances,
            transfers=transfers,
            total_spent=total_spent,
        )
