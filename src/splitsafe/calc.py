"""Balance netting and settlement computation.

Both ``calculate_balances`` and ``calculate_settlements`` are pure: they never
mutate their inputs, hold no state between calls and raise no errors for
malformed input. Validation of expense entries happens in the service layer.
"""

import logging
from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal

from .models import CENT, Balance, Expense, Split, Transfer

logger = logging.getLogger(__name__)

# Amounts below this magnitude are treated as settled
EPSILON = CENT


def round_money(amount: Decimal) -> Decimal:
    """
    Round an amount to cents.
    Uses ROUND_HALF_UP for consistency.

    Args:
        amount: Amount as Decimal

    Returns:
        Amount quantized to 2 decimal places
    """
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_balances(
    expenses: Iterable[Expense], members: Iterable[str]
) -> list[Balance]:
    """
    Calculate net balances for all members of a group.

    Steps:
    1. Start every roster member at zero
    2. Credit each payer with the expense total
    3. Debit each split member with their share
    4. Round every balance to cents once, at the end

    Members that only appear in expenses are added after the roster, in the
    order they are first seen.

    Args:
        expenses: Expenses in the order they were recorded
        members: Group roster

    Returns:
        One balance per distinct member
    """
    balance_map: dict[str, Decimal] = {member: Decimal("0") for member in members}

    for expense in expenses:
        balance_map[expense.payer] = (
            balance_map.get(expense.payer, Decimal("0")) + expense.total
        )

        for split in expense.splits:
            balance_map[split.member] = (
                balance_map.get(split.member, Decimal("0")) - split.amount
            )

    return [
        Balance(member=member, amount=round_money(amount))
        for member, amount in balance_map.items()
    ]


def calculate_settlements(balances: Iterable[Balance]) -> list[Transfer]:
    """
    Calculate the transfers that settle all balances.

    Greedy matching: the largest creditor is paired with the largest debtor
    until one of them is exhausted, then the scan moves on. This keeps the
    transfer count low but is not guaranteed minimal.

    Args:
        balances: Net balances, e.g. from ``calculate_balances``

    Returns:
        Ordered transfers, each with a positive amount
    """
    balances = list(balances)

    # Work on copies; amounts are drawn down during the scan
    creditors = [
        b.model_copy()
        for b in sorted(
            (b for b in balances if b.amount > EPSILON),
            key=lambda b: b.amount,
            reverse=True,
        )
    ]
    debtors = [
        b.model_copy()
        for b in sorted(
            (b for b in balances if b.amount < -EPSILON), key=lambda b: b.amount
        )
    ]

    transfers: list[Transfer] = []
    i = j = 0

    while i < len(creditors) and j < len(debtors):
        creditor, debtor = creditors[i], debtors[j]

        transfer_amount = min(creditor.amount, abs(debtor.amount))

        if transfer_amount > EPSILON:
            transfers.append(
                Transfer(
                    from_member=debtor.member,
                    to_member=creditor.member,
                    amount=round_money(transfer_amount),
                )
            )

        creditor.amount -= transfer_amount
        debtor.amount += transfer_amount

        if creditor.amount < EPSILON:
            i += 1
        if abs(debtor.amount) < EPSILON:
            j += 1

    if i < len(creditors) or j < len(debtors):
        residual = sum(c.amount for c in creditors[i:]) + sum(
            d.amount for d in debtors[j:]
        )
        logger.debug(f"Dropped unmatched residual of {residual} after settlement")

    return transfers


def equal_splits(total: Decimal, members: Sequence[str]) -> list[Split]:
    """
    Split a total evenly across members, to the cent.

    Each share is the total divided by the member count, rounded down to
    cents; leftover cents go one each to the first members so the shares
    add up to the total exactly.

    Args:
        total: Expense total
        members: Members sharing the expense

    Returns:
        One split per member, in roster order
    """
    if not members:
        return []

    total_cents = int(round_money(total) * 100)
    share_cents, remainder = divmod(total_cents, len(members))

    return [
        Split(
            member=member,
            amount=round_money(
                Decimal(share_cents + (1 if idx < remainder else 0)) / 100
            ),
        )
        for idx, member in enumerate(members)
    ]


def split_total(splits: Iterable[Split]) -> Decimal:
    """Sum of all split amounts."""
    return sum((split.amount for split in splits), Decimal("0"))


def splits_match_total(total: Decimal, splits: Iterable[Split]) -> bool:
    """Check that splits add up to the total within one cent."""
    return abs(split_total(splits) - total) <= EPSILON
