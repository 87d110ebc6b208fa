"""Pydantic domain models for SplitSafe."""

import secrets
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

SplitMode = Literal["equal", "custom"]

CENT = Decimal("0.01")


def generate_id() -> str:
    """Generate a short random identifier for groups and expenses."""
    return secrets.token_hex(4)


# ============================================================================
# Ledger Models
# ============================================================================


class Group(BaseModel):
    """A group of members sharing expenses."""

    id: str = Field(default_factory=generate_id)
    name: str
    members: list[str]  # ordered roster, opaque identifiers
    created_at: datetime = Field(default_factory=datetime.now)


class Split(BaseModel):
    """One member's share of an expense."""

    model_config = ConfigDict(frozen=True)

    member: str
    amount: Decimal


class Expense(BaseModel):
    """A shared cost fronted by a single payer.

    Splits are not required to sum to ``total``; each split is applied
    independently when computing balances.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    group_id: str = ""
    title: str = ""
    payer: str
    total: Decimal
    splits: tuple[Split, ...] = ()
    created_at: datetime = Field(default_factory=datetime.now)


# ============================================================================
# Derived Models
# ============================================================================


class Balance(BaseModel):
    """Net position of a member: positive = owed money, negative = owes."""

    member: str
    amount: Decimal

    @property
    def is_settled(self) -> bool:
        """True when the amount is within one cent of zero."""
        return abs(self.amount) < CENT


class Transfer(BaseModel):
    """A suggested payment: ``from_member`` pays ``to_member``."""

    model_config = ConfigDict(populate_by_name=True)

    from_member: str = Field(alias="from")
    to_member: str = Field(alias="to")
    amount: Decimal


class GroupSummary(BaseModel):
    """Everything needed to render a group's detail view."""

    group: Group
    expenses: list[Expense]
    balances: list[Balance]
    transfers: list[Transfer]
    total_spent: Decimal
