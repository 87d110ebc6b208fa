"""SplitSafe - Track shared expenses and compute who owes whom."""

__version__ = "0.1.0"

from .calc import (
    EPSILON,
    calculate_balances,
    calculate_settlements,
    equal_splits,
    round_money,
)
from .config import Settings, load_settings
from .db import Database
from .models import Balance, Expense, Group, GroupSummary, Split, Transfer
from .service import LedgerService

__all__ = [
    "EPSILON",
    "calculate_balances",
    "calculate_settlements",
    "equal_splits",
    "round_money",
    "Settings",
    "load_settings",
    "Database",
    "Balance",
    "Expense",
    "Group",
    "GroupSummary",
    "Split",
    "Transfer",
    "LedgerService",
]
