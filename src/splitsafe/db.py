"""SQLite ledger storage for SplitSafe."""

import sqlite3
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from .models import Expense, Group, Split


class Database:
    """SQLite database manager for groups and expenses."""

    def __init__(self, db_path: Path):
        """Initialize database connection."""
        self.db_path = db_path
        self.conn = sqlite3.connect(str(db_path))
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")
        self._init_schema()

    def _init_schema(self):
        """Initialize database schema."""
        cursor = self.conn.cursor()

        # Groups table
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS ledger_groups (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """
        )

        # Group roster, position keeps the member order
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS group_members (
                group_id TEXT NOT NULL REFERENCES ledger_groups(id) ON DELETE CASCADE,
                position INTEGER NOT NULL,
                member TEXT NOT NULL,
                PRIMARY KEY (group_id, position)
            )
        """
        )

        # Expenses table (amounts stored as TEXT to keep exact cents)
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS expenses (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                group_id TEXT NOT NULL REFERENCES ledger_groups(id) ON DELETE CASCADE,
                title TEXT NOT NULL,
                payer TEXT NOT NULL,
                total TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS expense_splits (
                expense_id TEXT NOT NULL REFERENCES expenses(id) ON DELETE CASCADE,
                position INTEGER NOT NULL,
                member TEXT NOT NULL,
                amount TEXT NOT NULL,
                PRIMARY KEY (expense_id, position)
            )
        """
        )

        self.conn.commit()

    def close(self):
        """Close database connection."""
        self.conn.close()

    # ========================================================================
    # Group operations
    # ========================================================================

    def add_group(self, group: Group) -> str:
        """Save a group and its roster."""
        cursor = self.conn.cursor()
        cursor.execute(
            "INSERT INTO ledger_groups (id, name, created_at) VALUES (?, ?, ?)",
            (group.id, group.name, group.created_at.isoformat()),
        )
        cursor.executemany(
            "INSERT INTO group_members (group_id, position, member) VALUES (?, ?, ?)",
            [(group.id, idx, member) for idx, member in enumerate(group.members)],
        )
        self.conn.commit()
        return group.id

    def get_group(self, group_id: str) -> Group | None:
        """Get a group by ID."""
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT id, name, created_at FROM ledger_groups WHERE id = ?",
            (group_id,),
        )
        row = cursor.fetchone()
        if not row:
            return None

        return self._row_to_group(row)

    def list_groups(self) -> list[Group]:
        """Get all groups, oldest first."""
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT id, name, created_at FROM ledger_groups ORDER BY created_at, rowid"
        )
        return [self._row_to_group(row) for row in cursor.fetchall()]

    def _row_to_group(self, row: sqlite3.Row) -> Group:
        """Build a group from its row plus roster."""
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT member FROM group_members WHERE group_id = ? ORDER BY position",
            (row["id"],),
        )
        return Group(
            id=row["id"],
            name=row["name"],
            members=[member_row["member"] for member_row in cursor.fetchall()],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    # ========================================================================
    # Expense operations
    # ========================================================================

    def add_expense(self, expense: Expense) -> str:
        """Save an expense and its splits."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO expenses (id, group_id, title, payer, total, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                expense.id,
                expense.group_id,
                expense.title,
                expense.payer,
                str(expense.total),
                expense.created_at.isoformat(),
            ),
        )
        cursor.executemany(
            """
            INSERT INTO expense_splits (expense_id, position, member, amount)
            VALUES (?, ?, ?, ?)
            """,
            [
                (expense.id, idx, split.member, str(split.amount))
                for idx, split in enumerate(expense.splits)
            ],
        )
        self.conn.commit()
        return expense.id

    def get_expenses_by_group(self, group_id: str) -> list[Expense]:
        """Get a group's expenses in the order they were recorded."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT id, group_id, title, payer, total, created_at
            FROM expenses
            WHERE group_id = ?
            ORDER BY seq
            """,
            (group_id,),
        )
        rows = cursor.fetchall()

        expenses = []
        for row in rows:
            cursor.execute(
                """
                SELECT member, amount FROM expense_splits
                WHERE expense_id = ?
                ORDER BY position
                """,
                (row["id"],),
            )
            splits = [
                Split(member=split_row["member"], amount=Decimal(split_row["amount"]))
                for split_row in cursor.fetchall()
            ]
            expenses.append(
                Expense(
                    id=row["id"],
                    group_id=row["group_id"],
                    title=row["title"],
                    payer=row["payer"],
                    total=Decimal(row["total"]),
                    splits=tuple(splits),
                    created_at=datetime.fromisoformat(row["created_at"]),
                )
            )
        return expenses

    def clear_all_data(self):
        """Delete every group and expense."""
        cursor = self.conn.cursor()
        cursor.execute("DELETE FROM expense_splits")
        cursor.execute("DELETE FROM expenses")
        cursor.execute("DELETE FROM group_members")
        cursor.execute("DELETE FROM ledger_groups")
        self.conn.commit()
