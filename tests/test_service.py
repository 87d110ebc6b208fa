"""Tests for LedgerService layer."""

from decimal import Decimal

import pytest

from splitsafe.config import Settings
from splitsafe.db import Database
from splitsafe.exceptions import (
    GroupNotFoundError,
    InvalidAmountError,
    InvalidGroupError,
    SplitMismatchError,
    UnknownMemberError,
)
from splitsafe.service import LedgerService

ALICE = "0x1111111111111111111111111111111111111111"
BOB = "bob@example.com"
CAROL = "carol"


@pytest.fixture
def mock_settings(tmp_path):
    """Create settings pointing at a temporary database."""
    return Settings(database_path=tmp_path / "ledger" / "test.db")


@pytest.fixture
def mock_db(mock_settings):
    """Create a temporary database."""
    db = Database(mock_settings.database_path)
    yield db
    db.close()


@pytest.fixture
def service(mock_settings, mock_db):
    """Create a LedgerService instance."""
    return LedgerService(mock_settings, mock_db)


@pytest.fixture
def group(service):
    """Create a three-member group."""
    return service.create_group("Ski trip", [ALICE, BOB, CAROL])


class TestCreateGroup:
    """Test group creation."""

    def test_creates_and_persists_group(self, service, mock_db):
        group = service.create_group("Flat", ["a", "b"])

        stored = mock_db.get_group(group.id)

        assert stored is not None
        assert stored.name == "Flat"
        assert stored.members == ["a", "b"]

    def test_settings_create_database_directory(self, mock_settings):
        assert mock_settings.database_path.parent.is_dir()

    def test_members_stripped_and_deduplicated(self, service):
        group = service.create_group("  Flat  ", [" a", "b", "a ", "", "c"])

        assert group.name == "Flat"
        assert group.members == ["a", "b", "c"]

    def test_empty_name_rejected(self, service):
        with pytest.raises(InvalidGroupError, match="name"):
            service.create_group("   ", ["a"])

    def test_no_members_rejected(self, service):
        with pytest.raises(InvalidGroupError, match="at least one member"):
            service.create_group("Flat", ["", "  "])

    def test_list_groups_in_creation_order(self, service):
        first = service.create_group("First", ["a"])
        second = service.create_group("Second", ["b"])

        assert [g.id for g in service.list_groups()] == [first.id, second.id]


class TestGetGroup:
    """Test group lookup."""

    def test_missing_group_raises(self, service):
        with pytest.raises(GroupNotFoundError) as exc_info:
            service.get_group("nope")

        assert exc_info.value.group_id == "nope"

    def test_missing_group_for_balances(self, service):
        with pytest.raises(GroupNotFoundError):
            service.get_balances("nope")


class TestAddExpense:
    """Test expense entry and its validation."""

    def test_equal_split_over_whole_roster(self, service, group):
        expense = service.add_expense(
            group.id, "Cabin", payer=ALICE, total=Decimal("100")
        )

        assert expense.group_id == group.id
        assert [(s.member, s.amount) for s in expense.splits] == [
            (ALICE, Decimal("33.34")),
            (BOB, Decimal("33.33")),
            (CAROL, Decimal("33.33")),
        ]

    def test_expense_round_trips_through_database(self, service, group):
        expense = service.add_expense(
            group.id, "Cabin", payer=ALICE, total=Decimal("100")
        )

        stored = service.get_expenses(group.id)

        assert len(stored) == 1
        assert stored[0].id == expense.id
        assert stored[0].total == Decimal("100")
        assert stored[0].splits == expense.splits

    def test_custom_split_fills_missing_members_with_zero(self, service, group):
        expense = service.add_expense(
            group.id,
            "Lift passes",
            payer=BOB,
            total=Decimal("80"),
            split_mode="custom",
            custom_splits={BOB: Decimal("30"), CAROL: Decimal("50")},
        )

        assert [(s.member, s.amount) for s in expense.splits] == [
            (ALICE, Decimal("0")),
            (BOB, Decimal("30")),
            (CAROL, Decimal("50")),
        ]

    def test_custom_split_mismatch_rejected(self, service, group):
        with pytest.raises(SplitMismatchError) as exc_info:
            service.add_expense(
                group.id,
                "Lift passes",
                payer=BOB,
                total=Decimal("80"),
                split_mode="custom",
                custom_splits={BOB: Decimal("30")},
            )

        assert exc_info.value.split_total == Decimal("30")
        assert exc_info.value.expected_total == Decimal("80")
        assert service.get_expenses(group.id) == []

    def test_custom_split_one_cent_off_accepted(self, service, group):
        service.add_expense(
            group.id,
            "Snacks",
            payer=CAROL,
            total=Decimal("10"),
            split_mode="custom",
            custom_splits={
                ALICE: Decimal("3.33"),
                BOB: Decimal("3.33"),
                CAROL: Decimal("3.33"),
            },
        )

        assert len(service.get_expenses(group.id)) == 1

    def test_custom_split_unknown_member_rejected(self, service, group):
        with pytest.raises(UnknownMemberError) as exc_info:
            service.add_expense(
                group.id,
                "Lift passes",
                payer=BOB,
                total=Decimal("80"),
                split_mode="custom",
                custom_splits={"mallory": Decimal("80")},
            )

        assert exc_info.value.member == "mallory"

    def test_unknown_payer_rejected(self, service, group):
        with pytest.raises(UnknownMemberError):
            service.add_expense(group.id, "Gas", payer="dave", total=Decimal("10"))

    @pytest.mark.parametrize("total", [Decimal("0"), Decimal("-5")])
    def test_non_positive_total_rejected(self, service, group, total):
        with pytest.raises(InvalidAmountError):
            service.add_expense(group.id, "Gas", payer=ALICE, total=total)

    def test_blank_title_gets_placeholder(self, service, group):
        expense = service.add_expense(group.id, "  ", payer=ALICE, total=Decimal("3"))

        assert expense.title == "Untitled expense"


class TestBalancesAndSettlements:
    """Test balances and transfers computed from stored expenses."""

    def test_balances_for_new_group_are_zero(self, service, group):
        balances = service.get_balances(group.id)

        assert [(b.member, b.amount) for b in balances] == [
            (ALICE, Decimal("0")),
            (BOB, Decimal("0")),
            (CAROL, Decimal("0")),
        ]
        assert service.get_settlements(group.id) == []

    def test_balances_reflect_latest_expenses(self, service, group):
        service.add_expense(group.id, "Dinner", payer=ALICE, total=Decimal("90"))
        assert [b.amount for b in service.get_balances(group.id)] == [
            Decimal("60"),
            Decimal("-30"),
            Decimal("-30"),
        ]

        service.add_expense(group.id, "Breakfast", payer=BOB, total=Decimal("30"))
        assert [b.amount for b in service.get_balances(group.id)] == [
            Decimal("50"),
            Decimal("-10"),
            Decimal("-40"),
        ]

    def test_settlements(self, service, group):
        service.add_expense(group.id, "Dinner", payer=ALICE, total=Decimal("90"))

        transfers = service.get_settlements(group.id)

        assert [(t.from_member, t.to_member, t.amount) for t in transfers] == [
            (BOB, ALICE, Decimal("30")),
            (CAROL, ALICE, Decimal("30")),
        ]

    def test_group_summary(self, service, group):
        service.add_expense(group.id, "Dinner", payer=ALICE, total=Decimal("90"))
        service.add_expense(group.id, "Taxi", payer=CAROL, total=Decimal("15.50"))

        summary = service.get_group_summary(group.id)

        assert summary.group.id == group.id
        assert len(summary.expenses) == 2
        assert summary.total_spent == Decimal("105.50")
        assert summary.balances == service.get_balances(group.id)
        assert summary.transfers == service.get_settlements(group.id)
        assert abs(sum(b.amount for b in summary.balances)) <= Decimal("0.01")

    def test_expenses_kept_per_group(self, service, group):
        other = service.create_group("Book club", [BOB, CAROL])
        service.add_expense(other.id, "Books", payer=BOB, total=Decimal("40"))

        assert service.get_expenses(group.id) == []
        assert len(service.get_expenses(other.id)) == 1


class TestClearAllData:
    """Test wiping the ledger."""

    def test_clear_all_data(self, service, mock_db, group):
        service.add_expense(group.id, "Dinner", payer=ALICE, total=Decimal("90"))

        mock_db.clear_all_data()

        assert service.list_groups() == []
        assert mock_db.get_expenses_by_group(group.id) == []
