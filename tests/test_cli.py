"""Smoke tests for the Typer CLI."""

import pytest
from typer.testing import CliRunner

from splitsafe.cli import app
from splitsafe.db import Database

runner = CliRunner()


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    """Point the CLI at a temporary database."""
    path = tmp_path / "cli.db"
    monkeypatch.setenv("DATABASE_PATH", str(path))
    return path


@pytest.fixture
def group_id(db_path):
    """Create a group through the CLI and return its ID."""
    result = runner.invoke(
        app, ["create-group", "Dinner club", "-m", "alice", "-m", "bob", "-m", "carol"]
    )
    assert result.exit_code == 0, result.output

    db = Database(db_path)
    try:
        return db.list_groups()[0].id
    finally:
        db.close()


def test_create_group_and_list(group_id):
    result = runner.invoke(app, ["groups"])

    assert result.exit_code == 0
    assert "Dinner club" in result.output
    assert group_id in result.output


def test_new_group_has_nothing_to_settle(group_id):
    result = runner.invoke(app, ["settle", group_id])

    assert result.exit_code == 0
    assert "Nothing to settle" in result.output


def test_new_group_is_settled_up(group_id):
    result = runner.invoke(app, ["balances", group_id])

    assert result.exit_code == 0
    assert "All settled up" in result.output


def test_add_expense_and_settle(group_id):
    result = runner.invoke(
        app,
        ["add-expense", group_id, "--total", "90", "--payer", "alice", "-t", "Pizza"],
    )
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["settle", group_id])

    assert result.exit_code == 0
    assert "$30.00" in result.output
    assert "bob" in result.output
    assert "carol" in result.output


def test_add_expense_with_custom_split(group_id):
    result = runner.invoke(
        app,
        [
            "add-expense",
            group_id,
            "--total",
            "50",
            "--payer",
            "bob",
            "--split",
            "alice=20",
            "--split",
            "carol=30",
        ],
    )
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["show", group_id])

    assert result.exit_code == 0
    assert "$50.00" in result.output
    assert "$30.00" in result.output


def test_custom_split_mismatch_fails(group_id):
    result = runner.invoke(
        app,
        ["add-expense", group_id, "--total", "50", "--payer", "bob", "-s", "alice=20"],
    )

    assert result.exit_code == 1
    assert "Split amounts must equal total" in result.output


def test_unknown_group_fails(db_path):
    result = runner.invoke(app, ["balances", "missing"])

    assert result.exit_code == 1
    assert "not found" in result.output
