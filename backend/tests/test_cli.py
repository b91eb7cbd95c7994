"""
Tests for the typer CLI, run against the test session.
"""

from contextlib import contextmanager

import pytest
from typer.testing import CliRunner

import cli
from shared.config.settings import Settings

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_session(db_session, monkeypatch):
    @contextmanager
    def _context():
        yield db_session

    monkeypatch.setattr(cli, "get_db_context", _context)
    monkeypatch.setattr(cli, "setup_logging", lambda: None)
    return db_session


class TestCatalogCommands:

    def test_resolve(self, burger_menu):
        result = runner.invoke(cli.app, ["resolve", str(burger_menu["toppings"].id)])

        assert result.exit_code == 0
        assert "Cheese" in result.stdout
        assert "1.00" in result.stdout

    def test_resolve_missing_group(self):
        result = runner.invoke(cli.app, ["resolve", "999"])

        assert result.exit_code == 1
        assert "no encontrado" in result.stdout

    def test_show_product(self, burger_menu):
        result = runner.invoke(cli.app, ["show-product", str(burger_menu["burger"].id)])

        assert result.exit_code == 0
        assert "Burger" in result.stdout
        assert "Toppings" in result.stdout

    def test_can_delete_blocked(self, burger_menu):
        result = runner.invoke(cli.app, ["can-delete", "ingredient", str(burger_menu["cheese"].id)])

        assert result.exit_code == 1
        assert "Burger" in result.stdout

    def test_can_delete_ok(self, combo_menu):
        result = runner.invoke(cli.app, ["can-delete", "product", str(combo_menu["combo"].id)])

        assert result.exit_code == 0
        assert "can be deleted" in result.stdout


class TestAvailabilityCommands:

    def test_enable_then_query(self, seed_branch, burger_menu):
        branch_id = str(seed_branch.id)
        cheese_id = str(burger_menu["cheese"].id)

        result = runner.invoke(cli.app, ["enable", branch_id, str(burger_menu["burger"].id)])
        assert result.exit_code == 0

        result = runner.invoke(cli.app, ["is-available", branch_id, cheese_id, "--ingredient"])
        assert result.exit_code == 0
        assert "is available" in result.stdout

    def test_disable_and_remove(self, seed_branch, burger_menu):
        branch_id = str(seed_branch.id)
        burger_id = str(burger_menu["burger"].id)

        assert runner.invoke(cli.app, ["disable", branch_id, burger_id]).exit_code == 0
        result = runner.invoke(cli.app, ["is-available", branch_id, burger_id])
        assert "is not available" in result.stdout

        result = runner.invoke(cli.app, ["remove", branch_id, burger_id])
        assert "removed" in result.stdout
        result = runner.invoke(cli.app, ["remove", branch_id, burger_id])
        assert "was not at branch" in result.stdout

    def test_unknown_branch(self):
        result = runner.invoke(cli.app, ["enable", "404", "1"])

        assert result.exit_code == 1
        assert "Sucursal" in result.stdout


class TestStartupConfiguration:

    def test_production_with_unsafe_settings_refuses_to_run(self, monkeypatch, burger_menu):
        monkeypatch.setattr(
            cli,
            "settings",
            Settings(environment="production", debug=True, database_url="sqlite://"),
        )

        result = runner.invoke(cli.app, ["resolve", str(burger_menu["toppings"].id)])

        assert result.exit_code == 1
        assert "DEBUG must be False in production" in result.stdout
        assert "Cheese" not in result.stdout

    def test_production_checks_skipped_in_development(self, monkeypatch, burger_menu):
        monkeypatch.setattr(cli, "settings", Settings(environment="development", sql_echo=True))

        result = runner.invoke(cli.app, ["resolve", str(burger_menu["toppings"].id)])

        assert result.exit_code == 0
        assert "Cheese" in result.stdout

    def test_invalid_node_cap_is_reported(self, monkeypatch, burger_menu):
        monkeypatch.setattr(cli, "settings", Settings(propagation_max_nodes=-1))

        result = runner.invoke(cli.app, ["resolve", str(burger_menu["toppings"].id)])

        assert "PROPAGATION_MAX_NODES" in result.stdout
