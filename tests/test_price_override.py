"""Tests for manual price overrides."""

import pytest

from simperfi.cli.main import cli
from simperfi.domain.errors import ValidationError


def test_set_and_get_override(price_override_service):
    """Test setting a manual price."""
    assert price_override_service.set_override(" mytoken ", 0.42) == "MYTOKEN"

    assert price_override_service.get_override("MYTOKEN") == 0.42
    assert price_override_service.list_overrides() == {"MYTOKEN": 0.42}


def test_override_replaced(price_override_service):
    """Test that setting twice keeps the latest price."""
    price_override_service.set_override("BTC", 1)
    price_override_service.set_override("BTC", 2)

    assert price_override_service.list_overrides() == {"BTC": 2.0}


@pytest.mark.parametrize("price", [0, -3, float("inf")])
def test_invalid_override_rejected(price_override_service, price):
    """Test that manual prices must be positive."""
    with pytest.raises(ValidationError):
        price_override_service.set_override("BTC", price)


def test_clear_override(price_override_service):
    """Test removing a manual price."""
    price_override_service.set_override("BTC", 1)

    assert price_override_service.clear_override("btc") is True
    assert price_override_service.clear_override("btc") is False
    assert price_override_service.get_override("BTC") is None


def test_price_commands(cli_runner, temp_db):
    """Test the price CLI."""
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "price", "set", "MYTOKEN", "0.42"]
    )
    assert result.exit_code == 0
    assert "Manual price for MYTOKEN set to $0.42" in result.output

    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "price", "list"])
    assert "MYTOKEN" in result.output

    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "price", "set", "MYTOKEN", "0"]
    )
    assert result.exit_code == 1
    assert "greater than zero" in result.output

    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "price", "clear", "mytoken"]
    )
    assert result.exit_code == 0
    assert "Cleared manual price for MYTOKEN" in result.output
