"""Tests for lutobot.cli."""

import asyncio
from unittest.mock import patch

from typer.testing import CliRunner

from lutobot import __version__
from lutobot.cli.commands import app
from lutobot.core.config import Config
from lutobot.store import SQLiteDocumentStore

from .conftest import SEED_FILE, FakeLLM

runner = CliRunner()

_PATCH_CONFIG = "lutobot.core.config.loader.load_config"
_PATCH_APP_PROVIDER = "lutobot.api.app.create_provider"
_PATCH_PROVIDER = "lutobot.core.providers.create_provider"


def _memory_config():
    return Config(store={"backend": "memory", "seed_path": str(SEED_FILE)})


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("run", "chat", "agents", "seed"):
        assert command in result.output


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"lutobot v{__version__}" in result.output


def test_chat_single_message():
    with (
        patch(_PATCH_CONFIG, return_value=_memory_config()),
        patch(_PATCH_APP_PROVIDER, return_value=FakeLLM()),
    ):
        result = runner.invoke(app, ["chat", "-m", "recipe for adobo"])

    assert result.exit_code == 0, result.output
    assert "Chicken Adobo" in result.output
    assert "View Recipe" in result.output


def test_chat_with_recipe_option():
    with (
        patch(_PATCH_CONFIG, return_value=_memory_config()),
        patch(_PATCH_APP_PROVIDER, return_value=FakeLLM()),
    ):
        result = runner.invoke(
            app, ["chat", "-m", "next step", "--recipe", "sinigang-na-baboy"]
        )

    assert result.exit_code == 0, result.output
    assert "Step 1: Boil the pork" in result.output


def test_chat_explicit_agent():
    llm = FakeLLM(reply="Tamarind makes it sour.")
    with (
        patch(_PATCH_CONFIG, return_value=_memory_config()),
        patch(_PATCH_APP_PROVIDER, return_value=llm),
    ):
        result = runner.invoke(
            app, ["chat", "-m", "recipe for adobo", "--agent", "ChatSupport"]
        )

    assert "Tamarind makes it sour." in result.output


def test_chat_interactive():
    with (
        patch(_PATCH_CONFIG, return_value=_memory_config()),
        patch(_PATCH_APP_PROVIDER, return_value=FakeLLM(reply="Ask me anything.")),
    ):
        result = runner.invoke(app, ["chat"], input="What is adobo?\n\nexit\n")

    assert result.exit_code == 0, result.output
    assert "Ask me anything." in result.output
    assert "Bye!" in result.output


def test_agents_lists_registration_order():
    with (
        patch(_PATCH_CONFIG, return_value=_memory_config()),
        patch(_PATCH_PROVIDER, return_value=FakeLLM()),
    ):
        result = runner.invoke(app, ["agents"])

    assert result.exit_code == 0, result.output
    positions = [
        result.output.index(name)
        for name in ("RecipeDiscovery", "CookingAssistant", "UserPreference", "ChatSupport")
    ]
    assert positions == sorted(positions)


def test_seed_into_sqlite(tmp_path):
    db_path = tmp_path / "seeded.db"
    config = Config(store={"backend": "sqlite", "path": str(db_path)})
    with patch(_PATCH_CONFIG, return_value=config):
        result = runner.invoke(app, ["seed", str(SEED_FILE)])

    assert result.exit_code == 0, result.output
    assert "Seeded 3 recipes" in result.output
    titles = asyncio.run(SQLiteDocumentStore(str(db_path)).get("recipes/leche-flan/title"))
    assert titles == "Leche Flan"


def test_seed_missing_file(tmp_path):
    result = runner.invoke(app, ["seed", str(tmp_path / "missing.json")])
    assert result.exit_code != 0
