"""CLI command tests using Click CliRunner."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from cli.main import cli
from llm import LLMError
from store import DataStore


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(f"paths:\n  db_path: {tmp_path / 'boomer.db'}\n")
    return path


def test_help(runner):
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    for command in ("init-db", "seed-demo", "serve", "chat"):
        assert command in result.output


def test_init_db(runner, config_file, tmp_path):
    result = runner.invoke(cli, ["-c", str(config_file), "init-db"])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "boomer.db").exists()


def test_seed_demo(runner, config_file, tmp_path):
    result = runner.invoke(cli, ["-c", str(config_file), "seed-demo", "demo-user", "--name", "Robert"])

    assert result.exit_code == 0, result.output
    assert "medications" in result.output
    store = DataStore(tmp_path / "boomer.db")
    assert store.users.get("demo-user").name == "Robert"
    assert len(store.contacts.search("demo-user", "")) > 0


def test_bad_config_exits(runner, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("llm:\n  provider: llama\n")
    result = runner.invoke(cli, ["-c", str(path), "init-db"])
    assert result.exit_code == 1
    assert "Config error" in result.output


def test_serve_runs_uvicorn(runner, config_file):
    with patch("uvicorn.run") as run:
        result = runner.invoke(cli, ["-c", str(config_file), "serve", "--port", "9000"])
    assert result.exit_code == 0, result.output
    run.assert_called_once_with("web.app:app", host="127.0.0.1", port=9000, reload=False)


def test_chat_session(runner, config_file, make_provider):
    provider = make_provider(classify={"intent": "help"})
    with patch("voice.factory.create_cheap_provider", return_value=provider):
        result = runner.invoke(
            cli,
            ["-c", str(config_file), "chat", "--user-id", "user-9", "--name", "Robert"],
            input="What can you do?\nquit\n",
        )

    assert result.exit_code == 0, result.output
    assert "Robert!" in result.output
    assert "I can help you with your schedule" in result.output


def test_chat_without_llm_key(runner, config_file):
    with patch("voice.factory.create_cheap_provider", side_effect=LLMError("No LLM API key found")):
        result = runner.invoke(cli, ["-c", str(config_file), "chat", "--user-id", "user-9"])
    assert result.exit_code == 1
    assert "LLM not configured" in result.output
