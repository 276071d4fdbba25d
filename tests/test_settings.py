"""Tests for env-file loading and the fatal startup path."""

import pytest
from fastapi.testclient import TestClient

from main import create_app
from relay.core.settings import EnvFileError, Settings, load_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("OPEN_API_KEY", "UPSTREAM_URL", "UPSTREAM_MODEL", "PORT"):
        monkeypatch.delenv(name, raising=False)


def test_missing_env_file_is_fatal(tmp_path):
    with pytest.raises(EnvFileError):
        load_settings(tmp_path / ".env")


def test_reads_key_from_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("OPEN_API_KEY=sk-from-file\n")

    settings = load_settings(env_file)

    assert settings.open_api_key == "sk-from-file"


def test_unset_key_is_not_fatal(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("# nothing here\n")

    settings = load_settings(env_file)

    assert settings.open_api_key == ""


def test_process_environment_wins_over_env_file(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("OPEN_API_KEY=sk-from-file\n")
    monkeypatch.setenv("OPEN_API_KEY", "sk-from-env")

    assert load_settings(env_file).open_api_key == "sk-from-env"


def test_defaults_match_public_api():
    settings = Settings(_env_file=None)

    assert settings.upstream_url == "https://api.openai.com/v1/chat/completions"
    assert settings.upstream_model == "gpt-3.5-turbo"
    assert settings.port == 8080
    assert settings.upstream_timeout_seconds is None


def test_app_refuses_to_start_without_env_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    app = create_app()

    with pytest.raises(EnvFileError):
        with TestClient(app):
            pass
