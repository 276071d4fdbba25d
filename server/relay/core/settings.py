from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ENV_FILE = ".env"


class EnvFileError(RuntimeError):
    """Raised when the env file holding the upstream credential is missing."""


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=DEFAULT_ENV_FILE, extra="ignore")

    # Upstream completion API
    open_api_key: str = Field(default="")
    upstream_url: str = Field(default="https://api.openai.com/v1/chat/completions")
    upstream_model: str = Field(default="gpt-3.5-turbo")
    # None keeps the client unbounded
    upstream_timeout_seconds: Optional[float] = Field(default=None)

    # HTTP listener
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    log_level: str = Field(default="info")


def load_settings(env_file: str | Path = DEFAULT_ENV_FILE) -> Settings:
    """
    Load settings from the environment and the given env file.

    The env file must exist. Variables already present in the process
    environment win over the file, and an unset OPEN_API_KEY is not an error.
    """
    path = Path(env_file)
    if not path.is_file():
        raise EnvFileError(f"Error loading {path} file")
    return Settings(_env_file=path)
