from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TOKEN_PATH = Path("pennychallengetoken.json")
MIN_BALANCE = 1000


class AppSettings(BaseSettings):
    client_id: str
    client_secret: str
    source_account: str = ""
    destination_pot: str = ""
    token_path: Path = DEFAULT_TOKEN_PATH
    api_base_url: str = "https://api.monzo.com"
    auth_base_url: str = "https://auth.monzo.com"
    redirect_uri: str = "http://localhost"
    # Minor currency units (pence).
    min_balance: int = MIN_BALANCE

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


def load_settings(*, env_file: Path | None = None, **overrides: Any) -> AppSettings:
    """Build settings once; explicit overrides (CLI flags) win over the environment."""
    values = {key: value for key, value in overrides.items() if value is not None}
    if env_file is not None:
        return AppSettings(_env_file=env_file, **values)  # type: ignore[call-arg]
    return AppSettings(**values)
