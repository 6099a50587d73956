from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    App settings.

    Notes:
    - Defaults are local and deterministic (SQLite file next to the repo, demo seed data).
    - Every field can be overridden with a `SHIFTDESK_` environment variable.
    """

    model_config = SettingsConfigDict(env_prefix="SHIFTDESK_", extra="ignore")

    app_name: str = "shiftdesk"
    host: str = "127.0.0.1"
    port: int = 8000
    db_url: str | None = None
    security_config_path: str | None = None
    log_level: str = "INFO"

    session_secret: str = "change-me"
    session_cookie: str = "shiftdesk_session"
    session_max_age: int = 60 * 60 * 8

    seed_demo_data: bool = True

    # Shared with every page so the frontend can limit how far ahead shifts may be requested.
    # 0 disables the limit.
    shift_application_deadline_days: int = 0

    # Fraction of ability decisions written to the debug log. 0 turns decision logging off.
    authz_log_sample_rate: float = 0.0

    def resolved_db_url(self) -> str:
        if self.db_url:
            return self.db_url

        repo_root = Path(__file__).resolve().parents[1]
        db_path = repo_root / "shiftdesk.db"
        return f"sqlite:///{db_path}"

    def resolved_security_config_path(self) -> Path:
        if self.security_config_path:
            return Path(self.security_config_path)

        repo_root = Path(__file__).resolve().parents[1]
        return repo_root / "config" / "security_config.yaml"


@lru_cache
def get_settings() -> Settings:
    return Settings()
