from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # DB
    database_url: str = Field(
        default="sqlite+pysqlite:///./football_import.db",
        validation_alias="DATABASE_URL",
    )
    db_echo: bool = False

    # football-data.org
    football_data_api_key: str | None = Field(default=None, repr=False)
    football_data_base_url: str = "https://api.football-data.org/v4"
    http_timeout_s: float = 30.0

    # Import pacing
    request_delay_s: float = 6.0
    team_import_limit: int = 5
    max_retries: int = 3
    retry_base_delay_s: float = 1.0

    log_level: str = "INFO"

    # -----------------------------
    # Required-key helpers
    # -----------------------------

    def require_football_data_api_key(self) -> str:
        if not self.football_data_api_key:
            raise RuntimeError(
                "FOOTBALL_DATA_API_KEY is not set. Set it in the environment or .env file."
            )
        return self.football_data_api_key


settings = Settings()
