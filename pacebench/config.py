"""Runtime configuration via environment variables."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_FILE: Optional[str] = None

    # Echo the textual performance report to stdout as well as the log
    PRINT_REPORT: bool = True

    HTTP_TIMEOUT_SECONDS: float = 30.0

    # CLI defaults when neither a flag nor a scenario file sets them
    DEFAULT_PACING_MS: float = 0.0
    DEFAULT_THINK_TIME_MS: float = 0.0

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
