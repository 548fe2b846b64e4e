from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./sqlquest.db"
    ECHO_SQL: bool = False

    # Lock-wait budget so a blocked write fails fast instead of hanging
    BUSY_TIMEOUT_SECONDS: float = 3.0

    # Optional SQL file used to seed the challenge database on startup
    SCHEMA_SCRIPT: Optional[str] = None

    DEFAULT_SUCCESS_MESSAGE: str = "Congratulations, you completed the challenge!"
    DEFAULT_CLOSE_DELAY_SECONDS: float = 1.0

    LOG_LEVEL: str = "INFO"

    # This tells Pydantic to read from the .env file
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Create a single instance of the settings to use everywhere
settings = Settings()
