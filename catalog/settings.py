from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        case_sensitive=True, env_file=".env", extra="ignore"
    )

    ENVIRONMENT: str = "development"

    # Database settings
    DATABASE_URL: str = "sqlite+aiosqlite:///./catalog.db"
    DB_ECHO: bool = False
    DB_POOL_PRE_PING: bool = True

    # Database initialization settings
    DB_INIT_RETRY_INTERVAL: int = 2
    DB_INIT_MAX_RETRIES: int = 5

    # Reject aliases that point into another library
    ALIAS_SAME_LIBRARY_ONLY: bool = True

    # Query monitoring
    SLOW_QUERY_THRESHOLD_MS: int = 100

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FILE_PATH: str = "logs/logging_errors.log"


app_settings = Settings()
