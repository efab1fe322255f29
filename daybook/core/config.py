from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven settings; a local ``.env`` file is read when present."""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- Database ---
    DATABASE_URL: str = "postgresql://daybook:daybook@db:5432/daybook"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    SQL_ECHO: bool = False

    # --- Runtime ---
    APP_ENV: str = "development"
    # Insert any missing default template metrics when the API starts.
    SEED_TEMPLATES_ON_STARTUP: bool = False

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    # "console" while developing, "json" for log shippers.
    LOG_FORMAT: str = "console"

    # Comma-separated allowed origins, or "*" for any.
    CORS_ORIGINS: str = "*"

    @property
    def cors_origins_list(self) -> list[str]:
        origins = self.CORS_ORIGINS.strip()
        if origins == "*":
            return ["*"]
        return [o.strip() for o in origins.split(",") if o.strip()]


settings = Settings()
