# File: /gridbase/core/config.py | Version: 1.0 | Title: Central App Settings (Pydantic v2)
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # --- Database ---
    DATABASE_URL: str = "sqlite:///./gridbase.db"

    # --- Security / JWT ---
    SECRET_KEY: str = "CHANGE_ME_FOR_DEV_ONLY"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # --- API behavior toggles ---
    ENABLE_STD_ERRORS: bool = (
        False  # set True in .env to enable standardized error responses
    )

    # --- Index provisioning ---
    INDEX_PROVISIONING_ENABLED: bool = True
    INDEX_BUILD_CONCURRENTLY: bool = True  # CREATE INDEX CONCURRENTLY on Postgres

    # --- Row scans ---
    ROWS_PAGE_SIZE: int = 200
    ROWS_MAX_PAGE_SIZE: int = 1000
    SEARCH_MAX_RESULTS: int = 100

    # v2-style config
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()
