from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote authoritative scoring service
    AUTOMATCH_API_BASE: str = "http://localhost:3001"
    AUTOMATCH_SERVICE_TOKEN: str | None = None  # Bearer token the service route accepts
    REMOTE_TIMEOUT_SECONDS: float = 10.0
    REMOTE_MAX_RETRIES: int = 3
    REMOTE_BACKOFF_BASE_SECONDS: float = 0.1  # 100ms, 200ms, 400ms

    # Registry
    REGISTRY_STORAGE_PATH: str = "data/registry.json"
    ALLOCATOR_FETCH_LIMIT: int = 1000
    REQUEST_FETCH_LIMIT: int = 100

    # Result defaults
    SCAN_MIN_SCORE: int = 70
    RUN_MIN_SCORE: int = 0
    MAX_RESULTS: int = 500


settings = Settings()
