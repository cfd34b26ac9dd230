# enhance_relay/config.py
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent
PUBLIC_DIR = BASE_DIR / "public"

class Settings(BaseSettings):
    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    # Replicate
    REPLICATE_API_TOKEN: str | None = None
    REPLICATE_MODEL: str = "nightmareai/real-esrgan"
    REPLICATE_ENDPOINT: str = "https://api.replicate.com"
    REPLICATE_TIMEOUT: int = 120
    POLL_INTERVAL: float = 1.5
    POLL_MAX_WAIT: float = 300

    # How long a finished job stays queryable before it is dropped
    JOB_RETENTION_SECONDS: float = 3600
    # Grace period for running jobs when the server stops
    SHUTDOWN_TIMEOUT: float = 5

    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        extra="ignore",
        case_sensitive=False,
    )

settings = Settings()
