from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # Fortune backend settings
    FORTUNE_API_BASE_URL: str = "https://api.dothefortune.com"
    FORTUNE_API_VERSION: str = "/api/v1"

    # Request timeouts and retry configuration
    REQUEST_TIMEOUT: float = 30.0  # seconds (compatibility calls can be slow)
    MAX_RETRIES: int = 3
    BACKOFF_FACTOR: float = 2.0

    # Busy indicator
    PRESENCE_MIN_DWELL_MS: int = 1200

    # Records screen
    RECENT_RECORDS_LIMIT: int = 6

    # Ephemeral counterpart accounts
    TEMP_USER_EMAIL_DOMAIN: str = "temp.com"
    TEMP_USER_PASSWORD: str = "temp123456"
    DEFAULT_BIRTH_PLACE: str = "서울"

    # Optional on-disk session (token + cached display fields)
    SESSION_FILE: str | None = None

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def api_root(self) -> str:
        """Base URL joined with the API version prefix, e.g. https://host/api/v1."""
        base = self.FORTUNE_API_BASE_URL.rstrip("/")
        version = "/" + self.FORTUNE_API_VERSION.strip("/")
        return f"{base}{version}"

    def session_path(self) -> Path | None:
        if self.SESSION_FILE:
            return Path(self.SESSION_FILE).expanduser()
        return None

    def get_http_config(self) -> dict:
        """
        Get HTTP client configuration.
        Adjust environment-specific settings based on self.environment.
        """
        config = {
            "timeout": self.REQUEST_TIMEOUT,
            "max_retries": self.MAX_RETRIES,
            "backoff_factor": self.BACKOFF_FACTOR,
        }

        if self.environment == "development":
            # Fail fast locally
            config.update(
                {
                    "timeout": min(self.REQUEST_TIMEOUT, 15.0),
                }
            )

        return config


settings = Settings()
