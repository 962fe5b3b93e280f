"""Application configuration module."""

from functools import lru_cache
from typing import Optional, Tuple

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
VALID_STORE_BACKENDS = ('memory', 'sql')


class Settings(BaseSettings):
    """Application settings."""

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    LOG_FILE: Optional[str] = None

    # Storage settings
    STORE_BACKEND: str = "memory"
    DATABASE_URL: str = "sqlite+aiosqlite:///./talentflow.db"
    SQL_ECHO: bool = False

    # Simulated backend
    MOCK_ERROR_RATE: float = 0.08
    MOCK_LATENCY_MIN_MS: int = 200
    MOCK_LATENCY_MAX_MS: int = 1200

    # Assessments
    SEED_ON_STARTUP: bool = True
    SHARE_LINK_BASE_URL: str = "https://assessment.talentflow.com/take/"

    # API settings
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "TalentFlow Assessments"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        if v.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {list(VALID_LOG_LEVELS)}")
        return v.upper()

    @field_validator('STORE_BACKEND')
    @classmethod
    def normalize_store_backend(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator('MOCK_ERROR_RATE')
    @classmethod
    def validate_error_rate(cls, v: float) -> float:
        if not 0 <= v <= 1:
            raise ValueError(f"Error rate must be between 0 and 1, got {v}")
        return v

    @property
    def latency_range_ms(self) -> Tuple[int, int]:
        """Latency bounds for the simulated backend, smallest first."""
        low, high = sorted((self.MOCK_LATENCY_MIN_MS, self.MOCK_LATENCY_MAX_MS))
        return max(low, 0), max(high, 0)

    def share_url(self, share_link: str) -> str:
        """Render the public URL for an opaque share link token."""
        if share_link.startswith(("http://", "https://")):
            return share_link
        return f"{self.SHARE_LINK_BASE_URL.rstrip('/')}/{share_link}"


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()

