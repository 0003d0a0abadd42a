from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# One hour, shared by every cached resource
DEFAULT_CACHE_TTL_SECONDS = 60 * 60


class Settings(BaseSettings):
    api_url: str = Field(default="http://localhost:8000", validation_alias="API_URL")
    api_timeout_seconds: float = Field(default=10.0, validation_alias="API_TIMEOUT_SECONDS")
    cache_ttl_seconds: int = Field(default=DEFAULT_CACHE_TTL_SECONDS, validation_alias="CACHE_TTL_SECONDS")
    cache_backend: str = Field(
        default="memory",
        validation_alias="CACHE_BACKEND",
        description="Persistent store backing the read-through cache (memory or redis)",
    )
    redis_url: str = Field(default="redis://localhost:6379/0", validation_alias="REDIS_URL")
    cache_namespace: str = Field(
        default="fitclient:",
        validation_alias="CACHE_NAMESPACE",
        description="Prefix applied to every key written to Redis",
    )
    reachability_url: str = Field(
        default="",
        validation_alias="REACHABILITY_URL",
        description="URL probed to decide whether the network is reachable (defaults to API_URL)",
    )
    reachability_timeout_seconds: float = Field(default=3.0, validation_alias="REACHABILITY_TIMEOUT_SECONDS")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(valid_levels)}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("cache_backend")
    @classmethod
    def validate_cache_backend(cls, value: str) -> str:
        """Validate the cache backend name, falling back to the in-memory store."""
        lower_value = value.lower()
        if lower_value not in {"memory", "redis"}:
            logger.warning(f"Unknown CACHE_BACKEND '{value}'. Valid backends are: memory, redis. Defaulting to memory.")
            return "memory"
        return lower_value

    @field_validator("cache_ttl_seconds")
    @classmethod
    def validate_cache_ttl(cls, value: int) -> int:
        if value < 0:
            raise ValueError("CACHE_TTL_SECONDS must be non-negative")
        return value

    @model_validator(mode="after")
    def _default_reachability_url(self) -> "Settings":
        """Probe the API host itself unless a dedicated URL is configured."""
        if not self.reachability_url:
            self.reachability_url = self.api_url
        return self

    @property
    def cache_ttl_millis(self) -> int:
        return self.cache_ttl_seconds * 1000


settings = Settings()
