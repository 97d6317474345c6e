from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    redis_url: str = "redis://localhost:6379/0"
    redpanda_brokers: str = "localhost:19092"

    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Attempt governance
    max_payment_attempts: int = 3

    # Session store settings
    session_key_prefix: str = "payment_session:"
    session_ttl_seconds: int = 1800

    # Request attribute holding the caller's security context
    security_context_attribute: str = "SECURITY_CONTEXT"

    # Kafka/Redpanda topic settings
    kafka_topic_prefix: str = "notifications"

    @field_validator("max_payment_attempts")
    @classmethod
    def _max_attempts_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_payment_attempts must be a positive integer")
        return value


settings = Settings()
