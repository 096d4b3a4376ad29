"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

import re

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Telegram Bot (optional, the flow engine runs without it)
    telegram_bot_token: str | None = None

    # Field validation
    validation_debounce_ms: int = Field(
        default=300, ge=0, description="Debounce window for field validation"
    )
    verification_code_length: int = Field(
        default=6, ge=4, le=10, description="Number of digits in a reset code"
    )
    min_password_length: int = Field(
        default=6, ge=1, description="Minimum new password length"
    )
    max_password_length: int = Field(
        default=128, ge=1, description="Maximum new password length"
    )

    # Flow timing (seconds)
    notice_duration: float = Field(
        default=2.0, ge=0, description="Success notice auto-dismiss delay"
    )
    completion_reset_delay: float = Field(
        default=2.0, ge=0, description="Delay before a completed flow resets"
    )
    flow_idle_timeout: float = Field(
        default=900.0, gt=0, description="Idle time before an abandoned flow is dropped"
    )

    # Application
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str = "logs/bot.log"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode='after')
    def validate_password_bounds(self) -> 'Settings':
        """Ensure the password length window is not empty."""
        if self.min_password_length > self.max_password_length:
            raise ValueError(
                'MIN_PASSWORD_LENGTH must not exceed MAX_PASSWORD_LENGTH '
                f'({self.min_password_length} > {self.max_password_length})'
            )
        return self

    @model_validator(mode='after')
    def validate_production(self) -> 'Settings':
        """Validate production-specific requirements."""
        if self.environment == 'production':
            # DEBUG must be False in production
            if self.debug:
                raise ValueError(
                    'DEBUG must be False in production environment. '
                    'Set DEBUG=false in your .env file.'
                )

            if self.min_password_length < 6:
                logger.warning(
                    f'MIN_PASSWORD_LENGTH={self.min_password_length} is weak '
                    'for production. Consider at least 6 characters.'
                )

        return self

    @field_validator('telegram_bot_token')
    @classmethod
    def validate_bot_token(cls, v: str | None) -> str | None:
        """Validate Telegram bot token format."""
        if v is None:
            return v
        pattern = r'^\d+:[A-Za-z0-9_-]{35}$'
        if not re.match(pattern, v):
            raise ValueError(
                'Invalid Telegram bot token format. '
                'Expected format: 123456789:ABCdefGHIjklMNOpqrsTUVwxyz'
            )
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the loguru level name."""
        level = v.upper()
        allowed = {'TRACE', 'DEBUG', 'INFO', 'SUCCESS', 'WARNING', 'ERROR', 'CRITICAL'}
        if level not in allowed:
            raise ValueError(f'Invalid LOG_LEVEL: {v}')
        return level

    @property
    def validation_debounce(self) -> float:
        """Debounce window in seconds."""
        return self.validation_debounce_ms / 1000


# Global settings instance
settings = Settings()
