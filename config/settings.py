"""
Configuration management using Pydantic Settings.

Environment variables:
- SPANWEAVE_MAX_NESTING_DEPTH: Bound for recursive re-nesting of overlaps
- SPANWEAVE_BRIDGE_WHITESPACE: Group labeled runs across whitespace-only text
- SPANWEAVE_BLOCK_SELECTOR: CSS selector for content blocks in HTML documents
- SPANWEAVE_LOG_LEVEL: Logging level name
- SPANWEAVE_LOG_JSON: Render log events as JSON lines
"""
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.constants import (
    DEFAULT_BLOCK_SELECTOR,
    DEFAULT_MAX_NESTING_DEPTH,
    MAX_NESTING_DEPTH_LIMIT,
    NAMESPACE_ATTRIBUTE_PREFIXES,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix='SPANWEAVE_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    # Nesting
    max_nesting_depth: int = Field(default=DEFAULT_MAX_NESTING_DEPTH, ge=1, le=MAX_NESTING_DEPTH_LIMIT)
    bridge_whitespace: bool = Field(default=False)

    # Cleanup
    namespace_attribute_prefixes: List[str] = Field(
        default_factory=lambda: list(NAMESPACE_ATTRIBUTE_PREFIXES)
    )

    # HTML adapter
    block_selector: str = Field(default=DEFAULT_BLOCK_SELECTOR)

    # Logging
    log_level: str = Field(default='WARNING')
    log_json: bool = Field(default=False)

    @field_validator('log_level')
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    def get_nesting_config(self) -> dict:
        """Get nester keyword arguments as dictionary."""
        return {
            'max_depth': self.max_nesting_depth,
            'bridge_whitespace': self.bridge_whitespace,
        }


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return settings
