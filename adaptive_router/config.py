"""
Router configuration management.

Following Sandi Metz principles:
- Single Responsibility: Configuration loading and validation
- Small class: Settings only, no behaviour
- Clear naming: Descriptive property names
"""

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RouterConfig(BaseSettings):
    """
    Routing engine configuration with validation.

    Loads from environment variables (prefix ROUTER_) with fallback to .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="ROUTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = Field(default="AdaptiveRouter", description="Application name")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    log_level: str = Field(default="INFO", description="Logging level")

    # Optimization cache settings
    cache_max_size: int = Field(default=1000, ge=1, description="Max cached plans")
    cache_ttl_seconds: float = Field(default=86400, ge=0, description="TTL seconds")
    cache_min_savings_threshold: float = Field(
        default=30.0, ge=0.0, le=100.0, description="Minimum savings % to cache"
    )

    # Compression settings
    max_essential_explicit: int = Field(
        default=5, ge=1, description="Explicit requirements kept after compression"
    )
    max_essential_implicit: int = Field(
        default=8, ge=1, description="Implicit requirements kept after compression"
    )
    compression_history_size: int = Field(
        default=1000, ge=1, description="Compression records kept for statistics"
    )

    # Pattern settings
    pattern_applicability_threshold: float = Field(
        default=0.6, ge=0.0, le=1.0, description="Minimum pattern applicability"
    )
    patterns_file: Optional[str] = Field(
        default=None, description="JSON file with pattern definitions"
    )

    # Decision settings
    low_confidence_floor: float = Field(
        default=0.5, ge=0.0, le=1.0, description="Below this the fallback is used"
    )
    fallback_handler_id: str = Field(
        default="project-manager", description="Handler used for fallback routes"
    )
    fallback_confidence: float = Field(
        default=0.6, ge=0.0, le=1.0, description="Confidence reported on fallback"
    )
    decision_log_size: int = Field(default=1000, ge=1, description="Decision log size")
    decision_stats_window: int = Field(
        default=100, ge=1, description="Recent decisions used for statistics"
    )
    token_boost_weight: float = Field(
        default=0.2, ge=0.0, le=1.0, description="Score boost per unit efficiency"
    )
    performance_bonus: float = Field(
        default=0.1, ge=0.0, le=1.0, description="Added to success rate multiplier"
    )
    performance_multiplier_cap: float = Field(
        default=1.2, ge=1.0, description="Upper bound of performance multiplier"
    )
    preference_learning_rate: float = Field(
        default=0.2, ge=0.0, le=1.0, description="EMA rate for preference updates"
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Upper-case the log level name."""
        return v.upper()

    @property
    def cache_ttl_ms(self) -> float:
        """Cache TTL in milliseconds."""
        return self.cache_ttl_seconds * 1000

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


# Global configuration instance
config = RouterConfig()
