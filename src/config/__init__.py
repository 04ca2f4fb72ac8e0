"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from enum import Enum
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="faq-matching-service", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Database ==========
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/support",
        description="Database connection URL (async driver)"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    # ========== FAQ Matching ==========
    faq_confidence_threshold: float = Field(
        default=0.15,
        description="Minimum similarity score for an FAQ to be used as an answer",
        ge=0.0,
        le=1.0
    )
    faq_search_limit: int = Field(
        default=10,
        description="Number of results returned by the FAQ search surface",
        ge=1,
        le=100
    )
    faq_scoring_workers: int = Field(
        default=4,
        description="Worker threads used to score a corpus",
        ge=1,
        le=64
    )
    faq_match_timeout_seconds: float = Field(
        default=2.0,
        description="Upper bound for one match call before escalating",
        gt=0.0,
        le=60
    )
    escalation_default_priority: str = Field(
        default="medium",
        description="Priority assigned to automatic escalations"
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("escalation_default_priority")
    @classmethod
    def validate_escalation_priority(cls, v: str) -> str:
        """Ensure the default escalation priority is a known level."""
        if v not in VALID_ESCALATION_PRIORITIES:
            raise ValueError(f"escalation_default_priority must be one of {VALID_ESCALATION_PRIORITIES}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# ========== Constants ==========

class FAQCategory(str, Enum):
    """Knowledge base sections an FAQ belongs to."""
    CHARGING = "charging"
    SERVICE = "service"
    RANGE = "range"
    ORDERS = "orders"
    COST = "cost"
    LICENSE = "license"
    WARRANTY = "warranty"


class ScooterModel(str, Enum):
    """Scooter models a customer can own and an FAQ can target."""
    S450 = "450S"
    X450 = "450X"
    RIZTA = "Rizta"


class EscalationPriority(str, Enum):
    """Escalated query priorities."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class EscalationStatus(str, Enum):
    """Escalated query lifecycle statuses."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


# Key of the threshold row in the system_settings table
CONFIDENCE_THRESHOLD_SETTING_KEY = "faq_confidence_threshold"


# ========== Lists for validation ==========

FAQ_CATEGORIES = [c.value for c in FAQCategory]
SCOOTER_MODELS = [m.value for m in ScooterModel]
VALID_ESCALATION_PRIORITIES = [p.value for p in EscalationPriority]
VALID_ESCALATION_STATUSES = [s.value for s in EscalationStatus]


# Global settings instance
settings = get_settings()
