"""Application settings loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings

from tempo.domains.health.domain_logic.condition_models import (
    ActivityLevel,
    Gender,
    InsightDisplayPolicy,
    UserBaseline,
)


class Settings(BaseSettings):
    """Tempo condition server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Default to loopback; there is no auth layer in front of the tools.
    tempo_host: str = "127.0.0.1"
    tempo_port: int = 8001
    tempo_log_level: str = "info"
    tempo_allow_insecure_bind: bool = False
    tempo_transport: Literal["streamable-http", "stdio"] = "streamable-http"

    # Default user baseline (used when the data provider supplies none)
    user_age: int = 30
    user_gender: Literal["male", "female", "other"] = "other"
    user_activity_level: Literal[
        "sedentary", "light", "moderate", "active", "very_active"
    ] = "moderate"
    user_hrv_baseline_ms: float | None = None

    # Insight display policy
    insight_max_per_run: int = 2
    insight_cooldown_days: int = 7

    # Correlation history window
    correlation_window_days: int = 30

    def user_baseline(self) -> UserBaseline:
        return UserBaseline(
            age=self.user_age,
            gender=Gender(self.user_gender),
            activity_level=ActivityLevel(self.user_activity_level),
            hrv_baseline_ms=self.user_hrv_baseline_ms,
        )

    def display_policy(self) -> InsightDisplayPolicy:
        return InsightDisplayPolicy(
            max_insights=self.insight_max_per_run,
            cooldown_days=self.insight_cooldown_days,
        )


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
