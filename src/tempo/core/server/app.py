"""Tempo condition MCP server: application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from tempo.core.config.settings import get_settings
from tempo.domains.health.connectors import HealthDataProvider
from tempo.domains.health.connectors.providers import MockHealthDataProvider
from tempo.domains.health.tools.condition_tools import register_condition_tools

logger = logging.getLogger(__name__)


def create_app(
    *,
    health_data_provider_override: HealthDataProvider | None = None,
) -> FastMCP:
    """Create and configure the Tempo condition MCP server.

    This is the main application factory. It:
    1. Creates the FastMCP server instance
    2. Initializes the health data provider (mock unless overridden)
    3. Registers the condition tools with settings-derived baseline and policy
    """
    settings = get_settings()

    # --- Server instance ---
    server = FastMCP(
        "Tempo Condition",
        instructions=(
            "Daily condition engine. Turns biometric and environmental readings "
            "into metric scores, an overall status tier, an energy level with "
            "trend, and ranked correlation insights as structured JSON for a "
            "downstream narrative layer."
        ),
    )

    # --- Initialize health data provider ---
    if health_data_provider_override is not None:
        health_provider = health_data_provider_override
    else:
        health_provider = MockHealthDataProvider()
        logger.info("Using mock health data provider")

    # --- Register tools ---
    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": "Tempo Condition",
            "version": "0.1.0",
            "data_source": health_provider.data_source,
            "insight_max_per_run": settings.insight_max_per_run,
            "insight_cooldown_days": settings.insight_cooldown_days,
            "correlation_window_days": settings.correlation_window_days,
        }

    register_condition_tools(server, health_provider, settings)
    logger.info("Condition tools registered (data source: %s)", health_provider.data_source)

    return server


# Module-level instance for FastMCP discovery.
# Lazy: only created when this attribute is accessed (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
