"""Tempo server entry point: ``python -m tempo.core.server.main``.

Transport is chosen by ``TEMPO_TRANSPORT``: ``streamable-http`` for a
network listener, ``stdio`` when launched as a subprocess by an MCP client.
"""

from __future__ import annotations

import logging
from ipaddress import ip_address

from tempo.core.config.settings import Settings, get_settings
from tempo.core.server.app import create_app

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _is_loopback_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def configure_logging(level_name: str) -> int:
    """Configure root logging and return the numeric level applied."""
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    return level


def check_bind_host(settings: Settings) -> None:
    """Refuse a non-loopback HTTP bind unless explicitly allowed.

    Raises:
        RuntimeError: If the host is exposed and the override is not set.
    """
    if settings.tempo_transport == "stdio" or settings.tempo_allow_insecure_bind:
        return
    if not _is_loopback_host(settings.tempo_host):
        raise RuntimeError(
            f"Refusing to bind Tempo server to {settings.tempo_host!r} without an auth layer. "
            "Set TEMPO_ALLOW_INSECURE_BIND=true to override (unsafe)."
        )


def run() -> None:
    """Start the Tempo MCP server on the configured transport."""
    settings = get_settings()
    configure_logging(settings.tempo_log_level)
    logger = logging.getLogger(__name__)
    check_bind_host(settings)

    mcp = create_app()
    if settings.tempo_transport == "stdio":
        logger.info("Starting Tempo Condition server on stdio")
        mcp.run(transport="stdio")
        return

    logger.info(
        "Starting Tempo Condition server on %s:%d",
        settings.tempo_host,
        settings.tempo_port,
    )
    mcp.run(
        transport="streamable-http",
        host=settings.tempo_host,
        port=settings.tempo_port,
    )


if __name__ == "__main__":
    run()
