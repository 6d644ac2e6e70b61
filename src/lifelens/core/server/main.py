"""LifeLens server entry point (``lifelens-server`` or ``python -m lifelens.core.server.main``)."""

from __future__ import annotations

import logging
from ipaddress import ip_address

from lifelens.core.config.settings import Settings, get_settings
from lifelens.core.server.app import create_app

logger = logging.getLogger(__name__)


def _is_loopback_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def check_bind(settings: Settings) -> None:
    """Refuse a network-facing HTTP bind unless explicitly allowed.

    stdio never binds, so it is always allowed.

    Raises:
        RuntimeError: non-loopback host without LIFELENS_ALLOW_INSECURE_BIND.
    """
    if settings.lifelens_transport == "stdio" or settings.lifelens_allow_insecure_bind:
        return
    if not _is_loopback_host(settings.lifelens_host):
        raise RuntimeError(
            f"Refusing to serve on non-loopback host {settings.lifelens_host!r}: "
            "the tools have no auth layer. Set LIFELENS_ALLOW_INSECURE_BIND=true "
            "to override (unsafe)."
        )


def run() -> None:
    """Start the LifeLens MCP server on the configured transport."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.lifelens_log_level.upper(), logging.INFO)
    )
    check_bind(settings)

    mcp = create_app()
    if settings.lifelens_transport == "stdio":
        logger.info("Starting LifeLens server on stdio")
        mcp.run(transport="stdio")
        return

    logger.info(
        "Starting LifeLens server on http://%s:%d",
        settings.lifelens_host,
        settings.lifelens_port,
    )
    mcp.run(
        transport="streamable-http",
        host=settings.lifelens_host,
        port=settings.lifelens_port,
    )


if __name__ == "__main__":
    run()
