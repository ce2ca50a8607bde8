from __future__ import annotations

import logging

import click

from .api.app import create_app
from .utils.config import AppConfig, ConfigError

logger = logging.getLogger(__name__)


@click.command()
@click.option("--host", default=None, help="Interface to bind (default: HOST or 127.0.0.1)")
@click.option("--port", type=int, default=None, help="Port to listen on for HTTP (default: PORT or 3000)")
@click.option(
    "--log-level",
    default=None,
    help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
)
@click.option("--ttl-ms", type=int, default=None, help="Cart time-to-live in milliseconds")
@click.option("--sweep-interval-ms", type=int, default=None, help="Interval between background sweeps")
def main(
    host: str | None,
    port: int | None,
    log_level: str | None,
    ttl_ms: int | None,
    sweep_interval_ms: int | None,
) -> int:
    """Serve the cart API. Unset options fall back to environment variables."""
    config = AppConfig.from_env()
    if host is not None:
        config.server.host = host
    if port is not None:
        config.server.port = port
    if log_level is not None:
        config.server.log_level = log_level
    if ttl_ms is not None:
        config.store.ttl_ms = ttl_ms
    if sweep_interval_ms is not None:
        config.store.sweep_interval_ms = sweep_interval_ms

    try:
        config.validate()
    except ConfigError as exc:
        raise click.BadParameter(str(exc)) from exc

    logging.basicConfig(
        level=getattr(logging, config.server.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(
        "Cart TTL %dms, sweep every %dms, tax rate %s",
        config.store.ttl_ms,
        config.store.sweep_interval_ms,
        config.pricing.tax_rate,
    )

    app = create_app(config)

    import uvicorn

    uvicorn.run(app, host=config.server.host, port=config.server.port)
    return 0


if __name__ == "__main__":
    main()
