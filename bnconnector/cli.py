"""
CLI entry point for the connector.

Usage:
    # Serve the REST API
    python -m bnconnector.cli serve --port 8000

    # Ping the configured business network
    python -m bnconnector.cli ping

    # List the model definitions, or describe one of them
    python -m bnconnector.cli models
    python -m bnconnector.cli schema org.acme.base.Vehicle
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Awaitable, Callable, Optional, Sequence

from bnconnector.application.network.connector import BusinessNetworkConnector
from bnconnector.core.config import settings
from bnconnector.domain.network.errors import NetworkConnectorError
from bnconnector.interfaces.network.dependencies import build_connector
from bnconnector.shared.logging import configure_logging

logger = logging.getLogger(__name__)


async def _with_connector(
    operation: Callable[[BusinessNetworkConnector], Awaitable[Any]],
) -> Any:
    connector = build_connector(settings)
    try:
        return await operation(connector)
    finally:
        await connector.disconnect(callback=_log_disconnect)


def _log_disconnect(error: Optional[BaseException], _result: None) -> None:
    if error is not None:
        logger.warning("Disconnect from business network failed: %s", error)


def _print_json(value: Any) -> None:
    print(json.dumps(value, indent=2, sort_keys=True))


def cmd_serve(args: argparse.Namespace) -> None:
    """Serve the REST API with uvicorn."""
    import uvicorn

    logger.info("Starting connector API at http://%s:%d", args.host, args.port)
    uvicorn.run("bnconnector.main:app", host=args.host, port=args.port, reload=False)


def cmd_ping(args: argparse.Namespace) -> None:
    """Connect and ping the configured business network."""

    async def ping(connector: BusinessNetworkConnector) -> Any:
        await connector.ensure_connected()
        return await connector.ping()

    _print_json(asyncio.run(_with_connector(ping)))


def cmd_models(args: argparse.Namespace) -> None:
    """Print the discovered model definitions."""
    _print_json(asyncio.run(_with_connector(lambda c: c.discover_model_definitions())))


def cmd_schema(args: argparse.Namespace) -> None:
    """Print the schema of one model."""
    _print_json(asyncio.run(_with_connector(lambda c: c.discover_schemas(args.model_name))))


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Business network connector CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Serve the REST API")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.set_defaults(func=cmd_serve)

    ping_parser = subparsers.add_parser("ping", help="Ping the business network")
    ping_parser.set_defaults(func=cmd_ping)

    models_parser = subparsers.add_parser("models", help="List model definitions")
    models_parser.set_defaults(func=cmd_models)

    schema_parser = subparsers.add_parser("schema", help="Describe one model")
    schema_parser.add_argument("model_name", help="Fully-qualified type name")
    schema_parser.set_defaults(func=cmd_schema)

    args = parser.parse_args(argv)
    configure_logging(level=settings.log_level)

    try:
        args.func(args)
    except (NetworkConnectorError, OSError) as exc:
        logger.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
