"""
Dependency wiring for the network bounded context.

Builds the connector with its infrastructure adapters and hands the
application's single connector instance to routes.
"""

from pathlib import Path

from fastapi import Request
from sqlalchemy import create_engine

from bnconnector.application.network.connector import BusinessNetworkConnector
from bnconnector.core.config import Settings
from bnconnector.infrastructure.network.local_connection import LocalBusinessNetworkConnection


def build_connector(settings: Settings) -> BusinessNetworkConnector:
    """Build a connector for the configured local business network."""
    engine = create_engine(settings.registry_dsn, pool_pre_ping=True)
    connection = LocalBusinessNetworkConnection(
        engine=engine,
        model_dir=Path(settings.network_model_dir),
    )
    return BusinessNetworkConnector(settings.network_settings(), connection)


def get_connector(request: Request) -> BusinessNetworkConnector:
    """Return the connector owned by the running application."""
    return request.app.state.connector
