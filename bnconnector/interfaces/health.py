"""
Health check router.

Provides a simple health endpoint for liveness/readiness probes.
Reports the connector's connection state without touching the ledger.
"""

from fastapi import APIRouter, Depends

from bnconnector.application.network.connector import BusinessNetworkConnector
from bnconnector.core.config import settings
from bnconnector.interfaces.network.dependencies import get_connector
from bnconnector.interfaces.network.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns application status, version and connection state.",
)
def health_check(
    connector: BusinessNetworkConnector = Depends(get_connector),
) -> HealthResponse:
    """Return current application health status."""
    return HealthResponse(
        status="ok",
        version=settings.version,
        network_state=connector.state.value,
    )
