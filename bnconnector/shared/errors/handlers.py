"""
Centralized error handlers for FastAPI.

Maps connector errors and ledger failures to HTTP responses.
No stack traces are exposed to clients. Connector errors carry their
message as ``detail`` because it names the offending type or record.
All error responses use the ErrorResponse schema.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from bnconnector.domain.network.errors import (
    InvalidFilterError,
    ModelNotFoundError,
    NetworkConnectorError,
    ResourceExistsError,
    ResourceNotFoundError,
    ResourceValidationError,
    UnsupportedTypeError,
)

logger = logging.getLogger(__name__)

HTTP_404 = 404
HTTP_409 = 409
HTTP_422 = 422
HTTP_500 = 500
HTTP_503 = 503


def _error_response(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, str | None] = {"error": error}
    if detail:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    """Register all connector error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(ResourceNotFoundError)
    async def handle_resource_not_found(
        _request: Request, exc: ResourceNotFoundError
    ) -> JSONResponse:
        """Handle missing records and registries."""
        logger.warning("Resource not found: %s in %s", exc.resource_id, exc.type_name)
        return _error_response(HTTP_404, "Resource not found", exc.message)

    @app.exception_handler(ModelNotFoundError)
    async def handle_model_not_found(
        _request: Request, exc: ModelNotFoundError
    ) -> JSONResponse:
        """Handle undeclared model names."""
        logger.warning("Model not found: %s", exc.type_name)
        return _error_response(HTTP_404, "Model not found", exc.message)

    @app.exception_handler(ResourceExistsError)
    async def handle_resource_exists(
        _request: Request, exc: ResourceExistsError
    ) -> JSONResponse:
        """Handle duplicate identifiers."""
        logger.warning("Resource exists: %s in %s", exc.resource_id, exc.type_name)
        return _error_response(HTTP_409, "Resource already exists", exc.message)

    @app.exception_handler(UnsupportedTypeError)
    async def handle_unsupported_type(
        _request: Request, exc: UnsupportedTypeError
    ) -> JSONResponse:
        """Handle types that are not assets, participants or transactions."""
        logger.warning("Unsupported type: %s", exc.type_name)
        return _error_response(HTTP_422, "Unsupported resource type", exc.message)

    @app.exception_handler(ResourceValidationError)
    async def handle_validation(
        _request: Request, exc: ResourceValidationError
    ) -> JSONResponse:
        """Handle payloads that do not match their declaration."""
        logger.warning("Invalid resource of type %s", exc.type_name)
        return _error_response(HTTP_422, "Invalid resource", exc.message)

    @app.exception_handler(InvalidFilterError)
    async def handle_invalid_filter(
        _request: Request, exc: InvalidFilterError
    ) -> JSONResponse:
        logger.warning("Invalid filter: %s", exc.reason)
        return _error_response(HTTP_422, "Invalid filter", exc.message)

    @app.exception_handler(NetworkConnectorError)
    async def handle_connector_error(
        _request: Request, exc: NetworkConnectorError
    ) -> JSONResponse:
        """Catch-all for connector errors without a dedicated mapping."""
        logger.error("Unhandled connector error: %s", exc.message)
        return _error_response(HTTP_500, "Connector error", exc.message)

    @app.exception_handler(OSError)
    async def handle_ledger_unavailable(
        _request: Request, exc: OSError
    ) -> JSONResponse:
        """Handle a business network that cannot be reached or read.

        Covers ConnectionError and other OSErrors raised by the ledger client.
        """
        logger.error("Business network unavailable: %s", exc)
        return _error_response(HTTP_503, "Business network unavailable")

    @app.exception_handler(Exception)
    async def handle_unexpected(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(HTTP_500, "Internal server error")
