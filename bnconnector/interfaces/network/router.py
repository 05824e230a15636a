"""
FastAPI router for the network bounded context.

Exposes the connector's discovery and CRUD verbs over REST.
All routes delegate to the connector. No business logic here.
Error mapping is handled by centralized error handlers.
"""

import json
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Request, Response, status

from bnconnector.application.network.connector import BusinessNetworkConnector
from bnconnector.domain.network.errors import InvalidFilterError
from bnconnector.interfaces.network.dependencies import get_connector
from bnconnector.interfaces.network.schemas import (
    CountResponse,
    CreateResponse,
    ErrorResponse,
    ModelDefinitionItem,
    PingResponse,
)
from bnconnector.shared.security.rate_limiting import HEAVY_RATE_LIMIT, limiter

router = APIRouter(prefix="/network", tags=["network"])

NOT_FOUND = {404: {"model": ErrorResponse}}
INVALID = {422: {"model": ErrorResponse}}


def _parse_json_param(name: str, raw: str | None) -> dict[str, Any] | None:
    if raw is None or raw == "":
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        raise InvalidFilterError(f"'{name}' is not valid JSON") from None
    if not isinstance(value, dict):
        raise InvalidFilterError(f"'{name}' must be a JSON object")
    return value


@router.get(
    "/ping",
    response_model=PingResponse,
    responses={503: {"model": ErrorResponse}},
    summary="Ping the business network",
)
async def ping(connector: BusinessNetworkConnector = Depends(get_connector)) -> PingResponse:
    """Ping the business network through the connector."""
    result = await connector.ping()
    return PingResponse(result=result)


@router.get(
    "/models",
    response_model=list[ModelDefinitionItem],
    summary="Discover model definitions",
    description="List the declared types that can be used as ORM models.",
)
@limiter.limit(HEAVY_RATE_LIMIT)
async def discover_model_definitions(
    request: Request,
    connector: BusinessNetworkConnector = Depends(get_connector),
) -> list[ModelDefinitionItem]:
    definitions = await connector.discover_model_definitions()
    return [ModelDefinitionItem(**definition) for definition in definitions]


@router.get(
    "/models/{model_name}/schema",
    responses={**NOT_FOUND, **INVALID},
    summary="Discover a model schema",
    description="Describe a declared type as an ORM model definition.",
)
@limiter.limit(HEAVY_RATE_LIMIT)
async def discover_schema(
    request: Request,
    model_name: str,
    connector: BusinessNetworkConnector = Depends(get_connector),
) -> dict[str, Any]:
    return await connector.discover_schemas(model_name)


@router.get(
    "/models/{model_name}/records",
    responses={**NOT_FOUND, **INVALID},
    summary="List records",
)
async def list_records(
    model_name: str,
    query_filter: str | None = Query(
        default=None, alias="filter", description="LoopBack filter as JSON"
    ),
    connector: BusinessNetworkConnector = Depends(get_connector),
) -> list[dict[str, Any]]:
    """List the records of a type in registry order."""
    return await connector.all(model_name, _parse_json_param("filter", query_filter))


@router.get(
    "/models/{model_name}/count",
    response_model=CountResponse,
    responses={**NOT_FOUND, **INVALID},
    summary="Count records",
)
async def count_records(
    model_name: str,
    where: str | None = Query(default=None, description="Where clause as JSON"),
    connector: BusinessNetworkConnector = Depends(get_connector),
) -> CountResponse:
    count = await connector.count(model_name, _parse_json_param("where", where))
    return CountResponse(count=count)


@router.post(
    "/models/{model_name}/records",
    response_model=CreateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND, **INVALID, 409: {"model": ErrorResponse}},
    summary="Create a record",
    description="Add an asset or participant, or submit a transaction.",
)
async def create_record(
    model_name: str,
    data: dict[str, Any] = Body(...),
    connector: BusinessNetworkConnector = Depends(get_connector),
) -> CreateResponse:
    identifier = await connector.create(model_name, data)
    return CreateResponse(id=identifier)


@router.put(
    "/models/{model_name}/records",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**NOT_FOUND, **INVALID},
    summary="Update a record",
    description="Replace the asset or participant identified by the body.",
)
async def update_record(
    model_name: str,
    data: dict[str, Any] = Body(...),
    connector: BusinessNetworkConnector = Depends(get_connector),
) -> Response:
    await connector.update(model_name, data)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/models/{model_name}/records/{record_id}",
    responses={**NOT_FOUND, **INVALID},
    summary="Retrieve a record",
)
async def retrieve_record(
    model_name: str,
    record_id: str,
    connector: BusinessNetworkConnector = Depends(get_connector),
) -> dict[str, Any]:
    return await connector.retrieve(model_name, record_id)


@router.head(
    "/models/{model_name}/records/{record_id}",
    summary="Check a record exists",
)
async def record_exists(
    model_name: str,
    record_id: str,
    connector: BusinessNetworkConnector = Depends(get_connector),
) -> Response:
    found = await connector.exists(model_name, record_id)
    return Response(status_code=status.HTTP_200_OK if found else status.HTTP_404_NOT_FOUND)


@router.delete(
    "/models/{model_name}/records/{record_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**NOT_FOUND, **INVALID},
    summary="Delete a record",
)
async def delete_record(
    model_name: str,
    record_id: str,
    connector: BusinessNetworkConnector = Depends(get_connector),
) -> Response:
    await connector.delete(model_name, record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
