"""
Pydantic schemas for the network API.

Record and schema bodies are free-form JSON objects shaped by the
business network model, so only the envelopes are typed here.
"""

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response schema for health check endpoint."""

    status: str
    version: str
    network_state: str = Field(..., description="disconnected, connecting or connected")


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None


class PingResponse(BaseModel):
    """Result of pinging the business network, as returned by the client."""

    status: str = "ok"
    result: Any = None


class ModelDefinitionItem(BaseModel):
    """A declared type exposed as an ORM model."""

    type: str = Field(..., description="Always 'table'")
    name: str = Field(..., description="Fully-qualified type name")


class CreateResponse(BaseModel):
    """Identifier of a created asset, participant or transaction."""

    id: str


class CountResponse(BaseModel):
    count: int = Field(..., ge=0)
