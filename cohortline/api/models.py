"""Request and response models for the query API."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from cohortline.domain.enums import CohortType


class ErrorCode(str, Enum):
    """Machine-readable error codes for API responses."""

    INVALID_REQUEST = "INVALID_REQUEST"
    """Missing, blank or malformed request argument."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class ErrorDetail(BaseModel):
    """Field-level error information."""

    field: str | None = None
    message: str


class ErrorBody(BaseModel):
    """Error body content for API error responses."""

    code: ErrorCode
    message: str
    details: list[ErrorDetail] | None = None


class ErrorResponse(BaseModel):
    """Standard error response format.

    Example:
        {"error": {"code": "INVALID_REQUEST", "message": "Customer ID cannot be blank"}}
    """

    error: ErrorBody


class ClassificationResponse(BaseModel):
    """Result of a manual classification."""

    model_config = ConfigDict(populate_by_name=True)

    customer_id: str = Field(alias="customerId")
    cohort_types: list[CohortType] = Field(alias="cohortTypes")


class ComponentHealth(BaseModel):
    """Health of one component."""

    name: str
    status: Literal["healthy", "degraded", "unhealthy"]
    message: str | None = None


class HealthResponse(BaseModel):
    """Overall service health."""

    status: Literal["healthy", "degraded", "unhealthy"]
    version: str
    components: list[ComponentHealth]
    timestamp: datetime
