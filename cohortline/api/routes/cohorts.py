"""Cohort query and manual classification endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Query

from cohortline.api.dependencies import CohortServiceDep
from cohortline.api.exceptions import InvalidRequestError
from cohortline.api.models import ClassificationResponse
from cohortline.domain.enums import CohortType
from cohortline.errors import MalformedPayloadError
from cohortline.ingestion.payloads import customer_from_fields
from cohortline.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/cohorts")


def _require_customer_id(customer_id: str) -> str:
    if not customer_id or not customer_id.strip():
        raise InvalidRequestError("Customer ID cannot be blank", field="customerId")
    return customer_id.strip()


@router.get("/check")
async def is_customer_in_cohort_type(
    service: CohortServiceDep,
    customer_id: str = Query(alias="customerId"),
    cohort_type: CohortType = Query(alias="cohortType"),
) -> bool:
    """Check whether a customer belongs to a cohort type.

    Membership written by the change-stream path may lag the customer
    update by up to one poll interval.
    """
    customer_id = _require_customer_id(customer_id)
    is_member = await service.is_customer_in_cohort_type(customer_id, cohort_type)

    logger.info(
        "cohort_membership_checked",
        customer_id=customer_id,
        cohort_type=cohort_type.value,
        is_member=is_member,
    )
    return is_member


@router.get("/customer/{customer_id}")
async def get_customer_cohort_types(
    customer_id: str,
    service: CohortServiceDep,
) -> list[CohortType]:
    """List the cohort types a customer belongs to."""
    customer_id = _require_customer_id(customer_id)
    cohort_types = await service.get_customer_cohort_types(customer_id)

    if not cohort_types:
        logger.info("no_cohorts_for_customer", customer_id=customer_id)
    return sorted(cohort_types, key=lambda c: c.value)


@router.get("/type/{cohort_type}/customers")
async def get_customer_ids_by_cohort_type(
    cohort_type: CohortType,
    service: CohortServiceDep,
) -> list[str]:
    """List the ids of customers in a cohort type."""
    customer_ids = await service.get_customer_ids_by_cohort_type(cohort_type)

    logger.info(
        "cohort_members_listed",
        cohort_type=cohort_type.value,
        count=len(customer_ids),
    )
    return sorted(customer_ids)


@router.post("/classify", response_model=ClassificationResponse)
async def classify_customer(
    service: CohortServiceDep,
    payload: dict[str, Any] = Body(...),
) -> ClassificationResponse:
    """Reclassify a customer snapshot immediately.

    The body uses the queue message shape:
    ``{"customerId": ..., "dailySpend": ..., "userType": "PAID" | "FREE"}``.
    """
    try:
        customer = customer_from_fields(payload)
    except MalformedPayloadError as e:
        raise InvalidRequestError(str(e), field=e.field) from e

    cohort_types = await service.classify(customer)
    return ClassificationResponse(
        customer_id=customer.customer_id,
        cohort_types=sorted(cohort_types, key=lambda c: c.value),
    )
