"""Parsing of customer payloads from queue messages and stream images.

Queue message body::

    {"customerId": "c-1", "dailySpend": 4200.5, "userType": "PAID"}

Stream post-images carry the same three attributes, either as plain values
or in DynamoDB's typed form (``{"customerId": {"S": "c-1"}, ...}``).
"""

import json
from collections.abc import Mapping
from decimal import Decimal, DecimalException
from typing import Any

from boto3.dynamodb.types import TypeDeserializer
from pydantic import ValidationError

from cohortline.domain.enums import UserType
from cohortline.domain.models import Customer
from cohortline.errors import MalformedPayloadError

REQUIRED_FIELDS = ("customerId", "dailySpend", "userType")

# Single-key descriptors used by DynamoDB's typed attribute values
_DYNAMODB_TYPES = frozenset({"S", "N", "B", "SS", "NS", "BS", "M", "L", "NULL", "BOOL"})

_deserializer = TypeDeserializer()


def customer_from_message(body: str | bytes) -> Customer:
    """Parse a queue message body into a Customer.

    Raises:
        MalformedPayloadError: If the body is not a JSON object or a
            required field is missing or invalid
    """
    try:
        payload = json.loads(body)
    except (TypeError, ValueError) as e:
        raise MalformedPayloadError(f"Message body is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedPayloadError("Message body must be a JSON object")

    return customer_from_fields(payload)


def customer_from_image(image: Mapping[str, Any] | None) -> Customer:
    """Parse a change-record post-image into a Customer.

    Raises:
        MalformedPayloadError: If the image is absent or a required field is
            missing or invalid
    """
    if image is None:
        raise MalformedPayloadError("Change record has no post-image")

    if _is_typed(image):
        try:
            image = {key: _deserializer.deserialize(value) for key, value in image.items()}
        except (TypeError, ValueError, DecimalException) as e:
            # Numbers outside DynamoDB's 38-digit context trap as DecimalException
            raise MalformedPayloadError(f"Undecodable attribute in image: {e}") from e

    return customer_from_fields(image)


def customer_from_fields(fields: Mapping[str, Any]) -> Customer:
    """Build a Customer from the three wire fields, all required."""
    for name in REQUIRED_FIELDS:
        if fields.get(name) is None:
            raise MalformedPayloadError(f"Missing field: {name}", field=name)

    spend = fields["dailySpend"]
    if isinstance(spend, bool):
        raise MalformedPayloadError("dailySpend must be a number", field="dailySpend")
    if isinstance(spend, Decimal):
        spend = float(spend)

    user_type = fields["userType"]
    if not isinstance(user_type, str) or user_type not in UserType.__members__:
        raise MalformedPayloadError(f"Unknown userType: {user_type!r}", field="userType")

    try:
        return Customer(
            customer_id=str(fields["customerId"]),
            daily_spend=spend,
            user_type=UserType(user_type),
        )
    except ValidationError as e:
        raise MalformedPayloadError(f"Invalid customer payload: {e}") from e


def _is_typed(image: Mapping[str, Any]) -> bool:
    return bool(image) and all(
        isinstance(value, Mapping) and len(value) == 1 and next(iter(value)) in _DYNAMODB_TYPES
        for value in image.values()
    )
