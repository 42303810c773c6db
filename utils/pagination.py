"""
Pagination cursors and pagination query parameters.

Two cursor formats are in use:

* Orders: the sort key (order id) of the last evaluated item, returned to the
  caller as ``offset`` and re-inserted as the ``SK`` of the exclusive start
  key on the next call.
* Products: the whole ``LastEvaluatedKey`` serialised to JSON and base64
  encoded, returned as ``nextToken``. The caller treats it as opaque.

A missing cursor means "start from the beginning".
"""

import base64
import binascii
import json
from typing import Any, Dict, Mapping, Optional

from models.pagination import PaginationParams

from .errors import ValidationError

DEFAULT_ORDER_LIMIT = 10
DEFAULT_PRODUCT_LIMIT = 20
MAX_PRODUCT_LIMIT = 100

# Every key attribute of both tables is a string
REQUIRED_KEY_ATTRIBUTES = frozenset({"PK", "SK"})


def parse_limit(raw: Any, default: int, maximum: Optional[int] = None) -> int:
    """
    Parse a page size from a query string value.

    Raises:
        ValidationError: If the value is not a positive integer or exceeds
            ``maximum``
    """
    if raw is None or raw == "":
        return default

    try:
        limit = int(raw)
    except (TypeError, ValueError):
        raise ValidationError("Invalid pagination parameters", details={"limit": raw})

    if limit <= 0 or (maximum is not None and limit > maximum):
        raise ValidationError("Invalid pagination parameters", details={"limit": raw})
    return limit


def parse_and_validate_query_parameters(
    query_params: Optional[Mapping[str, Any]],
) -> PaginationParams:
    """Parse ``limit`` and ``offset`` for the order list endpoint."""
    query_params = query_params or {}
    limit = parse_limit(query_params.get("limit"), DEFAULT_ORDER_LIMIT)
    return PaginationParams(limit=limit, offset=query_params.get("offset") or None)


def offset_from_last_key(last_evaluated_key: Optional[Dict[str, Any]]) -> Optional[str]:
    """Order cursor: the sort key of the last evaluated item."""
    if not last_evaluated_key:
        return None
    return last_evaluated_key["SK"]


def encode_next_token(last_evaluated_key: Optional[Dict[str, Any]]) -> Optional[str]:
    """Product cursor: base64 of the JSON encoded last evaluated key."""
    if not last_evaluated_key:
        return None
    raw = json.dumps(last_evaluated_key, sort_keys=True, separators=(",", ":"))
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def decode_next_token(token: str) -> Dict[str, Any]:
    """
    Decode a product cursor back into an exclusive start key.

    Raises:
        ValidationError: If the token is not base64 encoded JSON of a key with
            string ``PK`` and ``SK`` and only string attributes
    """
    try:
        decoded = base64.b64decode(token.encode("ascii"), validate=True)
        start_key = json.loads(decoded.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError):
        raise ValidationError("Invalid pagination token", details={"nextToken": token})

    if (
        not isinstance(start_key, dict)
        or not REQUIRED_KEY_ATTRIBUTES <= start_key.keys()
        or not all(isinstance(value, str) for value in start_key.values())
    ):
        raise ValidationError("Invalid pagination token", details={"nextToken": token})
    return start_key
