"""
Response decoding and exchange error detection.

Bitfinex answers with positional arrays whose layout depends on the
endpoint, so ``decode`` only guarantees a syntactically valid document.
Error documents look like ``["error", 10100, "apikey: invalid"]``.
"""

import json
from typing import Any, List, Optional

from .exceptions import ApiError, DecodeError, ResponseShapeError

ERROR_TAG = "error"

# [MTS, TYPE, MESSAGE_ID, null, DATA, CODE, STATUS, TEXT]
NOTIFICATION_DATA_INDEX = 4
NOTIFICATION_STATUS_INDEX = 6
NOTIFICATION_TEXT_INDEX = 7


def decode(raw: bytes, endpoint: Optional[str] = None) -> Any:
    """
    Parse a response body as JSON.

    Raises:
        DecodeError: If the body is empty, not UTF-8 or not valid JSON
    """
    try:
        return json.loads(raw)
    except (ValueError, TypeError, RecursionError) as e:
        # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors;
        # deeply nested arrays exhaust the recursion limit
        raise DecodeError(f"invalid JSON response: {e}", endpoint=endpoint) from e


def is_error_response(document: Any) -> bool:
    """Return True if the document is one of the exchange's error shapes."""
    if isinstance(document, list):
        return len(document) > 0 and document[0] == ERROR_TAG
    if isinstance(document, dict):
        return ERROR_TAG in document
    return False


def raise_for_api_error(document: Any, endpoint: Optional[str] = None,
                        status_code: Optional[int] = None) -> Any:
    """
    Raise ApiError for error documents, otherwise return the document.

    Raises:
        ApiError: If ``is_error_response(document)`` holds
    """
    if not is_error_response(document):
        return document

    if isinstance(document, list):
        code = document[1] if len(document) > 1 else None
        message = document[2] if len(document) > 2 else "unknown error"
    else:
        code = document.get("code")
        message = document.get("message") or document[ERROR_TAG]

    raise ApiError(message, code=code, endpoint=endpoint,
                   status_code=status_code, document=document)


def order_ids(notification: Any) -> List[int]:
    """
    Extract order ids from an order notification.

    ``DATA`` is a single order array for update/cancel and a list of order
    arrays for submit; an order array starts with its id.

    Raises:
        ResponseShapeError: If the notification does not have that layout
    """
    if not isinstance(notification, list) or len(notification) <= NOTIFICATION_DATA_INDEX:
        raise ResponseShapeError(f"not an order notification: {notification!r}")

    data = notification[NOTIFICATION_DATA_INDEX]
    if not isinstance(data, list) or not data:
        raise ResponseShapeError(f"notification carries no order data: {data!r}")

    orders = data if isinstance(data[0], list) else [data]
    ids = []
    for order in orders:
        if not isinstance(order, list) or not order or not isinstance(order[0], int):
            raise ResponseShapeError(f"order entry without an integer id: {order!r}")
        ids.append(order[0])
    return ids


def notification_status(notification: Any) -> Optional[str]:
    """Return the STATUS field (e.g. ``SUCCESS``, ``ERROR``) of a notification."""
    if isinstance(notification, list) and len(notification) > NOTIFICATION_STATUS_INDEX:
        return notification[NOTIFICATION_STATUS_INDEX]
    return None
