"""Response envelopes.

Every JSON response has one of two shapes::

    {"success": true, "data": ...}
    {"success": false, "error": {"code": "...", "message": "...", "validations": {...}}}

``validations`` only appears when there is something in it.
"""

import dataclasses
import datetime
import decimal
import enum
import json
import uuid
from collections.abc import Mapping
from typing import Any

from finch.errors import HTTPError
from finch.http.response import JSON_CONTENT_TYPE, Response


def _default(obj: Any) -> Any:
    """``json.dumps`` fallback for values handlers commonly return."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (datetime.datetime, datetime.date, datetime.time)):
        return obj.isoformat()
    if isinstance(obj, enum.Enum):
        return obj.value
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    if isinstance(obj, (uuid.UUID, decimal.Decimal)):
        return str(obj)
    if isinstance(obj, Mapping):
        return dict(obj)
    msg = f"Object of type {type(obj).__name__} is not JSON serializable"
    raise TypeError(msg)


def render_json(payload: Any) -> str:
    """Serialize *payload*. Raises ``TypeError``/``ValueError`` when it cannot."""
    return json.dumps(payload, default=_default, ensure_ascii=False)


def success_envelope(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data}


def error_envelope(
    code: str,
    message: str,
    validations: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message}
    if validations:
        error["validations"] = dict(validations)
    return {"success": False, "error": error}


def success_response(
    data: Any,
    status: int = 200,
    headers: tuple[tuple[str, str], ...] = (),
) -> Response:
    """Wrap handler output in a success envelope."""
    body = render_json(success_envelope(data))
    return Response(body=body, status=status, content_type=JSON_CONTENT_TYPE, headers=headers)


def error_response(exc: HTTPError) -> Response:
    """Render an ``HTTPError`` as an error envelope with its status and headers."""
    body = render_json(error_envelope(exc.code, exc.detail, exc.validations))
    return Response(body=body, status=exc.status, content_type=JSON_CONTENT_TYPE, headers=exc.headers)
