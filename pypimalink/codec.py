"""
Request/response envelopes of the PimaLink cloud API.

Every request body is ``{"data": ..., "header": {...}}``. Responses are JSON
when there is anything to say; errors come back as ``{"errorCode": int}`` or
``{"errorText": str}`` and are interpreted by the caller.
"""
import json
from typing import Any

from .constants import (
    HDR_OS_TYPE,
    HDR_PAIR_ENTITY_ID,
    HDR_SESSION_TOKEN,
    HDR_WEB_USER_ID,
    OS_TYPE,
)
from .exceptions import PimalinkStateDecodeError


def build_envelope(
    web_user_id: str,
    data: Any = None,
    pair_entity_id: str | None = None,
    session_token: str | None = None,
) -> dict:
    """
    Build a request envelope.

    Without ``pair_entity_id`` this is the plain web-user envelope; with it
    the header also addresses a panel, and ``session_token`` is added once
    Authenticate has issued one.
    """
    header = {
        HDR_OS_TYPE: OS_TYPE,
        HDR_WEB_USER_ID: web_user_id,
    }
    if pair_entity_id is not None:
        header[HDR_PAIR_ENTITY_ID] = pair_entity_id
        if session_token is not None:
            header[HDR_SESSION_TOKEN] = session_token

    return {
        "data": {} if data is None else data,
        "header": header,
    }


def parse_body(body: str | None) -> Any:
    """Decode a response body; None when there is no structured payload."""
    if not body:
        return None
    try:
        return json.loads(body)
    except (json.JSONDecodeError, ValueError):
        return None


def require_json(body: str | None) -> Any:
    """Decode a response body that must be JSON."""
    if not body:
        raise PimalinkStateDecodeError("Empty response body")
    try:
        return json.loads(body)
    except (json.JSONDecodeError, ValueError) as e:
        raise PimalinkStateDecodeError(f"Invalid JSON in response: {body[:200]}") from e


def error_code(parsed: Any) -> int | None:
    if not isinstance(parsed, dict):
        return None
    code = parsed.get("errorCode")
    try:
        return int(code) if code is not None else None
    except (TypeError, ValueError):
        return None


def error_text(parsed: Any) -> str | None:
    if not isinstance(parsed, dict):
        return None
    text = parsed.get("errorText")
    return text if isinstance(text, str) else None
