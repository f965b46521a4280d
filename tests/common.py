"""Helpers shared by the test modules."""

import json

from pypimalink.transport import TransportResponse

WEB_USER_ID = "0123456789abcdef"
PAIR_ID = "pair-42"


def response(status, body=None):
    """TransportResponse with a JSON-encoded body (strings are kept as-is)."""
    if body is not None and not isinstance(body, str):
        body = json.dumps(body)
    return TransportResponse(status=status, body=body)


def failed(error=None):
    """TransportResponse of a request that never got an answer."""
    return TransportResponse(status=None, body=None, error=error or ConnectionResetError("reset"))


def posted_paths(transport):
    return [c.args[0] for c in transport.post.call_args_list]


def posted_envelopes(transport):
    return [c.args[1] for c in transport.post.call_args_list]
