"""
Panel sessions.

A panel accepts one client at a time, so every command runs as
Authenticate -> Action -> Disconnect and the session token never outlives
the command that opened it.
"""
import logging
from typing import Any

from .codec import build_envelope, error_code, error_text, parse_body
from .constants import (
    ERROR_CODE_INVALID_USER_CODE,
    ERROR_CODE_PANEL_BUSY,
    ERROR_CODE_PANEL_IN_SESSION,
    GENERAL_STATUS_CODES,
    HTTP_200_OK,
    PANEL_AUTHENTICATE,
    PANEL_DISCONNECT,
    PANEL_SET_GENERAL_STATUS,
)
from .exceptions import (
    PimalinkInvalidUserCode,
    PimalinkPanelBusy,
    PimalinkPanelInSession,
    PimalinkProtocolError,
    PimalinkUndefinedAuthError,
    PimalinkUndefinedProtocolError,
)
from .models import AlarmState
from .transport import PimalinkTransport, TransportResponse

_LOGGER = logging.getLogger(__name__)

_AUTH_ERRORS = {
    ERROR_CODE_INVALID_USER_CODE: (PimalinkInvalidUserCode, "Invalid user code"),
    ERROR_CODE_PANEL_BUSY: (PimalinkPanelBusy, "Panel is busy"),
    ERROR_CODE_PANEL_IN_SESSION: (PimalinkPanelInSession, "Panel is already in a session"),
}


def raise_for_response(response: TransportResponse, operation: str) -> None:
    """
    Raise the matching error for a failed (non-200) response.

    Known errorCode/errorText -> PimalinkProtocolError, anything else ->
    PimalinkUndefinedProtocolError with the verbatim body.
    """
    response.raise_for_error()
    parsed = parse_body(response.body)
    code = error_code(parsed)
    text = error_text(parsed)
    if code is not None or text is not None:
        raise PimalinkProtocolError(
            f"{operation} failed: {response.status} - {text or code}",
            status=response.status,
            error_code=code,
            error_text=text,
        )
    _LOGGER.error("%s failed with status %s: %s", operation, response.status, response.body)
    raise PimalinkUndefinedProtocolError(
        f"{operation} failed: {response.status}",
        status=response.status,
        body=response.body,
    )


class PanelSessionManager:
    def __init__(
        self,
        transport: PimalinkTransport,
        web_user_id: str,
        pair_entity_id: str,
        user_code: str,
    ):
        self._transport = transport
        self._web_user_id = web_user_id
        self.pair_entity_id = pair_entity_id
        self.user_code = user_code

    def _envelope(self, data: Any = None, session_token: str | None = None) -> dict:
        return build_envelope(
            self._web_user_id,
            data,
            pair_entity_id=self.pair_entity_id,
            session_token=session_token,
        )

    # ---------- protocol steps ----------

    async def authenticate(self) -> str:
        """
        Open a panel session with the user code.

        Returns:
            The session token

        Raises:
            PimalinkTransportError: No answer from the server
            PimalinkInvalidUserCode: errorCode 45
            PimalinkPanelBusy: errorCode 24
            PimalinkPanelInSession: errorCode 21
            PimalinkUndefinedAuthError: Any other refusal
        """
        response = await self._transport.post(
            PANEL_AUTHENTICATE, self._envelope(self.user_code)
        )
        response.raise_for_error()

        parsed = parse_body(response.body)
        if response.status == HTTP_200_OK:
            token = parsed.get("sessionToken") if isinstance(parsed, dict) else None
            if token:
                return str(token)
            _LOGGER.error("Authenticate returned no session token: %s", response.body)
            raise PimalinkUndefinedAuthError(
                "Authentication failed: no session token", status=response.status, body=response.body
            )

        code = error_code(parsed)
        if code in _AUTH_ERRORS:
            exc_type, message = _AUTH_ERRORS[code]
            raise exc_type(message, status=response.status, error_code=code, error_text=error_text(parsed))

        _LOGGER.error(
            "Undefined authentication failure for %s: %s %s",
            self.pair_entity_id,
            response.status,
            response.body,
        )
        raise PimalinkUndefinedAuthError(
            f"Authentication failed: {response.status}", status=response.status, body=response.body
        )

    async def disconnect(self, session_token: str) -> None:
        """Close the panel session. Best effort: failures are only logged."""
        try:
            response = await self._transport.post(
                PANEL_DISCONNECT, self._envelope(session_token=session_token)
            )
        except Exception as e:
            _LOGGER.warning("Disconnect from %s raised: %s", self.pair_entity_id, e)
            return

        if response.status != HTTP_200_OK:
            _LOGGER.warning(
                "Disconnect from %s failed: %s %s",
                self.pair_entity_id,
                response.status,
                response.body or response.error,
            )

    # ---------- commands ----------

    async def run_action(self, path: str, data: Any = None) -> TransportResponse:
        """
        Run one state-changing call inside its own panel session.

        Disconnect is attempted whenever Authenticate issued a token, whether
        the action succeeded or not.
        """
        session_token = await self.authenticate()
        try:
            response = await self._transport.post(
                path, self._envelope(data, session_token=session_token)
            )
            if response.status != HTTP_200_OK:
                raise_for_response(response, path.rsplit("/", 1)[-1])
            return response
        finally:
            await self.disconnect(session_token)

    async def set_general_status(self, state: AlarmState) -> None:
        """Arm, partially arm or disarm the panel"""
        state = AlarmState(state)
        if state.value not in GENERAL_STATUS_CODES:
            raise ValueError(f"Cannot set panel to {state.value}")

        _LOGGER.debug("Setting %s general status to %s", self.pair_entity_id, state.value)
        await self.run_action(PANEL_SET_GENERAL_STATUS, GENERAL_STATUS_CODES[state.value])
