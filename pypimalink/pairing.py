"""
Web user registration and panel pairing.

None of these calls need a panel session: they are addressed with the web
user ID only.
"""
import logging
from typing import Any

from .codec import build_envelope, error_text, parse_body, require_json
from .constants import (
    DEFAULT_CONFIG_LANG,
    DEFAULT_WEB_USER_NAME,
    ERROR_TEXT_INVALID_WEB_USER_ID,
    ERROR_TEXT_PAIRING_ALREADY_EXIST,
    HTTP_204_NO_CONTENT,
    SETTING_USER_EMAIL,
    SETTING_USER_PHONE,
    WEBUSER_CONFIG,
    WEBUSER_PAIR,
    WEBUSER_PAIR_ENTITIES,
    WEBUSER_SET_DETAILS,
    WEBUSER_UNPAIR,
)
from .exceptions import PimalinkStateDecodeError
from .identity import SettingsStore
from .models import ContactDetails, PairedEntity
from .transport import PimalinkTransport, TransportResponse

_LOGGER = logging.getLogger(__name__)


class PimalinkPairing:
    def __init__(
        self,
        transport: PimalinkTransport,
        store: SettingsStore,
        web_user_id: str,
        web_user_name: str = DEFAULT_WEB_USER_NAME,
        lang: str = DEFAULT_CONFIG_LANG,
    ):
        self._transport = transport
        self._store = store
        self.web_user_id = web_user_id
        self.web_user_name = web_user_name
        self.lang = lang

    async def _post(self, path: str, data: Any = None) -> TransportResponse:
        return await self._transport.post(path, build_envelope(self.web_user_id, data))

    # ---------- web user ----------

    async def config(self, lang: str | None = None) -> TransportResponse:
        """Bootstrap the web user on the server side"""
        return await self._post(WEBUSER_CONFIG.format(lang=lang or self.lang))

    async def set_web_user_details(self, email: str, phone: str) -> bool:
        """
        Register contact details for this web user.

        If the server does not know the web user ID yet, the config endpoint
        is called once and the registration retried once. Details are stored
        locally only after the server confirmed them.

        Returns:
            True if the server answered 204
        """
        details = {"name": self.web_user_name, "email": email, "phone": phone}

        response = await self._post(WEBUSER_SET_DETAILS, details)
        if error_text(parse_body(response.body)) in ERROR_TEXT_INVALID_WEB_USER_ID:
            _LOGGER.info("Web user %s unknown to server, calling config first", self.web_user_id)
            await self.config()
            response = await self._post(WEBUSER_SET_DETAILS, details)

        if response.status == HTTP_204_NO_CONTENT:
            self._store.set(SETTING_USER_EMAIL, email)
            self._store.set(SETTING_USER_PHONE, phone)
            return True

        _LOGGER.warning(
            "SetWebUserDetails failed: %s %s",
            response.status,
            response.body if response.status is not None else response.error,
        )
        return False

    def get_web_user_details(self) -> ContactDetails:
        """Contact details last confirmed by the server"""
        return ContactDetails(
            email=self._store.get(SETTING_USER_EMAIL) or "",
            phone=self._store.get(SETTING_USER_PHONE) or "",
        )

    # ---------- pairing ----------

    async def pair(self, device_name: str, pairing_code: str) -> bool:
        """
        Bind a panel to this web user.

        A pairing that already exists counts as success.
        """
        response = await self._post(
            WEBUSER_PAIR, {"name": device_name, "pairingCode": pairing_code}
        )
        parsed = parse_body(response.body)
        _LOGGER.debug("Pair response: %s %s", response.status, parsed)

        if response.status == HTTP_204_NO_CONTENT:
            return True
        if error_text(parsed) in ERROR_TEXT_PAIRING_ALREADY_EXIST:
            _LOGGER.info("Pairing for %s already exists", device_name)
            return True
        return False

    async def list_devices(self) -> list[PairedEntity] | None:
        """
        Panels paired with this web user.

        Returns:
            The paired entities, or None when the server has none yet (the
            pairing flow should go back a step rather than show an empty list)

        Raises:
            PimalinkTransportError: No answer from the server
            PimalinkStateDecodeError: Body is not a JSON list or null
        """
        response = await self._post(WEBUSER_PAIR_ENTITIES)
        response.raise_for_error()

        data = require_json(response.body)
        if data is None:
            return None
        if not isinstance(data, list):
            raise PimalinkStateDecodeError(f"Expected a list of paired entities, got: {response.body[:200]}")

        entities = []
        for item in data:
            entity = PairedEntity.from_api(item) if isinstance(item, dict) else None
            if entity is None:
                _LOGGER.warning("Skipping paired entity without pairId: %s", item)
                continue
            entities.append(entity)
        return entities

    async def unpair(self, pair_id: str) -> bool:
        """Remove a panel from this web user"""
        response = await self._post(WEBUSER_UNPAIR, pair_id)
        if response.status == HTTP_204_NO_CONTENT:
            _LOGGER.info("Successfully unpaired %s from the web user", pair_id)
            return True

        _LOGGER.warning(
            "Error unpairing %s: %s",
            pair_id,
            error_text(parse_body(response.body)) or response.body or response.error,
        )
        return False
