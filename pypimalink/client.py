"""
PimaLink Alarm Panel Client

Main public API for pairing PIMA alarm panels and controlling them through
the PimaLink cloud.
"""
import logging
from collections.abc import Mapping

import aiohttp

from .constants import (
    DEFAULT_CONFIG_LANG,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_TIMEOUT,
    DEFAULT_WEB_USER_NAME,
)
from .device import PimalinkDevice
from .exceptions import PimalinkNotInitialized
from .identity import SettingsStore, ensure_web_user_id
from .models import AlarmState, ContactDetails, PairedEntity
from .pairing import PimalinkPairing
from .transport import PimalinkTransport

_LOGGER = logging.getLogger(__name__)


class PimalinkClient:
    """
    Main client for the PimaLink API.

    Usage:
        async with aiohttp.ClientSession() as session:
            client = PimalinkClient(session, JsonSettingsStore())

            # 1. Create (once) and load the web user ID
            client.bootstrap()

            # 2. Register contact details
            await client.set_web_user_details("user@example.com", "0501234567")

            # 3. Pair a panel with the code shown on its keypad
            await client.pair("Home", "123456")

            # 4. List paired panels and create a device for one
            entities = await client.list_devices()
            device = await client.create_device(entities[0], user_code="1234")

            # 5. Poll and control
            await device.async_start()
            result = await device.async_set_state(AlarmState.ARMED)

            # 6. Tear down
            await device.async_stop()
    """

    def __init__(
        self,
        aiohttp_session: aiohttp.ClientSession,
        store: SettingsStore,
        web_user_name: str = DEFAULT_WEB_USER_NAME,
        lang: str = DEFAULT_CONFIG_LANG,
        timeout: float | None = DEFAULT_TIMEOUT,
    ):
        self.transport = PimalinkTransport(aiohttp_session, timeout=timeout)
        self.store = store
        self.web_user_name = web_user_name
        self.lang = lang
        self.web_user_id: str | None = None
        self._pairing: PimalinkPairing | None = None
        self.devices: dict[str, PimalinkDevice] = {}

    # ========== Identity ==========

    def bootstrap(self) -> str:
        """
        Load the web user ID, generating it on first run.

        Safe to call more than once: an existing ID is never replaced.
        """
        self.web_user_id = ensure_web_user_id(self.store)
        self._pairing = PimalinkPairing(
            self.transport,
            self.store,
            self.web_user_id,
            web_user_name=self.web_user_name,
            lang=self.lang,
        )
        _LOGGER.info("PimaLink client has been initialized")
        return self.web_user_id

    @property
    def pairing(self) -> PimalinkPairing:
        if self._pairing is None:
            raise PimalinkNotInitialized("Call bootstrap() first")
        return self._pairing

    # ========== Registration / Pairing ==========

    async def set_web_user_details(self, email: str, phone: str) -> bool:
        """Register contact details; True once the server confirmed them"""
        return await self.pairing.set_web_user_details(email, phone)

    def get_web_user_details(self) -> ContactDetails:
        """Contact details last confirmed by the server"""
        return self.pairing.get_web_user_details()

    async def pair(self, device_name: str, pairing_code: str) -> bool:
        """Pair a panel; an existing pairing counts as success"""
        return await self.pairing.pair(device_name, pairing_code)

    async def list_devices(self) -> list[PairedEntity] | None:
        """
        Panels paired with this web user.

        None means nothing is paired yet and the pairing flow should go back
        to the pairing step.
        """
        return await self.pairing.list_devices()

    async def unpair(self, pair_id: str) -> bool:
        return await self.pairing.unpair(pair_id)

    # ========== Devices ==========

    async def create_device(
        self,
        entity: PairedEntity,
        user_code: str,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        phrases: Mapping[AlarmState, str] | None = None,
    ) -> PimalinkDevice:
        """
        Create the device for a paired panel.

        A device already registered for the same pair ID is stopped and
        replaced.

        Args:
            entity: Paired entity from list_devices()
            user_code: Panel user code used to open panel sessions
            poll_interval: Seconds between notification polls
            phrases: Notification phrase table (default: English)
        """
        previous = self.devices.pop(entity.pair_id, None)
        if previous is not None:
            _LOGGER.debug("Replacing device for %s", entity.pair_id)
            await previous.async_stop()

        device = PimalinkDevice(
            self.transport,
            self.pairing,
            self.pairing.web_user_id,
            entity,
            user_code,
            poll_interval=poll_interval,
            phrases=phrases,
        )
        self.devices[entity.pair_id] = device
        return device

    async def remove_device(self, pair_id: str) -> bool:
        """
        Delete a device. Returns True if the panel was also unpaired
        (device named "unpair").
        """
        device = self.devices.pop(pair_id, None)
        if device is None:
            return False
        return await device.async_on_deleted()

    async def close(self) -> None:
        """Stop polling on every device"""
        for device in self.devices.values():
            await device.async_stop()
