"""
Alarm panel device.

Holds the single authoritative alarm state of one paired panel. The state
changes in two ways:

- user commands (``async_set_state``) set it optimistically and revert it if
  the panel refuses;
- the background poller sets it from the notification feed, only when the
  feed names a state and it differs from the current one.

There is no lock between the two: a poll that completes while a command is
running may overwrite the optimistic value, and the command's revert may
overwrite the poll. The last writer wins.
"""
import logging
from collections.abc import Mapping
from typing import Any, Callable

from .codec import build_envelope, parse_body
from .constants import (
    DEFAULT_POLL_INTERVAL,
    DEVICE_SETTING_USER_CODE,
    HTTP_200_OK,
    UNPAIR_DEVICE_NAME,
    WEBUSER_NOTIFICATIONS,
)
from .exceptions import (
    PimalinkError,
    PimalinkInvalidUserCode,
    PimalinkPanelBusy,
    PimalinkPanelInSession,
    PimalinkTransportError,
)
from .models import AlarmState, CommandResult, PairedEntity
from .pairing import PimalinkPairing
from .poller import StatePoller
from .reducer import reduce_events
from .session import PanelSessionManager
from .transport import PimalinkTransport

_LOGGER = logging.getLogger(__name__)

StateListener = Callable[[AlarmState], None]


def _command_error_message(err: PimalinkError) -> str:
    if isinstance(err, PimalinkInvalidUserCode):
        return "Invalid user code"
    if isinstance(err, PimalinkPanelBusy):
        return "The panel is busy, try again later"
    if isinstance(err, PimalinkPanelInSession):
        return "The panel is in use by another client"
    if isinstance(err, PimalinkTransportError):
        return "Could not reach the PimaLink server"
    return f"Panel command failed: {err}"


class PimalinkDevice:
    def __init__(
        self,
        transport: PimalinkTransport,
        pairing: PimalinkPairing,
        web_user_id: str,
        entity: PairedEntity,
        user_code: str,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        phrases: Mapping[AlarmState, str] | None = None,
    ):
        self._transport = transport
        self._pairing = pairing
        self._web_user_id = web_user_id
        self.pair_id = entity.pair_id
        self.name = entity.name
        self._phrases = phrases

        self._session = PanelSessionManager(transport, web_user_id, entity.pair_id, user_code)
        self._state = AlarmState.UNKNOWN
        self._listeners: list[StateListener] = []
        self._poller: StatePoller[AlarmState] = StatePoller(
            self.async_fetch_state,
            self._apply_polled_state,
            interval=poll_interval,
            name=entity.name or entity.pair_id,
        )

    # ---------- state ----------

    @property
    def state(self) -> AlarmState:
        return self._state

    @property
    def poller(self) -> StatePoller:
        return self._poller

    def add_state_listener(self, listener: StateListener) -> Callable[[], None]:
        """Register a callback for state changes; returns a function that removes it"""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _set_state(self, state: AlarmState) -> None:
        if state == self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    # ---------- user commands ----------

    async def async_set_state(self, target: AlarmState | str) -> CommandResult:
        """
        Arm, partially arm or disarm the panel.

        The new state is shown immediately and reverted if the command fails.
        """
        try:
            target = AlarmState(target)
        except ValueError:
            return CommandResult.failed(f"Unsupported alarm state: {target}")
        if target is AlarmState.UNKNOWN:
            return CommandResult.failed("Cannot set the panel to an unknown state")

        previous = self._state
        self._set_state(target)
        try:
            await self._session.set_general_status(target)
        except PimalinkError as e:
            _LOGGER.warning("(%s) Setting state to %s failed: %s", self.name, target.value, e)
            self._set_state(previous)
            return CommandResult.failed(_command_error_message(e))

        _LOGGER.info("(%s) State set to %s", self.name, target.value)
        return CommandResult.ok()

    # ---------- polling ----------

    async def async_fetch_state(self) -> AlarmState:
        """
        Read the notification feed and reduce it to a state.

        Never raises for server or network problems: they are logged and
        reported as UNKNOWN.
        """
        response = await self._transport.post(
            WEBUSER_NOTIFICATIONS,
            build_envelope(self._web_user_id, pair_entity_id=self.pair_id),
        )
        if response.status != HTTP_200_OK or not response.body:
            _LOGGER.debug(
                "(%s) GetNotifications failed: %s %s",
                self.name,
                response.status,
                response.body if response.status is not None else response.error,
            )
            return AlarmState.UNKNOWN

        events = parse_body(response.body)
        if not isinstance(events, list):
            _LOGGER.debug("(%s) Cannot parse notifications: %s", self.name, response.body[:200])
            return AlarmState.UNKNOWN

        return reduce_events(events, self._phrases)

    def _apply_polled_state(self, state: AlarmState) -> None:
        if state is AlarmState.UNKNOWN or state == self._state:
            return
        _LOGGER.debug("(%s) Polled state %s (was %s)", self.name, state.value, self._state.value)
        self._set_state(state)

    async def async_poll_state(self) -> AlarmState:
        """Run one poll step outside the timer and return the device state"""
        self._apply_polled_state(await self.async_fetch_state())
        return self._state

    # ---------- lifecycle ----------

    async def async_added(self) -> None:
        _LOGGER.info("%s has been added", self.name)

    async def async_start(self) -> None:
        """Device activated: start polling (first poll runs right away)"""
        self._poller.start()
        _LOGGER.info("%s has been initialized", self.name)

    async def async_stop(self) -> None:
        """Device torn down: stop polling"""
        await self._poller.stop()

    async def async_on_renamed(self, name: str) -> None:
        _LOGGER.info("%s was renamed to %s", self.name, name)
        self.name = name
        self._poller.name = name

    async def async_on_settings(
        self,
        old_settings: Mapping[str, Any],
        new_settings: Mapping[str, Any],
        changed_keys: list[str],
    ) -> None:
        _LOGGER.info("%s settings were changed", self.name)
        if DEVICE_SETTING_USER_CODE in changed_keys:
            self._session.user_code = str(new_settings.get(DEVICE_SETTING_USER_CODE) or "")

    async def async_on_deleted(self) -> bool:
        """
        Device removed by the user.

        A device renamed to "unpair" (any case) is also unpaired from the web
        user before it goes away.

        Returns:
            True if the panel was unpaired
        """
        await self.async_stop()
        _LOGGER.info("%s has been deleted", self.name)

        if self.name.lower() != UNPAIR_DEVICE_NAME:
            return False
        return await self._pairing.unpair(self.pair_id)
