"""
PimaLink Alarm Panel Python Client Library
"""
from .client import PimalinkClient
from .device import PimalinkDevice
from .identity import JsonSettingsStore, MemorySettingsStore, ensure_web_user_id
from .models import AlarmState, CommandResult, ContactDetails, NotificationEvent, PairedEntity
from .phrases import EVENT_PHRASES, EVENT_PHRASES_VERSION, phrases_for
from .poller import StatePoller
from .reducer import reduce_events
from .session import PanelSessionManager
from .transport import PimalinkTransport, TransportResponse
from .exceptions import (
    PimalinkError,
    PimalinkNotInitialized,
    PimalinkTransportError,
    PimalinkProtocolError,
    PimalinkUndefinedProtocolError,
    PimalinkStateDecodeError,
    PimalinkAuthError,
    PimalinkInvalidUserCode,
    PimalinkPanelBusy,
    PimalinkPanelInSession,
    PimalinkUndefinedAuthError,
)

__version__ = "0.1.0"
__all__ = [
    "PimalinkClient",
    "PimalinkDevice",
    "PanelSessionManager",
    "PimalinkTransport",
    "TransportResponse",
    "StatePoller",
    "JsonSettingsStore",
    "MemorySettingsStore",
    "ensure_web_user_id",
    "reduce_events",
    "phrases_for",
    "EVENT_PHRASES",
    "EVENT_PHRASES_VERSION",
    "AlarmState",
    "CommandResult",
    "ContactDetails",
    "NotificationEvent",
    "PairedEntity",
    # Exceptions
    "PimalinkError",
    "PimalinkNotInitialized",
    "PimalinkTransportError",
    "PimalinkProtocolError",
    "PimalinkUndefinedProtocolError",
    "PimalinkStateDecodeError",
    "PimalinkAuthError",
    "PimalinkInvalidUserCode",
    "PimalinkPanelBusy",
    "PimalinkPanelInSession",
    "PimalinkUndefinedAuthError",
]
