"""
Data types shared by the pairing flow, the panel session and the device.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class AlarmState(str, Enum):
    """
    Alarm panel state as exposed to the host.

    UNKNOWN means no relevant notification was found yet; it is never
    written over a known state.
    """
    ARMED = "armed"
    DISARMED = "disarmed"
    PARTIALLY_ARMED = "partially_armed"
    UNKNOWN = "unknown"


@dataclass
class PairedEntity:
    """Remote panel bound to this web user"""
    pair_id: str
    name: str

    @classmethod
    def from_api(cls, item: dict) -> "PairedEntity | None":
        """None when the entry carries no pairId"""
        pair_id = item.get("pairId")
        if pair_id is None or pair_id == "":
            return None
        return cls(pair_id=str(pair_id), name=item.get("name") or "")


@dataclass
class ContactDetails:
    """Contact info registered with the web user"""
    email: str = ""
    phone: str = ""


@dataclass
class NotificationEvent:
    """Entry of the GetNotifications feed (newest first)"""
    message: str
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, item: Any) -> "NotificationEvent | None":
        if isinstance(item, cls):
            return item
        if isinstance(item, str):
            return cls(message=item)
        if isinstance(item, dict):
            message = item.get("message")
            if isinstance(message, str):
                return cls(message=message, raw=item)
        return None


@dataclass
class CommandResult:
    """Outcome of a user-initiated command; failure carries a user-facing message"""
    success: bool
    message: str | None = None

    @classmethod
    def ok(cls) -> "CommandResult":
        return cls(success=True)

    @classmethod
    def failed(cls, message: str) -> "CommandResult":
        return cls(success=False, message=message)
