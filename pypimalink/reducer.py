"""Alarm state from the notification feed."""
from collections.abc import Mapping, Sequence
from typing import Any

from .models import AlarmState, NotificationEvent
from .phrases import DEFAULT_LOCALE, phrases_for


def classify_message(message: str, phrases: Mapping[AlarmState, str]) -> AlarmState:
    for state, phrase in phrases.items():
        if phrase in message:
            return state
    return AlarmState.UNKNOWN


def reduce_events(
    events: Any,
    phrases: Mapping[AlarmState, str] | None = None,
) -> AlarmState:
    """
    Return the state told by the newest relevant event.

    The feed is newest first, so the first event containing one of the
    phrases wins. Unrelated events are skipped; an empty feed, a feed with no
    match, or something that is not a list yields UNKNOWN.
    """
    if phrases is None:
        phrases = phrases_for(DEFAULT_LOCALE)
    if isinstance(events, (str, bytes)) or not isinstance(events, Sequence):
        return AlarmState.UNKNOWN

    for item in events:
        event = NotificationEvent.from_api(item)
        if event is None:
            continue
        state = classify_message(event.message, phrases)
        if state is not AlarmState.UNKNOWN:
            return state
    return AlarmState.UNKNOWN
