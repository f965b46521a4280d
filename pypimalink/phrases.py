"""
Notification phrases that reveal the panel state, per locale.

The panel reports arm/disarm only through free-text notifications, in the
language the web user was configured with. Phrases are matched literally
(case and diacritics included), and checked in the order listed.
"""
from .models import AlarmState

EVENT_PHRASES_VERSION = 1

EVENT_PHRASES: dict[str, dict[AlarmState, str]] = {
    "en": {
        AlarmState.ARMED: "Full Arm",
        AlarmState.PARTIALLY_ARMED: "Home Arm",
        AlarmState.DISARMED: "Disarm",
    },
}

DEFAULT_LOCALE = "en"


def phrases_for(locale: str) -> dict[AlarmState, str]:
    """Phrase table for a locale; KeyError if the locale is not known"""
    return EVENT_PHRASES[locale]
