"""
String catalog for the wizard hosts.

Pages only carry opaque string ids; hosts turn them into text here.
"""

from typing import Dict, Optional

from ..models.strings import R


STRINGS: Dict[str, str] = {
    R.NEXT: "Next",
    R.PREVIOUS: "Back",
    R.SKIP: "Skip",
    R.START: "Start",
    R.LOADING: "Just a sec…",
    R.SETUP_WIFI: "Connect to Wi‑Fi",
    R.SETUP_MOBILE_NETWORK: "Mobile network",
    R.SETUP_ACCOUNT: "Add your account",
    R.SETUP_OTHER: "Other settings",
    R.SETUP_COMPLETE: "Setup complete",
    R.BACKUP: "Back up my data",
    R.LOCATION_ACCESS: "Access to my location",
    R.LOCATION_GPS: "Use GPS satellites",
    R.LOCATION_NETWORK: "Use Wi‑Fi and mobile networks",
    R.FINISH_SUMMARY: "Your device is ready. Tap Start to begin using it.",
}

CHEVRON_NEXT = "›"
CHEVRON_PREVIOUS = "‹"


def resolve_string(string_id: Optional[str], default: str = "") -> str:
    """Text for a string id; unknown ids resolve to themselves."""
    if string_id is None:
        return default
    return STRINGS.get(string_id, string_id)
