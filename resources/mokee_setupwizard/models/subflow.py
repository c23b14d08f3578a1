"""
External sub-flow vocabulary.

Intents describe a platform interaction the host must start; request codes
identify which page request a result belongs to; result statuses are what the
platform hands back when the interaction completes.
"""

from enum import Enum, IntEnum
from dataclasses import dataclass, field
from typing import Dict, Any, Union


ACTION_PICK_WIFI_NETWORK = "android.net.wifi.PICK_WIFI_NETWORK"
ACTION_CAPTIVE_PORTAL_LOGIN = "android.net.action.captive_portal_login"
ACTION_ADD_ACCOUNT = "android.accounts.action.ADD_ACCOUNT"
ACTION_NETWORK_OPERATOR_SETTINGS = "android.settings.NETWORK_OPERATOR_SETTINGS"

EXTRA_FIRST_RUN = "firstRun"
EXTRA_ALLOW_SKIP = "allowSkip"
EXTRA_USE_IMMERSIVE = "useImmersive"
EXTRA_ACCOUNT_TYPE = "accountType"
EXTRA_TEXT = "android.intent.extra.TEXT"


class RequestCode(IntEnum):
    """Request identifiers for the sub-flows started by wizard pages."""
    SETUP_WIFI = 0
    SETUP_CAPTIVE_PORTAL = 4
    SETUP_ACCOUNT = 5
    SETUP_NETWORK_SETTINGS = 6


class ResultStatus(Enum):
    """Outcome of an external sub-flow."""
    OK = "ok"
    FIRST_USER = "first_user"
    CANCELED = "canceled"
    OTHER = "other"

    @classmethod
    def coerce(cls, value: Union['ResultStatus', int, str]) -> 'ResultStatus':
        """
        Normalize a platform result into a ResultStatus.

        Integers follow the platform result codes (-1 OK, 0 canceled,
        1 first user); unknown codes and names map to OTHER.
        """
        if isinstance(value, ResultStatus):
            return value
        if isinstance(value, int):
            return {-1: cls.OK, 0: cls.CANCELED, 1: cls.FIRST_USER}.get(value, cls.OTHER)
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class SubFlowIntent:
    """A request for the host to start a platform interaction."""
    action: str
    extras: Dict[str, Any] = field(default_factory=dict)

    def describe(self) -> str:
        return self.action.rsplit(".", 1)[-1].replace("_", " ").lower()
