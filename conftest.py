"""
Shared fixtures for the setup wizard tests.

Tests run against the package in resources/ without installing it.
"""

import sys
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Any, Dict

import pytest

# Add the resources directory to Python path
sys.path.insert(0, str(Path(__file__).parent / "resources"))

from mokee_setupwizard.gui.host_shell import HostShell, ButtonTheme
from mokee_setupwizard.models.errors import ExternalUnavailable
from mokee_setupwizard.models.page import PageView
from mokee_setupwizard.models.subflow import SubFlowIntent
from mokee_setupwizard.services.account_service import (
    AccountService, AuthenticatorResponse, AuthenticatorStatus
)
from mokee_setupwizard.services.captive_portal_service import ProbeResult
from mokee_setupwizard.services.platform_service import (
    MemoryPlatform, ACCOUNT_AUTHENTICATORS, HAS_TELEPHONY
)
from mokee_setupwizard.services.scheduler import InlineScheduler
from mokee_setupwizard.models.subflow import ACTION_ADD_ACCOUNT


class RecordingHost(HostShell):
    """HostShell that records every call.

    The finish animation completes at once unless hold_finish is set, in which
    case its completion is kept in pending_finish.
    """

    def __init__(self, unavailable_actions: Tuple[str, ...] = (), hold_finish: bool = False):
        self.unavailable_actions = unavailable_actions
        self.hold_finish = hold_finish
        self.pending_finish: Optional[Callable[[], None]] = None
        self.views: List[PageView] = []
        self.flows: List[Tuple[SubFlowIntent, int]] = []
        self.button_bars: List[Tuple[str, Optional[str], bool, ButtonTheme, bool]] = []
        self.chrome: List[bool] = []
        self.finish_animations = 0
        self.closed = False

    @property
    def shown_keys(self) -> List[str]:
        return [view.key for view in self.views]

    @property
    def last_flow(self) -> Tuple[SubFlowIntent, int]:
        return self.flows[-1]

    def start_external_flow(self, intent: SubFlowIntent, request_id: int) -> None:
        if intent.action in self.unavailable_actions:
            raise ExternalUnavailable(f"No handler for {intent.action}")
        self.flows.append((intent, request_id))

    def show_page(self, view: PageView) -> None:
        self.views.append(view)

    def set_button_bar(self, next_label: str, prev_label: Optional[str],
                       prev_visible: bool, theme: ButtonTheme,
                       prev_chevron: bool = True) -> None:
        self.button_bars.append((next_label, prev_label, prev_visible, theme, prev_chevron))

    def animate_finish(self, done: Callable[[], None]) -> None:
        self.finish_animations += 1
        if self.hold_finish:
            self.pending_finish = done
        else:
            done()

    def enable_chrome(self, enabled: bool) -> None:
        self.chrome.append(enabled)

    def close(self) -> None:
        self.closed = True


class StubProbe:
    """Probe returning a fixed verdict and counting calls."""

    def __init__(self, captive: bool = False):
        self.captive = captive
        self.calls = 0

    def probe(self) -> ProbeResult:
        self.calls += 1
        return ProbeResult(captive=self.captive, url="http://stub/generate_204",
                           status_code=200 if self.captive else 204)


class StubAccountService(AccountService):
    """Account service with a scripted authenticator."""

    def __init__(self, available: bool = True, exists_after: bool = True,
                 response: Optional[AuthenticatorResponse] = None):
        self.available = available
        self.exists_after = exists_after
        self.response = response or AuthenticatorResponse(
            AuthenticatorStatus.INTENT,
            intent=SubFlowIntent(ACTION_ADD_ACCOUNT, {"accountType": "com.google"})
        )
        self.requests: List[Dict[str, Any]] = []

    def is_available(self, account_type: str) -> bool:
        return self.available

    def add_account(self, account_type: str, options: Dict[str, Any]) -> AuthenticatorResponse:
        if not self.available:
            raise ExternalUnavailable(account_type)
        self.requests.append(dict(options))
        return self.response

    def account_exists(self, account_type: str) -> bool:
        return self.exists_after


@pytest.fixture
def platform():
    return MemoryPlatform({
        ACCOUNT_AUTHENTICATORS: "com.google",
        HAS_TELEPHONY: "0",
    })


@pytest.fixture
def scheduler():
    scheduler = InlineScheduler()
    yield scheduler
    scheduler.shutdown()


@pytest.fixture
def host():
    return RecordingHost()


@pytest.fixture
def probe():
    return StubProbe(captive=False)


@pytest.fixture
def account_service():
    return StubAccountService()
