"""
Wifi setup page.

Shows a loading screen while the platform network picker runs. Once the
user has joined a network, the connection is probed for a captive portal on
a worker thread and the portal login is offered when one is found.
"""

import logging
from concurrent.futures import Future
from typing import Callable, Dict, Optional, Any

from ..models.page import Page, WizardCallbacks
from ..models.strings import R
from ..models.subflow import (
    SubFlowIntent, RequestCode, ResultStatus,
    ACTION_PICK_WIFI_NETWORK, ACTION_CAPTIVE_PORTAL_LOGIN, EXTRA_FIRST_RUN, EXTRA_TEXT
)
from ..services.captive_portal_service import CaptivePortalProbe, ProbeResult
from ..services.subflow_service import create_subflow_page, launch, run_guarded


logger = logging.getLogger(__name__)

KEY = "WifiSetupPage"

DEFAULT_PORTAL_COLORS = {
    "status_bar_color": "#1565c0",
    "action_bar_color": "#1565c0",
    "progress_bar_color": "#ff9800",
}


def wifi_picker_intent() -> SubFlowIntent:
    return SubFlowIntent(ACTION_PICK_WIFI_NETWORK, {EXTRA_FIRST_RUN: True})


def captive_portal_intent(net_id: Optional[Any], colors: Dict[str, str]) -> SubFlowIntent:
    extras: Dict[str, Any] = dict(colors)
    extras[EXTRA_TEXT] = "" if net_id is None else str(net_id)
    return SubFlowIntent(ACTION_CAPTIVE_PORTAL_LOGIN, extras)


def create_wifi_setup_page(probe_factory: Callable[[], CaptivePortalProbe],
                           portal_colors: Optional[Dict[str, str]] = None) -> Page:
    """
    Build the wifi setup page.

    Args:
        probe_factory: Returns the probe to run once a network is joined
        portal_colors: Theme colors handed to the captive portal login

    Returns:
        The page
    """
    colors = dict(DEFAULT_PORTAL_COLORS)
    colors.update(portal_colors or {})

    def _launch_picker(page: Page, callbacks: WizardCallbacks) -> None:
        launch(callbacks, page.subflow, wifi_picker_intent(), RequestCode.SETUP_WIFI)

    def _on_probe_done(page: Page, callbacks: WizardCallbacks, future: Future) -> None:
        try:
            result: ProbeResult = future.result()
        except Exception as e:
            logger.error(f"Captive portal probe failed: {e}")
            result = ProbeResult(captive=False, error=str(e))

        if not result.captive:
            page.subflow.resolve(advance=True)
            page.mark_completed()
            callbacks.advance()
            return

        intent = captive_portal_intent(page.extra.get("net_id"), colors)
        page.extra["captive_portal"] = True
        launch(callbacks, page.subflow, intent, RequestCode.SETUP_CAPTIVE_PORTAL)

    def _check_for_captive_portal(page: Page, callbacks: WizardCallbacks) -> None:
        run_guarded(
            page, callbacks,
            lambda: probe_factory().probe(),
            lambda future: _on_probe_done(page, callbacks, future)
        )

    def _on_result(page: Page, callbacks: WizardCallbacks, request_id: int,
                   status: ResultStatus, payload: Any) -> None:
        flow = page.subflow
        if request_id == RequestCode.SETUP_WIFI:
            if status is ResultStatus.CANCELED:
                flow.resolve(advance=False)
                callbacks.retreat()
            elif status is ResultStatus.OK:
                if isinstance(payload, dict) and "net_id" in payload:
                    page.extra["net_id"] = payload["net_id"]
                _check_for_captive_portal(page, callbacks)
            else:
                flow.resolve(advance=True)
                callbacks.advance()
        elif request_id == RequestCode.SETUP_CAPTIVE_PORTAL:
            if status is ResultStatus.CANCELED:
                logger.info("Captive portal login canceled, picking a network again")
                _launch_picker(page, callbacks)
            else:
                flow.resolve(advance=True)
                page.mark_completed()
                callbacks.advance()

    return create_subflow_page(
        KEY, R.LOADING,
        start=_launch_picker,
        on_result=_on_result,
        next_button_title_id=R.SKIP,
        optional=True
    )
