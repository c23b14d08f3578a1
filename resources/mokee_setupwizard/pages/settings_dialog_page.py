"""
System settings dialog pages.

A settings dialog page opens a platform settings screen and moves on when
the user returns from it, whatever the result.
"""

from typing import Any, Callable, Optional

from ..models.page import Page, WizardCallbacks
from ..models.strings import R
from ..models.subflow import (
    SubFlowIntent, RequestCode, ResultStatus, ACTION_NETWORK_OPERATOR_SETTINGS
)
from ..services.platform_service import Platform, HAS_TELEPHONY
from ..services.subflow_service import create_subflow_page, launch


MOBILE_NETWORK_KEY = "MobileNetworkPage"


def create_settings_dialog_page(key: str, title_id: str, intent: SubFlowIntent,
                                request_code: int,
                                hidden_check: Optional[Callable[[], bool]] = None,
                                **kwargs: Any) -> Page:
    """
    Build a page fronting a system settings screen.

    Reaching the page by going back skips past it; any result completes it.
    """

    def _start(page: Page, callbacks: WizardCallbacks) -> None:
        launch(callbacks, page.subflow, intent, request_code)

    def _on_result(page: Page, callbacks: WizardCallbacks, request_id: int,
                   status: ResultStatus, payload: Any) -> None:
        page.subflow.resolve(advance=True)
        page.mark_completed()
        callbacks.advance()

    return create_subflow_page(
        key, title_id,
        start=_start,
        on_result=_on_result,
        retreat_on_back=True,
        hidden_check=hidden_check,
        **kwargs
    )


def create_mobile_network_page(platform: Platform) -> Page:
    """Mobile network settings, shown only on devices with telephony."""
    return create_settings_dialog_page(
        MOBILE_NETWORK_KEY, R.SETUP_MOBILE_NETWORK,
        SubFlowIntent(ACTION_NETWORK_OPERATOR_SETTINGS),
        RequestCode.SETUP_NETWORK_SETTINGS,
        hidden_check=lambda: platform.get_int_setting(HAS_TELEPHONY, 0) != 1,
        next_button_title_id=R.SKIP,
        optional=True
    )
