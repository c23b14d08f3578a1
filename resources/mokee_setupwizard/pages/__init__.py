"""
Wizard pages for the MoKee setup wizard.

This module builds the default page list shown on first boot.
"""

from typing import Callable, List, Optional, TYPE_CHECKING

from ..models.page import Page
from ..services.account_service import AccountService, PlatformAccountService
from ..services.captive_portal_service import CaptivePortalProbe
from ..services.platform_service import Platform
from .account_page import create_account_page, DEFAULT_ACCOUNT_TYPE
from .finish_page import create_finish_page
from .other_settings_page import create_other_settings_page
from .settings_dialog_page import create_mobile_network_page, create_settings_dialog_page
from .wifi_setup_page import create_wifi_setup_page

if TYPE_CHECKING:
    from ..config.settings import AppConfig


def create_setup_pages(platform: Platform,
                       account_service: Optional[AccountService] = None,
                       probe_factory: Optional[Callable[[], CaptivePortalProbe]] = None,
                       config: Optional['AppConfig'] = None) -> List[Page]:
    """
    Build the first-boot pages in wizard order.

    Args:
        platform: Platform handle the pages read their defaults from
        account_service: Authenticator seam; defaults to the platform's
        probe_factory: Builds the captive portal probe; defaults to one
            configured from the platform and config
        config: Application configuration

    Returns:
        Wifi, mobile network, account, other settings and finish pages
    """
    if account_service is None:
        account_service = PlatformAccountService(platform)
    if probe_factory is None:
        probe_factory = lambda: CaptivePortalProbe.from_platform(platform, config)

    account_type = config.wizard.account_type if config else DEFAULT_ACCOUNT_TYPE
    portal_colors = None
    if config is not None:
        portal_colors = {
            "status_bar_color": config.get_color("primary_dark"),
            "action_bar_color": config.get_color("primary_dark"),
            "progress_bar_color": config.get_color("accent"),
        }

    return [
        create_wifi_setup_page(probe_factory, portal_colors),
        create_mobile_network_page(platform),
        create_account_page(account_service, account_type),
        create_other_settings_page(platform),
        create_finish_page(),
    ]


__all__ = [
    "create_setup_pages",
    "create_wifi_setup_page",
    "create_mobile_network_page",
    "create_settings_dialog_page",
    "create_account_page",
    "create_other_settings_page",
    "create_finish_page",
]
