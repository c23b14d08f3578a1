"""
Other settings page.

Lets the user choose backup and location settings. The choices live in the
page payload while the wizard runs, survive save/restore with it, and are
written to the platform when setup finishes.
"""

import logging
from typing import Dict, Any

from ..models.page import Page, PageAction, PageView
from ..models.strings import R
from ..services.platform_service import (
    Platform, BACKUP_ENABLED, LOCATION_PROVIDERS_ALLOWED, GPS_PROVIDER, NETWORK_PROVIDER
)


logger = logging.getLogger(__name__)

KEY = "OtherSettingsPage"

BACKUP = "backup_enabled"
GPS = "gps_enabled"
NETWORK_LOCATION = "network_location_enabled"


def read_toggles(platform: Platform) -> Dict[str, bool]:
    """Current toggle values as stored on the platform."""
    providers = platform.get_list_setting(LOCATION_PROVIDERS_ALLOWED)
    return {
        BACKUP: platform.get_int_setting(BACKUP_ENABLED, 0) == 1,
        GPS: GPS_PROVIDER in providers,
        NETWORK_LOCATION: NETWORK_PROVIDER in providers,
    }


def location_access(page: Page) -> bool:
    return bool(page.extra.get(GPS)) or bool(page.extra.get(NETWORK_LOCATION))


def toggle_backup(page: Page, checked: bool) -> Dict[str, Any]:
    page.extra[BACKUP] = bool(checked)
    return describe_toggles(page)


def toggle_location_access(page: Page, checked: bool) -> Dict[str, Any]:
    """Location access switches both providers together."""
    page.extra[GPS] = bool(checked)
    page.extra[NETWORK_LOCATION] = bool(checked)
    return describe_toggles(page)


def toggle_gps(page: Page, checked: bool) -> Dict[str, Any]:
    page.extra[GPS] = bool(checked)
    return describe_toggles(page)


def toggle_network_location(page: Page, checked: bool) -> Dict[str, Any]:
    page.extra[NETWORK_LOCATION] = bool(checked)
    return describe_toggles(page)


def describe_toggles(page: Page) -> Dict[str, Any]:
    """Toggle values as shown: the three stored ones plus derived location access."""
    return {
        BACKUP: bool(page.extra.get(BACKUP)),
        GPS: bool(page.extra.get(GPS)),
        NETWORK_LOCATION: bool(page.extra.get(NETWORK_LOCATION)),
        "location_access": location_access(page),
    }


def _render(page: Page, host: Any, action: PageAction) -> PageView:
    return PageView(
        key=page.key,
        title_id=page.title_id,
        layout=page.layout,
        action=action,
        arguments=describe_toggles(page),
        bindings={
            "toggle_backup": lambda checked: toggle_backup(page, checked),
            "toggle_location_access": lambda checked: toggle_location_access(page, checked),
            "toggle_gps": lambda checked: toggle_gps(page, checked),
            "toggle_network_location": lambda checked: toggle_network_location(page, checked),
        }
    )


def _save(page: Page) -> Dict[str, Any]:
    return {name: bool(page.extra.get(name)) for name in (BACKUP, GPS, NETWORK_LOCATION)}


def _load(page: Page, extra: Dict[str, Any]) -> None:
    for name in (BACKUP, GPS, NETWORK_LOCATION):
        if name in extra:
            page.extra[name] = bool(extra[name])


def _finalize(page: Page, platform: Platform) -> None:
    platform.put_setting(BACKUP_ENABLED, "1" if page.extra.get(BACKUP) else "0")

    providers = [p for p in platform.get_list_setting(LOCATION_PROVIDERS_ALLOWED)
                 if p not in (GPS_PROVIDER, NETWORK_PROVIDER)]
    if page.extra.get(GPS):
        providers.append(GPS_PROVIDER)
    if page.extra.get(NETWORK_LOCATION):
        providers.append(NETWORK_PROVIDER)
    platform.put_list_setting(LOCATION_PROVIDERS_ALLOWED, providers)

    logger.info(f"Saved other settings: {_save(page)}")


def create_other_settings_page(platform: Platform) -> Page:
    """Build the other settings page seeded from the platform's current values."""
    return Page(
        key=KEY,
        title_id=R.SETUP_OTHER,
        layout="other_settings",
        extra=read_toggles(platform),
        renderer=_render,
        state_saver=_save,
        state_loader=_load,
        finalizer=_finalize
    )
