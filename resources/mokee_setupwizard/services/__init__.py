"""
Service modules for the MoKee setup wizard.

This module provides the scheduler, the platform handle, the captive portal
probe, the account seam, and the navigation and session layers built on them.
"""

from .scheduler import Scheduler, InlineScheduler
from .platform_service import Platform, MemoryPlatform, FilePlatform
from .captive_portal_service import CaptivePortalProbe, ProbeResult
from .account_service import AccountService, PlatformAccountService
from .navigation_service import NavigationController
from .setup_wizard_service import SetupWizardSession

__all__ = [
    "Scheduler",
    "InlineScheduler",
    "Platform",
    "MemoryPlatform",
    "FilePlatform",
    "CaptivePortalProbe",
    "ProbeResult",
    "AccountService",
    "PlatformAccountService",
    "NavigationController",
    "SetupWizardSession",
]
