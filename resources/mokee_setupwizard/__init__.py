"""
MoKee Setup Wizard

First-boot setup wizard engine: an ordered list of pages, a navigation
controller driving them, and hosts for a desktop window and the terminal.
"""

from .config.settings import _get_version_from_file

__version__ = _get_version_from_file()
__author__ = "MoKee Open Source Project"
__description__ = "First-boot setup wizard with a CustomTkinter host"

# Package-level imports for convenience
from .config.settings import AppConfig
from .models.page import Page, PageAction, create_page
from .models.wizard_data import WizardData
from .services.setup_wizard_service import SetupWizardSession
from .utils.logger import get_logger

__all__ = [
    "AppConfig",
    "Page",
    "PageAction",
    "create_page",
    "WizardData",
    "SetupWizardSession",
    "get_logger"
]
