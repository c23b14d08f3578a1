"""
Data models for the MoKee setup wizard.

This module contains the page record, the page registry and the wizard-wide
data model with its save/restore format.
"""

from .page import Page, PageAction, PageView, WizardCallbacks, create_page
from .registry import PageRegistry
from .wizard_data import WizardData, WizardDataListener

__all__ = [
    "Page",
    "PageAction",
    "PageView",
    "WizardCallbacks",
    "create_page",
    "PageRegistry",
    "WizardData",
    "WizardDataListener",
]
