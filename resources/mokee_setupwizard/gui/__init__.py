"""
GUI modules for the MoKee setup wizard.

This module provides the host shell interface, the string catalog and the
terminal host. The CustomTkinter window lives in gui.wizards and is imported
only when the desktop host is used.
"""

from .host_shell import HostShell, ButtonTheme
from .console_host import ConsoleHostShell

__all__ = ["HostShell", "ButtonTheme", "ConsoleHostShell"]
