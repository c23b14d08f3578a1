"""
Platform-specific utilities for the MoKee setup wizard.

This module resolves the OS-specific directories where the wizard keeps its
configuration, its persisted wizard state and its logs when it runs outside
the device image (desktop preview, headless provisioning).
"""

import os
import sys
from pathlib import Path


def is_windows() -> bool:
    """Check if the current operating system is Windows."""
    return os.name == 'nt'


def get_platform_config_dir(app_name: str) -> Path:
    """
    Get the platform-appropriate configuration directory for the application.

    Args:
        app_name: The name of the application.

    Returns:
        A Path object pointing to the configuration directory.
    """
    if override := os.getenv('SETUPWIZARD_HOME'):
        config_dir = Path(override)
    elif is_windows():
        config_dir = Path(os.getenv('APPDATA', '')) / app_name
    elif sys.platform == 'darwin':
        config_dir = Path.home() / 'Library' / 'Application Support' / app_name
    else:
        config_dir = Path.home() / '.config' / app_name

    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_platform_log_dir(app_name: str) -> Path:
    """
    Get the platform-appropriate log directory for the application.

    Args:
        app_name: The name of the application.

    Returns:
        A Path object pointing to the log directory.
    """
    if override := os.getenv('SETUPWIZARD_HOME'):
        log_dir = Path(override) / 'logs'
    elif is_windows():
        log_dir = Path(os.getenv('LOCALAPPDATA', '')) / app_name / 'Logs'
    elif sys.platform == 'darwin':
        log_dir = Path.home() / 'Library' / 'Logs' / app_name
    else:
        log_dir = Path.home() / '.local' / 'share' / app_name / 'logs'

    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir
