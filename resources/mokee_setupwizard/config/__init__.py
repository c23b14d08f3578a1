"""
Configuration module for the MoKee setup wizard.

This module handles application settings and configuration file management
with proper validation and error handling.
"""

from .settings import AppConfig, get_config, init_config

__all__ = ["AppConfig", "get_config", "init_config"]
