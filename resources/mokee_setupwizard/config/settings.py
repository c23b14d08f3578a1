"""
Configuration management system for the MoKee setup wizard.

This module handles application settings, default values, environment
overrides and configuration file loading/saving with proper error handling.
"""

import os
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional, Union
from dataclasses import dataclass, asdict, field
from enum import Enum


def _get_version_from_file() -> str:
    """Read version from the VERSION file shipped inside the package."""
    try:
        version_file = Path(__file__).parent.parent / "VERSION"
        if version_file.exists():
            return version_file.read_text().strip()
    except OSError:
        pass
    return "1.0.0"


def _env_flag(value: str) -> bool:
    return value.lower() in ("true", "1", "yes", "on")


class LogLevel(Enum):
    """Available log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass
class NetworkConfig:
    """Connectivity check configuration."""
    # None defers to the platform setting, then to the built-in default server
    captive_portal_server: Optional[str] = None
    probe_path: str = "/generate_204"
    probe_timeout_ms: int = 10000


@dataclass
class PathConfig:
    """File and directory path configuration."""
    state_file: str = "setupwizard_state.json"
    platform_settings_file: str = "platform_settings.json"
    log_file: str = "setupwizard.log"


@dataclass
class WizardConfig:
    """Wizard behavior configuration."""
    guest_user: bool = False
    account_type: str = "com.google"
    worker_threads: int = 2
    persist_state: bool = True


@dataclass
class UIConfig:
    """User interface configuration."""
    appearance_mode: str = "dark"
    color_theme: str = "blue"
    window_width: int = 720
    window_height: int = 540
    finish_animation_ms: int = 400
    colored_output: bool = True

    colors: Dict[str, str] = field(default_factory=lambda: {
        "primary": "#263238",
        "primary_dark": "#1c2529",
        "accent": "#1de9b6",
        "window_background": "#eceff1",
        "primary_text": "#212121",
        "white": "#ffffff",
    })


@dataclass
class AppConfig:
    """Main application configuration container."""

    network: NetworkConfig = field(default_factory=NetworkConfig)
    paths: PathConfig = field(default_factory=PathConfig)
    wizard: WizardConfig = field(default_factory=WizardConfig)
    ui: UIConfig = field(default_factory=UIConfig)

    version: str = field(default_factory=_get_version_from_file)
    app_name: str = "MoKee Setup Wizard"
    config_version: str = "1.0"

    debug_mode: bool = False
    log_level: LogLevel = LogLevel.INFO

    def __post_init__(self):
        """Post-initialization processing."""
        self._load_environment_variables()
        self._validate_config()

    def _load_environment_variables(self) -> None:
        """Load configuration from environment variables."""
        if env_server := os.getenv("CAPTIVE_PORTAL_SERVER"):
            self.network.captive_portal_server = env_server.strip()

        if env_debug := os.getenv("SETUPWIZARD_DEBUG"):
            self.debug_mode = _env_flag(env_debug)
            if self.debug_mode:
                self.log_level = LogLevel.DEBUG

        if env_log_level := os.getenv("SETUPWIZARD_LOG_LEVEL"):
            try:
                self.log_level = LogLevel(env_log_level.upper())
            except ValueError:
                logging.warning(f"Invalid log level in environment: {env_log_level}")

        if env_guest := os.getenv("SETUPWIZARD_GUEST_USER"):
            self.wizard.guest_user = _env_flag(env_guest)

    def _validate_config(self) -> None:
        """Validate configuration values."""
        if self.network.probe_timeout_ms <= 0:
            raise ValueError("Probe timeout must be positive")

        if not self.network.probe_path.startswith("/"):
            raise ValueError("Probe path must start with '/'")

        if self.network.captive_portal_server is not None:
            server = self.network.captive_portal_server
            if not server or "/" in server or " " in server:
                raise ValueError(f"Invalid captive portal server: {server!r}")

        if self.wizard.worker_threads <= 0:
            raise ValueError("Worker thread count must be positive")

        if not self.wizard.account_type:
            raise ValueError("Account type cannot be empty")

        if self.ui.finish_animation_ms < 0:
            raise ValueError("Finish animation duration cannot be negative")

    def get_config_dir(self) -> Path:
        """Get the application configuration directory."""
        from ..utils.platform_utils import get_platform_config_dir
        return get_platform_config_dir('mokee-setupwizard')

    def get_config_file_path(self) -> Path:
        """Get the path to the configuration file."""
        return self.get_config_dir() / 'config.json'

    def get_state_file_path(self) -> Path:
        """Get the path of the persisted wizard state."""
        path = Path(self.paths.state_file)
        return path if path.is_absolute() else self.get_config_dir() / path

    def get_platform_settings_path(self) -> Path:
        """Get the path of the JSON file backing platform settings."""
        path = Path(self.paths.platform_settings_file)
        return path if path.is_absolute() else self.get_config_dir() / path

    def get_log_file_path(self) -> Path:
        """Get the path of the log file."""
        from ..utils.platform_utils import get_platform_log_dir
        path = Path(self.paths.log_file)
        return path if path.is_absolute() else get_platform_log_dir('mokee-setupwizard') / path

    def get_probe_timeout_seconds(self) -> float:
        return self.network.probe_timeout_ms / 1000.0

    def save_to_file(self, file_path: Optional[Union[str, Path]] = None) -> None:
        """
        Save configuration to a JSON file.

        Args:
            file_path: Path to save the config file. If None, uses default location.

        Raises:
            IOError: If the file cannot be written
        """
        if file_path is None:
            file_path = self.get_config_file_path()
        else:
            file_path = Path(file_path)

        try:
            config_dict = self._to_serializable_dict()
            file_path.parent.mkdir(parents=True, exist_ok=True)

            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)

            logging.info(f"Configuration saved to {file_path}")

        except (OSError, TypeError) as e:
            raise IOError(f"Failed to save configuration to {file_path}: {e}")

    def _to_serializable_dict(self) -> Dict[str, Any]:
        """Convert configuration to a JSON-serializable dictionary."""
        config_dict = asdict(self)
        config_dict['log_level'] = self.log_level.value
        return config_dict

    @classmethod
    def load_from_file(cls, file_path: Optional[Union[str, Path]] = None) -> 'AppConfig':
        """
        Load configuration from a JSON file.

        Args:
            file_path: Path to load the config file from. If None, uses default location.

        Returns:
            AppConfig instance loaded from file

        Raises:
            FileNotFoundError: If the config file doesn't exist
            ValueError: If the config file is invalid
        """
        if file_path is None:
            file_path = cls._get_default_config_path()
        else:
            file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                config_dict = json.load(f)

            return cls._from_dict(config_dict)

        except (OSError, TypeError, ValueError) as e:
            raise ValueError(f"Failed to load configuration from {file_path}: {e}")

    @classmethod
    def _get_default_config_path(cls) -> Path:
        """Get the default configuration file path."""
        from ..utils.platform_utils import get_platform_config_dir
        return get_platform_config_dir('mokee-setupwizard') / 'config.json'

    @classmethod
    def _from_dict(cls, config_dict: Dict[str, Any]) -> 'AppConfig':
        """Create AppConfig instance from dictionary."""
        log_level = LogLevel.INFO
        if log_level_str := config_dict.get('log_level'):
            try:
                log_level = LogLevel(str(log_level_str).upper())
            except ValueError:
                logging.warning(f"Invalid log level in config: {log_level_str}")

        return cls(
            network=NetworkConfig(**config_dict.get('network', {})),
            paths=PathConfig(**config_dict.get('paths', {})),
            wizard=WizardConfig(**config_dict.get('wizard', {})),
            ui=UIConfig(**config_dict.get('ui', {})),
            version=config_dict.get('version', _get_version_from_file()),
            app_name=config_dict.get('app_name', 'MoKee Setup Wizard'),
            config_version=config_dict.get('config_version', '1.0'),
            debug_mode=config_dict.get('debug_mode', False),
            log_level=log_level
        )

    def get_color(self, name: str) -> str:
        """Get a theme color by resource name."""
        return self.ui.colors.get(name, "#000000")


# Global configuration instance
_global_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get the global configuration instance.

    Raises:
        RuntimeError: If configuration hasn't been initialized
    """
    if _global_config is None:
        raise RuntimeError("Configuration not initialized. Call init_config() first.")
    return _global_config


def init_config(config_file: Optional[Union[str, Path]] = None) -> AppConfig:
    """
    Initialize the global configuration.

    Args:
        config_file: Optional path to config file. If None, uses default or creates new.

    Returns:
        Initialized AppConfig instance
    """
    global _global_config

    try:
        if config_file:
            _global_config = AppConfig.load_from_file(config_file)
        else:
            try:
                _global_config = AppConfig.load_from_file()
            except FileNotFoundError:
                _global_config = AppConfig()
                logging.info("Created new configuration with default values")
    except ValueError as e:
        logging.warning(f"Failed to load configuration: {e}. Using defaults.")
        _global_config = AppConfig()

    return _global_config
