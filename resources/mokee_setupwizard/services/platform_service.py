"""
Platform service for the setup wizard.

The wizard reads and writes a handful of system settings and notifies the
system when setup is finished. This module defines that seam and two
implementations: an in-memory one and a JSON-file-backed one.
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, List, Union


DEVICE_PROVISIONED = "device_provisioned"
USER_SETUP_COMPLETE = "user_setup_complete"
CAPTIVE_PORTAL_SERVER = "captive_portal_server"
HAS_TELEPHONY = "has_telephony"
BACKUP_ENABLED = "backup_enabled"
LOCATION_PROVIDERS_ALLOWED = "location_providers_allowed"
ACCOUNT_AUTHENTICATORS = "account_authenticators"
ACCOUNTS = "accounts"

GPS_PROVIDER = "gps"
NETWORK_PROVIDER = "network"

ACTION_SETUP_FINISHED = "com.mokee.setupwizard.SETUP_FINISHED"


class Platform(ABC):
    """Settings and broadcast handle of the host platform."""

    @abstractmethod
    def get_setting(self, name: str) -> Optional[str]:
        """Read a setting; None when unset."""

    @abstractmethod
    def put_setting(self, name: str, value: str) -> None:
        """Write a setting."""

    @abstractmethod
    def send_broadcast(self, action: str) -> None:
        """Notify the platform of a well-known event."""

    def get_int_setting(self, name: str, default: Optional[int] = None) -> Optional[int]:
        value = self.get_setting(name)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    def get_list_setting(self, name: str) -> List[str]:
        """Read a comma-separated setting as a list."""
        value = self.get_setting(name) or ""
        return [item.strip() for item in value.split(",") if item.strip()]

    def put_list_setting(self, name: str, values: List[str]) -> None:
        self.put_setting(name, ",".join(values))


class MemoryPlatform(Platform):
    """In-process platform, used for dry runs and tests."""

    def __init__(self, settings: Optional[Dict[str, str]] = None):
        self.settings: Dict[str, str] = dict(settings or {})
        self.broadcasts: List[str] = []
        self._lock = threading.Lock()

    def get_setting(self, name: str) -> Optional[str]:
        with self._lock:
            return self.settings.get(name)

    def put_setting(self, name: str, value: str) -> None:
        with self._lock:
            self.settings[name] = str(value)

    def send_broadcast(self, action: str) -> None:
        with self._lock:
            self.broadcasts.append(action)


class FilePlatform(Platform):
    """
    Platform backed by a JSON settings file.

    Broadcasts are recorded in the same file with a timestamp so that the
    provisioning tooling reading it can react to them.
    """

    def __init__(self, settings_path: Union[str, Path]):
        """
        Initialize file platform.

        Args:
            settings_path: JSON file holding the settings
        """
        self.settings_path = Path(settings_path)
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)
        self._data: Dict[str, Dict] = {"settings": {}, "broadcasts": []}
        self._load()

    def _load(self) -> None:
        if not self.settings_path.exists():
            return
        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if isinstance(data, dict):
                self._data["settings"] = {str(k): str(v) for k, v in data.get("settings", {}).items()}
                self._data["broadcasts"] = list(data.get("broadcasts", []))
        except (OSError, ValueError) as e:
            self._logger.error(f"Failed to read platform settings from {self.settings_path}: {e}")

    def _save(self) -> None:
        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.settings_path, 'w', encoding='utf-8') as f:
                json.dump(self._data, f, indent=2)
        except OSError as e:
            self._logger.error(f"Failed to write platform settings to {self.settings_path}: {e}")

    def get_setting(self, name: str) -> Optional[str]:
        with self._lock:
            return self._data["settings"].get(name)

    def put_setting(self, name: str, value: str) -> None:
        with self._lock:
            self._data["settings"][name] = str(value)
            self._save()
        self._logger.debug(f"Setting {name}={value}")

    def send_broadcast(self, action: str) -> None:
        with self._lock:
            self._data["broadcasts"].append({
                "action": action,
                "sent_at": datetime.now().isoformat()
            })
            self._save()
        self._logger.info(f"Broadcast sent: {action}")
