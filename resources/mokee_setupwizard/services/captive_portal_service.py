"""
Captive portal detection for the setup wizard.

After the user joins a network the wifi page probes a well-known URL that
answers 204 No Content on the open internet. Anything else means a portal
is intercepting HTTP traffic and the user must sign in first.
"""

import logging
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

import requests

from ..models.errors import TransientNetwork
from .platform_service import CAPTIVE_PORTAL_SERVER

if TYPE_CHECKING:
    from .platform_service import Platform
    from ..config.settings import AppConfig


DEFAULT_SERVER = "download.mokeedev.com"
DEFAULT_PROBE_PATH = "/generate_204"
CAPTIVE_PORTAL_SOCKET_TIMEOUT_MS = 10000


@dataclass
class ProbeResult:
    """Outcome of one connectivity probe."""
    captive: bool
    url: Optional[str] = None
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def reachable(self) -> bool:
        return self.error is None


def build_probe_url(server: Optional[str] = None, path: str = DEFAULT_PROBE_PATH) -> str:
    return f"http://{server or DEFAULT_SERVER}{path}"


class CaptivePortalProbe:
    """
    HTTP probe deciding whether the current network is behind a captive portal.

    The request never follows redirects and never uses caches, and both the
    connect and the read phase are bounded by the socket timeout.
    """

    def __init__(self, server: Optional[str] = None,
                 timeout_ms: int = CAPTIVE_PORTAL_SOCKET_TIMEOUT_MS,
                 path: str = DEFAULT_PROBE_PATH):
        """
        Initialize the probe.

        Args:
            server: Host (optionally host:port) answering the probe path
            timeout_ms: Connect and read timeout, each, in milliseconds
            path: Probe path on the server
        """
        self.url = build_probe_url(server, path)
        self.timeout_ms = timeout_ms
        self._logger = logging.getLogger(__name__)

    @classmethod
    def from_platform(cls, platform: 'Platform',
                      config: Optional['AppConfig'] = None) -> 'CaptivePortalProbe':
        """
        Build a probe for the configured server.

        A server configured on the application wins over the platform
        setting; without either the default server is used.
        """
        server = None
        timeout_ms = CAPTIVE_PORTAL_SOCKET_TIMEOUT_MS
        path = DEFAULT_PROBE_PATH
        if config is not None:
            server = config.network.captive_portal_server
            timeout_ms = config.network.probe_timeout_ms
            path = config.network.probe_path
        if not server:
            server = platform.get_setting(CAPTIVE_PORTAL_SERVER)
        return cls(server=server, timeout_ms=timeout_ms, path=path)

    def _fetch(self) -> requests.Response:
        timeout = self.timeout_ms / 1000.0
        try:
            return requests.get(
                self.url,
                allow_redirects=False,
                timeout=(timeout, timeout),
                headers={"Cache-Control": "no-cache", "Pragma": "no-cache"}
            )
        except requests.exceptions.RequestException as e:
            raise TransientNetwork(str(e)) from e

    def probe(self) -> ProbeResult:
        """
        Run the probe. Blocks up to twice the timeout; call off the UI thread.

        Returns:
            ProbeResult; I/O failures yield captive=False
        """
        try:
            response = self._fetch()
        except TransientNetwork as e:
            self._logger.error(f"Captive portal check - probably not a portal: {e}")
            return ProbeResult(captive=False, url=self.url, error=str(e))

        has_body = len(response.content or b"") > 0
        captive = response.status_code != 204 or has_body

        self._logger.info(
            f"Captive portal check: HTTP {response.status_code} from {self.url} -> "
            f"{'captive' if captive else 'open'}"
        )
        return ProbeResult(captive=captive, url=self.url, status_code=response.status_code)

    def is_captive_portal(self) -> bool:
        return self.probe().captive
