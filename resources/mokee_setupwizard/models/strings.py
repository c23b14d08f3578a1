"""
Opaque string resource ids used by wizard pages.

Pages only carry these ids; the host resolves them through its own catalog.
"""


class R:
    """String resource ids."""
    NEXT = "next"
    PREVIOUS = "previous"
    SKIP = "skip"
    START = "start"
    LOADING = "loading"
    SETUP_WIFI = "setup_wifi"
    SETUP_MOBILE_NETWORK = "setup_mobile_network"
    SETUP_ACCOUNT = "setup_account"
    SETUP_OTHER = "setup_other"
    SETUP_COMPLETE = "setup_complete"
    BACKUP = "backup"
    LOCATION_ACCESS = "location_access"
    LOCATION_GPS = "location_gps"
    LOCATION_NETWORK = "location_network"
    FINISH_SUMMARY = "finish_summary"
