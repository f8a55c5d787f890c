"""Protocol constants and environment overrides.

Nothing here touches the filesystem: persisting credentials is the caller's
job (see commands/store.py for the CLI's take on it).
"""

import os
from dataclasses import dataclass

# SSDP multicast group used by UPnP device discovery
SSDP_ADDRESS = '239.255.255.250'
SSDP_PORT = 1900
SSDP_SEARCH_TARGET = 'ssdp:all'
SSDP_MX = 3

# Philips N-UPnP lookup service
DISCOVERY_URL = 'https://discovery.meethue.com/'

# Link button not pressed
LINK_BUTTON_ERROR = 101

DEFAULT_HTTP_TIMEOUT = 5.0
DEFAULT_DISCOVERY_TIMEOUT = 5.0
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_MAX_WAIT = 30.0
DEFAULT_DEVICE_NAME = 'hue_link#cli'
DEFAULT_SCHEME = 'http'


@dataclass(frozen=True)
class Settings:
    """Runtime settings, after environment overrides."""
    discovery_url: str = DISCOVERY_URL
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    scheme: str = DEFAULT_SCHEME


def get_settings() -> Settings:
    """Read settings from the environment.

    Honours:
    - HUE_DISCOVERY_URL (default: https://discovery.meethue.com/)
    - HUE_HTTP_TIMEOUT (seconds, default: 5)
    - HUE_SCHEME ("http" or "https", default: "http")
    """
    timeout = os.getenv('HUE_HTTP_TIMEOUT')
    try:
        http_timeout = float(timeout) if timeout else DEFAULT_HTTP_TIMEOUT
    except ValueError:
        raise ValueError(f"HUE_HTTP_TIMEOUT must be a number, got {timeout!r}") from None

    scheme = os.getenv('HUE_SCHEME', DEFAULT_SCHEME).lower()
    if scheme not in ('http', 'https'):
        raise ValueError(f"HUE_SCHEME must be 'http' or 'https', got {scheme!r}")

    return Settings(
        discovery_url=os.getenv('HUE_DISCOVERY_URL', DISCOVERY_URL),
        http_timeout=http_timeout,
        scheme=scheme,
    )
