"""Type definitions for raw payloads.

These describe JSON as it arrives from the bridge, the remote discovery
service, or the user config file, before it is turned into value objects.
"""

from typing import TypedDict


class StoredCredentials(TypedDict):
    """Bridge address and username as persisted by the CLI."""
    bridge_ip: str
    username: str


class DiscoveredBridge(TypedDict, total=False):
    """Bridge entry from the remote N-UPnP discovery service."""
    id: str
    internalipaddress: str
    port: int
    name: str


class ErrorPayload(TypedDict, total=False):
    """Body of an ``{"error": {...}}`` section returned by the bridge."""
    type: int
    address: str
    description: str
