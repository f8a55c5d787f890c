"""Client library for Philips Hue bridges.

This package contains:
- discovery: find bridges (SSDP probe and remote lookup)
- pairing: link button pairing (PairingSession)
- client: BridgeClient for listing and switching lights
- protocol: JSON wire format and error classification
- transport: HTTP and datagram adapters
- exceptions: error hierarchy
- config: protocol constants and environment settings
"""

from huelink.client import BridgeClient
from huelink.discovery import DiscoveryResults, describe_bridge, discover
from huelink.exceptions import (
    BadRequestError,
    BridgeError,
    DiscoveryError,
    HueError,
    InternalError,
    MethodNotAllowedError,
    NoTransportError,
    NotFoundError,
    PairingError,
    PairingRejected,
    PairingTimeout,
    TransportError,
    TransportTimeout,
    UnauthorizedError,
    UnclassifiedError,
)
from huelink.pairing import PairingSession, PairingState
from models.bridge import BridgeDescriptor, Credential
from models.light import UNSET, Light, LightState

__version__ = '0.1.0'
