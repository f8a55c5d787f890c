"""Exception hierarchy for the Hue bridge client.

Every failure the library raises derives from ``HueError`` and carries enough
detail (bridge error code, description, transport error text) for a caller to
decide whether to retry, re-pair, or give up.
"""


class HueError(Exception):
    """Base class for all errors raised by huelink."""


class TransportError(HueError):
    """The network exchange itself failed (refused, DNS, socket, ...)."""


class TransportTimeout(TransportError):
    """The network exchange did not complete in time."""


class DiscoveryError(HueError):
    """Discovery could not run."""


class NoTransportError(DiscoveryError):
    """The discovery socket could not be opened."""


class PairingError(HueError):
    """Pairing did not produce a credential."""


class PairingRejected(PairingError):
    """The bridge refused the registration for a reason other than the link button."""

    def __init__(self, reason: str, code: int | None = None):
        self.reason = reason
        self.code = code
        super().__init__(f"Bridge rejected pairing: {reason}"
                         + (f" (error {code})" if code is not None else ''))


class PairingTimeout(PairingError):
    """The link button was not pressed within the allowed time."""

    def __init__(self, waited: float):
        self.waited = waited
        super().__init__(f"Link button not pressed within {waited:.1f}s")


class BridgeError(HueError):
    """The bridge answered, but with an error.

    Attributes:
        code: Numeric error type reported by the bridge (None if not reported)
        description: Bridge supplied description, or diagnostic text
        address: Resource address the error refers to, if any
        raw: Raw response content, for precise reporting
        applied: Fields the bridge did apply before rejecting (partial updates)
    """

    def __init__(self, code: int | None, description: str, address: str | None = None,
                 raw: str | None = None):
        self.code = code
        self.description = description
        self.address = address
        self.raw = raw
        self.applied: dict = {}
        super().__init__(self._format())

    def _format(self) -> str:
        message = self.description
        if self.code is not None:
            message = f"[{self.code}] {message}"
        if self.address:
            message = f"{message} ({self.address})"
        return message


class NotFoundError(BridgeError):
    """Resource not available (type 3)."""


class UnauthorizedError(BridgeError):
    """Unauthorised user (type 1): the credential was revoked or never valid."""


class BadRequestError(BridgeError):
    """The request body or one of its parameters was rejected."""


class MethodNotAllowedError(BridgeError):
    """Method not available for the resource (type 4)."""


class InternalError(BridgeError):
    """Internal bridge error (type 901)."""


class UnclassifiedError(BridgeError):
    """An error the library does not recognise, or a response it cannot parse."""
