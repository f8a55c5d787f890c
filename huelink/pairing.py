"""Link button pairing.

A new client gets its username by POSTing ``{"devicetype": ...}`` to ``/api``.
The bridge refuses with error 101 until someone presses the physical link
button, so the session keeps asking at a fixed interval until it succeeds, the
bridge rejects the request for another reason, or time runs out.
"""

import enum
import logging
import time
from collections.abc import Callable

from huelink.config import DEFAULT_MAX_WAIT, DEFAULT_POLL_INTERVAL, DEFAULT_SCHEME
from huelink.exceptions import (
    BridgeError,
    PairingError,
    PairingRejected,
    PairingTimeout,
    TransportError,
    TransportTimeout,
)
from huelink.protocol import decode_registration, read_payload
from huelink.transport import HttpTransport
from models.bridge import BridgeDescriptor, Credential

logger = logging.getLogger(__name__)


class PairingState(enum.Enum):
    UNAUTHENTICATED = 'unauthenticated'
    AWAITING_LINK_BUTTON = 'awaiting_link_button'
    AUTHENTICATED = 'authenticated'
    FAILED = 'failed'


TERMINAL_STATES = (PairingState.AUTHENTICATED, PairingState.FAILED)


class PairingSession:
    """One pairing attempt against one bridge.

    Sessions are single use; to pair again, create a new session.

    Args:
        bridge: The bridge to pair with
        http: HTTP transport (a fresh one is created if omitted)
        clock: Monotonic clock, injectable for tests
        sleep: Sleep function, injectable for tests
        scheme: 'http' or 'https'
    """

    def __init__(self, bridge: BridgeDescriptor, http: HttpTransport | None = None,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep,
                 scheme: str = DEFAULT_SCHEME):
        self.bridge = bridge
        self.http = http or HttpTransport()
        self.url = f"{scheme}://{bridge.ip_or_host}/api"
        self._clock = clock
        self._sleep = sleep
        self._state = PairingState.UNAUTHENTICATED
        self._credential = None
        self._used = False

    @property
    def state(self) -> PairingState:
        return self._state

    @property
    def credential(self) -> Credential | None:
        return self._credential

    def abandon(self):
        """Give up on this session. Terminal sessions are left as they are."""
        if self._state not in TERMINAL_STATES:
            self._state = PairingState.FAILED

    def request_credential(self, device_name: str, poll_interval: float = DEFAULT_POLL_INTERVAL,
                           max_wait: float = DEFAULT_MAX_WAIT) -> Credential:
        """Register with the bridge, waiting up to ``max_wait`` for the link button.

        Args:
            device_name: Label the bridge stores for this client (``app#device``)
            poll_interval: Seconds between registration attempts
            max_wait: Seconds to keep trying while the button is not pressed

        Returns:
            The credential issued by the bridge

        Raises:
            PairingRejected: the bridge refused the request for another reason
            PairingTimeout: the button was not pressed within ``max_wait``
            PairingError: the session was already used or abandoned
            TransportError: the bridge could not be reached
        """
        if not device_name or not isinstance(device_name, str):
            raise ValueError("device_name must be a non-empty string")
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if max_wait < 0:
            raise ValueError("max_wait must not be negative")
        if self._used or self._state is not PairingState.UNAUTHENTICATED:
            raise PairingError(f"Pairing session already {self._state.value}; create a new one")
        self._used = True

        start = self._clock()
        deadline = start + max_wait
        attempt = 0

        while True:
            attempt += 1
            try:
                registration = self._register(device_name)
            except TransportTimeout as e:
                # Counts as another round of waiting
                logger.debug("Registration attempt %d timed out: %s", attempt, e)
                registration = None
            except TransportError:
                self._state = PairingState.FAILED
                raise
            except BridgeError as e:
                self._state = PairingState.FAILED
                raise PairingRejected(e.description, e.code) from e

            if registration is not None and not registration.pending:
                self._credential = Credential(registration.username)
                self._state = PairingState.AUTHENTICATED
                logger.info("Paired with %s after %d attempt(s)", self.bridge, attempt)
                return self._credential

            self._state = PairingState.AWAITING_LINK_BUTTON

            remaining = deadline - self._clock()
            if remaining <= 0:
                self._state = PairingState.FAILED
                raise PairingTimeout(self._clock() - start)
            logger.debug("Link button not pressed yet (attempt %d), %.1fs left", attempt, remaining)
            self._sleep(min(poll_interval, remaining))

            if self._state is PairingState.FAILED:
                # abandon() was called while we slept
                raise PairingError("Pairing abandoned")

    def _register(self, device_name: str):
        response = self.http.request('POST', self.url, {'devicetype': device_name})
        return decode_registration(read_payload(response))
