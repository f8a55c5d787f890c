"""BridgeClient: authenticated access to the lights on one bridge.

Every call goes to the bridge; nothing is cached between calls because the
bridge is the only source of truth for light state.
"""

import logging

from huelink.config import DEFAULT_SCHEME
from huelink.protocol import (
    check_response,
    decode_light,
    decode_lights,
    decode_update_result,
    encode_state_update,
    read_payload,
)
from huelink.transport import HttpTransport
from models.bridge import BridgeDescriptor, Credential
from models.light import Light, LightState

logger = logging.getLogger(__name__)


class BridgeClient:
    """Manages light operations against one bridge with one credential.

    A client is bound to its (address, credential) pair for life. If the
    bridge stops accepting the credential, calls raise ``UnauthorizedError``;
    nothing is retried, and the fix is to pair again and build a new client.

    Instances share no state, so several clients (even for the same bridge)
    can be used side by side.
    """

    def __init__(self, address: str | BridgeDescriptor, credential: Credential,
                 http: HttpTransport | None = None, scheme: str = DEFAULT_SCHEME):
        if isinstance(address, BridgeDescriptor):
            address = address.ip_or_host
        if not address:
            raise ValueError("Bridge address is required")
        if not isinstance(credential, Credential):
            raise TypeError("credential must be a Credential")
        self._address = address
        self._credential = credential
        self.http = http or HttpTransport()
        self.base_url = f"{scheme}://{address}/api/{credential.username}"

    @property
    def address(self) -> str:
        return self._address

    @property
    def credential(self) -> Credential:
        return self._credential

    def __repr__(self) -> str:
        return f"BridgeClient(address={self._address!r})"

    def _request(self, method: str, endpoint: str, data: dict | None = None):
        """Send a request to the bridge API under this credential."""
        url = f"{self.base_url}{endpoint}"
        logger.debug("%s %s %s", method, endpoint, data if data is not None else '')
        return self.http.request(method, url, data)

    def list_lights(self) -> dict[str, Light]:
        """Get all lights with their current state, keyed by light id.

        An empty dict means the bridge has no lights, which is not an error.
        """
        return decode_lights(check_response(self._request('GET', '/lights')))

    def get_light(self, light_id: str | int) -> Light:
        """Get one light.

        Raises:
            NotFoundError: if the bridge has no light with this id
        """
        payload = check_response(self._request('GET', f'/lights/{light_id}'))
        return decode_light(light_id, payload)

    def find_light(self, name: str) -> Light | None:
        """Get a light by name (case-insensitive)."""
        for light in self.list_lights().values():
            if light.name.lower() == name.lower():
                return light
        return None

    def set_light_state(self, light_id: str | int, state: LightState) -> None:
        """Change some of a light's state.

        Only the populated fields of ``state`` are sent; everything else is left
        as it is on the bridge.

        Partial failure: the bridge applies each field on its own. If it accepts
        some fields and rejects others, the first rejection is raised even
        though the accepted fields have already taken effect. The raised error's
        ``applied`` attribute lists those fields by wire name (e.g. ``{'bri': 200}``).

        Raises:
            ValueError: if ``state`` has nothing to change
            NotFoundError: if the light does not exist
            BadRequestError: if a value was rejected
        """
        body = encode_state_update(state)
        response = self._request('PUT', f'/lights/{light_id}/state', body)
        decode_update_result(read_payload(response))

    def switch_light(self, light_id: str | int, on: bool) -> None:
        """Turn a light on or off."""
        self.set_light_state(light_id, LightState(on=on))
