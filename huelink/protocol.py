"""Wire format for the bridge's v1 JSON API.

Translates typed requests and responses to and from JSON, and classifies the
error objects the bridge embeds in its responses. The bridge answers most
failures with HTTP 200 and a body like::

    [{"error": {"type": 1, "address": "/lights", "description": "unauthorized user"}}]

so every body is inspected, whatever the status code.
"""

import json
import logging
from typing import NamedTuple

from huelink.config import LINK_BUTTON_ERROR
from huelink.exceptions import (
    BadRequestError,
    BridgeError,
    InternalError,
    MethodNotAllowedError,
    NotFoundError,
    UnauthorizedError,
    UnclassifiedError,
)
from huelink.transport import HttpResponse
from models.light import Light, LightState
from models.types import ErrorPayload

logger = logging.getLogger(__name__)

# Known bridge error types. Anything else is UnclassifiedError.
ERROR_CLASSES: dict[int, type[BridgeError]] = {
    1: UnauthorizedError,           # unauthorized user
    2: BadRequestError,             # body contains invalid JSON
    3: NotFoundError,               # resource not available
    4: MethodNotAllowedError,       # method not available for resource
    5: BadRequestError,             # missing parameters in body
    6: BadRequestError,             # parameter not available
    7: BadRequestError,             # invalid value for parameter
    8: BadRequestError,             # parameter is not modifiable
    11: BadRequestError,            # too many items in list
    901: InternalError,             # internal error
}

# LightState attribute -> wire name
WIRE_FIELDS = {
    'on': 'on',
    'brightness': 'bri',
    'hue': 'hue',
    'saturation': 'sat',
    'color_temperature': 'ct',
    'reachable': 'reachable',
}


class Registration(NamedTuple):
    """Outcome of one registration request."""
    username: str | None
    pending: bool


def _unexpected(what: str, payload) -> UnclassifiedError:
    return UnclassifiedError(None, f"Unexpected {what}", raw=json.dumps(payload, default=str))


def error_from_payload(error: ErrorPayload, raw: str | None = None) -> BridgeError:
    """Build the typed exception for one ``{"type", "address", "description"}`` object."""
    code = error.get('type')
    if isinstance(code, bool) or not isinstance(code, int):
        code = None
    description = error.get('description') or 'Unknown bridge error'
    address = error.get('address')
    error_class = ERROR_CLASSES.get(code, UnclassifiedError)
    if raw is None:
        raw = json.dumps(error, default=str)
    return error_class(code, str(description), address=address, raw=raw)


def parse_body(text: str):
    """Decode a JSON body, turning garbage into UnclassifiedError."""
    try:
        return json.loads(text)
    except ValueError as e:
        raise UnclassifiedError(None, f"Malformed JSON from bridge: {e}", raw=text) from e


def iter_errors(payload):
    """Yield every embedded error object in a response payload."""
    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        return
    for section in payload:
        if isinstance(section, dict) and isinstance(section.get('error'), dict):
            yield section['error']


def first_error(payload) -> BridgeError | None:
    for error in iter_errors(payload):
        return error_from_payload(error)
    return None


def read_payload(response: HttpResponse):
    """Decode a response body without judging the errors it may carry.

    Raises:
        UnclassifiedError: body is not JSON, or a non-2xx status came
            without any bridge error object to explain it
    """
    ok = 200 <= response.status < 300
    try:
        payload = parse_body(response.text)
    except UnclassifiedError:
        if ok:
            raise
        raise UnclassifiedError(None, f"HTTP {response.status} from bridge", raw=response.text) from None

    if not ok and first_error(payload) is None:
        raise UnclassifiedError(None, f"HTTP {response.status} from bridge", raw=response.text)
    return payload


def check_response(response: HttpResponse):
    """Decode a response and raise the first embedded bridge error, if any."""
    payload = read_payload(response)
    error = first_error(payload)
    if error is not None:
        error.raw = response.text
        raise error
    return payload


def encode_state_update(state: LightState) -> dict:
    """Wire body for a partial state update.

    Only populated, writable fields are sent. Absent fields are left untouched
    by the bridge, so nothing is ever sent as null.
    """
    body = {WIRE_FIELDS[name]: value for name, value in state.writable().items()}
    if not body:
        raise ValueError("State update has no fields to change")
    return body


def decode_state(data) -> LightState:
    """Decode a light's ``state`` object.

    A field the bridge reports out of range or with the wrong type (some
    third-party bulbs send ``ct: 0``) is left unset and logged, so one odd
    light cannot break a whole listing.
    """
    if not isinstance(data, dict):
        raise _unexpected("light state", data)
    values = {}
    for name, wire_name in WIRE_FIELDS.items():
        value = data.get(wire_name)
        if value is None:
            continue
        try:
            LightState(**{name: value})
        except ValueError as e:
            logger.warning("Ignoring %s from bridge: %s", wire_name, e)
            continue
        values[name] = value
    return LightState(**values)


def decode_light(light_id, data) -> Light:
    if not isinstance(data, dict) or not isinstance(data.get('name'), str):
        raise _unexpected(f"light object for light {light_id}", data)
    return Light(
        id=str(light_id),
        name=data['name'],
        state=decode_state(data.get('state', {})),
        type=data.get('type', ''),
        model_id=data.get('modelid'),
        manufacturer=data.get('manufacturername'),
        unique_id=data.get('uniqueid'),
        sw_version=data.get('swversion'),
    )


def decode_lights(payload) -> dict[str, Light]:
    """Decode the ``/lights`` listing (a mapping of id to light object)."""
    if not isinstance(payload, dict):
        raise _unexpected("light listing", payload)
    return {str(light_id): decode_light(light_id, data) for light_id, data in payload.items()}


def decode_registration(payload) -> Registration:
    """Decode the answer to ``POST /api``.

    Returns ``Registration(username, False)`` on success and
    ``Registration(None, True)`` while the link button has not been pressed.
    Any other bridge error is raised.
    """
    if not isinstance(payload, list) or not payload:
        raise _unexpected("registration response", payload)

    for section in payload:
        success = section.get('success') if isinstance(section, dict) else None
        if isinstance(success, dict):
            username = success.get('username')
            if isinstance(username, str) and username:
                return Registration(username, False)

    for error in iter_errors(payload):
        if error.get('type') == LINK_BUTTON_ERROR:
            return Registration(None, True)
        raise error_from_payload(error)

    raise _unexpected("registration response", payload)


def decode_update_result(payload) -> dict:
    """Decode the answer to a state PUT.

    The bridge answers with one section per field, for example::

        [{"success": {"/lights/1/state/bri": 200}},
         {"error": {"type": 7, "address": "/lights/1/state/hue", ...}}]

    Returns the applied fields keyed by wire name. If any field was rejected,
    the first rejection is raised with ``applied`` set to the fields that were
    applied anyway.
    """
    if not isinstance(payload, list) or not payload:
        raise _unexpected("state update response", payload)

    applied = {}
    for section in payload:
        success = section.get('success') if isinstance(section, dict) else None
        if isinstance(success, dict):
            for address, value in success.items():
                applied[address.rsplit('/', 1)[-1]] = value

    error = first_error(payload)
    if error is not None:
        error.applied = applied
        raise error
    if not applied:
        raise _unexpected("state update response", payload)
    return applied
