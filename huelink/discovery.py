"""Bridge discovery.

Two strategies find bridges without knowing their address:

- local: an SSDP ``M-SEARCH`` multicast on the LAN, collecting replies whose
  ``LOCATION`` header points at the bridge's description document
- remote: the Philips N-UPnP service at https://discovery.meethue.com/, which
  lists bridges registered from the caller's public IP (handy when multicast
  is blocked, e.g. across subnets)

Results are candidates, not a ranking: picking a bridge is up to the caller.
"""

import logging
import time
import xml.etree.ElementTree as ElementTree
from collections.abc import Callable, Iterator
from urllib.parse import urlsplit

from huelink.config import (
    DEFAULT_DISCOVERY_TIMEOUT,
    DISCOVERY_URL,
    SSDP_ADDRESS,
    SSDP_MX,
    SSDP_PORT,
    SSDP_SEARCH_TARGET,
)
from huelink.exceptions import NoTransportError, TransportError, UnclassifiedError
from huelink.protocol import parse_body
from huelink.transport import DatagramTransport, HttpTransport
from models.bridge import BridgeDescriptor
from models.types import DiscoveredBridge

logger = logging.getLogger(__name__)

STRATEGIES = ('local', 'remote')

SEARCH_REQUEST = (
    'M-SEARCH * HTTP/1.1\r\n'
    f'HOST: {SSDP_ADDRESS}:{SSDP_PORT}\r\n'
    'MAN: "ssdp:discover"\r\n'
    f'MX: {SSDP_MX}\r\n'
    f'ST: {SSDP_SEARCH_TARGET}\r\n'
    '\r\n'
).encode()

UPNP_DEVICE_NS = '{urn:schemas-upnp-org:device-1-0}'


def _host(hostname: str) -> str:
    """IPv6 literals need their brackets back before going into a URL."""
    if ':' in hostname and not hostname.startswith('['):
        return f"[{hostname}]"
    return hostname


def _address_from_url(url: str) -> str | None:
    """``http://192.168.1.2:80/description.xml`` -> ``192.168.1.2``."""
    try:
        parts = urlsplit(url.strip())
        port = parts.port
    except ValueError:
        return None
    if parts.scheme not in ('http', 'https') or not parts.hostname:
        return None
    host = _host(parts.hostname)
    default_port = 443 if parts.scheme == 'https' else 80
    if port and port != default_port:
        return f"{host}:{port}"
    return host


def parse_ssdp_response(data: bytes) -> BridgeDescriptor | None:
    """Turn one SSDP reply into a descriptor, or None if it is not a usable bridge reply."""
    text = data.decode('utf-8', errors='replace')
    lines = text.splitlines()
    if not lines or not lines[0].strip().upper().startswith('HTTP/1.1 200'):
        return None

    headers = {}
    for line in lines[1:]:
        name, sep, value = line.partition(':')
        if sep:
            headers[name.strip().lower()] = value.strip()

    location = headers.get('location')
    if not location:
        return None

    # Other UPnP devices answer ssdp:all too
    bridge_id = headers.get('hue-bridgeid')
    if not bridge_id and 'ipbridge' not in headers.get('server', '').lower():
        return None

    address = _address_from_url(location)
    if not address:
        return None
    return BridgeDescriptor(ip_or_host=address, bridge_id=bridge_id.lower() if bridge_id else None)


def parse_remote_entries(payload: list[DiscoveredBridge]) -> list[BridgeDescriptor]:
    """Parse the N-UPnP service's ``[{"id", "internalipaddress", ...}]`` list.

    Malformed entries are skipped.
    """
    if not isinstance(payload, list):
        logger.warning("Remote discovery returned %s instead of a list", type(payload).__name__)
        return []

    bridges = []
    for entry in payload:
        if not isinstance(entry, dict) or not isinstance(entry.get('internalipaddress'), str):
            logger.debug("Skipping malformed remote discovery entry: %r", entry)
            continue
        address = entry['internalipaddress'].strip()
        if not address:
            continue
        address = _host(address)
        port = entry.get('port')
        if isinstance(port, int) and port not in (80, 443):
            address = f"{address}:{port}"
        bridge_id = entry.get('id')
        name = entry.get('name')
        bridges.append(BridgeDescriptor(
            ip_or_host=address,
            bridge_id=bridge_id.lower() if isinstance(bridge_id, str) and bridge_id else None,
            friendly_name=name if isinstance(name, str) and name else None,
        ))
    return bridges


def lookup_remote(http: HttpTransport, url: str = DISCOVERY_URL,
                  timeout: float | None = None) -> list[BridgeDescriptor]:
    """Ask the remote lookup service which bridges share our network.

    Never raises: an unavailable service just means no remote results.
    """
    try:
        response = http.get(url, timeout=timeout)
    except TransportError as e:
        logger.warning("Remote bridge discovery failed: %s", e)
        return []

    if response.status == 429:
        logger.warning("Remote discovery service rate limit reached")
        return []
    if response.status != 200:
        logger.warning("Remote discovery service returned HTTP %s", response.status)
        return []

    try:
        payload = parse_body(response.text)
    except UnclassifiedError as e:
        logger.warning("Failed to parse remote discovery response: %s", e.description)
        return []
    return parse_remote_entries(payload)


class DiscoveryResults:
    """Lazy, single-use iterator over discovered bridges.

    Owns the datagram socket opened by ``discover()``. The socket is released
    when iteration ends, on ``close()``, on leaving a ``with`` block, or when
    the object is garbage collected, whichever comes first.
    """

    def __init__(self, transport: DatagramTransport | None, results: Iterator[BridgeDescriptor]):
        self._transport = transport
        self._results = results

    def __iter__(self):
        return self

    def __next__(self) -> BridgeDescriptor:
        return next(self._results)

    def close(self):
        self._results.close()
        if self._transport is not None:
            self._transport.close()
            self._transport = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __del__(self):
        self.close()


def discover(timeout: float = DEFAULT_DISCOVERY_TIMEOUT, *, strategies=STRATEGIES,
             quiet_interval: float | None = None,
             datagram_factory: Callable[[], DatagramTransport] = DatagramTransport,
             http: HttpTransport | None = None, discovery_url: str = DISCOVERY_URL,
             clock: Callable[[], float] = time.monotonic) -> DiscoveryResults:
    """Find bridges on the network.

    The whole search, remote lookup included, fits in ``timeout`` seconds
    counted from this call. The datagram socket is opened and the search sent
    first, so a socket failure surfaces right here and replies queue up while
    the remote lookup runs. The returned iterator is lazy and single-use: it
    yields bridges as replies come in and stops at the deadline, or once
    ``quiet_interval`` seconds pass without a reply. An empty result is a
    normal outcome.

    Args:
        timeout: Overall time budget in seconds
        strategies: Any of 'local' and 'remote'
        quiet_interval: Stop early after this long without a reply
        datagram_factory: Builds the datagram transport (injectable for tests)
        http: HTTP transport for the remote lookup; a default one is closed after use
        discovery_url: Remote lookup endpoint
        clock: Monotonic clock (injectable for tests)

    Raises:
        NoTransportError: if the datagram socket cannot be opened
    """
    strategies = tuple(strategies)
    unknown = set(strategies) - set(STRATEGIES)
    if unknown:
        raise ValueError(f"Unknown discovery strategies: {', '.join(sorted(unknown))}")
    if timeout < 0:
        raise ValueError("timeout must not be negative")
    deadline = clock() + timeout

    transport = None
    if 'local' in strategies:
        transport = datagram_factory()
        try:
            transport.open()
            transport.send(SEARCH_REQUEST, (SSDP_ADDRESS, SSDP_PORT))
        except TransportError as e:
            transport.close()
            raise NoTransportError(str(e)) from e

    remote = []
    if 'remote' in strategies:
        own_http = http is None
        http = http or HttpTransport()
        try:
            remaining = deadline - clock()
            if remaining > 0:
                remote = lookup_remote(http, discovery_url, timeout=remaining)
            else:
                logger.debug("No time left for remote discovery")
        except BaseException:
            if transport is not None:
                transport.close()
            raise
        finally:
            if own_http:
                http.close()

    return DiscoveryResults(transport, _collect(transport, remote, deadline, quiet_interval, clock))


def _collect(transport: DatagramTransport | None, remote: list[BridgeDescriptor],
             deadline: float, quiet_interval: float | None,
             clock: Callable[[], float]) -> Iterator[BridgeDescriptor]:
    remote_by_address = {bridge.ip_or_host: bridge for bridge in remote}
    seen = set()

    try:
        if transport is not None:
            while True:
                remaining = deadline - clock()
                if remaining <= 0:
                    break
                wait = min(remaining, quiet_interval) if quiet_interval else remaining

                try:
                    reply = transport.receive(wait)
                except TransportError as e:
                    logger.warning("Stopping local discovery: %s", e)
                    break
                if reply is None:
                    if quiet_interval and wait < remaining:
                        logger.debug("No discovery replies for %.1fs, stopping", quiet_interval)
                        break
                    continue

                data, sender = reply
                bridge = parse_ssdp_response(data)
                if bridge is None:
                    logger.debug("Ignoring discovery reply from %s", sender[0])
                    continue
                if bridge.ip_or_host in seen:
                    continue
                seen.add(bridge.ip_or_host)

                # Seen locally and remotely: merge what each side knows
                confirmed = remote_by_address.get(bridge.ip_or_host)
                if confirmed is not None:
                    bridge = bridge.merge(confirmed)
                yield bridge
    finally:
        if transport is not None:
            transport.close()

    for bridge in remote:
        if bridge.ip_or_host not in seen:
            seen.add(bridge.ip_or_host)
            yield bridge


def describe_bridge(bridge: BridgeDescriptor, http: HttpTransport | None = None) -> BridgeDescriptor:
    """Fill in name and id from the bridge's UPnP description document.

    Raises:
        TransportError: if the document cannot be fetched
        UnclassifiedError: if it is not a bridge description
    """
    url = f"http://{bridge.ip_or_host}/description.xml"
    if http is None:
        default_http = HttpTransport()
        try:
            response = default_http.get(url)
        finally:
            default_http.close()
    else:
        response = http.get(url)
    if response.status != 200:
        raise UnclassifiedError(None, f"HTTP {response.status} fetching {url}", raw=response.text)

    try:
        root = ElementTree.fromstring(response.text)
    except ElementTree.ParseError as e:
        raise UnclassifiedError(None, f"Malformed bridge description: {e}", raw=response.text) from e

    device = root.find(f'{UPNP_DEVICE_NS}device')
    if device is None:
        raise UnclassifiedError(None, "Bridge description has no device element", raw=response.text)

    friendly_name = device.findtext(f'{UPNP_DEVICE_NS}friendlyName')
    serial = device.findtext(f'{UPNP_DEVICE_NS}serialNumber')
    described = BridgeDescriptor(
        ip_or_host=bridge.ip_or_host,
        bridge_id=serial.strip().lower() if serial and serial.strip() else None,
        friendly_name=friendly_name.strip() if friendly_name and friendly_name.strip() else None,
    )
    # Keep what discovery already knew (the SSDP bridge id is the full 16 digit one)
    return BridgeDescriptor(
        ip_or_host=bridge.ip_or_host,
        bridge_id=bridge.bridge_id or described.bridge_id,
        friendly_name=described.friendly_name or bridge.friendly_name,
    )
