"""Transport adapters: HTTP via requests, datagrams via a UDP socket.

These know nothing about the bridge protocol. They move bytes and turn
library-specific failures into ``TransportError``.
"""

import socket
from typing import NamedTuple

import requests
from requests.packages.urllib3.exceptions import InsecureRequestWarning

from huelink.config import DEFAULT_HTTP_TIMEOUT
from huelink.exceptions import TransportError, TransportTimeout

# Disable SSL warnings for self-signed certificate
requests.packages.urllib3.disable_warnings(InsecureRequestWarning)


class HttpResponse(NamedTuple):
    status: int
    text: str


class HttpTransport:
    """Send one HTTP request, get one response."""

    def __init__(self, session: requests.Session | None = None,
                 timeout: float = DEFAULT_HTTP_TIMEOUT, verify: bool = False):
        self.session = session or requests.Session()
        self.session.verify = verify  # Bridges use a self-signed certificate
        self.timeout = timeout

    def request(self, method: str, url: str, payload: dict | None = None,
                timeout: float | None = None) -> HttpResponse:
        """Perform a request and return its status and body text.

        ``timeout`` can only shorten the transport's own timeout.

        Raises:
            TransportTimeout: if the bridge did not answer in time
            TransportError: on any other connection level failure
        """
        if timeout is None or timeout > self.timeout:
            timeout = self.timeout
        try:
            response = self.session.request(method, url, json=payload, timeout=timeout)
        except requests.exceptions.Timeout as e:
            raise TransportTimeout(f"{method} {url} timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e
        return HttpResponse(response.status_code, response.text)

    def get(self, url: str, timeout: float | None = None) -> HttpResponse:
        return self.request('GET', url, timeout=timeout)

    def close(self):
        self.session.close()


class DatagramTransport:
    """A UDP socket that can send to a multicast group and collect replies."""

    def __init__(self, ttl: int = 2):
        self.ttl = ttl
        self._sock = None

    def open(self) -> 'DatagramTransport':
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, self.ttl)
            sock.bind(('', 0))
        except OSError as e:
            raise TransportError(f"Could not open datagram socket: {e}") from e
        self._sock = sock
        return self

    def send(self, data: bytes, address: tuple[str, int]):
        if self._sock is None:
            raise TransportError("Datagram socket is not open")
        try:
            self._sock.sendto(data, address)
        except OSError as e:
            raise TransportError(f"Could not send datagram to {address[0]}:{address[1]}: {e}") from e

    def receive(self, timeout: float) -> tuple[bytes, tuple[str, int]] | None:
        """Wait up to ``timeout`` seconds for one datagram; None if none arrived."""
        if self._sock is None:
            raise TransportError("Datagram socket is not open")
        self._sock.settimeout(max(timeout, 0.001))
        try:
            return self._sock.recvfrom(65507)
        except socket.timeout:
            return None
        except OSError as e:
            raise TransportError(f"Datagram receive failed: {e}") from e

    def close(self):
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def __enter__(self):
        if self._sock is None:
            self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
