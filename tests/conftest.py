"""Pytest configuration and fixtures for hue-link tests."""

import json

import pytest
from pathlib import Path

from huelink.exceptions import TransportError, TransportTimeout
from huelink.transport import HttpResponse


class FakeHttp:
    """Stands in for HttpTransport: replays queued responses, records requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []
        self.timeouts = []
        self.closed = False

    def queue(self, body, status: int = 200):
        text = body if isinstance(body, str) else json.dumps(body)
        self.responses.append(HttpResponse(status, text))

    def request(self, method, url, payload=None, timeout=None):
        self.requests.append((method, url, payload))
        self.timeouts.append(timeout)
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url, timeout=None):
        return self.request('GET', url, timeout=timeout)

    def close(self):
        self.closed = True


class SlowHttp(FakeHttp):
    """FakeHttp whose answers take ``delay`` seconds of fake time.

    A request whose timeout is shorter than the delay gives up at the timeout.
    """

    def __init__(self, clock, delay: float, *responses):
        super().__init__(*responses)
        self.clock = clock
        self.delay = delay

    def request(self, method, url, payload=None, timeout=None):
        if timeout is not None and timeout < self.delay:
            self.requests.append((method, url, payload))
            self.timeouts.append(timeout)
            self.clock.now += timeout
            raise TransportTimeout(f"{method} {url} timed out")
        self.clock.now += self.delay
        return super().request(method, url, payload, timeout)


class FakeClock:
    """Manually advanced monotonic clock; sleep() advances it."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.now += seconds


class FakeDatagram:
    """Stands in for DatagramTransport.

    ``replies`` is a list of ``(delay, data)``: each receive() waits ``delay``
    seconds of fake time (or until its timeout) before delivering ``data``.
    """

    def __init__(self, clock: FakeClock, replies=(), fail_open: bool = False):
        self.clock = clock
        self.replies = list(replies)
        self.fail_open = fail_open
        self.sent = []
        self.opened = False
        self.closed = False

    def open(self):
        if self.fail_open:
            raise TransportError("Could not open datagram socket: [Errno 98] Address in use")
        self.opened = True
        return self

    def send(self, data, address):
        self.sent.append((data, address))

    def receive(self, timeout):
        if self.replies and self.replies[0][0] <= timeout:
            delay, data = self.replies.pop(0)
            self.clock.now += delay
            return data, ('192.168.1.2', 1900)
        if self.replies:
            self.replies[0] = (self.replies[0][0] - timeout, self.replies[0][1])
        self.clock.now += timeout
        return None

    def close(self):
        self.closed = True


@pytest.fixture
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def fake_http():
    return FakeHttp()


@pytest.fixture
def clock():
    return FakeClock()
