import pytest

from rfc6265 import CookieJar, RequestContext


class FakeClock:
    """A manually advanced clock for deterministic expiry."""

    def __init__(self, now=1000):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, delta=1):
        self.now += delta


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def jar(clock):
    return CookieJar(clock=clock)


@pytest.fixture
def plain():
    return RequestContext("example.com", "/", secure=False)


@pytest.fixture
def secure():
    return RequestContext("example.com", "/", secure=True)
