"""Shared fixtures: fake audio on disk, in-memory stores and a recording HTTP transport."""
import httpx
import pytest

from cloudscribe.services.storage.credential_store import MemoryCredentialStore
from cloudscribe.services.storage.preferences_store import PreferencesStore

AUDIO_BYTES = b"RIFF\x24\x00\x00\x00WAVEfmt fake-pcm-data"


@pytest.fixture
def audio_file(tmp_path):
    p = tmp_path / "clip.wav"
    p.write_bytes(AUDIO_BYTES)
    return p


@pytest.fixture
def prefs():
    """Factory for a file-less PreferencesStore."""

    def _make(**values):
        return PreferencesStore(path="", overrides=values)

    return _make


@pytest.fixture
def creds():
    def _make(**keys):
        return MemoryCredentialStore(keys)

    return _make


class FakeClock:
    """Monotonic clock that only moves when sleep() is awaited."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mock_transport():
    """
    mock_transport(handler) -> (transport, seen)

    Every request passing through the transport is appended to `seen`
    before `handler` builds the response.
    """

    def _make(handler):
        seen = []

        def _handle(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        return httpx.MockTransport(_handle), seen

    return _make
