# cloudscribe/services/speech/stt_base.py

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type, TypeVar, Union

import httpx
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ConfigDict, ValidationError

from cloudscribe.core import settings
from cloudscribe.services.speech.errors import (
    ApiRequestFailed,
    AudioFileNotFound,
    DataEncodingError,
    MissingAPIKey,
    NetworkError,
    NoTranscriptionReturned,
)
from cloudscribe.services.speech.models import ModelProvider, TranscriptionModel
from cloudscribe.services.speech.polling import BackoffPolicy, PollResult, PollState, poll_job
from cloudscribe.services.speech.vocabulary import extract_vocabulary
from cloudscribe.services.storage.credential_store import CredentialStore, SettingsCredentialStore
from cloudscribe.services.storage.preferences_store import PreferencesStore

logger = logging.getLogger(__name__)

AudioRef = Union[str, Path]
SchemaT = TypeVar("SchemaT", bound=BaseModel)

NO_ERROR_MESSAGE = "No error message"

_MIME_BY_EXT: Dict[str, str] = {
    "wav": "audio/wav",
    "mp3": "audio/mpeg",
    "m4a": "audio/mp4",
    "aac": "audio/aac",
    "ogg": "audio/ogg",
    "flac": "audio/flac",
    "webm": "audio/webm",
}


class ResponseSchema(BaseModel):
    """Backend response shape; unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore")


class STTProvider(ABC):
    supported_provider: ModelProvider

    @abstractmethod
    async def transcribe(self, audio_path: AudioRef, model: TranscriptionModel) -> str:
        raise NotImplementedError


def clamp_str(s: str, default: str = "", max_len: int = 64) -> str:
    x = (s or "").strip()
    if not x:
        return default
    return x[:max_len]


def decode_error_body(body: bytes) -> str:
    try:
        return bytes(body).decode("utf-8")
    except UnicodeDecodeError:
        return NO_ERROR_MESSAGE


def validate_response(status_code: int, body: bytes) -> bytes:
    """2xx -> body unchanged; anything else -> ApiRequestFailed(status, body text)."""
    if 200 <= int(status_code) <= 299:
        return body
    raise ApiRequestFailed(int(status_code), decode_error_body(body))


def detect_mime_type(audio_path: AudioRef, overrides: Optional[Dict[str, str]] = None) -> str:
    ext = Path(audio_path).suffix.lower().lstrip(".")
    table = dict(_MIME_BY_EXT)
    if overrides:
        table.update(overrides)
    return table.get(ext, "audio/wav")


class CloudTranscriptionBase(STTProvider):
    """
    Shared plumbing for HTTP adapters: credential lookup, audio loading,
    one short-lived httpx client per call, uniform response validation.
    """

    # Name the key is stored under in the credential store
    credential_name: str = ""

    def __init__(
        self,
        *,
        credentials: CredentialStore | None = None,
        preferences: PreferencesStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout_s: float | None = None,
    ) -> None:
        self.credentials = credentials if credentials is not None else SettingsCredentialStore()
        self.preferences = preferences if preferences is not None else PreferencesStore()
        self.transport = transport
        self.timeout_s = float(timeout_s if timeout_s is not None else settings.HTTP_TIMEOUT_SECONDS)

    @property
    def provider_name(self) -> str:
        return self.supported_provider.value

    async def _credential(self, name: str) -> str:
        return (await run_in_threadpool(self.credentials.get, name) or "").strip()

    async def _api_key(self, name: str | None = None) -> str:
        key = await self._credential(name or self.credential_name)
        if not key:
            logger.error("Missing %s API key", self.provider_name)
            raise MissingAPIKey()
        return key

    async def _load_audio(self, audio_path: AudioRef) -> bytes:
        try:
            return await run_in_threadpool(Path(audio_path).read_bytes)
        except OSError as e:
            logger.error("%s: audio file not found at %s", self.provider_name, audio_path)
            raise AudioFileNotFound() from e

    async def _preferences(self) -> PreferencesStore:
        """One read of the preferences file per call; accessors on the copy do no I/O."""
        return await run_in_threadpool(self.preferences.snapshot)

    def _language(self, prefs: PreferencesStore) -> Optional[str]:
        lang = prefs.selected_language()
        if not lang or lang.lower() == "auto":
            return None
        return lang

    def _vocabulary(self, prefs: PreferencesStore) -> List[str]:
        return extract_vocabulary(prefs.custom_vocabulary_items())

    def _client(self) -> httpx.AsyncClient:
        timeout = httpx.Timeout(self.timeout_s, connect=settings.HTTP_CONNECT_TIMEOUT_SECONDS)
        return httpx.AsyncClient(
            timeout=timeout,
            transport=self.transport,
            headers={"Cache-Control": "no-cache"},
        )

    async def _send(self, client: httpx.AsyncClient, method: str, url: str, **kwargs: Any) -> bytes:
        """One request; returns the body of a 2xx response."""
        try:
            r = await client.request(method, url, **kwargs)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            logger.error("%s: could not build request for %s: %s", self.provider_name, url, e)
            raise DataEncodingError() from e
        except httpx.RequestError as e:
            # transport failures plus undecodable bodies and redirect loops
            logger.error("%s: request error calling %s: %s", self.provider_name, url, e)
            raise NetworkError(e) from e

        try:
            return validate_response(r.status_code, r.content)
        except ApiRequestFailed as e:
            logger.error(
                "%s API request failed with status %d: %s", self.provider_name, e.status_code, e.message
            )
            raise

    def _decode(self, schema: Type[SchemaT], body: bytes) -> SchemaT:
        try:
            return schema.model_validate_json(body)
        except ValidationError as e:
            logger.error("Failed to decode %s response: %s", self.provider_name, e)
            raise NoTranscriptionReturned() from e

    def _require_text(self, text: Optional[str]) -> str:
        if text is None or not text.strip():
            logger.error("No transcript found in %s response", self.provider_name)
            raise NoTranscriptionReturned()
        return text


class JobPollingTranscriptionBase(CloudTranscriptionBase):
    """
    Adapters whose backend works as submit-job-then-poll. Subclasses supply a
    default BackoffPolicy; clock/sleep are injectable so the loop can be driven
    without real time passing.
    """

    def __init__(
        self,
        *,
        poll_policy: BackoffPolicy | None = None,
        clock: Callable[[], float] | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.poll_policy = poll_policy or self.default_poll_policy()
        self.clock = clock or time.monotonic
        self.sleep = sleep or asyncio.sleep

    @abstractmethod
    def default_poll_policy(self) -> BackoffPolicy:
        raise NotImplementedError

    async def _poll(
        self,
        client: httpx.AsyncClient,
        job_id: str,
        url: str,
        headers: Dict[str, str],
        parse: Callable[[bytes], PollResult],
    ) -> PollState:
        async def fetch() -> bytes:
            return await self._send(client, "GET", url, headers=headers)

        return await poll_job(
            job_id,
            fetch,
            parse,
            self.poll_policy,
            provider_name=self.provider_name,
            clock=self.clock,
            sleep=self.sleep,
        )
