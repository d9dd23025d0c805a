"""Tests for shared adapter plumbing: response validation, mime detection, error mapping."""
import fastapi.concurrency
import httpx
import pytest

import cloudscribe.services.speech.stt_base as stt_base
from cloudscribe.services.speech.errors import (
    ApiRequestFailed,
    AudioFileNotFound,
    MissingAPIKey,
    NetworkError,
)
from cloudscribe.services.speech.models import CLOUD_MODELS, ModelProvider, TranscriptionModel, find_cloud_model
from cloudscribe.services.speech.providers.groq import GroqTranscriptionService
from cloudscribe.services.speech.router import PROVIDER_CLASSES, default_providers
from cloudscribe.services.speech.stt_base import (
    NO_ERROR_MESSAGE,
    JobPollingTranscriptionBase,
    clamp_str,
    decode_error_body,
    detect_mime_type,
    validate_response,
)

GROQ_MODEL = find_cloud_model("whisper-large-v3-turbo", ModelProvider.GROQ)


def test_validate_response_passes_2xx_body_through():
    assert validate_response(200, b"ok") == b"ok"
    assert validate_response(201, b"created") == b"created"
    assert validate_response(299, b"") == b""


def test_validate_response_raises_with_status_and_body_text():
    with pytest.raises(ApiRequestFailed) as ei:
        validate_response(429, b"rate limited")
    assert ei.value.status_code == 429
    assert ei.value.message == "rate limited"
    assert "429" in str(ei.value)


def test_undecodable_error_body_gets_placeholder():
    assert decode_error_body(b"\xff\xfe") == NO_ERROR_MESSAGE
    with pytest.raises(ApiRequestFailed) as ei:
        validate_response(500, b"\xff\xfe")
    assert ei.value.message == NO_ERROR_MESSAGE


def test_detect_mime_type_by_extension():
    assert detect_mime_type("a.wav") == "audio/wav"
    assert detect_mime_type("a.MP3") == "audio/mpeg"
    assert detect_mime_type("a.m4a") == "audio/mp4"
    assert detect_mime_type("a.flac") == "audio/flac"
    assert detect_mime_type("noext") == "audio/wav"
    assert detect_mime_type("a.mp3", {"mp3": "audio/mp3"}) == "audio/mp3"


def test_clamp_str():
    assert clamp_str("  abc  ") == "abc"
    assert clamp_str("", default="x") == "x"
    assert clamp_str("abcdef", max_len=3) == "abc"


@pytest.mark.asyncio
async def test_missing_key_makes_no_request(audio_file, creds, prefs, mock_transport):
    transport, seen = mock_transport(lambda r: httpx.Response(200, json={"text": "x"}))
    svc = GroqTranscriptionService(credentials=creds(), preferences=prefs(), transport=transport)

    with pytest.raises(MissingAPIKey):
        await svc.transcribe(audio_file, GROQ_MODEL)
    assert seen == []


@pytest.mark.asyncio
async def test_blank_key_counts_as_missing(audio_file, creds, prefs, mock_transport):
    transport, seen = mock_transport(lambda r: httpx.Response(200, json={"text": "x"}))
    svc = GroqTranscriptionService(credentials=creds(GROQ="   "), preferences=prefs(), transport=transport)

    with pytest.raises(MissingAPIKey):
        await svc.transcribe(audio_file, GROQ_MODEL)
    assert seen == []


@pytest.mark.asyncio
async def test_missing_audio_file_makes_no_request(tmp_path, creds, prefs, mock_transport):
    transport, seen = mock_transport(lambda r: httpx.Response(200, json={"text": "x"}))
    svc = GroqTranscriptionService(credentials=creds(GROQ="k"), preferences=prefs(), transport=transport)

    with pytest.raises(AudioFileNotFound):
        await svc.transcribe(tmp_path / "missing.wav", GROQ_MODEL)
    assert seen == []


@pytest.mark.asyncio
async def test_transport_failure_becomes_network_error(audio_file, creds, prefs, mock_transport):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    transport, _ = mock_transport(handler)
    svc = GroqTranscriptionService(credentials=creds(GROQ="k"), preferences=prefs(), transport=transport)

    with pytest.raises(NetworkError) as ei:
        await svc.transcribe(audio_file, GROQ_MODEL)
    assert isinstance(ei.value.underlying, httpx.ConnectError)


@pytest.mark.asyncio
async def test_non_2xx_becomes_api_request_failed(audio_file, creds, prefs, mock_transport):
    transport, _ = mock_transport(lambda r: httpx.Response(401, content=b"Invalid API Key"))
    svc = GroqTranscriptionService(credentials=creds(GROQ="k"), preferences=prefs(), transport=transport)

    with pytest.raises(ApiRequestFailed) as ei:
        await svc.transcribe(audio_file, GROQ_MODEL)
    assert ei.value.status_code == 401
    assert ei.value.message == "Invalid API Key"


@pytest.mark.asyncio
async def test_undecodable_body_becomes_network_error(audio_file, creds, prefs, mock_transport):
    transport, _ = mock_transport(
        lambda r: httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not-gzip")
    )
    svc = GroqTranscriptionService(credentials=creds(GROQ="k"), preferences=prefs(), transport=transport)

    with pytest.raises(NetworkError) as ei:
        await svc.transcribe(audio_file, GROQ_MODEL)
    assert isinstance(ei.value.underlying, httpx.DecodingError)


def _first_model(provider: ModelProvider) -> TranscriptionModel:
    if provider == ModelProvider.CUSTOM:
        return TranscriptionModel(
            name="custom-whisper",
            provider=ModelProvider.CUSTOM,
            api_endpoint="https://stt.example.com/v1/audio/transcriptions",
            model_name="whisper-1",
        )
    return next(m for m in CLOUD_MODELS if m.provider == provider)


@pytest.mark.asyncio
@pytest.mark.parametrize("index", range(len(PROVIDER_CLASSES)), ids=[c.__name__ for c in PROVIDER_CLASSES])
async def test_every_adapter_checks_key_before_sending(index, audio_file, creds, prefs, mock_transport):
    transport, seen = mock_transport(lambda r: httpx.Response(200, json={}))
    svc = default_providers(credentials=creds(), preferences=prefs(), transport=transport)[index]

    with pytest.raises(MissingAPIKey):
        await svc.transcribe(audio_file, _first_model(svc.supported_provider))
    assert seen == []


def test_job_adapter_must_define_poll_policy():
    class NoPolicy(JobPollingTranscriptionBase):
        supported_provider = ModelProvider.SONIOX

        async def transcribe(self, audio_path, model):
            return ""

    with pytest.raises(TypeError):
        NoPolicy()


def test_blocking_io_goes_through_fastapi_threadpool():
    assert stt_base.run_in_threadpool is fastapi.concurrency.run_in_threadpool
