# cloudscribe/services/speech/providers/openai_compatible.py

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import httpx

from cloudscribe.services.speech.errors import DataEncodingError, MissingAPIKey
from cloudscribe.services.speech.models import ModelProvider, TranscriptionModel
from cloudscribe.services.speech.multipart import MultipartFormDataBuilder
from cloudscribe.services.speech.stt_base import (
    AudioRef,
    CloudTranscriptionBase,
    ResponseSchema,
)

logger = logging.getLogger(__name__)


class TranscriptionResponse(ResponseSchema):
    text: str
    language: Optional[str] = None
    duration: Optional[float] = None


def build_openai_form(
    *,
    audio: bytes,
    filename: str,
    model_name: str,
    language: Optional[str],
    prompt: str,
) -> MultipartFormDataBuilder:
    """Form layout shared by every /audio/transcriptions endpoint that follows OpenAI's API."""
    form = MultipartFormDataBuilder()
    form.add_file("file", filename, audio, "audio/wav")
    form.add_field("model", model_name)
    if language:
        form.add_field("language", language)
    if prompt:
        form.add_field("prompt", prompt)
    form.add_field("response_format", "json")
    form.add_field("temperature", "0")
    return form


def custom_credential_name(model: TranscriptionModel) -> str:
    return f"custom_model_{model.id}"


class OpenAICompatibleTranscriptionService(CloudTranscriptionBase):
    """User-configured endpoint that speaks the OpenAI transcription API."""

    supported_provider = ModelProvider.CUSTOM

    def _endpoint(self, model: TranscriptionModel) -> str:
        raw = (model.api_endpoint or "").strip()
        try:
            url = httpx.URL(raw)
        except (httpx.InvalidURL, TypeError) as e:
            logger.error("Invalid API endpoint URL for custom model %s: %r", model.name, raw)
            raise DataEncodingError() from e
        if url.scheme not in ("http", "https") or not url.host:
            logger.error("Invalid API endpoint URL for custom model %s: %r", model.name, raw)
            raise DataEncodingError()
        return str(url)

    async def _custom_api_key(self, model: TranscriptionModel) -> str:
        key = (model.api_key or "").strip()
        if key:
            return key
        key = await self._credential(custom_credential_name(model))
        if not key:
            logger.error("Missing API key for custom model %s", model.name)
            raise MissingAPIKey()
        return key

    async def transcribe(self, audio_path: AudioRef, model: TranscriptionModel) -> str:
        api_key = await self._custom_api_key(model)
        url = self._endpoint(model)
        prefs = await self._preferences()
        model_name = model.model_name or model.name

        audio = await self._load_audio(audio_path)
        form = build_openai_form(
            audio=audio,
            filename=Path(audio_path).name,
            model_name=model_name,
            language=self._language(prefs),
            prompt=prefs.transcription_prompt(),
        )

        async with self._client() as client:
            data = await self._send(
                client,
                "POST",
                url,
                content=form.finalize(),
                headers={
                    "Content-Type": form.content_type,
                    "Authorization": f"Bearer {api_key}",
                },
            )

        resp = self._decode(TranscriptionResponse, data)
        return self._require_text(resp.text)
