# cloudscribe/services/speech/providers/zai.py

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from cloudscribe.services.speech.models import ModelProvider, TranscriptionModel
from cloudscribe.services.speech.multipart import MultipartFormDataBuilder
from cloudscribe.services.speech.stt_base import (
    AudioRef,
    CloudTranscriptionBase,
    ResponseSchema,
    detect_mime_type,
)

logger = logging.getLogger(__name__)

ZAI_TRANSCRIPTIONS_URL = "https://api.z.ai/api/paas/v4/audio/transcriptions"


class ZAITranscriptionResponse(ResponseSchema):
    text: str
    id: Optional[str] = None
    created: Optional[int] = None
    model: Optional[str] = None
    request_id: Optional[str] = None


class ZAITranscriptionService(CloudTranscriptionBase):
    """
    Z.AI GLM-ASR (OpenAI-style form, synchronous).
    The backend accepts clips up to 30 seconds / 25MB.
    """

    supported_provider = ModelProvider.ZAI
    credential_name = "ZAI"

    async def transcribe(self, audio_path: AudioRef, model: TranscriptionModel) -> str:
        api_key = await self._api_key()
        audio = await self._load_audio(audio_path)

        form = MultipartFormDataBuilder()
        form.add_file("file", Path(audio_path).name, audio, detect_mime_type(audio_path))
        form.add_field("model", model.name)
        form.add_field("stream", "false")

        logger.info("Sending transcription request to Z.AI using model: %s", model.name)
        async with self._client() as client:
            data = await self._send(
                client,
                "POST",
                ZAI_TRANSCRIPTIONS_URL,
                content=form.finalize(),
                headers={
                    "Content-Type": form.content_type,
                    "Authorization": f"Bearer {api_key}",
                },
            )

        resp = self._decode(ZAITranscriptionResponse, data)
        return self._require_text(resp.text)
