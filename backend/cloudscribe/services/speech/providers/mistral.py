# cloudscribe/services/speech/providers/mistral.py

from __future__ import annotations

import logging
from pathlib import Path

from cloudscribe.services.speech.models import ModelProvider, TranscriptionModel
from cloudscribe.services.speech.multipart import MultipartFormDataBuilder
from cloudscribe.services.speech.stt_base import AudioRef, CloudTranscriptionBase, ResponseSchema

logger = logging.getLogger(__name__)

MISTRAL_TRANSCRIPTIONS_URL = "https://api.mistral.ai/v1/audio/transcriptions"


class MistralTranscriptionResponse(ResponseSchema):
    text: str


class MistralTranscriptionService(CloudTranscriptionBase):
    supported_provider = ModelProvider.MISTRAL
    credential_name = "Mistral"

    async def transcribe(self, audio_path: AudioRef, model: TranscriptionModel) -> str:
        logger.info("Sending transcription request to Mistral for model: %s", model.name)
        api_key = await self._api_key()

        form = MultipartFormDataBuilder()
        form.add_field("model", model.name)
        # no language field: the backend detects it
        audio = await self._load_audio(audio_path)
        form.add_file("file", Path(audio_path).name, audio, "audio/wav")

        async with self._client() as client:
            data = await self._send(
                client,
                "POST",
                MISTRAL_TRANSCRIPTIONS_URL,
                content=form.finalize(),
                headers={"Content-Type": form.content_type, "x-api-key": api_key},
            )

        resp = self._decode(MistralTranscriptionResponse, data)
        logger.info("Successfully received transcription from Mistral.")
        return self._require_text(resp.text)
