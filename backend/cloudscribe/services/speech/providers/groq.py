# cloudscribe/services/speech/providers/groq.py

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from cloudscribe.services.speech.models import ModelProvider, TranscriptionModel
from cloudscribe.services.speech.providers.openai_compatible import build_openai_form
from cloudscribe.services.speech.stt_base import AudioRef, CloudTranscriptionBase, ResponseSchema

logger = logging.getLogger(__name__)

GROQ_TRANSCRIPTIONS_URL = "https://api.groq.com/openai/v1/audio/transcriptions"


class GroqMetadata(ResponseSchema):
    id: Optional[str] = None


class GroqTranscriptionResponse(ResponseSchema):
    text: str
    language: Optional[str] = None
    duration: Optional[float] = None
    x_groq: Optional[GroqMetadata] = None


class GroqTranscriptionService(CloudTranscriptionBase):
    supported_provider = ModelProvider.GROQ
    credential_name = "GROQ"

    async def transcribe(self, audio_path: AudioRef, model: TranscriptionModel) -> str:
        api_key = await self._api_key()
        prefs = await self._preferences()
        audio = await self._load_audio(audio_path)

        form = build_openai_form(
            audio=audio,
            filename=Path(audio_path).name,
            model_name=model.name,
            language=self._language(prefs),
            prompt=prefs.transcription_prompt(),
        )

        logger.info("Sending transcription request to Groq using model: %s", model.name)
        async with self._client() as client:
            data = await self._send(
                client,
                "POST",
                GROQ_TRANSCRIPTIONS_URL,
                content=form.finalize(),
                headers={
                    "Content-Type": form.content_type,
                    "Authorization": f"Bearer {api_key}",
                },
            )

        resp = self._decode(GroqTranscriptionResponse, data)
        return self._require_text(resp.text)
