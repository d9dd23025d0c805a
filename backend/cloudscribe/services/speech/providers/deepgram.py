# cloudscribe/services/speech/providers/deepgram.py

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from cloudscribe.services.speech.models import ModelProvider, TranscriptionModel
from cloudscribe.services.speech.stt_base import AudioRef, CloudTranscriptionBase, ResponseSchema
from cloudscribe.services.storage.preferences_store import DEEPGRAM_MEDICAL_CONTENT

logger = logging.getLogger(__name__)

DEEPGRAM_LISTEN_URL = "https://api.deepgram.com/v1/listen"


def resolve_deepgram_model(language: Optional[str], medical_content: bool = False) -> str:
    """
    nova-3-medical is English only: used when the medical-content preference is
    on and the language is explicitly "en". Everything else runs on nova-3,
    which is multilingual. The catalogue model name does not take part.
    """
    if medical_content and language == "en":
        return "nova-3-medical"
    return "nova-3"


def build_listen_params(model_name: str, language: Optional[str]) -> List[Tuple[str, str]]:
    params = [
        ("model", model_name),
        ("smart_format", "true"),
        ("punctuate", "true"),
        ("paragraphs", "true"),
        ("utterances", "true"),
        ("diarize", "false"),
    ]
    if language:
        params.append(("language", language))
    return params


class DeepgramAlternative(ResponseSchema):
    transcript: str
    confidence: Optional[float] = None


class DeepgramChannel(ResponseSchema):
    alternatives: List[DeepgramAlternative]


class DeepgramResults(ResponseSchema):
    channels: List[DeepgramChannel]


class DeepgramResponse(ResponseSchema):
    results: DeepgramResults


class DeepgramTranscriptionService(CloudTranscriptionBase):
    supported_provider = ModelProvider.DEEPGRAM
    credential_name = "Deepgram"

    async def transcribe(self, audio_path: AudioRef, model: TranscriptionModel) -> str:
        api_key = await self._api_key()
        prefs = await self._preferences()
        language = self._language(prefs)
        model_name = resolve_deepgram_model(language, prefs.flag(DEEPGRAM_MEDICAL_CONTENT))
        logger.debug("Configured Deepgram with model: %s, language: %s", model_name, language or "auto")

        audio = await self._load_audio(audio_path)

        logger.info("Sending transcription request to Deepgram using model: %s", model_name)
        async with self._client() as client:
            data = await self._send(
                client,
                "POST",
                DEEPGRAM_LISTEN_URL,
                params=build_listen_params(model_name, language),
                content=audio,
                headers={"Authorization": f"Token {api_key}", "Content-Type": "audio/wav"},
            )

        resp = self._decode(DeepgramResponse, data)

        transcript = ""
        if resp.results.channels and resp.results.channels[0].alternatives:
            transcript = resp.results.channels[0].alternatives[0].transcript

        text = self._require_text(transcript)
        logger.info("Successfully received transcription from Deepgram")
        return text
