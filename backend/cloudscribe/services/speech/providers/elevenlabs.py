# cloudscribe/services/speech/providers/elevenlabs.py

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

from cloudscribe.services.speech.errors import MissingAPIKey
from cloudscribe.services.speech.models import ModelProvider, TranscriptionModel
from cloudscribe.services.speech.multipart import MultipartFormDataBuilder
from cloudscribe.services.speech.stt_base import AudioRef, CloudTranscriptionBase, ResponseSchema
from cloudscribe.services.storage.preferences_store import ELEVENLABS_LEGACY_KEY, PreferencesStore

logger = logging.getLogger(__name__)

ELEVENLABS_V1_URL = "https://api.elevenlabs.io/v1/speech-to-text"
ELEVENLABS_V2_URL = "https://api.elevenlabs.io/v2/speech-to-text"


class ElevenLabsModelVersion(str, Enum):
    SCRIBE_V1 = "scribe_v1"
    SCRIBE_V2_REALTIME = "scribe_v2_realtime"
    UNKNOWN = "unknown"

    @classmethod
    def from_model_name(cls, model_name: str) -> "ElevenLabsModelVersion":
        # any name containing "v2" (scribe_v2, scribe_v2_realtime) uses the v2 parameter set
        lowered = (model_name or "").lower()
        if "v2" in lowered:
            return cls.SCRIBE_V2_REALTIME
        if "scribe" in lowered:
            return cls.SCRIBE_V1
        return cls.UNKNOWN

    @property
    def endpoint(self) -> str:
        if self is ElevenLabsModelVersion.SCRIBE_V2_REALTIME:
            return ELEVENLABS_V2_URL
        return ELEVENLABS_V1_URL

    @property
    def preferred_content_type(self) -> str:
        return "audio/wav"

    @property
    def tag_audio_events(self) -> bool:
        return self is ElevenLabsModelVersion.SCRIBE_V2_REALTIME

    @property
    def default_temperature(self) -> float:
        return 0.1 if self is ElevenLabsModelVersion.SCRIBE_V2_REALTIME else 0.0

    @property
    def additional_parameters(self) -> Dict[str, str]:
        if self is ElevenLabsModelVersion.SCRIBE_V2_REALTIME:
            return {"timestamps_granularity": "word", "diarize": "false"}
        return {}


class ElevenLabsTranscriptionResponse(ResponseSchema):
    text: str
    language: Optional[str] = None
    duration: Optional[float] = None


class ElevenLabsTranscriptionService(CloudTranscriptionBase):
    supported_provider = ModelProvider.ELEVENLABS
    credential_name = "ElevenLabs"

    async def _elevenlabs_api_key(self, prefs: PreferencesStore) -> str:
        key = await self._credential(self.credential_name)
        if key:
            return key
        legacy = prefs.get(ELEVENLABS_LEGACY_KEY, "")
        if isinstance(legacy, str) and legacy.strip():
            return legacy.strip()
        logger.error("Missing ElevenLabs API key")
        raise MissingAPIKey()

    async def transcribe(self, audio_path: AudioRef, model: TranscriptionModel) -> str:
        prefs = await self._preferences()
        api_key = await self._elevenlabs_api_key(prefs)
        version = ElevenLabsModelVersion.from_model_name(model.name)
        audio = await self._load_audio(audio_path)

        form = MultipartFormDataBuilder()
        form.add_file("file", Path(audio_path).name, audio, version.preferred_content_type)
        form.add_field("model_id", model.name)
        form.add_field("tag_audio_events", "true" if version.tag_audio_events else "false")
        form.add_field("temperature", str(version.default_temperature))

        language = self._language(prefs)
        if language:
            form.add_field("language_code", language)

        for key, value in version.additional_parameters.items():
            form.add_field(key, value)

        logger.info("Sending transcription request to ElevenLabs (%s) using model: %s", version.value, model.name)
        async with self._client() as client:
            data = await self._send(
                client,
                "POST",
                version.endpoint,
                content=form.finalize(),
                headers={
                    "Content-Type": form.content_type,
                    "Accept": "application/json",
                    "xi-api-key": api_key,
                },
            )

        resp = self._decode(ElevenLabsTranscriptionResponse, data)
        return self._require_text(resp.text)
