# cloudscribe/services/speech/providers/assemblyai.py

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from cloudscribe.core import settings
from cloudscribe.services.speech.diarization import Utterance, format_utterances
from cloudscribe.services.speech.models import ModelProvider, TranscriptionModel
from cloudscribe.services.speech.polling import BackoffPolicy, PollResult, classify_status
from cloudscribe.services.speech.stt_base import (
    AudioRef,
    JobPollingTranscriptionBase,
    ResponseSchema,
)
from cloudscribe.services.storage.preferences_store import PreferencesStore

logger = logging.getLogger(__name__)

ASSEMBLYAI_API_BASE = "https://api.assemblyai.com/v2"


def resolve_speech_model(model_name: str) -> str:
    return "nano" if "nano" in (model_name or "") else "best"


class UploadResponse(ResponseSchema):
    upload_url: str


class TranscriptCreateResponse(ResponseSchema):
    id: str


class AssemblyAIUtterance(ResponseSchema):
    text: str
    speaker: Optional[str] = None
    start: Optional[int] = None
    end: Optional[int] = None
    confidence: Optional[float] = None


class TranscriptStatusResponse(ResponseSchema):
    id: str
    status: str
    text: Optional[str] = None
    error: Optional[str] = None
    utterances: Optional[List[AssemblyAIUtterance]] = None


def parse_status(body: bytes) -> PollResult:
    resp = TranscriptStatusResponse.model_validate_json(body)
    status = classify_status(resp.status, failed=("error",))
    return PollResult(status=status, error=resp.error, payload=resp)


def format_transcript(resp: TranscriptStatusResponse) -> str:
    utterances = [
        Utterance(text=u.text, speaker=u.speaker, start=u.start, end=u.end)
        for u in (resp.utterances or [])
    ]
    return format_utterances(utterances, resp.text or "")


class AssemblyAITranscriptionService(JobPollingTranscriptionBase):
    """
    upload -> create transcript (speaker labels on) -> poll every few seconds.
    Completed transcripts with utterances come back as "Speaker X: ..." lines.
    """

    supported_provider = ModelProvider.ASSEMBLYAI
    credential_name = "AssemblyAI"

    def default_poll_policy(self) -> BackoffPolicy:
        return BackoffPolicy.fixed(
            settings.ASSEMBLYAI_POLL_INTERVAL_SECONDS,
            settings.ASSEMBLYAI_MAX_WAIT_SECONDS,
        )

    def build_transcript_payload(
        self, upload_url: str, model: TranscriptionModel, prefs: PreferencesStore
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "audio_url": upload_url,
            "speaker_labels": True,
            "punctuate": True,
            "format_text": True,
            "speech_model": resolve_speech_model(model.name),
        }

        language = self._language(prefs)
        if language:
            payload["language_code"] = language
        else:
            payload["language_detection"] = True

        terms = self._vocabulary(prefs)
        if terms:
            payload["word_boost"] = terms
            payload["boost_param"] = "high"

        return payload

    async def _upload(self, client: httpx.AsyncClient, api_key: str, audio: bytes) -> str:
        data = await self._send(
            client,
            "POST",
            f"{ASSEMBLYAI_API_BASE}/upload",
            content=audio,
            headers={"Authorization": api_key, "Content-Type": "application/octet-stream"},
        )
        return self._decode(UploadResponse, data).upload_url

    async def _create(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        upload_url: str,
        model: TranscriptionModel,
        prefs: PreferencesStore,
    ) -> str:
        data = await self._send(
            client,
            "POST",
            f"{ASSEMBLYAI_API_BASE}/transcript",
            json=self.build_transcript_payload(upload_url, model, prefs),
            headers={"Authorization": api_key},
        )
        return self._decode(TranscriptCreateResponse, data).id

    async def transcribe(self, audio_path: AudioRef, model: TranscriptionModel) -> str:
        api_key = await self._api_key()
        prefs = await self._preferences()
        audio = await self._load_audio(audio_path)

        async with self._client() as client:
            upload_url = await self._upload(client, api_key, audio)
            transcript_id = await self._create(client, api_key, upload_url, model, prefs)
            logger.info("AssemblyAI: created transcript '%s' (%s)", transcript_id, resolve_speech_model(model.name))

            state = await self._poll(
                client,
                transcript_id,
                f"{ASSEMBLYAI_API_BASE}/transcript/{transcript_id}",
                {"Authorization": api_key},
                parse_status,
            )

        return self._require_text(format_transcript(state.payload))
