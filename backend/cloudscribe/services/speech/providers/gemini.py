# cloudscribe/services/speech/providers/gemini.py

from __future__ import annotations

import base64
import logging
import re
from typing import Any, Dict, List, Optional

from cloudscribe.services.speech.errors import DataEncodingError
from cloudscribe.services.speech.models import ModelProvider, TranscriptionModel
from cloudscribe.services.speech.stt_base import (
    AudioRef,
    CloudTranscriptionBase,
    ResponseSchema,
    detect_mime_type,
)

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"

RECOMMENDED_MODEL = "gemini-2.0-flash"
FALLBACK_MODEL = "gemini-1.5-flash"

TRANSCRIPTION_PROMPT = """You are a professional transcription assistant. Transcribe the following audio accurately and completely.

Instructions:
- Transcribe exactly what is spoken, word for word
- Include proper punctuation and capitalization
- Preserve natural speech patterns and pauses where appropriate
- Do not add any commentary, explanations, or formatting
- Do not include timestamps unless specifically requested
- If audio is unclear, transcribe what you can hear accurately
- Output only the transcribed text, nothing else"""

# Gemini labels mp3/aac differently from the IANA types used elsewhere
_GEMINI_MIME_OVERRIDES = {"mp3": "audio/mp3", "m4a": "audio/aac"}

_MODEL_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def available_models() -> List[str]:
    return [RECOMMENDED_MODEL, FALLBACK_MODEL, "gemini-1.5-pro"]


def generate_content_url(model_name: str) -> str:
    name = (model_name or "").strip()
    if not _MODEL_NAME_RE.match(name):
        raise DataEncodingError(f"Invalid Gemini model name: {model_name!r}")
    return f"{GEMINI_API_BASE}/{name}:generateContent"


def build_request_body(audio: bytes, mime_type: str) -> Dict[str, Any]:
    return {
        "contents": [
            {
                "parts": [
                    {"text": TRANSCRIPTION_PROMPT},
                    {
                        "inlineData": {
                            "mimeType": mime_type,
                            "data": base64.b64encode(audio).decode("ascii"),
                        }
                    },
                ]
            }
        ],
        # deterministic decoding
        "generationConfig": {
            "temperature": 0.0,
            "topP": 1.0,
            "topK": 1,
            "maxOutputTokens": 8192,
        },
    }


class GeminiResponsePart(ResponseSchema):
    text: Optional[str] = None


class GeminiResponseContent(ResponseSchema):
    parts: List[GeminiResponsePart] = []


class GeminiCandidate(ResponseSchema):
    content: GeminiResponseContent


class GeminiResponse(ResponseSchema):
    candidates: List[GeminiCandidate] = []


class GeminiTranscriptionService(CloudTranscriptionBase):
    supported_provider = ModelProvider.GEMINI
    credential_name = "Gemini"

    async def transcribe(self, audio_path: AudioRef, model: TranscriptionModel) -> str:
        api_key = await self._api_key()
        try:
            url = generate_content_url(model.name)
        except DataEncodingError:
            logger.error("Failed to construct Gemini API URL for model: %s", model.name)
            raise

        logger.info("Starting Gemini transcription with model: %s", model.name)
        audio = await self._load_audio(audio_path)
        logger.info("Audio file loaded, size: %d bytes", len(audio))

        body = build_request_body(audio, detect_mime_type(audio_path, _GEMINI_MIME_OVERRIDES))

        async with self._client() as client:
            data = await self._send(
                client,
                "POST",
                url,
                json=body,
                headers={"x-goog-api-key": api_key},
            )

        resp = self._decode(GeminiResponse, data)

        text: Optional[str] = None
        if resp.candidates and resp.candidates[0].content.parts:
            text = resp.candidates[0].content.parts[0].text

        text = self._require_text(text).strip()
        logger.info("Gemini transcription successful, text length: %d", len(text))
        return text
