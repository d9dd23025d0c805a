# cloudscribe/services/speech/models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class ModelProvider(str, Enum):
    # on-device engines (handled outside this layer)
    LOCAL = "Local"
    PARAKEET = "Parakeet"
    FAST_CONFORMER = "FastConformer"
    SENSE_VOICE = "SenseVoice"
    NATIVE_APPLE = "Native Apple"

    # cloud backends
    GROQ = "Groq"
    ELEVENLABS = "ElevenLabs"
    DEEPGRAM = "Deepgram"
    MISTRAL = "Mistral"
    GEMINI = "Gemini"
    SONIOX = "Soniox"
    ASSEMBLYAI = "AssemblyAI"
    ZAI = "ZAI"
    CUSTOM = "Custom"

    @classmethod
    def parse(cls, value: str) -> "ModelProvider":
        """Case-insensitive lookup by value or member name."""
        v = (value or "").strip()
        for p in cls:
            if v.lower() in (p.value.lower(), p.name.lower()):
                return p
        raise ValueError(f"Unknown provider: {value!r}")


_MULTILINGUAL_LANGUAGES: Dict[str, str] = {
    "auto": "Auto-detect",
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "nl": "Dutch",
    "ru": "Russian",
    "tr": "Turkish",
    "ar": "Arabic",
    "hi": "Hindi",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
}

_ENGLISH_ONLY: Dict[str, str] = {"en": "English"}


def language_dictionary(is_multilingual: bool) -> Dict[str, str]:
    return dict(_MULTILINGUAL_LANGUAGES if is_multilingual else _ENGLISH_ONLY)


@dataclass(frozen=True)
class TranscriptionModel:
    name: str
    provider: ModelProvider
    display_name: str = ""
    description: str = ""
    is_multilingual: bool = True
    supported_languages: Dict[str, str] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    # OpenAI-compatible custom models only
    api_endpoint: Optional[str] = None
    model_name: Optional[str] = None
    api_key: Optional[str] = field(default=None, repr=False)

    @property
    def language(self) -> str:
        return "Multilingual" if self.is_multilingual else "English-only"


def _cloud(
    name: str,
    display_name: str,
    description: str,
    provider: ModelProvider,
    *,
    is_multilingual: bool = True,
) -> TranscriptionModel:
    return TranscriptionModel(
        name=name,
        provider=provider,
        display_name=display_name,
        description=description,
        is_multilingual=is_multilingual,
        supported_languages=language_dictionary(is_multilingual),
        id=f"{provider.value.lower()}:{name}",
    )


CLOUD_MODELS: List[TranscriptionModel] = [
    _cloud(
        "whisper-large-v3-turbo",
        "Whisper Large v3 Turbo (Groq)",
        "Whisper Large v3 Turbo model with Groq's lightning-speed inference",
        ModelProvider.GROQ,
    ),
    _cloud(
        "scribe_v2_realtime",
        "Scribe v2 Realtime (ElevenLabs)",
        "ElevenLabs' low-latency transcription model with word-level timestamps.",
        ModelProvider.ELEVENLABS,
    ),
    _cloud(
        "scribe_v1",
        "Scribe v1 (ElevenLabs)",
        "ElevenLabs' Scribe model for fast & accurate transcription.",
        ModelProvider.ELEVENLABS,
    ),
    _cloud(
        "scribe_v2",
        "Scribe v2 (ElevenLabs)",
        "ElevenLabs' Scribe v2 model for the most accurate transcription.",
        ModelProvider.ELEVENLABS,
    ),
    _cloud(
        "nova-2",
        "Nova (Deepgram)",
        "Deepgram's Nova model for fast, accurate, and cost-effective transcription.",
        ModelProvider.DEEPGRAM,
    ),
    _cloud(
        "nova-3-medical",
        "Nova-3 Medical (Deepgram)",
        "Specialized medical transcription model optimized for clinical environments.",
        ModelProvider.DEEPGRAM,
        is_multilingual=False,
    ),
    _cloud(
        "nova-3-diarize",
        "Nova-3 + Diarization (Deepgram)",
        "English transcription with speaker identification. Outputs speaker-labeled segments.",
        ModelProvider.DEEPGRAM,
        is_multilingual=False,
    ),
    _cloud(
        "nova-2-diarize",
        "Nova-2 + Diarization (Deepgram)",
        "Multilingual transcription with speaker identification.",
        ModelProvider.DEEPGRAM,
    ),
    _cloud(
        "voxtral-mini-latest",
        "Voxtral Mini (Mistral)",
        "Mistral's transcription model.",
        ModelProvider.MISTRAL,
    ),
    _cloud(
        "gemini-3-pro-preview",
        "Gemini 3 Pro",
        "Google's multimodal model with strong reasoning and transcription.",
        ModelProvider.GEMINI,
    ),
    _cloud(
        "gemini-3-flash-preview",
        "Gemini 3 Flash",
        "Google's fastest Gemini 3 model.",
        ModelProvider.GEMINI,
    ),
    _cloud(
        "stt-async-v3",
        "Soniox (stt-async-v3)",
        "Soniox asynchronous transcription model v3.",
        ModelProvider.SONIOX,
    ),
    _cloud(
        "assemblyai-best",
        "AssemblyAI Best",
        "High-accuracy transcription with speaker diarization support.",
        ModelProvider.ASSEMBLYAI,
    ),
    _cloud(
        "assemblyai-nano",
        "AssemblyAI Nano",
        "Fast, cost-effective transcription optimized for speed.",
        ModelProvider.ASSEMBLYAI,
    ),
    _cloud(
        "glm-asr-2512",
        "GLM-ASR-Nano (Z.AI)",
        "Z.AI's speech recognition model. Max 30 seconds per request.",
        ModelProvider.ZAI,
    ),
]


def find_cloud_model(name: str, provider: ModelProvider) -> Optional[TranscriptionModel]:
    for m in CLOUD_MODELS:
        if m.provider == provider and m.name == name:
            return m
    return None
