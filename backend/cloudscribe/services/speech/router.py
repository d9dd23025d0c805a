# cloudscribe/services/speech/router.py

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

import httpx

from cloudscribe.services.speech.errors import UnsupportedProvider
from cloudscribe.services.speech.models import ModelProvider, TranscriptionModel
from cloudscribe.services.speech.providers.assemblyai import AssemblyAITranscriptionService
from cloudscribe.services.speech.providers.deepgram import DeepgramTranscriptionService
from cloudscribe.services.speech.providers.elevenlabs import ElevenLabsTranscriptionService
from cloudscribe.services.speech.providers.gemini import GeminiTranscriptionService
from cloudscribe.services.speech.providers.groq import GroqTranscriptionService
from cloudscribe.services.speech.providers.mistral import MistralTranscriptionService
from cloudscribe.services.speech.providers.openai_compatible import OpenAICompatibleTranscriptionService
from cloudscribe.services.speech.providers.soniox import SonioxTranscriptionService
from cloudscribe.services.speech.providers.zai import ZAITranscriptionService
from cloudscribe.services.speech.stt_base import AudioRef, STTProvider
from cloudscribe.services.storage.credential_store import CredentialStore
from cloudscribe.services.storage.preferences_store import PreferencesStore

logger = logging.getLogger(__name__)

PROVIDER_CLASSES = (
    GroqTranscriptionService,
    ElevenLabsTranscriptionService,
    DeepgramTranscriptionService,
    MistralTranscriptionService,
    GeminiTranscriptionService,
    SonioxTranscriptionService,
    AssemblyAITranscriptionService,
    ZAITranscriptionService,
    OpenAICompatibleTranscriptionService,
)


def default_providers(
    *,
    credentials: CredentialStore | None = None,
    preferences: PreferencesStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> List[STTProvider]:
    """One adapter per supported cloud backend, sharing the same stores."""
    return [
        cls(credentials=credentials, preferences=preferences, transport=transport)
        for cls in PROVIDER_CLASSES
    ]


class TranscriptionRouter:
    """
    Dispatches transcribe() to the adapter registered for model.provider.
    The registry is built up front and only read during dispatch.
    """

    def __init__(self, providers: Optional[Iterable[STTProvider]] = None) -> None:
        self._providers: Dict[ModelProvider, STTProvider] = {}
        for p in default_providers() if providers is None else providers:
            self.register(p)

    def register(self, provider: STTProvider) -> None:
        tag = provider.supported_provider
        if tag in self._providers:
            logger.debug("Replacing %s adapter with %s", tag.value, type(provider).__name__)
        self._providers[tag] = provider

    def provider_for(self, tag: ModelProvider) -> Optional[STTProvider]:
        return self._providers.get(tag)

    @property
    def supported_providers(self) -> List[ModelProvider]:
        return sorted(self._providers, key=lambda p: p.value)

    async def transcribe(self, audio_path: AudioRef, model: TranscriptionModel) -> str:
        provider = self._providers.get(model.provider)
        if provider is None:
            logger.error("No transcription adapter registered for provider %s", model.provider)
            raise UnsupportedProvider()
        return await provider.transcribe(audio_path, model)
