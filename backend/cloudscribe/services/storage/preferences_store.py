# cloudscribe/services/storage/preferences_store.py

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from cloudscribe.core import settings

logger = logging.getLogger(__name__)

SELECTED_LANGUAGE = "SelectedLanguage"
TRANSCRIPTION_PROMPT = "TranscriptionPrompt"
CUSTOM_VOCABULARY_ITEMS = "CustomVocabularyItems"
DEEPGRAM_MEDICAL_CONTENT = "DeepgramMedicalContent"
ELEVENLABS_LEGACY_KEY = "ElevenLabsAPIKey"


class PreferencesStore:
    """
    User preferences consulted by the adapters: language, prompt, custom
    dictionary and per-provider flags.

    Values come from `overrides` first, then the JSON file at `path`. The file
    is read on every lookup; the user may edit it between recordings.
    """

    def __init__(self, path: str | None = None, overrides: Optional[Dict[str, Any]] = None) -> None:
        self.path = path if path is not None else settings.PREFERENCES_FILE
        self.overrides: Dict[str, Any] = dict(overrides or {})

    def load(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}

        p = (self.path or "").strip()
        if p:
            try:
                fp = Path(p)
                if fp.exists():
                    raw = json.loads(fp.read_text(encoding="utf-8"))
                    if isinstance(raw, dict):
                        data = raw
            except (OSError, ValueError) as e:
                logger.warning("Could not read preferences file %s: %s", p, e)

        data.update(self.overrides)
        return data

    def snapshot(self) -> "PreferencesStore":
        """File-less copy holding the current values."""
        return PreferencesStore(path="", overrides=self.load())

    def get(self, key: str, default: Any = None) -> Any:
        return self.load().get(key, default)

    def selected_language(self) -> str:
        v = self.get(SELECTED_LANGUAGE)
        if not isinstance(v, str) or not v.strip():
            return settings.DEFAULT_LANGUAGE or "auto"
        return v.strip()

    def transcription_prompt(self) -> str:
        v = self.get(TRANSCRIPTION_PROMPT, "")
        return v if isinstance(v, str) else ""

    def custom_vocabulary_items(self) -> Any:
        # Raw value; vocabulary.extract_vocabulary() does the validation
        return self.get(CUSTOM_VOCABULARY_ITEMS)

    def flag(self, key: str) -> bool:
        v = self.get(key, False)
        if isinstance(v, str):
            return v.strip().lower() in ("1", "true", "yes", "y", "on")
        return bool(v)
