"""Tests for credential and preference lookup."""
import json

from cloudscribe.core import settings
from cloudscribe.services.storage.credential_store import (
    MemoryCredentialStore,
    SettingsCredentialStore,
    env_var_name,
)
from cloudscribe.services.storage.preferences_store import (
    CUSTOM_VOCABULARY_ITEMS,
    DEEPGRAM_MEDICAL_CONTENT,
    SELECTED_LANGUAGE,
    TRANSCRIPTION_PROMPT,
    PreferencesStore,
)


def test_env_var_name():
    assert env_var_name("GROQ") == "GROQ_API_KEY"
    assert env_var_name("ElevenLabs") == "ELEVENLABS_API_KEY"
    assert env_var_name("custom_model_ab-12") == "CUSTOM_MODEL_AB_12_API_KEY"


def test_memory_store_set_and_get():
    store = MemoryCredentialStore({"GROQ": "a"})
    store.set("Deepgram", "b")
    assert store.get("GROQ") == "a"
    assert store.get("Deepgram") == "b"
    assert store.get("Gemini") is None


def test_settings_store_prefers_env_over_file(tmp_path, monkeypatch):
    fp = tmp_path / "credentials.json"
    fp.write_text(json.dumps({"GROQ": "from-file", "Deepgram": "dg-file", "bad": 1}), encoding="utf-8")
    monkeypatch.setenv("GROQ_API_KEY", "from-env")
    monkeypatch.delenv("DEEPGRAM_API_KEY", raising=False)

    store = SettingsCredentialStore(str(fp))

    assert store.get("GROQ") == "from-env"
    assert store.get("Deepgram") == "dg-file"
    assert store.get("bad") is None


def test_settings_store_rereads_file(tmp_path, monkeypatch):
    monkeypatch.delenv("SONIOX_API_KEY", raising=False)
    fp = tmp_path / "credentials.json"
    store = SettingsCredentialStore(str(fp))
    assert store.get("Soniox") is None

    fp.write_text(json.dumps({"Soniox": "rotated"}), encoding="utf-8")
    assert store.get("Soniox") == "rotated"


def test_settings_store_tolerates_broken_file(tmp_path, monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    fp = tmp_path / "credentials.json"
    fp.write_text("{not json", encoding="utf-8")
    assert SettingsCredentialStore(str(fp)).get("Gemini") is None
    assert SettingsCredentialStore("").get("Gemini") is None


def test_preferences_file_and_overrides(tmp_path):
    fp = tmp_path / "preferences.json"
    fp.write_text(
        json.dumps(
            {
                SELECTED_LANGUAGE: "de",
                TRANSCRIPTION_PROMPT: "Meeting notes",
                CUSTOM_VOCABULARY_ITEMS: [{"word": "Kafka"}],
            }
        ),
        encoding="utf-8",
    )
    store = PreferencesStore(str(fp), overrides={SELECTED_LANGUAGE: "fr"})

    assert store.selected_language() == "fr"
    assert store.transcription_prompt() == "Meeting notes"
    assert store.custom_vocabulary_items() == [{"word": "Kafka"}]


def test_preferences_defaults(monkeypatch):
    monkeypatch.setattr(settings, "DEFAULT_LANGUAGE", "auto")
    store = PreferencesStore(path="")
    assert store.selected_language() == "auto"
    assert store.transcription_prompt() == ""
    assert store.custom_vocabulary_items() is None
    assert store.flag(DEEPGRAM_MEDICAL_CONTENT) is False


def test_preferences_flag_parsing():
    store = PreferencesStore(path="", overrides={"a": "yes", "b": "0", "c": True, SELECTED_LANGUAGE: "  "})
    assert store.flag("a") is True
    assert store.flag("b") is False
    assert store.flag("c") is True


def test_preferences_broken_file_is_empty(tmp_path):
    fp = tmp_path / "preferences.json"
    fp.write_text("[1, 2", encoding="utf-8")
    assert PreferencesStore(str(fp)).load() == {}


def test_preferences_snapshot_is_detached_from_file(tmp_path):
    fp = tmp_path / "preferences.json"
    fp.write_text(json.dumps({SELECTED_LANGUAGE: "de"}), encoding="utf-8")
    store = PreferencesStore(str(fp), overrides={TRANSCRIPTION_PROMPT: "Standup"})

    snap = store.snapshot()
    fp.write_text(json.dumps({SELECTED_LANGUAGE: "it"}), encoding="utf-8")

    assert snap.path == ""
    assert snap.selected_language() == "de"
    assert snap.transcription_prompt() == "Standup"
    assert store.selected_language() == "it"
