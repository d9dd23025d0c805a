import pytest

from cloudscribe.services.speech.models import (
    CLOUD_MODELS,
    ModelProvider,
    TranscriptionModel,
    find_cloud_model,
    language_dictionary,
)


def test_provider_parse_is_case_insensitive():
    assert ModelProvider.parse("groq") is ModelProvider.GROQ
    assert ModelProvider.parse("AssemblyAI") is ModelProvider.ASSEMBLYAI
    assert ModelProvider.parse("native apple") is ModelProvider.NATIVE_APPLE
    assert ModelProvider.parse("ELEVENLABS") is ModelProvider.ELEVENLABS
    with pytest.raises(ValueError):
        ModelProvider.parse("openai")


def test_catalogue_ids_are_unique_and_languages_filled():
    ids = [m.id for m in CLOUD_MODELS]
    assert len(ids) == len(set(ids))
    for m in CLOUD_MODELS:
        assert m.supported_languages
        assert m.display_name


def test_find_cloud_model():
    m = find_cloud_model("nova-3-medical", ModelProvider.DEEPGRAM)
    assert m is not None
    assert m.is_multilingual is False
    assert m.language == "English-only"
    assert find_cloud_model("nova-3-medical", ModelProvider.GROQ) is None


def test_language_dictionary():
    assert language_dictionary(False) == {"en": "English"}
    assert "auto" in language_dictionary(True)


def test_api_key_hidden_from_repr():
    m = TranscriptionModel(name="x", provider=ModelProvider.CUSTOM, api_key="sk-secret")
    assert "sk-secret" not in repr(m)
