from cloudscribe.core import settings


def test_env_bool(monkeypatch):
    monkeypatch.setenv("CS_FLAG", "Yes")
    assert settings._env_bool("CS_FLAG") is True
    monkeypatch.setenv("CS_FLAG", "off")
    assert settings._env_bool("CS_FLAG", True) is False
    monkeypatch.setenv("CS_FLAG", "  ")
    assert settings._env_bool("CS_FLAG", True) is True


def test_env_numbers_fall_back_on_garbage(monkeypatch):
    monkeypatch.setenv("CS_NUM", "abc")
    assert settings._env_int("CS_NUM", 7) == 7
    assert settings._env_float("CS_NUM", 1.5) == 1.5
    monkeypatch.setenv("CS_NUM", " 42 ")
    assert settings._env_int("CS_NUM", 7) == 42
    assert settings._env_float("CS_NUM", 1.5) == 42.0


def test_env_csv(monkeypatch):
    monkeypatch.setenv("CS_LIST", " Groq, ,Deepgram ")
    assert settings._env_csv("CS_LIST") == ["Groq", "Deepgram"]
    monkeypatch.delenv("CS_LIST")
    assert settings._env_csv("CS_LIST") == []


def test_norm_path_resolves_relative_to_backend():
    assert settings._norm_path("") == ""
    assert settings._norm_path("prefs.json") == str((settings.BACKEND_ROOT / "prefs.json").resolve())
