# cloudscribe/core/settings.py

import os
from pathlib import Path
from typing import Optional

# Load .env if available (safe even if python-dotenv isn't installed)
try:
    from dotenv import load_dotenv
except Exception:
    load_dotenv = None

BACKEND_ROOT = Path(__file__).resolve().parents[2]  # .../backend
KEYS_DIR = BACKEND_ROOT / "keys"

if load_dotenv:
    # backend/.env (works no matter where uvicorn is launched from)
    env_path = BACKEND_ROOT / ".env"
    load_dotenv(env_path)


def _norm_path(p: str) -> str:
    p = (p or "").strip()
    if not p:
        return ""
    p = os.path.expandvars(os.path.expanduser(p))
    try:
        pp = Path(p)
        if not pp.is_absolute():
            pp = (BACKEND_ROOT / pp).resolve()
        return str(pp)
    except Exception:
        return p


def _fallback_key(*names: str) -> str:
    if not KEYS_DIR.exists():
        return ""
    for n in names:
        fp = KEYS_DIR / n
        if fp.exists():
            return str(fp)
    return ""


def _env_bool(name: str, default: bool = False) -> bool:
    v = os.getenv(name, "")
    if v is None or str(v).strip() == "":
        return bool(default)
    return str(v).strip().lower() in ("1", "true", "yes", "y", "on")


def _env_int(name: str, default: int) -> int:
    try:
        return int(str(os.getenv(name, str(default))).strip())
    except Exception:
        return int(default)


def _env_float(name: str, default: float) -> float:
    try:
        return float(str(os.getenv(name, str(default))).strip())
    except Exception:
        return float(default)


def _env_csv(name: str) -> list[str]:
    raw = (os.getenv(name, "") or "").strip()
    if not raw:
        return []
    return [x.strip() for x in raw.split(",") if x.strip()]


# -----------------------------
# App / Environment
# -----------------------------
ENV = (os.getenv("ENV", os.getenv("APP_ENV", "dev")) or "dev").strip().lower()
IS_PROD = ENV in ("prod", "production")
LOG_LEVEL = (os.getenv("LOG_LEVEL", "INFO" if IS_PROD else "DEBUG") or "INFO").strip().upper()

# -----------------------------
# CORS
# -----------------------------
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").strip()
ALLOWED_ORIGIN_REGEX = (os.getenv("ALLOWED_ORIGIN_REGEX", "") or "").strip() or None
CORS_ALLOW_CREDENTIALS: Optional[bool]
_raw_cac = (os.getenv("CORS_ALLOW_CREDENTIALS", "") or "").strip()
if _raw_cac == "":
    CORS_ALLOW_CREDENTIALS = None
else:
    CORS_ALLOW_CREDENTIALS = _env_bool("CORS_ALLOW_CREDENTIALS", True)

# -----------------------------
# Credentials
# -----------------------------
# Provider secrets come from <NAME>_API_KEY env vars first, then this JSON file
# ({"GROQ": "...", "Deepgram": "...", ...}).
CREDENTIALS_FILE = _norm_path(os.getenv("CREDENTIALS_FILE", ""))

if CREDENTIALS_FILE and not Path(CREDENTIALS_FILE).exists():
    CREDENTIALS_FILE = _fallback_key("credentials.json", "api_keys.json")

if not CREDENTIALS_FILE:
    CREDENTIALS_FILE = _fallback_key("credentials.json", "api_keys.json")

# -----------------------------
# User preferences (language, prompt, custom dictionary)
# -----------------------------
PREFERENCES_FILE = _norm_path(os.getenv("PREFERENCES_FILE", "preferences.json"))

# Used when the preferences file has no SelectedLanguage entry
DEFAULT_LANGUAGE = (os.getenv("SELECTED_LANGUAGE", "auto") or "auto").strip()

# -----------------------------
# Transport
# -----------------------------
HTTP_TIMEOUT_SECONDS = _env_float("HTTP_TIMEOUT_SECONDS", 120.0)
HTTP_CONNECT_TIMEOUT_SECONDS = _env_float("HTTP_CONNECT_TIMEOUT_SECONDS", 15.0)

# -----------------------------
# Job polling
# -----------------------------
ASSEMBLYAI_POLL_INTERVAL_SECONDS = _env_float("ASSEMBLYAI_POLL_INTERVAL_SECONDS", 3.0)
ASSEMBLYAI_MAX_WAIT_SECONDS = _env_float("ASSEMBLYAI_MAX_WAIT_SECONDS", 300.0)

SONIOX_INITIAL_POLL_INTERVAL_SECONDS = _env_float("SONIOX_INITIAL_POLL_INTERVAL_SECONDS", 1.0)
SONIOX_MAX_POLL_INTERVAL_SECONDS = _env_float("SONIOX_MAX_POLL_INTERVAL_SECONDS", 10.0)
SONIOX_POLL_BACKOFF_MULTIPLIER = _env_float("SONIOX_POLL_BACKOFF_MULTIPLIER", 1.5)
SONIOX_MAX_WAIT_SECONDS = _env_float("SONIOX_MAX_WAIT_SECONDS", 120.0)

# -----------------------------
# HTTP API
# -----------------------------
# Max bytes accepted by /api/transcribe (0 disables the check)
TRANSCRIBE_MAX_AUDIO_BYTES = _env_int("TRANSCRIBE_MAX_AUDIO_BYTES", 25 * 1024 * 1024)

# Optional allow-list of provider tags exposed over HTTP (empty = all registered)
ENABLED_PROVIDERS = _env_csv("ENABLED_PROVIDERS")
