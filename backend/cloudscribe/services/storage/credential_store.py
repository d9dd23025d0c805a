# cloudscribe/services/storage/credential_store.py

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Dict, Optional, Protocol

from cloudscribe.core import settings

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    def get(self, provider_name: str) -> Optional[str]:
        ...


def env_var_name(provider_name: str) -> str:
    """'GROQ' -> GROQ_API_KEY, 'custom_model_<uuid>' -> CUSTOM_MODEL_<UUID>_API_KEY"""
    base = re.sub(r"[^A-Za-z0-9]+", "_", (provider_name or "").strip()).strip("_").upper()
    return f"{base}_API_KEY"


class MemoryCredentialStore:
    def __init__(self, keys: Optional[Dict[str, str]] = None) -> None:
        self._keys: Dict[str, str] = dict(keys or {})

    def get(self, provider_name: str) -> Optional[str]:
        return self._keys.get(provider_name)

    def set(self, provider_name: str, secret: str) -> None:
        self._keys[provider_name] = secret


class SettingsCredentialStore:
    """
    Read-only lookup:
      1) env <NAME>_API_KEY
      2) JSON credentials file (settings.CREDENTIALS_FILE), keyed by provider name
    The file is re-read on each lookup so rotated keys apply without a restart.
    """

    def __init__(self, credentials_file: str | None = None) -> None:
        self.credentials_file = (
            credentials_file if credentials_file is not None else settings.CREDENTIALS_FILE
        )

    def _file_keys(self) -> Dict[str, str]:
        p = (self.credentials_file or "").strip()
        if not p:
            return {}
        try:
            fp = Path(p)
            if not fp.exists():
                return {}
            data = json.loads(fp.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Could not read credentials file %s: %s", p, e)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if isinstance(v, str)}

    def get(self, provider_name: str) -> Optional[str]:
        v = (os.getenv(env_var_name(provider_name), "") or "").strip()
        if v:
            return v
        return self._file_keys().get(provider_name)
