# cloudscribe/services/speech/vocabulary.py

from __future__ import annotations

import json
import logging
from typing import Any, List

from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError

logger = logging.getLogger(__name__)


class DictionaryItem(BaseModel):
    """One persisted custom dictionary entry. Extra keys (id, dateAdded, ...) are ignored."""

    model_config = ConfigDict(extra="ignore")

    word: StrictStr


def _decode(raw: Any) -> Any:
    if isinstance(raw, (bytes, bytearray)):
        raw = bytes(raw).decode("utf-8")
    if isinstance(raw, str):
        if not raw.strip():
            return None
        return json.loads(raw)
    return raw


def extract_vocabulary(raw: Any) -> List[str]:
    """
    Build the word-boost list from the user's custom dictionary.

    Accepts JSON bytes/str or an already decoded list of {"word": ...} objects.
    Words are trimmed, empties dropped, and duplicates removed case-insensitively
    keeping the first spelling seen. Never raises: bad input yields [].
    """
    if raw is None:
        return []

    try:
        entries = _decode(raw)
    except (UnicodeDecodeError, ValueError) as e:
        logger.debug("Ignoring unparsable custom dictionary: %s", e)
        return []

    if not isinstance(entries, list):
        return []

    unique: List[str] = []
    seen: set[str] = set()
    for entry in entries:
        try:
            item = DictionaryItem.model_validate(entry)
        except ValidationError:
            continue

        word = item.word.strip()
        if not word:
            continue

        key = word.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(word)

    return unique
