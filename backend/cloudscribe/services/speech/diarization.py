# cloudscribe/services/speech/diarization.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union


@dataclass(frozen=True)
class Utterance:
    text: str
    speaker: Optional[Union[str, int]] = None
    start: Optional[float] = None
    end: Optional[float] = None


def speaker_label(speaker: Optional[Union[str, int]]) -> str:
    if speaker is None:
        return "Unknown"
    label = str(speaker).strip()
    return label or "Unknown"


def format_utterances(utterances: Optional[Sequence[Utterance]], full_text: str = "") -> str:
    """
    One "Speaker <label>: <text>" line per utterance, in input order.
    Falls back to full_text (unchanged) when there are no utterances.
    """
    if not utterances:
        return full_text
    return "\n".join(f"Speaker {speaker_label(u.speaker)}: {u.text}" for u in utterances)
