# cloudscribe/routes/transcribe.py

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from cloudscribe.core import settings
from cloudscribe.services.speech.errors import (
    ApiRequestFailed,
    AudioFileNotFound,
    CloudTranscriptionError,
    DataEncodingError,
    InvalidAPIKey,
    MissingAPIKey,
    NetworkError,
    NoTranscriptionReturned,
    UnsupportedProvider,
)
from cloudscribe.services.speech.models import (
    CLOUD_MODELS,
    ModelProvider,
    TranscriptionModel,
    find_cloud_model,
)
from cloudscribe.services.speech.router import TranscriptionRouter, default_providers
from cloudscribe.services.speech.stt_base import clamp_str

logger = logging.getLogger(__name__)

router = APIRouter()

_transcriber: TranscriptionRouter | None = None


def _enabled_providers() -> set[ModelProvider]:
    enabled = set()
    for raw in settings.ENABLED_PROVIDERS:
        try:
            enabled.add(ModelProvider.parse(raw))
        except ValueError:
            logger.warning("Ignoring unknown provider in ENABLED_PROVIDERS: %s", raw)
    return enabled


def get_transcriber() -> TranscriptionRouter:
    global _transcriber
    if _transcriber is None:
        providers = default_providers()
        enabled = _enabled_providers()
        if enabled:
            providers = [p for p in providers if p.supported_provider in enabled]
        _transcriber = TranscriptionRouter(providers)
    return _transcriber


class TranscribeOut(BaseModel):
    text: str
    provider: str
    model: str


class ModelOut(BaseModel):
    name: str
    provider: str
    display_name: str
    description: str
    is_multilingual: bool
    supported_languages: Dict[str, str]


def _build_model(
    *,
    name: str,
    provider: ModelProvider,
    api_endpoint: str | None,
    api_key: str | None,
    model_id: str | None,
) -> TranscriptionModel:
    known = find_cloud_model(name, provider)
    if known is not None:
        return known

    kwargs: Dict[str, Any] = dict(name=name, provider=provider, display_name=name)
    if provider == ModelProvider.CUSTOM:
        kwargs.update(api_endpoint=api_endpoint, model_name=name, api_key=api_key)
    if model_id:
        kwargs["id"] = model_id
    return TranscriptionModel(**kwargs)


def _write_temp_audio(data: bytes, suffix: str) -> str:
    fd, path = tempfile.mkstemp(prefix="cloudscribe-", suffix=suffix)
    with os.fdopen(fd, "wb") as f:
        f.write(data)
    return path


@router.get("/models", response_model=List[ModelOut])
async def list_models():
    return [
        ModelOut(
            name=m.name,
            provider=m.provider.value,
            display_name=m.display_name,
            description=m.description,
            is_multilingual=m.is_multilingual,
            supported_languages=m.supported_languages,
        )
        for m in CLOUD_MODELS
    ]


@router.get("/providers")
async def list_providers():
    return {"providers": [p.value for p in get_transcriber().supported_providers]}


@router.post("/transcribe", response_model=TranscribeOut)
async def transcribe(
    audio: UploadFile = File(...),
    model: str = Form(...),
    provider: str = Form(...),
    api_endpoint: str | None = Form(None),
    api_key: str | None = Form(None),
    model_id: str | None = Form(None),
):
    try:
        tag = ModelProvider.parse(provider)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    model_name = clamp_str(model, max_len=128)
    if not model_name:
        raise HTTPException(status_code=400, detail="model is required")

    b = await audio.read()
    if not b:
        raise HTTPException(status_code=400, detail="Empty audio upload")

    max_bytes = int(settings.TRANSCRIBE_MAX_AUDIO_BYTES)
    if max_bytes > 0 and len(b) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Audio too large ({len(b)} bytes). Max is {max_bytes}.",
        )

    tm = _build_model(
        name=model_name,
        provider=tag,
        api_endpoint=api_endpoint,
        api_key=api_key,
        model_id=model_id,
    )

    suffix = Path(audio.filename or "").suffix or ".wav"
    path = await run_in_threadpool(_write_temp_audio, b, suffix)
    try:
        text = await get_transcriber().transcribe(path, tm)
    except UnsupportedProvider as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (MissingAPIKey, InvalidAPIKey) as e:
        raise HTTPException(status_code=401, detail=str(e))
    except AudioFileNotFound as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ApiRequestFailed as e:
        raise HTTPException(status_code=504 if e.status_code == 504 else 502, detail=str(e))
    except (NoTranscriptionReturned, NetworkError) as e:
        raise HTTPException(status_code=502, detail=str(e))
    except DataEncodingError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except CloudTranscriptionError as e:
        raise HTTPException(status_code=500, detail=f"Transcription failed: {e}")
    finally:
        try:
            os.unlink(path)
        except OSError:
            logger.warning("Could not remove temporary audio file %s", path)

    return TranscribeOut(text=text, provider=tag.value, model=tm.name)
