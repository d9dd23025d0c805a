# cloudscribe/main.py

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cloudscribe.core.settings import (
    ALLOWED_ORIGINS,
    ALLOWED_ORIGIN_REGEX,
    CORS_ALLOW_CREDENTIALS,
    LOG_LEVEL,
)

from cloudscribe.routes.health import router as health_router
from cloudscribe.routes.transcribe import router as transcribe_router

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="cloudscribe API")

raw = (ALLOWED_ORIGINS or "*").strip()

cors_kwargs = dict(
    allow_methods=["*"],
    allow_headers=["*"],
)

if raw == "" or raw == "*":
    cors_kwargs.update(
        allow_origins=["*"],
        allow_credentials=False,
    )
else:
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    if any(o == "*" for o in origins):
        cors_kwargs.update(
            allow_origins=["*"],
            allow_credentials=False,
        )
    else:
        allow_credentials = True if CORS_ALLOW_CREDENTIALS is None else bool(CORS_ALLOW_CREDENTIALS)
        cors_kwargs.update(
            allow_origins=origins,
            allow_credentials=allow_credentials,
        )
        if ALLOWED_ORIGIN_REGEX:
            cors_kwargs["allow_origin_regex"] = ALLOWED_ORIGIN_REGEX

app.add_middleware(CORSMiddleware, **cors_kwargs)

app.include_router(health_router, prefix="/api")
app.include_router(transcribe_router, prefix="/api")
