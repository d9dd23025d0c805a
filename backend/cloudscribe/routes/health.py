# cloudscribe/routes/health.py

from fastapi import APIRouter

from cloudscribe.core.settings import ENV

router = APIRouter()


@router.get("/health")
async def health():
    return {"status": "ok", "env": ENV}
