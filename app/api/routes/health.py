from __future__ import annotations

from fastapi import APIRouter

from schema import SCHEMA_VERSION

router = APIRouter()


@router.get("/api/health")
async def api_health():
    return {"ok": True, "schema_version": SCHEMA_VERSION}
