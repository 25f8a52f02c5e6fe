from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import configure_logging, get_admin_token
from league_repo import LeagueRepo
from app.api.router import api_router
from app.services.waiver_facade import get_active_db_path

logger = logging.getLogger(__name__)

app = FastAPI(title="Fantasy waiver server")


@app.on_event("startup")
def _startup_init_db() -> None:
    # 1) logging from WAIVER_LOG_LEVEL
    # 2) DB schema init/migrate once (per db_path)
    configure_logging()
    db_path = get_active_db_path()
    with LeagueRepo(db_path) as repo:
        repo.init_db()
    logger.info("waiver server ready db_path=%s", db_path)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def _auth_guard_middleware(request: Request, call_next):
    """Optional admin guard.

    If WAIVER_ADMIN_TOKEN is configured, require it on state-changing API calls.
    """
    required_token = get_admin_token()
    if not required_token:
        return await call_next(request)

    path = request.url.path or ""
    method = (request.method or "GET").upper()
    if method not in {"POST", "DELETE"} or not path.startswith("/api/"):
        return await call_next(request)

    provided = (request.headers.get("X-Admin-Token") or "").strip()
    if provided != required_token:
        return JSONResponse(status_code=401, content={"detail": "Unauthorized: invalid X-Admin-Token"})

    return await call_next(request)


app.include_router(api_router)
