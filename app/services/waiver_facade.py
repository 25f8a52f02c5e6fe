from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi.responses import JSONResponse

from config import get_db_path
from league_repo import LeagueRepo
from waivers.errors import NOT_FOUND_CODES, WaiverError

_DB_PATH: Optional[str] = None


def set_db_path(db_path: str) -> None:
    global _DB_PATH
    _DB_PATH = str(db_path)


def get_active_db_path() -> str:
    if _DB_PATH is None:
        set_db_path(get_db_path())
    return str(_DB_PATH)


@contextmanager
def open_repo() -> Iterator[LeagueRepo]:
    # DB schema is guaranteed during server startup (app.main._startup_init_db).
    with LeagueRepo(get_active_db_path()) as repo:
        yield repo


def _waiver_error_response(error: WaiverError) -> JSONResponse:
    payload = {
        "ok": False,
        "error": {
            "code": error.code,
            "message": error.message,
            "details": error.details,
        },
    }
    status_code = 404 if error.code in NOT_FOUND_CODES else 400
    return JSONResponse(status_code=status_code, content=payload)


def _bad_request_response(exc: ValueError) -> JSONResponse:
    payload = {"ok": False, "error": {"code": "BAD_REQUEST", "message": str(exc), "details": None}}
    return JSONResponse(status_code=400, content=payload)
