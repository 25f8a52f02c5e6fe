from __future__ import annotations

from typing import Optional

from fastapi import APIRouter

from config import get_lock_timeout_s
from waivers import cancel_claim, list_claims, process_waiver_claims, submit_claim
from waivers.config import WaiverConfig
from waivers.errors import WaiverError
from app.schemas.waivers import ProcessWaiversRequest, SubmitClaimRequest
from app.services.waiver_facade import _bad_request_response, _waiver_error_response, open_repo

router = APIRouter()


@router.post("/api/waivers/process")
async def api_process_waivers(req: ProcessWaiversRequest):
    try:
        config = WaiverConfig(lock_timeout_s=get_lock_timeout_s())
        with open_repo() as repo:
            result = process_waiver_claims(repo, req.league_id, req.week, config=config)
        return {"ok": True, **result.to_dict()}
    except WaiverError as exc:
        return _waiver_error_response(exc)
    except ValueError as exc:
        return _bad_request_response(exc)


@router.post("/api/waivers/claims")
async def api_submit_claim(req: SubmitClaimRequest):
    try:
        with open_repo() as repo:
            claim = submit_claim(
                repo,
                league_id=req.league_id,
                team_id=req.team_id,
                player_id=req.player_id,
                drop_player_id=req.drop_player_id,
                bid_amount=req.bid_amount,
                week=req.week,
            )
        return {"ok": True, "claim": claim}
    except WaiverError as exc:
        return _waiver_error_response(exc)
    except ValueError as exc:
        return _bad_request_response(exc)


@router.get("/api/waivers/claims")
async def api_list_claims(
    league_id: str,
    team_id: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = 200,
):
    try:
        with open_repo() as repo:
            claims = list_claims(repo, league_id, team_id=team_id, status=status, limit=limit)
        return {"ok": True, "claims": claims}
    except WaiverError as exc:
        return _waiver_error_response(exc)
    except ValueError as exc:
        return _bad_request_response(exc)


@router.delete("/api/waivers/claims/{claim_id}")
async def api_cancel_claim(claim_id: str, team_id: str):
    try:
        with open_repo() as repo:
            out = cancel_claim(repo, claim_id, team_id=team_id)
        return {"ok": True, **out}
    except WaiverError as exc:
        return _waiver_error_response(exc)
    except ValueError as exc:
        return _bad_request_response(exc)
