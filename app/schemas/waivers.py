from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class ProcessWaiversRequest(BaseModel):
    league_id: str
    week: Optional[int] = Field(default=None, ge=0)  # default: league current week


class SubmitClaimRequest(BaseModel):
    league_id: str
    team_id: str
    player_id: str
    drop_player_id: Optional[str] = None
    bid_amount: Optional[int] = None  # FAAB leagues only
    week: Optional[int] = Field(default=None, ge=0)
