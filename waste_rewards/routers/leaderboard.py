from typing import List

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from waste_rewards.config import settings
from waste_rewards.db import get_session
from waste_rewards.schemas.leaderboard import LeaderboardEntry
from waste_rewards.services.leaderboard import get_leaderboard

router = APIRouter()


@router.get("/", response_model=List[LeaderboardEntry])
def leaderboard(
    limit: int = Query(settings.LEADERBOARD_LIMIT, ge=1, le=100),
    session: Session = Depends(get_session),
):
    return get_leaderboard(session, limit=limit)
