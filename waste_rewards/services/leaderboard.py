from __future__ import annotations

from sqlalchemy import and_, func
from sqlmodel import Session, select

from ..models import EARNED_TYPES, Transaction, User, level_for
from ..schemas.leaderboard import LeaderboardEntry


def get_leaderboard(session: Session, limit: int = 20) -> list[LeaderboardEntry]:
    """Users ranked by lifetime earned points; redemptions do not lower a rank."""
    earned = func.coalesce(func.sum(Transaction.amount), 0).label("points")
    rows = session.exec(
        select(User.id, User.name, earned)
        .outerjoin(
            Transaction,
            and_(Transaction.user_id == User.id, Transaction.type.in_(EARNED_TYPES)),
        )
        .group_by(User.id, User.name)
        .order_by(earned.desc(), User.id)
        .limit(limit)
    ).all()
    return [
        LeaderboardEntry(
            rank=rank,
            user_id=user_id,
            user_name=name or "Unknown User",
            points=int(points),
            level=level_for(int(points)),
        )
        for rank, (user_id, name, points) in enumerate(rows, start=1)
    ]
