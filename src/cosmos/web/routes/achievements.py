"""Achievement endpoints."""

from fastapi import APIRouter, Depends

from cosmos.core.achievements import evaluate, load_counts, sync_unlocked_achievements
from cosmos.core.session import Session
from cosmos.web.deps import get_session
from cosmos.web.schemas import AchievementsResponse, BadgeResponse

router = APIRouter(prefix="/api/achievements", tags=["achievements"])


@router.get("", response_model=AchievementsResponse)
async def list_achievements(session: Session = Depends(get_session)) -> AchievementsResponse:
    """Badges evaluated from current counts."""
    statuses = evaluate(load_counts(session.user_id))
    sync_unlocked_achievements(session.user_id)

    badges = [BadgeResponse(**s.to_dict()) for s in statuses]
    return AchievementsResponse(
        badges=badges,
        earned_count=sum(1 for b in badges if b.earned),
    )
