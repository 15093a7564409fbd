"""Leaderboard endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from cosmos.core.leaderboard import UnknownBoardError, load_leaderboard
from cosmos.core.session import Session
from cosmos.web.deps import get_session
from cosmos.web.schemas import LeaderboardEntryResponse, LeaderboardResponse

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])


@router.get("/{board}", response_model=LeaderboardResponse)
async def get_leaderboard(
    board: str, session: Session = Depends(get_session)
) -> LeaderboardResponse:
    """Top ten users of a board: global, daily-pages, weekly-keywords or badge-sets."""
    try:
        entries = load_leaderboard(board, viewer=session)
    except UnknownBoardError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return LeaderboardResponse(
        board=board,
        entries=[
            LeaderboardEntryResponse(
                **e.to_dict(), is_current_user=e.user_id == session.user_id
            )
            for e in entries
        ],
    )
