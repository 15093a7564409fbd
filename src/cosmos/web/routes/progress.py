"""Reading progress endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from cosmos.core.pagination import progress_percent, total_pages_for
from cosmos.core.progress import ProgressTracker
from cosmos.core.session import Session
from cosmos.db import books_repository
from cosmos.web.deps import get_session
from cosmos.web.schemas import NavigationResponse, PageNavigation, ProgressResponse

router = APIRouter(prefix="/api/progress", tags=["progress"])


def _load_tracker(book_id: str, session: Session) -> ProgressTracker:
    book = books_repository.get_book_by_id(book_id, user_id=session.user_id)
    if book is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Book '{book_id}' not found",
        )
    return ProgressTracker.load(session.user_id, book.id, total_pages_for(book))


@router.get("/{book_id}", response_model=ProgressResponse)
async def get_progress(
    book_id: str, session: Session = Depends(get_session)
) -> ProgressResponse:
    """Current page and pages read for a book."""
    tracker = _load_tracker(book_id, session)
    return ProgressResponse(
        book_id=book_id,
        current_page=tracker.current_page,
        pages_read=tracker.pages_read,
        total_pages=tracker.total_pages,
        percent=progress_percent(tracker.pages_read, tracker.total_pages),
    )


@router.put("/{book_id}", response_model=NavigationResponse)
async def go_to_page(
    book_id: str,
    request: PageNavigation,
    session: Session = Depends(get_session),
) -> NavigationResponse:
    """Move to a page.

    Out-of-range pages leave the position unchanged (moved=False). A failed
    write still moves the reader; persisted=False reports it.
    """
    tracker = _load_tracker(book_id, session)
    moved = tracker.go_to_page(request.page)

    return NavigationResponse(
        book_id=book_id,
        current_page=tracker.current_page,
        pages_read=tracker.pages_read,
        total_pages=tracker.total_pages,
        percent=progress_percent(tracker.pages_read, tracker.total_pages),
        moved=moved,
        persisted=bool(tracker.last_write_ok),
    )
