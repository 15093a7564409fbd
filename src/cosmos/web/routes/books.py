"""Book endpoints."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from cosmos.core.achievements import sync_unlocked_achievements
from cosmos.core.book_importer import BookImportError, add_pdf_book, add_text_book
from cosmos.core.glossary import highlight_terms
from cosmos.core.pagination import get_page, progress_percent, total_pages_for
from cosmos.core.pdf_extractor import PdfExtractionError
from cosmos.core.session import Session
from cosmos.db import books_repository, progress_repository
from cosmos.db.books_repository import BookRecord
from cosmos.web.deps import get_session
from cosmos.web.schemas import (
    BookCreate,
    BookDetail,
    BookListResponse,
    BookSummary,
    PageResponse,
    ProgressResponse,
    SegmentResponse,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/books", tags=["books"])


def _progress(book: BookRecord, user_id: str) -> ProgressResponse | None:
    record = progress_repository.get_progress(user_id, book.id)
    if record is None:
        return None
    total = total_pages_for(book)
    return ProgressResponse(
        book_id=book.id,
        current_page=record.current_page,
        pages_read=record.pages_read,
        total_pages=total,
        percent=progress_percent(record.pages_read, total),
    )


def _summary(book: BookRecord, user_id: str) -> BookSummary:
    return BookSummary(
        id=book.id,
        title=book.title,
        author=book.author,
        book_type=book.book_type,
        total_pages=total_pages_for(book),
        created_at=book.created_at,
        progress=_progress(book, user_id),
    )


def _detail(book: BookRecord, user_id: str) -> BookDetail:
    return BookDetail(
        **_summary(book, user_id).model_dump(),
        file_url=book.file_url,
        language=book.language,
    )


def _get_owned_book(book_id: str, session: Session) -> BookRecord:
    book = books_repository.get_book_by_id(book_id, user_id=session.user_id)
    if book is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Book '{book_id}' not found",
        )
    return book


@router.get("", response_model=BookListResponse)
async def list_books(session: Session = Depends(get_session)) -> BookListResponse:
    """List the current user's books with their reading progress."""
    books = books_repository.list_books(session.user_id)
    summaries = [_summary(b, session.user_id) for b in books]
    logger.info("books_list", user_id=session.user_id, count=len(summaries))
    return BookListResponse(books=summaries, count=len(summaries))


@router.post("", response_model=BookDetail, status_code=status.HTTP_201_CREATED)
async def create_book(
    request: BookCreate, session: Session = Depends(get_session)
) -> BookDetail:
    """Add a text book or register an already-stored PDF."""
    try:
        if request.book_type == "text":
            book = add_text_book(
                session,
                title=request.title,
                content=request.content or "",
                author=request.author,
                total_pages=request.total_pages,
            )
        else:
            book = add_pdf_book(
                session,
                title=request.title,
                author=request.author,
                total_pages=request.total_pages,
                file_url=request.file_url,
            )
    except (BookImportError, PdfExtractionError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    sync_unlocked_achievements(session.user_id)
    return _detail(book, session.user_id)


@router.get("/{book_id}", response_model=BookDetail)
async def get_book(book_id: str, session: Session = Depends(get_session)) -> BookDetail:
    """Get details of one of the user's books."""
    return _detail(_get_owned_book(book_id, session), session.user_id)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(book_id: str, session: Session = Depends(get_session)) -> None:
    """Remove a book from the library."""
    if not books_repository.delete_book(book_id, session.user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Book '{book_id}' not found",
        )
    sync_unlocked_achievements(session.user_id)


@router.get("/{book_id}/pages/{page}", response_model=PageResponse)
async def read_page(
    book_id: str, page: int, session: Session = Depends(get_session)
) -> PageResponse:
    """Text of one page of a text book, split into glossary segments."""
    book = _get_owned_book(book_id, session)
    if not book.is_text:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="PDF pages are rendered by the client viewer",
        )

    text = get_page(book, page)
    if text is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Page {page} not found",
        )

    segments = [
        SegmentResponse(text=s.text, is_term=s.is_term, has_entry=s.entry is not None)
        for s in highlight_terms(text)
    ]
    return PageResponse(
        book_id=book.id,
        page=page,
        total_pages=total_pages_for(book),
        text=text,
        segments=segments,
    )
