"""Reading assistant endpoint."""

from fastapi import APIRouter, Depends, HTTPException, status

from cosmos.core.assistant import (
    AssistantError,
    ChatTurn,
    EmptyMessageError,
    ReadingAssistant,
    book_context,
)
from cosmos.core.pagination import clamp_page, total_pages_for
from cosmos.core.session import Session
from cosmos.db import books_repository
from cosmos.llm.client import LLMClient
from cosmos.web.deps import get_llm_client, get_session
from cosmos.web.schemas import ChatRequest, ChatResponse

router = APIRouter(prefix="/api/assistant", tags=["assistant"])


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    session: Session = Depends(get_session),
    client: LLMClient = Depends(get_llm_client),
) -> ChatResponse:
    """Ask the assistant, optionally about an open book.

    A page outside the book is moved to the nearest valid page.
    """
    context = None
    if request.book_id:
        book = books_repository.get_book_by_id(request.book_id, user_id=session.user_id)
        if book is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Book '{request.book_id}' not found",
            )
        total = total_pages_for(book)
        context = book_context(book, clamp_page(request.page or 1, total), total)

    history = [ChatTurn(role=t.role, content=t.content) for t in request.history]
    try:
        reply = ReadingAssistant(client).reply(request.message, history, context)
    except EmptyMessageError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except AssistantError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Assistant unavailable: {e}",
        )

    return ChatResponse(reply=reply, context=context)
