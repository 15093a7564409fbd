"""Keyword discovery endpoints."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from cosmos.core.glossary import lookup
from cosmos.core.keywords import get_extractor
from cosmos.core.session import Session
from cosmos.db import books_repository
from cosmos.llm.client import LLMClient
from cosmos.web.deps import get_llm_client, get_session
from cosmos.web.schemas import KeywordListResponse, KeywordResponse

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/keywords", tags=["keywords"])


@router.get("", response_model=KeywordListResponse)
async def list_keywords(
    strategy: str = Query(default="frequency", description="static, frequency or ai"),
    session: Session = Depends(get_session),
    client: LLMClient = Depends(get_llm_client),
) -> KeywordListResponse:
    """Keywords extracted from the current user's books."""
    try:
        extractor = get_extractor(strategy, client=client)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    books = books_repository.list_books(session.user_id)
    keywords = extractor.extract(books)
    logger.info(
        "keywords_list",
        user_id=session.user_id,
        strategy=strategy,
        books=len(books),
        count=len(keywords),
    )

    items = [
        KeywordResponse(**kw.to_dict(), has_glossary_entry=lookup(kw.keyword) is not None)
        for kw in keywords
    ]
    return KeywordListResponse(strategy=strategy, keywords=items, count=len(items))
