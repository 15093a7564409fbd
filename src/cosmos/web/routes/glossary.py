"""Glossary endpoints."""

from fastapi import APIRouter, Depends

from cosmos.core import glossary
from cosmos.core.achievements import sync_unlocked_achievements
from cosmos.core.session import Session
from cosmos.web.deps import get_session
from cosmos.web.schemas import (
    GlossaryEntryResponse,
    GlossaryListResponse,
    GlossaryLookupResponse,
    TermClickResponse,
)

router = APIRouter(prefix="/api/glossary", tags=["glossary"])


def _entry_response(entry: glossary.GlossaryEntry) -> GlossaryEntryResponse:
    return GlossaryEntryResponse(**entry.to_dict())


@router.get("", response_model=GlossaryListResponse)
async def list_terms() -> GlossaryListResponse:
    """All glossary entries."""
    entries = [_entry_response(e) for e in glossary.list_entries()]
    return GlossaryListResponse(entries=entries, count=len(entries))


@router.get("/{term}", response_model=GlossaryLookupResponse)
async def lookup_term(term: str) -> GlossaryLookupResponse:
    """Look a term up; entry is null when there is no definition."""
    entry = glossary.lookup(term)
    return GlossaryLookupResponse(
        term=term,
        key=glossary.normalize_term(term),
        entry=_entry_response(entry) if entry else None,
    )


@router.post("/{term}/click", response_model=TermClickResponse)
async def click_term(
    term: str, session: Session = Depends(get_session)
) -> TermClickResponse:
    """Count a glossary interaction and report newly unlocked badges."""
    result = glossary.record_term_click(session.user_id, term)
    added, _ = sync_unlocked_achievements(session.user_id)
    return TermClickResponse(term=result.term, counters=result.counters, unlocked=added)
