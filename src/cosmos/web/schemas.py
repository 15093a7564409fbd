"""Pydantic schemas for Web API.

Serialization models for books, progress, glossary, keywords,
achievements, leaderboards and the assistant.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field


# =============================================================================
# BOOK SCHEMAS
# =============================================================================


class BookCreate(BaseModel):
    """Request body for adding a book."""

    title: str = Field(..., min_length=1, max_length=300)
    author: str | None = Field(default=None, max_length=300)
    book_type: Literal["pdf", "text"]
    content: str | None = None
    file_url: str | None = None
    total_pages: int | None = Field(default=None, ge=0)


class ProgressResponse(BaseModel):
    """Reading position within a book."""

    book_id: str
    current_page: int
    pages_read: int
    total_pages: int
    percent: float


class BookSummary(BaseModel):
    """Book in a library listing."""

    id: str
    title: str
    author: str | None
    book_type: str
    total_pages: int
    created_at: str
    progress: ProgressResponse | None = None


class BookListResponse(BaseModel):
    """Response for list of books."""

    books: list[BookSummary]
    count: int


class BookDetail(BookSummary):
    """Book with reader metadata."""

    file_url: str | None = None
    language: str | None = None


class SegmentResponse(BaseModel):
    """Plain or glossary-term run of page text."""

    text: str
    is_term: bool = False
    has_entry: bool = False


class PageResponse(BaseModel):
    """One page of a text book."""

    book_id: str
    page: int
    total_pages: int
    text: str
    segments: list[SegmentResponse]


# =============================================================================
# PROGRESS SCHEMAS
# =============================================================================


class PageNavigation(BaseModel):
    """Request to move to a page."""

    page: int


class NavigationResponse(ProgressResponse):
    """Result of a page move; moved is False when the target was rejected."""

    moved: bool
    persisted: bool


# =============================================================================
# GLOSSARY SCHEMAS
# =============================================================================


class GlossaryEntryResponse(BaseModel):
    """A glossary definition."""

    term: str
    definition: str
    category: str
    media: list[str] = Field(default_factory=list)


class GlossaryListResponse(BaseModel):
    """All glossary entries."""

    entries: list[GlossaryEntryResponse]
    count: int


class GlossaryLookupResponse(BaseModel):
    """Lookup outcome; entry is None when the term has no definition."""

    term: str
    key: str
    entry: GlossaryEntryResponse | None = None


class TermClickResponse(BaseModel):
    """Counters touched by a click and badges it unlocked."""

    term: str
    counters: list[str]
    unlocked: list[str] = Field(default_factory=list)


# =============================================================================
# KEYWORD SCHEMAS
# =============================================================================


class KeywordResponse(BaseModel):
    """A keyword with optional enrichment."""

    keyword: str
    source: str
    definition: str | None = None
    category: str | None = None
    example: str | None = None
    related_terms: list[str] = Field(default_factory=list)
    has_glossary_entry: bool = False


class KeywordListResponse(BaseModel):
    """Keywords extracted from the library."""

    strategy: str
    keywords: list[KeywordResponse]
    count: int


# =============================================================================
# ACHIEVEMENT & LEADERBOARD SCHEMAS
# =============================================================================


class BadgeResponse(BaseModel):
    """An evaluated badge."""

    key: str
    title: str
    family: str
    description: str
    earned: bool
    progress: int
    target: int


class AchievementsResponse(BaseModel):
    """All badges for the current user."""

    badges: list[BadgeResponse]
    earned_count: int


class LeaderboardEntryResponse(BaseModel):
    """One leaderboard row."""

    rank: int
    user_id: str
    display_name: str
    score: int
    is_current_user: bool = False
    details: dict[str, int] = Field(default_factory=dict)


class LeaderboardResponse(BaseModel):
    """A ranked board."""

    board: str
    entries: list[LeaderboardEntryResponse]


# =============================================================================
# ASSISTANT SCHEMAS
# =============================================================================


class ChatTurnSchema(BaseModel):
    """Previous conversation message."""

    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Message to the reading assistant."""

    message: str = Field(..., min_length=1, max_length=4000)
    history: list[ChatTurnSchema] = Field(default_factory=list)
    book_id: str | None = None
    page: int | None = Field(default=None, ge=1)


class ChatResponse(BaseModel):
    """Assistant reply."""

    reply: str
    context: str | None = None


# =============================================================================
# HEALTH SCHEMAS
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
