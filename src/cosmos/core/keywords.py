"""Keyword extraction from a user's library.

Three interchangeable strategies share one interface, ``extract(books)``:

- StaticVocabularyExtractor: substring match against a fixed term list
- FrequencyExtractor: most frequent meaningful words across all books
- DelegatedExtractor: LLM extraction and enrichment, per book, falling back
  to the frequency strategy for any book whose LLM call fails
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable, Protocol, Sequence

import structlog

from cosmos.config import load_app_config
from cosmos.llm.client import LLMError, LLMResponseError

if TYPE_CHECKING:
    from cosmos.db.books_repository import BookRecord
    from cosmos.llm.client import LLMClient

logger = structlog.get_logger(__name__)

STRATEGIES = ("static", "frequency", "ai")

FREQUENCY_LIMIT = 50
MIN_KEYWORD_LENGTH = 4
AI_CONTENT_LIMIT = 5000
AI_MAX_KEYWORDS = 20
AI_MAX_ENRICHED = 15

# Portuguese and English stop words
STOP_WORDS = frozenset(
    {
        "a", "o", "e", "de", "da", "do", "em", "para", "com", "por", "uma", "um",
        "os", "as", "dos", "das", "ao", "aos", "à", "às", "no", "na", "nos", "nas",
        "the", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
        "with", "by", "from", "is", "are", "was", "were", "be", "been", "being",
        "have", "has", "had", "does", "did", "will", "would", "could", "should",
        "que", "não", "se", "mais", "como", "muito", "sua", "seu", "seus", "suas",
        "esse", "essa", "isso", "isto", "este", "esta", "aquele", "aquela", "deste",
        "desta", "neste", "nesta", "pelo", "pela", "pelos", "pelas", "também", "já",
    }
)

# Space-science vocabulary for the static matcher
SPACE_VOCABULARY: tuple[str, ...] = (
    "asteroid",
    "atmosphere",
    "aurora",
    "black hole",
    "chandra",
    "comet",
    "coronal mass ejection",
    "cosmic",
    "galaxy",
    "geomagnetic storm",
    "hubble",
    "ionosphere",
    "james webb",
    "magnetosphere",
    "nebula",
    "planet",
    "radiation",
    "satellite",
    "solar",
    "solar flare",
    "solar wind",
    "star",
    "sunspot",
    "telescope",
)

# Everything except ASCII word chars, whitespace and accented Latin letters
_NON_WORD = re.compile(r"[^\w\sáàâãéèêíïóôõöúçñ]", re.ASCII)
_NUMERIC = re.compile(r"^\d+$", re.ASCII)

KEYWORDS_SYSTEM_PROMPT = (
    "You are an expert at extracting relevant keywords from text. Extract up to "
    f"{AI_MAX_KEYWORDS} of the most important and meaningful keywords from the provided "
    "book content. Focus on scientific terms, space-related concepts, and key themes. "
    'Return JSON of the form {"keywords": ["..."]} and nothing else.'
)

ENRICH_SYSTEM_PROMPT = (
    "You are an expert educator creating glossary entries for space weather and related "
    "scientific terms. Provide comprehensive but concise definitions suitable for "
    "educational purposes. Include practical examples when relevant. Return JSON with "
    'keys "term", "definition", "category", "example" and "related_terms".'
)


@dataclass
class Keyword:
    """A keyword surfaced from the library, optionally enriched."""

    keyword: str
    source: str
    definition: str | None = None
    category: str | None = None
    example: str | None = None
    related_terms: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "keyword": self.keyword,
            "source": self.source,
            "definition": self.definition,
            "category": self.category,
            "example": self.example,
            "related_terms": list(self.related_terms),
        }


class KeywordExtractor(Protocol):
    """Common interface of all strategies."""

    def extract(self, books: Sequence[BookRecord]) -> list[Keyword]: ...


def _dedupe_sorted(keywords: Iterable[Keyword]) -> list[Keyword]:
    """Drop case-insensitive duplicates (first wins), sort alphabetically."""
    seen: dict[str, Keyword] = {}
    for kw in keywords:
        seen.setdefault(kw.keyword.lower(), kw)
    return sorted(seen.values(), key=lambda k: k.keyword.lower())


class StaticVocabularyExtractor:
    """Match a fixed vocabulary against book title and author."""

    def __init__(
        self,
        vocabulary: Sequence[str] = SPACE_VOCABULARY,
        include_content: bool = False,
    ):
        self.vocabulary = vocabulary
        self.include_content = include_content

    def _haystack(self, book: BookRecord) -> str:
        parts = [book.title, book.author or ""]
        if self.include_content:
            parts.append(book.content or "")
        return " ".join(parts).lower()

    def extract(self, books: Sequence[BookRecord]) -> list[Keyword]:
        matches = []
        for book in books:
            haystack = self._haystack(book)
            for term in self.vocabulary:
                if term.lower() in haystack:
                    matches.append(Keyword(keyword=term, source="static"))
        return _dedupe_sorted(matches)


def tokenize(text: str, stop_words: frozenset[str] = STOP_WORDS) -> list[str]:
    """Lower-case text and keep meaningful tokens.

    Accented letters survive; punctuation becomes a separator. Tokens
    shorter than four characters, stop words and plain numbers are dropped.
    """
    words = _NON_WORD.sub(" ", text.lower()).split()
    return [
        w
        for w in words
        if len(w) >= MIN_KEYWORD_LENGTH and w not in stop_words and not _NUMERIC.match(w)
    ]


class FrequencyExtractor:
    """Most frequent words across title, author and content of all books."""

    def __init__(self, limit: int = FREQUENCY_LIMIT, stop_words: frozenset[str] = STOP_WORDS):
        self.limit = limit
        self.stop_words = stop_words

    def extract(self, books: Sequence[BookRecord]) -> list[Keyword]:
        frequency: Counter[str] = Counter()
        for book in books:
            text = " ".join([book.title, book.author or "", book.content or ""])
            frequency.update(tokenize(text, self.stop_words))

        # most_common keeps first-seen order among equal counts
        top = [word for word, _ in frequency.most_common(self.limit)]
        return [Keyword(keyword=word, source="frequency") for word in sorted(top)]


class DelegatedExtractor:
    """Ask an LLM for keywords and glossary enrichment, book by book."""

    def __init__(
        self,
        client: LLMClient,
        fallback: KeywordExtractor | None = None,
        content_limit: int = AI_CONTENT_LIMIT,
        max_enriched: int = AI_MAX_ENRICHED,
    ):
        self.client = client
        self.fallback = fallback or FrequencyExtractor()
        self.content_limit = content_limit
        self.max_enriched = max_enriched

    def extract(self, books: Sequence[BookRecord]) -> list[Keyword]:
        results: list[Keyword] = []
        for book in books:
            try:
                results.extend(self.extract_book(book))
            except LLMError as e:
                logger.warning(
                    "keywords.ai_failed_fallback",
                    book_id=book.id,
                    error=str(e),
                )
                results.extend(self.fallback.extract([book]))
        return _dedupe_sorted(results)

    def extract_book(self, book: BookRecord) -> list[Keyword]:
        """Extract and enrich keywords for one book.

        Raises:
            LLMError: If the extraction call fails or returns no keyword list
        """
        content = (book.content or "")[: self.content_limit] or "No content available"
        user_message = (
            "Extract keywords from this book:\n"
            f"Title: {book.title}\n"
            f"Author: {book.author or 'Unknown'}\n"
            f"Content: {content}"
        )

        data = self.client.simple_json(KEYWORDS_SYSTEM_PROMPT, user_message)
        raw = data.get("keywords") if isinstance(data, dict) else data
        if not isinstance(raw, list):
            raise LLMResponseError("Keyword response is not a list")

        terms = [str(k).strip() for k in raw if str(k).strip()][:AI_MAX_KEYWORDS]
        logger.info("keywords.ai_extracted", book_id=book.id, count=len(terms))

        return [self._enrich(term) for term in terms[: self.max_enriched]]

    def _enrich(self, term: str) -> Keyword:
        """Build a glossary-style entry; generic text when the LLM fails."""
        try:
            info = self.client.simple_json(
                ENRICH_SYSTEM_PROMPT,
                f'Create a detailed educational definition for the term: "{term}". '
                "Include: 1) Clear definition (2-3 sentences), 2) Category/field of study, "
                "3) Real-world applications or examples if applicable.",
            )
        except LLMError as e:
            logger.warning("keywords.enrich_failed", keyword=term, error=str(e))
            return Keyword(
                keyword=term,
                source="ai",
                definition=f"Scientific term: {term}",
                category="General",
            )

        if not isinstance(info, dict):
            info = {}

        related = info.get("related_terms") or info.get("relatedTerms") or []
        return Keyword(
            keyword=term,
            source="ai",
            definition=info.get("definition") or f"Scientific term related to {term}",
            category=info.get("category") or "Science",
            example=info.get("example") or None,
            related_terms=[str(r) for r in related] if isinstance(related, list) else [],
        )


def get_extractor(strategy: str, client: LLMClient | None = None) -> KeywordExtractor:
    """Build the extractor for a strategy name.

    Raises:
        ValueError: For an unknown strategy, or "ai" without a client
    """
    if strategy == "static":
        return StaticVocabularyExtractor()
    if strategy == "frequency":
        return FrequencyExtractor(limit=load_app_config().reader.keyword_limit)
    if strategy == "ai":
        if client is None:
            raise ValueError("The 'ai' strategy requires an LLM client")
        return DelegatedExtractor(client)
    raise ValueError(f"Unknown keyword strategy: {strategy} (expected one of {STRATEGIES})")
