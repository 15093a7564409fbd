"""Core library logic.

Modules:
- pagination: text page splitting and page counts
- progress: current page and pages-read high-water-mark
- keywords: static, frequency and LLM keyword strategies
- glossary: term lookup, highlighting and click accounting
- achievements: badge evaluation and cache resync
- leaderboard: ranked boards
- book_importer / pdf_extractor: adding books to a library
- assistant: reading assistant chat
- session: explicit user session
"""

__all__ = [
    "achievements",
    "assistant",
    "book_importer",
    "glossary",
    "keywords",
    "leaderboard",
    "pagination",
    "pdf_extractor",
    "progress",
    "session",
]
