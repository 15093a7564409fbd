"""Space-weather glossary.

Static term table addressed by a normalized key, text highlighting for the
reader, and click accounting for gamification.

Lookup rule: lower-case the term and strip every character outside a-z.
Terms without an entry are shown as plain text; that is a normal outcome,
not an error.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

import structlog

from cosmos.db import stats_repository

logger = structlog.get_logger(__name__)

_NON_ALPHA = re.compile(r"[^a-z]")


@dataclass(frozen=True)
class GlossaryEntry:
    """A fixed vocabulary entry."""

    term: str
    definition: str
    category: str
    media: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "term": self.term,
            "definition": self.definition,
            "category": self.category,
            "media": list(self.media),
        }


GLOSSARY: dict[str, GlossaryEntry] = {
    "ionosphere": GlossaryEntry(
        term="Ionosphere",
        definition=(
            "The ionosphere is a layer of Earth's atmosphere filled with electrically "
            "charged particles. It plays a crucial role in radio communications and is "
            "affected by solar activity."
        ),
        category="Atmosphere",
    ),
    "aurora": GlossaryEntry(
        term="Aurora",
        definition=(
            "Auroras are natural light displays in Earth's sky, predominantly seen in "
            "high-latitude regions. They are caused by disturbances in the magnetosphere "
            "caused by solar wind."
        ),
        category="Phenomenon",
    ),
    "magnetosphere": GlossaryEntry(
        term="Magnetosphere",
        definition=(
            "The magnetosphere is the region of space surrounding Earth where the "
            "planet's magnetic field is the dominant force controlling the behavior of "
            "charged particles."
        ),
        category="Space",
    ),
    "radiation": GlossaryEntry(
        term="Radiation",
        definition=(
            "Radiation is energy that travels through space as waves or particles. "
            "Solar radiation includes electromagnetic radiation from the sun."
        ),
        category="Physics",
    ),
    "satellite": GlossaryEntry(
        term="Satellite",
        definition=(
            "A satellite is an object that orbits around a larger object. Artificial "
            "satellites are used for communications, navigation, and Earth observation."
        ),
        category="Technology",
    ),
    "solar": GlossaryEntry(
        term="Solar",
        definition=(
            "Solar relates to the Sun. Solar activity includes phenomena like solar "
            "flares and coronal mass ejections that can affect Earth."
        ),
        category="Sun",
    ),
    "cosmic": GlossaryEntry(
        term="Cosmic",
        definition=(
            "Cosmic relates to the universe or outer space, especially as distinct from "
            "Earth. Cosmic rays are high-energy particles from space."
        ),
        category="Space",
    ),
    "atmosphere": GlossaryEntry(
        term="Atmosphere",
        definition=(
            "The atmosphere is the layer of gases surrounding Earth, held in place by "
            "gravity. It protects life and affects weather and climate."
        ),
        category="Earth",
    ),
    "hubble": GlossaryEntry(
        term="Hubble",
        definition=(
            "The Hubble Space Telescope observes in visible, ultraviolet and near-infrared "
            "light from low Earth orbit and has operated since 1990."
        ),
        category="Telescope",
        media=("https://science.nasa.gov/mission/hubble/",),
    ),
    "chandra": GlossaryEntry(
        term="Chandra",
        definition=(
            "The Chandra X-ray Observatory detects X-ray emission from very hot regions "
            "of the universe such as exploded stars and matter around black holes."
        ),
        category="Telescope",
        media=("https://chandra.si.edu/",),
    ),
    "jameswebb": GlossaryEntry(
        term="James Webb",
        definition=(
            "The James Webb Space Telescope is an infrared observatory orbiting the Sun "
            "near the second Lagrange point, built to study the earliest galaxies."
        ),
        category="Telescope",
        media=("https://science.nasa.gov/mission/webb/",),
    ),
}
GLOSSARY["jwst"] = GLOSSARY["jameswebb"]

# Terms highlighted in reader text (English and Portuguese spellings)
HIGHLIGHT_TERMS: tuple[str, ...] = (
    "ionosphere",
    "ionosfera",
    "aurora",
    "magnetosphere",
    "magnetosfera",
    "radiation",
    "radiacao",
    "radiação",
    "satellite",
    "satelite",
    "satélite",
    "solar",
    "cosmic",
    "cosmico",
    "cósmico",
    "atmosphere",
    "atmosfera",
)

_HIGHLIGHT_PATTERN = re.compile(
    r"\b(" + "|".join(re.escape(t) for t in HIGHLIGHT_TERMS) + r")\b",
    re.IGNORECASE,
)

# Telescope keyword families: counter name -> substrings that identify it
TELESCOPE_FAMILIES: dict[str, tuple[str, ...]] = {
    "hubble_clicks": ("hubble",),
    "chandra_clicks": ("chandra",),
    "jwst_clicks": ("jwst", "webb", "james webb"),
}


@dataclass
class Segment:
    """A run of reader text, either plain or a glossary term."""

    text: str
    is_term: bool = False
    entry: GlossaryEntry | None = None


@dataclass
class ClickResult:
    """Counters touched by a glossary click."""

    term: str
    counters: list[str] = field(default_factory=list)


def normalize_term(term: str) -> str:
    """Normalize a term to its glossary key (lower-case, a-z only)."""
    return _NON_ALPHA.sub("", term.lower())


def lookup(term: str) -> GlossaryEntry | None:
    """Find the glossary entry for a term, or None when there is none."""
    return GLOSSARY.get(normalize_term(term))


def list_entries() -> list[GlossaryEntry]:
    """Distinct entries sorted by display term."""
    unique = {id(e): e for e in GLOSSARY.values()}
    return sorted(unique.values(), key=lambda e: e.term.lower())


def highlight_terms(text: str) -> list[Segment]:
    """Split text into plain and term segments.

    Matching is case-insensitive on whole words. Matched terms keep their
    original spelling; their entry is None when the spelling has no
    glossary definition. Text without matches yields one plain segment.
    """
    segments: list[Segment] = []
    last = 0

    for match in _HIGHLIGHT_PATTERN.finditer(text):
        if match.start() > last:
            segments.append(Segment(text=text[last : match.start()]))
        matched = match.group(0)
        segments.append(Segment(text=matched, is_term=True, entry=lookup(matched)))
        last = match.end()

    if last < len(text):
        segments.append(Segment(text=text[last:]))

    return segments if segments else [Segment(text=text)]


def detect_telescopes(term: str) -> list[str]:
    """Telescope counters whose family matches the term by substring."""
    lowered = term.lower()
    return [
        counter
        for counter, needles in TELESCOPE_FAMILIES.items()
        if any(needle in lowered for needle in needles)
    ]


def record_term_click(user_id: str, term: str) -> ClickResult:
    """Count a glossary interaction for a user.

    Increments keyword_clicks and any matching telescope counter, and
    appends a click event used by time-windowed leaderboards.
    """
    counters = ["keyword_clicks", *detect_telescopes(term)]
    for counter in counters:
        stats_repository.increment(user_id, counter)
    stats_repository.log_click_event(user_id, term)

    logger.info("glossary.term_clicked", user_id=user_id, term=term, counters=counters)
    return ClickResult(term=term, counters=counters)
