"""Shared text patterns for the generated story and epic formats."""

from __future__ import annotations

import re

# "En tant que <role>, je veux <action>, afin de <benefit>" and its English form.
# Single line; the benefit stops at the first sentence-ending period.
NARRATIVE = (
    r"(?:\b(?i:en tant qu)(?:e\b|['’])|\b(?i:as an?\b))[ \t]*(?P<role>[^\n,]+?)[ \t]*,[ \t]*"
    r"(?i:je veux|j['’]aimerais|i want(?: to)?|i would like(?: to)?)[ \t]+(?P<action>[^\n]+?)[ \t]*,?[ \t]*"
    r"(?i:afin (?:de|d['’])|pour (?:que|pouvoir)|so that|in order to)[ \t]*(?P<benefit>[^\n.]*(?:\.(?![ \t]|$)[^\n.]*)*)"
)

NARRATIVE_RE = re.compile(NARRATIVE, re.MULTILINE)

# A numbered list item whose text is a narrative sentence
NUMBERED_NARRATIVE_RE = re.compile(
    rf"^[ \t]*\d+[.)][ \t]*(?P<sentence>{NARRATIVE})",
    re.MULTILINE,
)

# "##### User Story 3", "User Story 3 :", "**User Story 3**"
STORY_MARKER_RE = re.compile(
    r"^[ \t]*(?:#{1,6}[ \t]*)?(?:\*\*)?(?i:user story|histoire utilisateur)[ \t]*\d+[^\n]*",
    re.MULTILINE,
)

# "### EPIC 2 : Gestion des demandes"
EPIC_MARKER_RE = re.compile(
    r"^[ \t]*#{1,6}[ \t]*(?:\*\*)?(?i:epic)\b(?P<heading>[^\n]*)",
    re.MULTILINE,
)

# "1. EPIC : Gestion des demandes", "2) **EPIC 2 - Suivi**"
NUMBERED_EPIC_RE = re.compile(
    r"^[ \t]*\d+[.)][ \t]*(?:\*\*)?(?i:epic)\b[ \t]*\d*[ \t]*[:\-–—][ \t]*(?P<title>[^\n]+)",
    re.MULTILINE,
)

_EMPHASIS_RE = re.compile(r"\*\*|__")
_HEADING_TITLE_RE = re.compile(r"^[ \t]*\d*[ \t]*[:\-–—.][ \t]*(?P<title>.+)$")


def strip_emphasis(text: str) -> str:
    """Drop strong-emphasis markers so patterns can match through them."""
    return _EMPHASIS_RE.sub("", text)


def sentence_of(match: re.Match[str], group: str | int = 0) -> str:
    """Normalized narrative sentence: trimmed, no trailing period."""
    return match.group(group).strip().rstrip(".").strip()


def title_from_heading(heading: str) -> str:
    """Title carried by an epic heading, e.g. ' 2 : Gestion' -> 'Gestion'."""
    match = _HEADING_TITLE_RE.match(strip_emphasis(heading))
    if not match:
        return ""
    return match.group("title").strip().strip("*").strip()
