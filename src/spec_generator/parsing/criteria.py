"""Given/When/Then acceptance criteria extraction."""

from __future__ import annotations

import re

from ..models.project import AcceptanceCriterion

# The sub-section starts at its heading label and runs until the next markdown
# heading, the next bold "Label :" line, a trailing story field, or the end.
_SECTION_RE = re.compile(
    r"(?:Crit[èe]res? d['’]accept(?:ance|ation)|Acceptance Criteria)"
    r"[ \t]*(?:\*\*|__)?[ \t]*:?[ \t]*(?:\*\*|__)?"
    r"(?P<body>.*?)"
    r"(?=^[ \t]*#{1,6}[ \t]"
    r"|^[ \t]*(?:[-*•][ \t]*)?\*\*(?!Sc[ée]nario|Scenario|Crit[èe]re|[ÉEée]tant|Given|Quand|Lorsqu|When|Alors|Then)[^*\n]+(?::[ \t]*\*\*|\*\*[ \t]*:)"
    r"|^[ \t]*(?:[-*•][ \t]*)?(?:KPIs?|Lien vers|Design Link)\b"
    r"|\Z)",
    re.DOTALL | re.MULTILINE | re.IGNORECASE,
)

_GIVEN = r"(?:[ÉEée]tant donn[ée]e?s?|Given)\b"
_WHEN = r"(?:(?:[Qq]uand|[Ww]hen)\b|[Ll]orsqu(?:e\b|['’]))"
_THEN = r"(?:[Aa]lors|[Tt]hen)\b"

# Bold markers and an optional colon around a keyword
_KEYWORD_TAIL = r"\**[ \t]*:?[ \t]*\**[ \t]*"

# A when/then keyword only counts after a comma, a line break or bold markers,
# optionally followed by a bullet
_SEPARATOR = r"[ \t]*(?:,|\n|(?=\*\*))\s*(?:[-*•][ \t]+)?\**"

# A clause may wrap onto the next line but never swallows another criterion
_CLAUSE = r"(?:(?![ÉEée]tant donn|Given\b).)+?"

_CRITERION_RE = re.compile(
    rf"{_GIVEN}{_KEYWORD_TAIL}(?:qu(?:e\b|['’])[ \t]*)?(?P<given>{_CLAUSE})"
    rf"{_SEPARATOR}{_WHEN}{_KEYWORD_TAIL}(?P<when>{_CLAUSE})"
    rf"{_SEPARATOR}{_THEN}{_KEYWORD_TAIL}(?P<then>[^\n]+)",
    re.DOTALL,
)


def _clean(clause: str) -> str:
    clause = clause.replace("*", "")
    clause = re.sub(r"\s+", " ", clause)
    return clause.strip().rstrip(".,;").strip()


def find_criteria_section(text: str) -> str | None:
    """Return the body of the acceptance-criteria sub-section, if any."""
    match = _SECTION_RE.search(text)
    if not match:
        return None
    return match.group("body")


def extract_criteria(text: str) -> list[AcceptanceCriterion]:
    """Extract Given/When/Then triples in document order.

    Returns an empty list when the sub-section or the pattern is absent.
    """
    section = find_criteria_section(text)
    if section is None:
        return []

    criteria = []
    for match in _CRITERION_RE.finditer(section):
        given, when, then = (_clean(match.group(k)) for k in ("given", "when", "then"))
        if given and when and then:
            criteria.append(AcceptanceCriterion(given=given, when=when, then=then))
    return criteria
