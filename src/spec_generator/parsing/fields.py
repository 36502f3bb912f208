"""Labeled value extraction ("Label: value").

Three conventions are tried in order:

- strong:  ``**Objectif :** value``  (or ``**Objectif** : value``)
- emphasis: ``*Objectif :* value``   (or ``_Objectif :_ value``)
- bare:    ``Objectif : value``

Values never run past the end of their line.
"""

from __future__ import annotations

import re
from functools import lru_cache

_STRONG = r"(?:\*\*|__){label}\s*(?::\s*(?:\*\*|__)|(?:\*\*|__)\s*:)[ \t]*([^\n]*)"
_EMPHASIS = r"(?<![*_])[*_]{label}\s*(?::\s*[*_]|[*_]\s*:)[ \t]*([^\n]*)"
_BARE = r"(?<![\w-]){label}[ \t]*:[ \t]*([^\n]*)"


@lru_cache(maxsize=256)
def _patterns(label: str) -> tuple[re.Pattern[str], ...]:
    escaped = re.escape(label)
    return tuple(
        re.compile(template.format(label=escaped))
        for template in (_STRONG, _EMPHASIS, _BARE)
    )


def _clean(value: str) -> str:
    return value.strip().strip("*").strip()


def extract_field(text: str, label: str) -> str:
    """Extract the value following ``label`` in ``text``.

    Returns:
        The trimmed value of the first matching convention, or "" if none match.
    """
    for pattern in _patterns(label):
        match = pattern.search(text)
        if match:
            value = _clean(match.group(1))
            if value:
                return value
    return ""


def extract_field_any(text: str, *labels: str) -> str:
    """Try several label aliases and return the first non-empty value."""
    for label in labels:
        value = extract_field(text, label)
        if value:
            return value
    return ""
