"""Name helpers shared by the grouping stages (prefixes, concepts, word similarity)."""

from __future__ import annotations

import re
from typing import Iterable, Sequence

from form_contracts.fields import Field

_WS_RE = re.compile(r"\s+")

FALLBACK_CONCEPT = "Related Fields"


def split_words(text: str) -> list[str]:
    s = text.strip()
    if not s:
        return []
    return _WS_RE.split(s)


def longest_common_prefix(strings: Sequence[str]) -> str:
    if not strings:
        return ""
    prefix = strings[0]
    for s in strings[1:]:
        i = 0
        while i < len(prefix) and i < len(s) and prefix[i] == s[i]:
            i += 1
        prefix = prefix[:i]
        if not prefix:
            break
    return prefix


def common_prefix_concept(names: Sequence[str]) -> str:
    """Longest common prefix trimmed of whitespace and trailing separator punctuation."""
    return longest_common_prefix(names).strip().rstrip("-:|/ _").strip()


def extract_common_concept(names: Sequence[str]) -> str:
    if not names:
        return ""
    if len(names) == 1:
        return names[0]
    concept = common_prefix_concept(names)
    return concept if len(concept) >= 3 else FALLBACK_CONCEPT


def name_similarity(a: str, b: str) -> float:
    """Jaccard similarity of lowercase whitespace-separated words (0.0 .. 1.0)."""
    w1 = set(split_words(a.lower()))
    w2 = set(split_words(b.lower()))
    if not w1 or not w2:
        return 0.0
    return len(w1 & w2) / len(w1 | w2)


def without_claimed(remaining: Sequence[Field], claimed: Iterable[Field]) -> tuple[Field, ...]:
    """
    Drop claimed rows from the working remainder.

    Identity (not equality) is used so two rows that compare equal are still tracked separately.
    """
    claimed_ids = {id(f) for f in claimed}
    return tuple(f for f in remaining if id(f) not in claimed_ids)
