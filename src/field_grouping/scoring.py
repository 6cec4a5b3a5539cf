"""
Exclusivity scoring for candidate RADIO / CHECKBOX groups.

Two scales are used on purpose: suffix-pattern and option-set scores live in [0, 1], while the
empirical / name-based / combined boolean scores live in [0, 100].
"""

from __future__ import annotations

import logging
import re
from typing import Sequence

from form_contracts.fields import Field

from .text_utils import longest_common_prefix, split_words

logger = logging.getLogger(__name__)

_NUMBER_TOKEN_RE = re.compile(r"\b(\d+)\b")
_LETTER_TOKEN_RE = re.compile(r"\b([A-Z])\b")
_NEGATION_RE = re.compile(r"(^|\s)not\s|^no\s")

ATTRIBUTE_WORDS = ("available", "functioning", "damaged", "working", "broken", "has", "does", "is")
_ATTRIBUTE_RE = re.compile(r"\b(" + "|".join(ATTRIBUTE_WORDS) + r")\b")
_COMPOUND_RE = re.compile(r"\b(and|or)\b|,")
_VERB_IN_SUFFIX_RE = re.compile(r"\b(is|has|does)\b")

TAXONOMIC_PAIRS: tuple[frozenset[str], ...] = (
    frozenset({"public", "private"}),
    frozenset({"urban", "rural", "peri urban"}),
    frozenset({"licensed", "not licensed", "registered"}),
    frozenset({"day", "boarding", "mixed"}),
    frozenset({"boys only", "girls only", "mixed"}),
)

_YES_VALUES = frozenset({"true", "1", "yes"})
_NO_VALUES = frozenset({"false", "0", "no"})


def _clamp(x: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, x))


def detect_numeric_enumeration(suffixes: Sequence[str]) -> bool:
    """"Option 1", "Option 2", ... : >= 60% carry a number, numbers sequential or all unique."""
    numbers = []
    for s in suffixes:
        m = _NUMBER_TOKEN_RE.search(s)
        if m is not None:
            numbers.append(int(m.group(1)))
    if len(numbers) < 2 or len(numbers) < len(suffixes) * 0.6:
        return False
    ordered = sorted(numbers)
    sequential = all(b == a + 1 for a, b in zip(ordered, ordered[1:]))
    unique = len(set(numbers)) == len(numbers)
    return sequential or unique


def detect_letter_enumeration(suffixes: Sequence[str]) -> bool:
    """"Type A", "Type B", ... : >= 60% carry a single capital letter, sequential or all unique."""
    letters = []
    for s in suffixes:
        m = _LETTER_TOKEN_RE.search(s)
        if m is not None:
            letters.append(m.group(1))
    if len(letters) < 2 or len(letters) < len(suffixes) * 0.6:
        return False
    ordered = sorted(letters)
    sequential = all(ord(b) == ord(a) + 1 for a, b in zip(ordered, ordered[1:]))
    unique = len(set(letters)) == len(letters)
    return sequential or unique


def analyze_suffix_pattern(suffixes: Sequence[str]) -> float:
    """
    Score in [0, 1]: 1.0 reads like exclusive categories, 0.0 like inclusive attributes.
    """
    if not suffixes:
        return 0.0
    lower = [s.lower().strip() for s in suffixes]
    score = 0.0

    negated = [bool(_NEGATION_RE.search(s)) for s in lower]
    if any(negated) and not all(negated):
        score += 0.4
        logger.debug("  suffix: negation pair (+0.4)")

    proper = [s for s in suffixes if s[:1].isupper() and not _VERB_IN_SUFFIX_RE.search(s.lower())]
    if len(proper) >= len(suffixes) * 0.7:
        score += 0.3
        logger.debug("  suffix: proper nouns %d/%d (+0.3)", len(proper), len(suffixes))

    if any(_ATTRIBUTE_RE.search(s) for s in lower):
        score -= 0.3
        logger.debug("  suffix: attribute words (-0.3)")

    if len(suffixes) >= 3 and all(len(split_words(s)) <= 2 for s in suffixes):
        score += 0.2
        logger.debug("  suffix: short enumerated list (+0.2)")

    if any(any(term in s for term in taxonomy) for taxonomy in TAXONOMIC_PAIRS for s in lower):
        score += 0.3
        logger.debug("  suffix: taxonomic term (+0.3)")

    if detect_numeric_enumeration(suffixes):
        score += 0.4
        logger.debug("  suffix: numeric enumeration (+0.4)")

    if any(_COMPOUND_RE.search(s) for s in lower):
        score -= 0.2
        logger.debug("  suffix: compound options (-0.2)")

    if detect_letter_enumeration(suffixes):
        score += 0.3
        logger.debug("  suffix: letter enumeration (+0.3)")

    return _clamp(score)


def option_set_exclusivity_score(fields: Sequence[Field]) -> float:
    """Structural exclusivity of fields sharing a YES/NO option set, in [0, 1]."""
    names = [f.display_name for f in fields]
    prefix = longest_common_prefix(names)
    suffixes = [n[len(prefix):].strip() for n in names]
    all_present = all(suffixes)
    distinct = len(set(suffixes)) == len(suffixes)

    score = 0.0
    if len(prefix) >= 5 and all_present and distinct:
        score += 0.3
    if all_present:
        score += analyze_suffix_pattern(suffixes) * 0.5
    if 2 <= len(fields) <= 15:
        if distinct:
            score += 0.2
    elif len(fields) > 15:
        score -= 0.2
    return _clamp(score)


def _normalized(value: str | None) -> str:
    return (value or "").strip().lower()


def empirical_exclusivity_score(fields: Sequence[Field]) -> float:
    """
    Score in [0, 100] from stored values: exactly one YES scores highest.

    Returns 0.0 when fewer than half (rounded down) of the members carry a recognizable boolean value.
    """
    if not fields:
        return 0.0
    yes = sum(1 for f in fields if _normalized(f.current_value) in _YES_VALUES)
    no = sum(1 for f in fields if _normalized(f.current_value) in _NO_VALUES or not _normalized(f.current_value))
    if yes + no < len(fields) // 2:
        return 0.0

    one_yes = 80.0 if yes == 1 else 0.0
    if yes <= 1:
        distribution = 20.0
    else:
        distribution = 20.0 / (1.0 + (yes - 1))
    return _clamp(one_yes + distribution, 0.0, 100.0)


def name_based_exclusivity_score(fields: Sequence[Field]) -> float:
    """Score in [0, 100] from the count of literal "true" / "1" values."""
    true_count = sum(1 for f in fields if _normalized(f.current_value) in ("true", "1"))
    if true_count <= 1:
        return 100.0
    if true_count == 2:
        return 50.0
    return 100.0 / (true_count * 2)


def combined_exclusivity_score(empirical: float, name_based: float) -> float:
    if empirical > 0.0:
        return empirical * 0.7 + name_based * 0.3
    return name_based


def group_size_score(size: int) -> float:
    if 2 <= size <= 8:
        return 1.0
    if 9 <= size <= 15:
        return 0.7
    return 0.4


def numeric_confidence(exclusivity: float, suffix_quality: float, size: int, options: Sequence[str]) -> float:
    """Blend in [0, 1]: 40% exclusivity, 30% suffix quality, 20% size, 10% distinctness."""
    distinctness = 1.0 if len(set(options)) == len(options) else 0.5
    return _clamp(
        (exclusivity / 100.0) * 0.4 + suffix_quality * 0.3 + group_size_score(size) * 0.2 + distinctness * 0.1
    )
