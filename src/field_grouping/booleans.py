"""
Mutually exclusive boolean detection for YES/NO fields without option-set metadata.

Three subject-extraction passes, each seeing only fields left unclaimed by the previous ones:
  1. delimiter split ("Ownership - Public"), falling back to "Subject (Option)"
  2. shared leading word sequence ("Main water source piped", "Main water source well")
  3. single leading word, accepted only after vocabulary / shape validation
Every accepted subject is scored for exclusivity to choose RADIO_GROUP vs CHECKBOX_GROUP.
"""

from __future__ import annotations

import logging
import re
from typing import Sequence

from form_contracts.fields import EntryType, Field
from form_contracts.grouping import ConfidenceLevel, GroupingStrategy, GroupMetadata, GroupType

from .config import GroupingConfig
from .scoring import (
    analyze_suffix_pattern,
    combined_exclusivity_score,
    detect_letter_enumeration,
    detect_numeric_enumeration,
    empirical_exclusivity_score,
    name_based_exclusivity_score,
    numeric_confidence,
)
from .text_utils import split_words, without_claimed

logger = logging.getLogger(__name__)

# Priority order matters: the first delimiter yielding a long enough subject wins.
DELIMITERS = (" - ", ": ", " – ", " — ", " | ", " / ", " \\ ")
_PAREN_RE = re.compile(r"^(.+?)\s*\(([^)]+)\)\s*$")
_OPTION_LEAD_CHARS = "-:–—|/\\ "

GENERIC_SUBJECTS = frozenset(
    {
        "school",
        "student",
        "teacher",
        "class",
        "grade",
        "total",
        "number",
        "count",
        "data",
        "information",
        "report",
        "record",
        "entry",
        "item",
        "field",
    }
)

TAXONOMIES: tuple[frozenset[str], ...] = (
    frozenset({"public", "private", "government", "ngo", "faith-based", "community"}),  # ownership
    frozenset({"urban", "rural", "peri urban", "peri-urban", "remote"}),  # location
    frozenset({"licensed", "not licensed", "unlicensed", "registered", "unregistered"}),  # licensing
    frozenset({"day", "boarding", "mixed", "residential"}),  # boarding
    frozenset({"boys only", "girls only", "mixed", "male", "female", "coeducational"}),  # gender
    frozenset({"permanent", "temporary", "semi-permanent"}),  # facility permanence
    frozenset({"active", "inactive", "closed", "suspended"}),  # status
    frozenset({"primary", "secondary", "tertiary", "preschool", "elementary"}),  # education level
)


def option_text(display_name: str, subject: str) -> str:
    """The part of a name that distinguishes it from its subject."""
    rest = display_name[len(subject):] if display_name.startswith(subject) else display_name
    rest = rest.strip().lstrip(_OPTION_LEAD_CHARS).strip()
    if rest.startswith("(") and rest.endswith(")"):
        rest = rest[1:-1].strip()
    return rest


def delimiter_subject(display_name: str, cfg: GroupingConfig) -> str | None:
    for delimiter in DELIMITERS:
        idx = display_name.rfind(delimiter)
        if idx > 0:
            subject = display_name[:idx].strip()
            if len(subject) >= cfg.min_subject_length:
                return subject
    m = _PAREN_RE.match(display_name)
    if m is not None:
        subject = m.group(1).strip()
        if len(subject) >= cfg.min_subject_length:
            return subject
    return None


def subjects_by_delimiter(fields: Sequence[Field], cfg: GroupingConfig) -> list[tuple[str, list[Field]]]:
    by_subject: dict[str, list[Field]] = {}
    for f in fields:
        subject = delimiter_subject(f.display_name, cfg)
        if subject is not None:
            by_subject.setdefault(subject, []).append(f)
    return list(by_subject.items())


def subjects_by_word_sequence(fields: Sequence[Field]) -> list[tuple[str, list[Field]]]:
    """Candidate leading word sequences (2 words up to one less than the full name), longest first."""
    by_prefix: dict[str, list[Field]] = {}
    for f in fields:
        words = split_words(f.display_name)
        for n in range(len(words) - 1, 1, -1):
            by_prefix.setdefault(" ".join(words[:n]), []).append(f)
    ordered = sorted(by_prefix.items(), key=lambda kv: -len(split_words(kv[0])))
    return [(s, fs) for s, fs in ordered if len(fs) >= 2]


def validate_single_word_group(subject: str, fields: Sequence[Field]) -> bool:
    if subject.lower() in GENERIC_SUBJECTS:
        logger.debug("  single-word subject %r is too generic", subject)
        return False

    options = [option_text(f.display_name, subject) for f in fields]
    lower = [o.lower() for o in options]

    for taxonomy in TAXONOMIES:
        hits = sum(1 for o in lower if any(term in o for term in taxonomy))
        if hits >= len(options) * 0.5:
            logger.debug("  single-word subject %r matches a taxonomy", subject)
            return True

    avg_len = sum(len(o) for o in options) / len(options)
    max_words = max(len(split_words(o)) for o in options)
    if avg_len <= 25 and len(set(options)) == len(options) and max_words <= 3:
        logger.debug("  single-word subject %r has short distinct options", subject)
        return True

    if detect_numeric_enumeration(options) or detect_letter_enumeration(options):
        logger.debug("  single-word subject %r has an enumeration", subject)
        return True

    return False


def subjects_by_single_word(fields: Sequence[Field], cfg: GroupingConfig) -> list[tuple[str, list[Field]]]:
    by_word: dict[str, list[Field]] = {}
    for f in fields:
        words = split_words(f.display_name)
        if len(words) >= 2 and len(words[0]) >= cfg.min_subject_length:
            by_word.setdefault(words[0], []).append(f)
    return [
        (s, fs)
        for s, fs in by_word.items()
        if len(fs) >= cfg.min_group_size and validate_single_word_group(s, fs)
    ]


def build_boolean_group(
    subject: str,
    fields: Sequence[Field],
    method: str,
    cfg: GroupingConfig,
) -> GroupingStrategy | None:
    options = [option_text(f.display_name, subject) for f in fields]

    longest = max(len(split_words(o)) for o in options)
    avg_len = sum(len(o) for o in options) / len(options)
    if longest > cfg.max_option_words or avg_len > cfg.max_avg_option_length:
        logger.debug("  %s: %r rejected, options too long", method, subject)
        return None

    empirical = empirical_exclusivity_score(fields)
    name_based = name_based_exclusivity_score(fields)
    exclusivity = combined_exclusivity_score(empirical, name_based)
    group_type = GroupType.RADIO_GROUP if exclusivity > cfg.boolean_radio_threshold else GroupType.CHECKBOX_GROUP

    suffix_quality = analyze_suffix_pattern(options)
    confidence = numeric_confidence(exclusivity, suffix_quality, len(fields), options)
    logger.debug(
        "  %s: %r -> %s (combined=%d, empirical=%d, name=%d, confidence=%.2f)",
        method,
        subject,
        group_type.value,
        int(exclusivity),
        int(empirical),
        int(name_based),
        confidence,
    )

    return GroupingStrategy(
        confidence=ConfidenceLevel.MEDIUM,
        group_type=group_type,
        group_title=subject.strip(),
        members=list(fields),
        metadata=GroupMetadata(
            detection_method=f"{method} (empirical={int(empirical)}%, name={int(name_based)}%)",
            mutual_exclusivity_score=exclusivity / 100.0,
            numeric_confidence_score=confidence,
        ),
    )


def group_mutually_exclusive_booleans(
    remaining: Sequence[Field],
    cfg: GroupingConfig,
) -> tuple[list[GroupingStrategy], tuple[Field, ...]]:
    candidates = tuple(f for f in remaining if f.entry_type is EntryType.YES_NO)
    if len(candidates) < cfg.min_group_size:
        return [], tuple(remaining)

    strategies: list[GroupingStrategy] = []
    passes = (
        ("Pass 1: Delimiter", lambda fs: subjects_by_delimiter(fs, cfg)),
        ("Pass 2: Word-seq", subjects_by_word_sequence),
        ("Pass 3: Single-word", lambda fs: subjects_by_single_word(fs, cfg)),
    )
    unclaimed = candidates
    for method, extract in passes:
        if len(unclaimed) < cfg.min_group_size:
            break
        for subject, fields in extract(unclaimed):
            # Pass 2 offers one field under several prefixes; never hand out a field twice.
            live = {id(f) for f in unclaimed}
            members = [f for f in fields if id(f) in live]
            if len(members) < cfg.min_group_size:
                continue
            group = build_boolean_group(subject, members, method, cfg)
            if group is None:
                continue
            strategies.append(group)
            unclaimed = without_claimed(unclaimed, members)

    claimed = [m for s in strategies for m in s.members]
    return strategies, without_claimed(remaining, claimed)
