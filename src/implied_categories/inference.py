"""
Implied category inference from field naming conventions.

Used for sections without explicit category-combo metadata: a consistent naming convention
("Attendance - Male - Day 1", "Weight (Female)") is turned into a synthetic multi-level category
structure, and each field is re-mapped onto it for nested rendering.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Iterable, Sequence

from form_contracts.fields import Field
from form_contracts.implied import (
    CategoryPattern,
    ImpliedCategory,
    ImpliedCategoryCombination,
    ImpliedCategoryMapping,
)

from .config import ImpliedCategoryConfig
from .naming import infer_category_name

logger = logging.getLogger(__name__)

_PAREN_RE = re.compile(r"^(.+?)\s*\(([^)]+)\)\s*$")
_GENDER_SUFFIXES = frozenset({"male", "female", "men", "women", "boys", "girls", "m", "f"})
PARENTHETICAL_SEPARATOR = "()"

_SEPARATOR_PATTERNS = {
    " - ": CategoryPattern.HIERARCHICAL,
    " / ": CategoryPattern.HIERARCHICAL,
    " | ": CategoryPattern.PIPE_DELIM,
    "_": CategoryPattern.UNDERSCORE_DELIM,
    ": ": CategoryPattern.PREFIX_GROUPED,
}


def _build_levels(
    rows: Sequence[Sequence[str]],
    positions: Iterable[int],
    separator: str,
    cfg: ImpliedCategoryConfig,
) -> list[ImpliedCategory]:
    categories: list[ImpliedCategory] = []
    for pos in positions:
        distinct = sorted({r[pos].strip() for r in rows})
        if len(distinct) <= 1:
            continue
        if len(distinct) > cfg.max_options_per_level:
            logger.debug("  %r position %d: %d options (too many)", separator, pos, len(distinct))
            continue
        if len(distinct) == len(rows):
            # Every row differs: an identifier, not a category.
            continue
        level = len(categories)
        categories.append(
            ImpliedCategory(
                name=infer_category_name(distinct, level),
                options=distinct,
                level=level,
                separator_used=separator,
                part_index=pos,
            )
        )
    return categories


def _delimited_confidence(structured_ratio: float, depth_consistency: float, category_count: int) -> float:
    return structured_ratio * 0.5 + depth_consistency * 0.3 + min(category_count / 3.0, 1.0) * 0.2


def _try_separator(
    fields: Sequence[Field],
    separator: str,
    cfg: ImpliedCategoryConfig,
) -> list[ImpliedCategoryCombination]:
    structured = [parts for parts in (f.display_name.split(separator) for f in fields) if len(parts) >= 2]
    ratio = len(structured) / len(fields)
    if ratio < cfg.min_structured_ratio:
        logger.debug("  %r: only %d%% structured", separator, int(ratio * 100))
        return []

    depth, depth_count = Counter(len(p) for p in structured).most_common(1)[0]
    consistency = depth_count / len(structured)
    if consistency < cfg.min_depth_consistency:
        logger.debug("  %r: inconsistent depth (%d%%)", separator, int(consistency * 100))
        return []

    rows = [p for p in structured if len(p) == depth]
    pattern = _SEPARATOR_PATTERNS.get(separator, CategoryPattern.FLAT)

    def combination(categories: list[ImpliedCategory], residual_part_index: int) -> ImpliedCategoryCombination:
        return ImpliedCategoryCombination(
            categories=categories,
            confidence=_delimited_confidence(ratio, consistency, len(categories)),
            pattern=pattern,
            total_data_elements=len(fields),
            structured_data_elements=len(structured),
            separator=separator,
            residual_part_index=residual_part_index,
        )

    out: list[ImpliedCategoryCombination] = []

    # Standard reading: every part but the last is a level, the last is the field name.
    levels = _build_levels(rows, range(depth - 1), separator, cfg)
    if levels:
        out.append(combination(levels, -1))

    # Redundant prefix layer: a first token shared by every name is the field name itself.
    first_tokens = {p[0].strip() for p in structured}
    if len(first_tokens) == 1 and "" not in first_tokens:
        levels = _build_levels(rows, range(1, depth), separator, cfg)
        if levels:
            out.append(combination(levels, 0))

    return out


def _try_parenthetical(fields: Sequence[Field], cfg: ImpliedCategoryConfig) -> ImpliedCategoryCombination | None:
    suffixes = []
    for f in fields:
        m = _PAREN_RE.match(f.display_name)
        if m is not None:
            suffixes.append(m.group(2).strip())
    if not suffixes:
        return None

    distinct = sorted(set(suffixes))
    if len(distinct) < 2 or len(distinct) > cfg.max_options_per_level:
        return None

    ratio = len(suffixes) / len(fields)
    is_gender = all(s.lower() in _GENDER_SUFFIXES for s in distinct)
    min_ratio = cfg.gender_parenthetical_min_ratio if is_gender else cfg.parenthetical_min_ratio
    if ratio < min_ratio:
        logger.debug("  parenthetical: only %d%% structured", int(ratio * 100))
        return None

    category = ImpliedCategory(
        name=infer_category_name(distinct, 0),
        options=distinct,
        level=0,
        separator_used=PARENTHETICAL_SEPARATOR,
        part_index=1,
    )
    return ImpliedCategoryCombination(
        categories=[category],
        confidence=ratio * 0.6 + min(len(distinct) / 4.0, 1.0) * 0.4,
        pattern=CategoryPattern.PARENTHETICAL,
        total_data_elements=len(fields),
        structured_data_elements=len(suffixes),
        separator="",
        residual_part_index=0,
    )


def _selection_score(c: ImpliedCategoryCombination) -> float:
    option_total = sum(len(cat.options) for cat in c.categories)
    return c.confidence + 0.1 * len(c.categories) + 0.001 * option_total


def infer_category_structure(
    fields: Iterable[Field],
    section_label: str,
    cfg: ImpliedCategoryConfig | None = None,
) -> ImpliedCategoryCombination | None:
    """Best naming-convention category structure for one section, or None below the confidence floor."""
    cfg = cfg or ImpliedCategoryConfig()
    fields = list(fields or ())
    if not fields:
        logger.debug("section %r: no fields", section_label)
        return None

    attempts: list[ImpliedCategoryCombination] = []
    for separator in cfg.separators:
        attempts.extend(_try_separator(fields, separator, cfg))
    parenthetical = _try_parenthetical(fields, cfg)
    if parenthetical is not None:
        attempts.append(parenthetical)

    best: ImpliedCategoryCombination | None = None
    best_score = 0.0
    for attempt in attempts:
        score = _selection_score(attempt)
        if best is None or score > best_score:
            best, best_score = attempt, score

    if best is None or best.confidence < cfg.min_confidence:
        logger.debug("section %r: no category pattern detected", section_label)
        return None

    logger.debug(
        "section %r: %s pattern, %d levels, confidence %.2f",
        section_label,
        best.pattern.value,
        len(best.categories),
        best.confidence,
    )
    return best


def _map_parenthetical(f: Field, combination: ImpliedCategoryCombination) -> ImpliedCategoryMapping:
    m = _PAREN_RE.match(f.display_name)
    if m is None or not combination.categories:
        return ImpliedCategoryMapping(f.field_id, f.display_name, {}, f.display_name.strip())
    level = combination.categories[0].level
    return ImpliedCategoryMapping(
        field_id=f.field_id,
        display_name=f.display_name,
        category_options_by_level={level: m.group(2).strip()},
        residual_field_name=m.group(1).strip(),
    )


def _map_delimited(f: Field, combination: ImpliedCategoryCombination, separator: str) -> ImpliedCategoryMapping:
    parts = f.display_name.split(separator)
    if len(parts) < 2:
        return ImpliedCategoryMapping(f.field_id, f.display_name, {}, f.display_name.strip())

    residual_index = combination.residual_part_index % len(parts)
    options: dict[int, str] = {}
    for category in combination.categories:
        if category.part_index < len(parts) and category.part_index != residual_index:
            options[category.level] = parts[category.part_index].strip()
    return ImpliedCategoryMapping(
        field_id=f.field_id,
        display_name=f.display_name,
        category_options_by_level=options,
        residual_field_name=parts[residual_index].strip(),
    )


def create_mappings(
    fields: Iterable[Field],
    combination: ImpliedCategoryCombination,
) -> list[ImpliedCategoryMapping]:
    """
    One mapping per field, in input order.

    Fields that do not follow the pattern keep an empty level mapping and their full name.
    """
    if combination.pattern is CategoryPattern.PARENTHETICAL:
        return [_map_parenthetical(f, combination) for f in fields]

    separator = combination.separator or (combination.categories[0].separator_used if combination.categories else "")
    if not separator:
        return [ImpliedCategoryMapping(f.field_id, f.display_name, {}, f.display_name.strip()) for f in fields]
    return [_map_delimited(f, combination, separator) for f in fields]


def group_by_implied_categories(
    mappings: Iterable[ImpliedCategoryMapping],
    combination: ImpliedCategoryCombination,
) -> dict[tuple[str, ...], list[ImpliedCategoryMapping]]:
    """Nested-rendering buckets keyed by the option tuple (outer to inner level; "" when missing)."""
    out: dict[tuple[str, ...], list[ImpliedCategoryMapping]] = {}
    for m in mappings:
        key = tuple(m.category_options_by_level.get(c.level, "") for c in combination.categories)
        out.setdefault(key, []).append(m)
    return out


class ImpliedCategoryInferenceService:
    """Stateless facade bound to one config."""

    def __init__(self, cfg: ImpliedCategoryConfig | None = None) -> None:
        self.cfg = cfg or ImpliedCategoryConfig()

    def infer_category_structure(
        self, fields: Iterable[Field], section_label: str
    ) -> ImpliedCategoryCombination | None:
        return infer_category_structure(fields, section_label, self.cfg)

    def create_mappings(
        self, fields: Iterable[Field], combination: ImpliedCategoryCombination
    ) -> list[ImpliedCategoryMapping]:
        return create_mappings(fields, combination)

    def group_by_implied_categories(
        self, mappings: Iterable[ImpliedCategoryMapping], combination: ImpliedCategoryCombination
    ) -> dict[tuple[str, ...], list[ImpliedCategoryMapping]]:
        return group_by_implied_categories(mappings, combination)
