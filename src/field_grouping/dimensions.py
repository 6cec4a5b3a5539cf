"""
Dimensional pattern recognition: "BASE (TOKEN TOKEN ...)" names.

Suffix token position i across all members of one base name forms one Dimension. Dimensions are
labelled from their value sets and combined into an inferred category combo, with a conditional
branch for the grade / boarding / disability sub-population that skips the boarding axis.
"""

from __future__ import annotations

import logging
import re
from typing import Sequence

from form_contracts.fields import Field
from form_contracts.grouping import (
    ConfidenceLevel,
    Dimension,
    DimensionalPattern,
    GroupingStrategy,
    GroupMetadata,
    GroupType,
    InferredCategory,
    InferredCategoryCombo,
)

from .config import GroupingConfig
from .text_utils import split_words, without_claimed

logger = logging.getLogger(__name__)

_SUFFIX_RE = re.compile(r"^(.*?)\s*\(([^)]+)\)\s*$")
_GRADE_RE = re.compile(r"^P\.?\d+.*$")
_REGULAR_GRADE_RE = re.compile(r"^P\d+$")
_DISABLED_GRADE_RE = re.compile(r"^P\.\d+.*$")

_GENDER_VALUES = frozenset({"male", "female", "men", "women", "boys", "girls"})
_BOARDING_VALUES = frozenset({"day", "boarding"})

GRADE_LEVEL = "Grade Level"
NUMERIC_CATEGORY = "Numeric Category"
GENDER = "Gender"
BOARDING_DISABILITY = "Boarding/Disability Status"
BOARDING = "Boarding Status"
DISABILITY = "Disability Status"
LOCATION = "Location"


def _is_disability(v: str) -> bool:
    return "disab" in v.lower()


def infer_dimension_name(values: frozenset[str] | set[str], order: int) -> str:
    lowered = {v.lower() for v in values}
    if not values:
        return f"Category {order + 1}"
    if all(_GRADE_RE.match(v) for v in values):
        return GRADE_LEVEL
    if all(v.isdigit() for v in values):
        return NUMERIC_CATEGORY
    if lowered <= _GENDER_VALUES:
        return GENDER
    if lowered & _BOARDING_VALUES and any(_is_disability(v) for v in values):
        return BOARDING_DISABILITY
    if lowered <= _BOARDING_VALUES:
        return BOARDING
    if any(_is_disability(v) for v in values):
        return DISABILITY
    if any("urban" in v or "rural" in v for v in lowered):
        return LOCATION
    return f"Category {order + 1}"


def parse_dimensional_name(display_name: str) -> tuple[str, list[str]] | None:
    m = _SUFFIX_RE.match(display_name or "")
    if m is None:
        return None
    base = m.group(1).strip()
    tokens = split_words(m.group(2))
    if not base or not tokens:
        return None
    return base, tokens


def _index_of(dimensions: Sequence[Dimension], name: str) -> int:
    return next((i for i, d in enumerate(dimensions) if d.name == name), -1)


def _span(values: Sequence[str]) -> str:
    if not values:
        return "none"
    if len(values) == 1:
        return values[0]
    return f"{values[0]}-{values[-1]}"


def _simple_categories(dimensions: Sequence[Dimension]) -> list[InferredCategory]:
    return [
        InferredCategory(
            name=d.name,
            category_options=sorted(d.values),
            option_count=len(d.values),
            detection_method="Suffix extraction from parenthetical notation",
        )
        for d in dimensions
    ]


def _conditional_categories(
    dimensions: Sequence[Dimension],
    grade_idx: int,
    boarding_idx: int,
    disability_idx: int,
    gender_idx: int,
) -> tuple[list[InferredCategory], list[str]]:
    grades = dimensions[grade_idx].values
    regular = sorted(g for g in grades if _REGULAR_GRADE_RE.match(g))
    disabled = sorted(g for g in grades if _DISABLED_GRADE_RE.match(g))
    boarding = sorted(v for v in dimensions[boarding_idx].values if not _is_disability(v))

    options = [f"{g} {b}" for g in regular for b in boarding]
    options.extend(f"{g} Disabled" for g in disabled)

    categories = [
        InferredCategory(
            name="Student Type & Grade",
            category_options=sorted(options),
            option_count=len(options),
            detection_method="Hierarchical pattern detection (conditional boarding/disability status)",
        )
    ]
    used = {grade_idx, boarding_idx, disability_idx}
    if gender_idx >= 0:
        used.add(gender_idx)
        g = dimensions[gender_idx]
        categories.append(
            InferredCategory(
                name=g.name,
                category_options=sorted(g.values),
                option_count=len(g.values),
                detection_method="Suffix extraction",
            )
        )
    categories.extend(_simple_categories([d for i, d in enumerate(dimensions) if i not in used]))

    gender_tail = " × Gender" if gender_idx >= 0 else ""
    rules = [
        f"Regular population: Grade ({_span(regular)}) × {BOARDING} ({'/'.join(boarding) or 'none'}){gender_tail}",
        f"Population with disabilities: Grade ({_span(disabled)}){gender_tail} (no boarding status)",
    ]
    return categories, rules


def build_inferred_category_combo(
    dimensions: Sequence[Dimension],
    members: Sequence[Field],
) -> InferredCategoryCombo | None:
    if not dimensions:
        return None

    grade_idx = _index_of(dimensions, GRADE_LEVEL)
    disability_idx = _index_of(dimensions, DISABILITY)
    boarding_idx = _index_of(dimensions, BOARDING)
    combined_idx = _index_of(dimensions, BOARDING_DISABILITY)
    gender_idx = _index_of(dimensions, GENDER)

    is_conditional = grade_idx >= 0 and ((disability_idx >= 0 and boarding_idx >= 0) or combined_idx >= 0)

    if is_conditional:
        effective_boarding = combined_idx if combined_idx >= 0 else boarding_idx
        categories, rules = _conditional_categories(
            dimensions, grade_idx, effective_boarding, disability_idx, gender_idx
        )
    else:
        categories, rules = _simple_categories(dimensions), []

    total = 1
    for c in categories:
        total *= c.option_count
    actual = len(members)

    return InferredCategoryCombo(
        name=" × ".join(c.name for c in categories),
        categories=categories,
        total_expected_combinations=total,
        actual_combinations=actual,
        completeness_ratio=(actual / total) if total > 0 else 0.0,
        is_conditional=is_conditional,
        conditional_rules=rules,
        applied_to_field_ids=list(dict.fromkeys(m.field_id for m in members)),
    )


def group_by_dimensional_patterns(
    remaining: Sequence[Field],
    cfg: GroupingConfig,
) -> tuple[list[GroupingStrategy], tuple[Field, ...]]:
    by_base: dict[str, list[tuple[Field, list[str]]]] = {}
    for f in remaining:
        parsed = parse_dimensional_name(f.display_name)
        if parsed is None:
            continue
        base, tokens = parsed
        by_base.setdefault(base, []).append((f, tokens))

    strategies: list[GroupingStrategy] = []
    for base, items in by_base.items():
        if len(items) < cfg.min_group_size:
            continue

        max_dims = max(len(tokens) for _, tokens in items)
        dimensions = []
        for i in range(max_dims):
            values = frozenset(tokens[i] for _, tokens in items if len(tokens) > i)
            dimensions.append(Dimension(name=infer_dimension_name(values, i), values=values, order=i))

        members = [f for f, _ in items]
        combo = build_inferred_category_combo(dimensions, members)
        if combo is not None:
            logger.debug(
                "dimensional pattern %r: %s, completeness %d/%d%s",
                base,
                combo.name,
                combo.actual_combinations,
                combo.total_expected_combinations,
                " (conditional)" if combo.is_conditional else "",
            )

        strategies.append(
            GroupingStrategy(
                confidence=ConfidenceLevel.MEDIUM,
                group_type=GroupType.DIMENSIONAL_GRID,
                group_title=base,
                members=members,
                metadata=GroupMetadata(
                    detection_method="Dimensional Pattern Recognition",
                    dimensional_pattern=DimensionalPattern(base_name=base, dimensions=dimensions),
                    inferred_category_combo=combo,
                ),
            )
        )

    claimed = [m for s in strategies for m in s.members]
    return strategies, without_claimed(remaining, claimed)
