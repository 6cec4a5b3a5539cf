from __future__ import annotations

import logging
from typing import Callable, Iterable, Mapping, Sequence

from form_contracts.fields import CategoryComboStructure, Field, OptionSet, ValidationRule
from form_contracts.grouping import ConfidenceLevel, GroupingStrategy, GroupMetadata, GroupType

from .booleans import group_mutually_exclusive_booleans
from .category_combos import group_by_category_combos
from .clustering import cluster_by_semantic_similarity
from .config import GroupingConfig
from .dimensions import group_by_dimensional_patterns
from .option_sets import group_by_option_sets
from .rules import group_by_validation_rules

logger = logging.getLogger(__name__)

# A stage claims some of the remainder and hands back what it did not claim.
Stage = Callable[[tuple[Field, ...]], tuple[list[GroupingStrategy], tuple[Field, ...]]]

FALLBACK_METHOD = "Fallback - no pattern detected"


def _stages(
    structures: Mapping[str, CategoryComboStructure],
    option_sets: Mapping[str, OptionSet],
    rules: Sequence[ValidationRule],
    cfg: GroupingConfig,
) -> list[tuple[str, Stage]]:
    # Strict priority order; a later stage never sees what an earlier one claimed.
    return [
        ("validation_rules", lambda rest: group_by_validation_rules(rest, rules, cfg)),
        ("category_combos", lambda rest: group_by_category_combos(rest, structures, cfg)),
        ("dimensional_patterns", lambda rest: group_by_dimensional_patterns(rest, cfg)),
        ("option_sets", lambda rest: group_by_option_sets(rest, option_sets, cfg)),
        ("boolean_subjects", lambda rest: group_mutually_exclusive_booleans(rest, cfg)),
        ("semantic_clusters", lambda rest: cluster_by_semantic_similarity(rest, cfg)),
    ]


def analyze_grouping(
    fields: Iterable[Field],
    category_combo_structures: Mapping[str, CategoryComboStructure] | None = None,
    option_sets: Mapping[str, OptionSet] | None = None,
    validation_rules: Sequence[ValidationRule] | None = None,
    cfg: GroupingConfig | None = None,
) -> list[GroupingStrategy]:
    """
    Partition `fields` into ordered UI groups, highest-confidence explanation first.

    Flattening the members of the returned strategies yields every input row exactly once.
    Inputs are never mutated; identical inputs produce identical output.
    """
    cfg = cfg or GroupingConfig()
    remaining: tuple[Field, ...] = tuple(fields or ())
    if not remaining:
        return []

    stages = _stages(
        dict(category_combo_structures or {}),
        dict(option_sets or {}),
        list(validation_rules or []),
        cfg,
    )

    strategies: list[GroupingStrategy] = []
    for name, stage in stages:
        if not remaining:
            break
        groups, remaining = stage(remaining)
        if groups:
            logger.debug("stage %s: %d groups, %d fields left", name, len(groups), len(remaining))
        strategies.extend(groups)

    if remaining:
        logger.debug("%d fields remain ungrouped, using FLAT_LIST", len(remaining))
        strategies.append(
            GroupingStrategy(
                confidence=ConfidenceLevel.LOW,
                group_type=GroupType.FLAT_LIST,
                group_title="",
                members=list(remaining),
                metadata=GroupMetadata(detection_method=FALLBACK_METHOD),
            )
        )
    return strategies


class GroupingAnalyzer:
    """Stateless facade over `analyze_grouping` bound to one config."""

    def __init__(self, cfg: GroupingConfig | None = None) -> None:
        self.cfg = cfg or GroupingConfig()

    def analyze_grouping(
        self,
        fields: Iterable[Field],
        category_combo_structures: Mapping[str, CategoryComboStructure] | None = None,
        option_sets: Mapping[str, OptionSet] | None = None,
        validation_rules: Sequence[ValidationRule] | None = None,
    ) -> list[GroupingStrategy]:
        return analyze_grouping(fields, category_combo_structures, option_sets, validation_rules, self.cfg)
