from __future__ import annotations

import logging
from typing import Mapping, Sequence

from form_contracts.fields import CategoryComboStructure, Field
from form_contracts.grouping import ConfidenceLevel, GroupingStrategy, GroupMetadata, GroupType

from .config import GroupingConfig
from .text_utils import without_claimed

logger = logging.getLogger(__name__)


def group_by_category_combos(
    remaining: Sequence[Field],
    structures: Mapping[str, CategoryComboStructure],
    cfg: GroupingConfig,
) -> tuple[list[GroupingStrategy], tuple[Field, ...]]:
    """
    One DIMENSIONAL_GRID per field id whose non-default combo resolves to a known structure.

    Rows whose combos do not resolve fall through unclaimed.
    """
    by_field: dict[str, list[Field]] = {}
    for f in remaining:
        if f.category_option_combo_id == cfg.default_category_option_combo_id:
            continue
        by_field.setdefault(f.field_id, []).append(f)

    strategies: list[GroupingStrategy] = []
    for field_id, rows in by_field.items():
        combo_id = next((r.category_option_combo_id for r in rows if structures.get(r.category_option_combo_id)), None)
        if combo_id is None:
            logger.debug("field %s: no category combo structure for %d rows", field_id, len(rows))
            continue
        structure = structures[combo_id]
        strategies.append(
            GroupingStrategy(
                confidence=ConfidenceLevel.HIGH,
                group_type=GroupType.DIMENSIONAL_GRID,
                group_title=rows[0].display_name,
                members=list(rows),
                metadata=GroupMetadata(
                    detection_method="Category Combo",
                    category_combo_id=combo_id,
                    category_combo_structure=[(name, list(options)) for name, options in structure],
                ),
            )
        )
        logger.debug("field %s: category combo grid with %d rows", field_id, len(rows))

    claimed = [m for s in strategies for m in s.members]
    return strategies, without_claimed(remaining, claimed)
