from __future__ import annotations

import logging
from typing import Mapping, Sequence

from form_contracts.fields import Field, OptionSet
from form_contracts.grouping import ConfidenceLevel, GroupingStrategy, GroupMetadata, GroupType

from .config import GroupingConfig
from .scoring import option_set_exclusivity_score
from .text_utils import common_prefix_concept, extract_common_concept, without_claimed

logger = logging.getLogger(__name__)


def group_by_option_sets(
    remaining: Sequence[Field],
    option_sets: Mapping[str, OptionSet],
    cfg: GroupingConfig,
) -> tuple[list[GroupingStrategy], tuple[Field, ...]]:
    """
    Cluster unclaimed fields sharing one option set id.

    `option_sets` maps field id -> the option set that field uses.
    """
    by_set: dict[str, tuple[OptionSet, list[Field]]] = {}
    for f in remaining:
        vocab = option_sets.get(f.field_id)
        if vocab is None:
            continue
        by_set.setdefault(vocab.id, (vocab, []))[1].append(f)

    strategies: list[GroupingStrategy] = []
    for set_id, (option_set, fields) in by_set.items():
        if len(fields) < cfg.min_group_size:
            continue
        names = [f.display_name for f in fields]

        if option_set.is_yes_no():
            score = option_set_exclusivity_score(fields)
            if score > cfg.option_set_radio_threshold:
                group_type = GroupType.RADIO_GROUP
            elif score > cfg.option_set_checkbox_threshold:
                group_type = GroupType.CHECKBOX_GROUP
            else:
                group_type = GroupType.SEMANTIC_CLUSTER
            title = extract_common_concept(names)
            logger.debug(
                "option set %s: %r (%d fields, exclusivity %.2f) -> %s",
                set_id,
                title,
                len(fields),
                score,
                group_type.value,
            )
            strategies.append(
                GroupingStrategy(
                    confidence=ConfidenceLevel.MEDIUM,
                    group_type=group_type,
                    group_title=title,
                    members=fields,
                    metadata=GroupMetadata(
                        detection_method="Option Set Analysis (YES/NO)",
                        mutual_exclusivity_score=score,
                    ),
                )
            )
            continue

        concept = common_prefix_concept(names)
        if len(concept) < cfg.min_option_set_concept_length:
            logger.debug("option set %s: common concept %r too short", set_id, concept)
            continue
        strategies.append(
            GroupingStrategy(
                confidence=ConfidenceLevel.MEDIUM,
                group_type=GroupType.SEMANTIC_CLUSTER,
                group_title=concept,
                members=fields,
                metadata=GroupMetadata(detection_method="Option Set Clustering"),
            )
        )

    claimed = [m for s in strategies for m in s.members]
    return strategies, without_claimed(remaining, claimed)
