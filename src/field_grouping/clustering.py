from __future__ import annotations

import logging
from typing import Sequence

from form_contracts.fields import Field
from form_contracts.grouping import ConfidenceLevel, GroupingStrategy, GroupMetadata, GroupType

from .config import GroupingConfig
from .text_utils import extract_common_concept, name_similarity, without_claimed

logger = logging.getLogger(__name__)


def cluster_by_semantic_similarity(
    remaining: Sequence[Field],
    cfg: GroupingConfig,
) -> tuple[list[GroupingStrategy], tuple[Field, ...]]:
    """
    Seed-based greedy clustering on word Jaccard similarity with the seed name.

    Seeds are taken in input order; a seed with no similar fields stays unclaimed.
    """
    if len(remaining) < cfg.min_group_size:
        return [], tuple(remaining)

    pool = list(remaining)
    clusters: list[list[Field]] = []
    while pool:
        seed = pool.pop(0)
        similar = [
            f for f in pool if name_similarity(seed.display_name, f.display_name) > cfg.semantic_similarity_threshold
        ]
        if similar:
            pool = list(without_claimed(pool, similar))
        cluster = [seed, *similar]
        if len(cluster) >= cfg.min_group_size:
            clusters.append(cluster)

    strategies: list[GroupingStrategy] = []
    for cluster in clusters:
        title = extract_common_concept([f.display_name for f in cluster])
        similarity = sum(name_similarity(f.display_name, title) for f in cluster) / len(cluster)
        logger.debug("semantic cluster %r: %d fields, similarity %.2f", title, len(cluster), similarity)
        strategies.append(
            GroupingStrategy(
                confidence=ConfidenceLevel.LOW,
                group_type=GroupType.SEMANTIC_CLUSTER,
                group_title=title,
                members=cluster,
                metadata=GroupMetadata(
                    detection_method="Semantic Similarity Clustering",
                    semantic_similarity_score=similarity,
                ),
            )
        )

    claimed = [m for s in strategies for m in s.members]
    return strategies, without_claimed(remaining, claimed)
