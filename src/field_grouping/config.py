from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from form_contracts.fields import DEFAULT_CATEGORY_OPTION_COMBO


@dataclass(frozen=True, slots=True)
class GroupingConfig:
    """
    Field grouping cascade parameters.

    Defaults are explicit constants (no environment, time or randomness).
    Scores are compared against thresholds only; they never reorder the cascade.
    """

    default_category_option_combo_id: str = DEFAULT_CATEGORY_OPTION_COMBO
    min_group_size: int = 2

    # Jaccard word similarity must be strictly greater than this to join a cluster.
    semantic_similarity_threshold: float = 0.6

    # YES/NO option-set clusters: score > radio => RADIO_GROUP, score > checkbox => CHECKBOX_GROUP.
    option_set_radio_threshold: float = 0.8
    option_set_checkbox_threshold: float = 0.5
    min_option_set_concept_length: int = 5

    # Boolean subject groups: combined exclusivity (0..100 scale) > this => RADIO_GROUP.
    boolean_radio_threshold: float = 75.0

    # Sanity guard against accidental prefix coincidences.
    max_option_words: int = 5
    max_avg_option_length: float = 30.0
    min_subject_length: int = 3

    def validate(self) -> None:
        if not self.default_category_option_combo_id:
            raise ValueError("default_category_option_combo_id must be non-empty")
        if self.min_group_size < 2:
            raise ValueError("min_group_size must be >= 2")
        for name in (
            "semantic_similarity_threshold",
            "option_set_radio_threshold",
            "option_set_checkbox_threshold",
        ):
            v = getattr(self, name)
            if not (0.0 <= v <= 1.0):
                raise ValueError(f"{name} must be within [0, 1]")
        if self.option_set_checkbox_threshold > self.option_set_radio_threshold:
            raise ValueError("option_set_checkbox_threshold must be <= option_set_radio_threshold")
        if not (0.0 <= self.boolean_radio_threshold <= 100.0):
            raise ValueError("boolean_radio_threshold must be within [0, 100]")
        if self.min_option_set_concept_length < 1:
            raise ValueError("min_option_set_concept_length must be >= 1")
        if self.max_option_words < 1:
            raise ValueError("max_option_words must be >= 1")
        if self.max_avg_option_length <= 0:
            raise ValueError("max_avg_option_length must be > 0")
        if self.min_subject_length < 1:
            raise ValueError("min_subject_length must be >= 1")

    def __post_init__(self) -> None:
        self.validate()


def params_dict(cfg: GroupingConfig) -> dict[str, Any]:
    return {
        "default_category_option_combo_id": cfg.default_category_option_combo_id,
        "min_group_size": cfg.min_group_size,
        "semantic_similarity_threshold": cfg.semantic_similarity_threshold,
        "option_set_radio_threshold": cfg.option_set_radio_threshold,
        "option_set_checkbox_threshold": cfg.option_set_checkbox_threshold,
        "min_option_set_concept_length": cfg.min_option_set_concept_length,
        "boolean_radio_threshold": cfg.boolean_radio_threshold,
        "max_option_words": cfg.max_option_words,
        "max_avg_option_length": cfg.max_avg_option_length,
        "min_subject_length": cfg.min_subject_length,
    }
