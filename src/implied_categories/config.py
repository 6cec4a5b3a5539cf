from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class ImpliedCategoryConfig:
    """
    Naming-convention inference parameters.

    Separators are tried in order; ties between equally scored attempts keep the earlier one.
    """

    separators: tuple[str, ...] = (" - ", " | ", "_", " / ", ": ")
    min_confidence: float = 0.6
    min_structured_ratio: float = 0.7
    min_depth_consistency: float = 0.8
    max_options_per_level: int = 20

    # "Base (Option)" names tolerate sparser coverage; gender suffixes sparser still.
    parenthetical_min_ratio: float = 0.5
    gender_parenthetical_min_ratio: float = 0.25

    def validate(self) -> None:
        if not self.separators or any(not s for s in self.separators):
            raise ValueError("separators must be non-empty strings")
        for name in (
            "min_confidence",
            "min_structured_ratio",
            "min_depth_consistency",
            "parenthetical_min_ratio",
            "gender_parenthetical_min_ratio",
        ):
            v = getattr(self, name)
            if not (0.0 <= v <= 1.0):
                raise ValueError(f"{name} must be within [0, 1]")
        if self.max_options_per_level < 2:
            raise ValueError("max_options_per_level must be >= 2")

    def __post_init__(self) -> None:
        self.validate()


def params_dict(cfg: ImpliedCategoryConfig) -> dict[str, Any]:
    return {
        "separators": list(cfg.separators),
        "min_confidence": cfg.min_confidence,
        "min_structured_ratio": cfg.min_structured_ratio,
        "min_depth_consistency": cfg.min_depth_consistency,
        "max_options_per_level": cfg.max_options_per_level,
        "parenthetical_min_ratio": cfg.parenthetical_min_ratio,
        "gender_parenthetical_min_ratio": cfg.gender_parenthetical_min_ratio,
    }
