from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class CategoryPattern(str, Enum):
    HIERARCHICAL = "HIERARCHICAL"  # "A - B - Field" or "A / B / Field"
    PREFIX_GROUPED = "PREFIX_GROUPED"  # "Prefix: Field"
    UNDERSCORE_DELIM = "UNDERSCORE_DELIM"  # "A_B_Field"
    PIPE_DELIM = "PIPE_DELIM"  # "A | B | Field"
    PARENTHETICAL = "PARENTHETICAL"  # "Field (Option)"
    FLAT = "FLAT"


@dataclass(frozen=True, slots=True)
class ImpliedCategory:
    name: str
    options: list[str]  # sorted, distinct
    level: int  # nesting level, 0 = outermost
    separator_used: str
    part_index: int = 0  # position of this level inside the split name

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "options": list(self.options),
            "level": self.level,
            "separator_used": self.separator_used,
            "part_index": self.part_index,
        }


@dataclass(frozen=True, slots=True)
class ImpliedCategoryCombination:
    categories: list[ImpliedCategory]  # outer to inner
    confidence: float  # 0..1
    pattern: CategoryPattern
    total_data_elements: int
    structured_data_elements: int
    separator: str = ""  # "" for the parenthetical pattern
    residual_part_index: int = -1  # which split part is the leaf label (-1 = last)

    def to_dict(self) -> dict[str, Any]:
        return {
            "categories": [c.to_dict() for c in self.categories],
            "confidence": self.confidence,
            "pattern": self.pattern.value,
            "total_data_elements": self.total_data_elements,
            "structured_data_elements": self.structured_data_elements,
            "separator": self.separator,
            "residual_part_index": self.residual_part_index,
        }


@dataclass(frozen=True, slots=True)
class ImpliedCategoryMapping:
    field_id: str
    display_name: str
    category_options_by_level: dict[int, str]  # level -> matched option
    residual_field_name: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "field_id": self.field_id,
            "display_name": self.display_name,
            # JSON object keys are strings; keep level order stable.
            "category_options_by_level": {
                str(k): v for k, v in sorted(self.category_options_by_level.items())
            },
            "residual_field_name": self.residual_field_name,
        }
