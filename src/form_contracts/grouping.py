from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .fields import CategoryComboStructure, Field, structure_from_dict, structure_to_dict


class ConfidenceLevel(str, Enum):
    # Declaration order is the trust order: HIGH first.
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    def rank(self) -> int:
        return _CONFIDENCE_RANK[self]


_CONFIDENCE_RANK = {ConfidenceLevel.HIGH: 0, ConfidenceLevel.MEDIUM: 1, ConfidenceLevel.LOW: 2}


class GroupType(str, Enum):
    DIMENSIONAL_GRID = "DIMENSIONAL_GRID"
    RADIO_GROUP = "RADIO_GROUP"
    CHECKBOX_GROUP = "CHECKBOX_GROUP"
    SEMANTIC_CLUSTER = "SEMANTIC_CLUSTER"
    FLAT_LIST = "FLAT_LIST"


@dataclass(frozen=True, slots=True)
class Dimension:
    name: str
    values: frozenset[str]
    order: int  # position inside the parenthetical suffix

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "values": sorted(self.values), "order": self.order}


@dataclass(frozen=True, slots=True)
class DimensionalPattern:
    base_name: str
    dimensions: list[Dimension]

    def to_dict(self) -> dict[str, Any]:
        return {"base_name": self.base_name, "dimensions": [d.to_dict() for d in self.dimensions]}


@dataclass(frozen=True, slots=True)
class InferredCategory:
    name: str
    category_options: list[str]
    option_count: int
    detection_method: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "category_options": list(self.category_options),
            "option_count": self.option_count,
            "detection_method": self.detection_method,
        }


@dataclass(frozen=True, slots=True)
class InferredCategoryCombo:
    name: str  # category names joined with " × "
    categories: list[InferredCategory]
    total_expected_combinations: int
    actual_combinations: int
    completeness_ratio: float
    is_conditional: bool = False
    conditional_rules: list[str] = field(default_factory=list)
    applied_to_field_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "categories": [c.to_dict() for c in self.categories],
            "total_expected_combinations": self.total_expected_combinations,
            "actual_combinations": self.actual_combinations,
            "completeness_ratio": self.completeness_ratio,
            "is_conditional": self.is_conditional,
            "conditional_rules": list(self.conditional_rules),
            "applied_to_field_ids": list(self.applied_to_field_ids),
        }


@dataclass(frozen=True, slots=True)
class GroupMetadata:
    detection_method: str = ""
    category_combo_id: str | None = None
    category_combo_structure: CategoryComboStructure | None = None
    dimensional_pattern: DimensionalPattern | None = None
    inferred_category_combo: InferredCategoryCombo | None = None
    mutual_exclusivity_score: float | None = None  # 0..1
    semantic_similarity_score: float | None = None  # 0..1
    numeric_confidence_score: float | None = None  # 0..1, ranking/debugging only

    def to_dict(self) -> dict[str, Any]:
        return {
            "detection_method": self.detection_method,
            "category_combo_id": self.category_combo_id,
            "category_combo_structure": (
                None if self.category_combo_structure is None else structure_to_dict(self.category_combo_structure)
            ),
            "dimensional_pattern": None if self.dimensional_pattern is None else self.dimensional_pattern.to_dict(),
            "inferred_category_combo": (
                None if self.inferred_category_combo is None else self.inferred_category_combo.to_dict()
            ),
            "mutual_exclusivity_score": self.mutual_exclusivity_score,
            "semantic_similarity_score": self.semantic_similarity_score,
            "numeric_confidence_score": self.numeric_confidence_score,
        }

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "GroupMetadata":
        # Only the scalar parts round-trip; pattern/combo payloads are output-only.
        raw_structure = d.get("category_combo_structure")
        return GroupMetadata(
            detection_method=str(d.get("detection_method") or ""),
            category_combo_id=(None if d.get("category_combo_id") is None else str(d["category_combo_id"])),
            category_combo_structure=(None if raw_structure is None else structure_from_dict(raw_structure)),
            mutual_exclusivity_score=_opt_float(d.get("mutual_exclusivity_score")),
            semantic_similarity_score=_opt_float(d.get("semantic_similarity_score")),
            numeric_confidence_score=_opt_float(d.get("numeric_confidence_score")),
        )


def _opt_float(x: Any) -> float | None:
    return None if x is None else float(x)


@dataclass(frozen=True, slots=True)
class GroupingStrategy:
    confidence: ConfidenceLevel
    group_type: GroupType
    group_title: str
    members: list[Field]  # non-empty, ordered as in the input
    metadata: GroupMetadata = field(default_factory=GroupMetadata)

    def should_render_as_group(self) -> bool:
        if self.group_type is GroupType.FLAT_LIST:
            return False
        return len(self.members) >= 2

    def is_definitive(self) -> bool:
        return self.confidence is ConfidenceLevel.HIGH

    def detection_description(self) -> str:
        """User-facing sentence explaining why these fields were grouped."""
        md = self.metadata
        if self.is_definitive():
            if md.category_combo_structure is not None:
                return "Grouped by category combination"
            return "Grouped by validation rule"
        if md.dimensional_pattern is not None:
            return f"Detected {len(md.dimensional_pattern.dimensions)}-dimensional pattern"
        if md.mutual_exclusivity_score is not None:
            pct = int(md.mutual_exclusivity_score * 100)
            if self.group_type is GroupType.RADIO_GROUP:
                return f"Detected mutually exclusive options ({pct}% confidence)"
            return f"Detected related options ({pct}% confidence)"
        if md.semantic_similarity_score is not None:
            return "Grouped by semantic similarity"
        return "Default grouping"

    def to_dict(self) -> dict[str, Any]:
        return {
            "confidence": self.confidence.value,
            "group_type": self.group_type.value,
            "group_title": self.group_title,
            "members": [m.to_dict() for m in self.members],
            "metadata": self.metadata.to_dict(),
        }

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "GroupingStrategy":
        return GroupingStrategy(
            confidence=ConfidenceLevel(str(d["confidence"])),
            group_type=GroupType(str(d["group_type"])),
            group_title=str(d.get("group_title") or ""),
            members=[Field.from_dict(x) for x in (d.get("members") or [])],
            metadata=GroupMetadata.from_dict(d.get("metadata") or {}),
        )
