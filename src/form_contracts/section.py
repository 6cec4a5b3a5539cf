from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .fields import CategoryComboStructure, Field, OptionSet, ValidationRule, structure_from_dict
from .grouping import GroupingStrategy


@dataclass(frozen=True, slots=True)
class GroupingError:
    code: str
    message: str
    detail: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "detail": self.detail}


@dataclass(frozen=True, slots=True)
class SectionInput:
    """
    One form section as handed over by the metadata layer.

    `option_sets` is keyed by field id (the vocabulary each field uses).
    """

    section_label: str
    fields: list[Field]
    category_combo_structures: dict[str, CategoryComboStructure]
    option_sets: dict[str, OptionSet]
    validation_rules: list[ValidationRule]

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "SectionInput":
        return SectionInput(
            section_label=str(d.get("section_label") or ""),
            fields=[Field.from_dict(x) for x in (d.get("fields") or [])],
            category_combo_structures={
                str(k): structure_from_dict(v) for k, v in (d.get("category_combo_structures") or {}).items()
            },
            option_sets={str(k): OptionSet.from_dict(v) for k, v in (d.get("option_sets") or {}).items()},
            validation_rules=[ValidationRule.from_dict(x) for x in (d.get("validation_rules") or [])],
        )


@dataclass(frozen=True, slots=True)
class SectionGroupingResult:
    ok: bool
    errors: list[GroupingError]
    meta: dict[str, Any]  # algorithm, version, params, counts
    groups: list[GroupingStrategy]
    implied: dict[str, Any] | None  # {"combination": ..., "mappings": [...]} when requested
    source_relpath: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "ok": self.ok,
            "errors": [e.to_dict() for e in self.errors],
            "meta": dict(self.meta),
            "groups": [g.to_dict() for g in self.groups],
            "implied": None if self.implied is None else dict(self.implied),
        }
        if self.source_relpath is not None:
            out["source_relpath"] = self.source_relpath
        return out
