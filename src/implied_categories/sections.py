from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from form_contracts.fields import Field
from form_contracts.implied import ImpliedCategoryCombination, ImpliedCategoryMapping

from .config import ImpliedCategoryConfig
from .inference import create_mappings, infer_category_structure

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SectionInference:
    section_label: str
    combination: ImpliedCategoryCombination | None
    mappings: list[ImpliedCategoryMapping]  # empty when no structure was detected

    def to_dict(self) -> dict[str, Any]:
        return {
            "section_label": self.section_label,
            "combination": None if self.combination is None else self.combination.to_dict(),
            "mappings": [m.to_dict() for m in self.mappings],
        }


@dataclass(slots=True)
class ImpliedCategoryCache:
    """
    In-process memo of per-section inference, keyed by (scope_id, section_label).

    A scope is whatever the caller re-uses sections under (a dataset, a form version).
    Nothing is persisted; `clear()` drops everything.
    """

    entries: dict[tuple[str, str], SectionInference] = field(default_factory=dict)

    def get(self, scope_id: str, section_label: str) -> SectionInference | None:
        return self.entries.get((scope_id, section_label))

    def put(self, scope_id: str, inference: SectionInference) -> None:
        self.entries[(scope_id, inference.section_label)] = inference

    def clear(self) -> None:
        self.entries.clear()

    def __len__(self) -> int:
        return len(self.entries)


def infer_section(
    section_label: str,
    fields: Iterable[Field],
    cfg: ImpliedCategoryConfig | None = None,
) -> SectionInference:
    fields = list(fields)
    combination = infer_category_structure(fields, section_label, cfg)
    mappings = [] if combination is None else create_mappings(fields, combination)
    return SectionInference(section_label=section_label, combination=combination, mappings=mappings)


def infer_sections(
    fields: Iterable[Field],
    cache: ImpliedCategoryCache | None = None,
    scope_id: str = "",
    cfg: ImpliedCategoryConfig | None = None,
) -> dict[str, SectionInference]:
    """
    Run implied inference once per `Field.section_label`.

    Sections appear in first-seen order. With a cache, a section already inferred under
    `scope_id` is returned as-is without looking at the fields again.
    """
    by_section: dict[str, list[Field]] = {}
    for f in fields:
        by_section.setdefault(f.section_label, []).append(f)

    out: dict[str, SectionInference] = {}
    for label, section_fields in by_section.items():
        cached = None if cache is None else cache.get(scope_id, label)
        if cached is not None:
            logger.debug("section %r: cache hit (scope %r)", label, scope_id)
            out[label] = cached
            continue
        inference = infer_section(label, section_fields, cfg)
        if cache is not None:
            cache.put(scope_id, inference)
        out[label] = inference
    return out
