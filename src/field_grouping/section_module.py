from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from form_contracts.grouping import ConfidenceLevel, GroupingStrategy, GroupType
from form_contracts.section import GroupingError, SectionGroupingResult, SectionInput
from implied_categories.config import ImpliedCategoryConfig
from implied_categories.config import params_dict as implied_params_dict
from implied_categories.inference import create_mappings, group_by_implied_categories, infer_category_structure

from .analyzer import analyze_grouping
from .config import GroupingConfig
from .config import params_dict as grouping_params_dict

logger = logging.getLogger(__name__)

_GROUPING_ALGORITHM = "field_grouping_cascade"
_GROUPING_VERSION = "field_grouping_cascade_v1"


def _meta(
    *,
    cfg: GroupingConfig,
    implied_cfg: ImpliedCategoryConfig | None,
    section_label: str,
    fields_in: int,
    groups: list[GroupingStrategy],
    implied_levels: int,
) -> dict[str, Any]:
    # Same shape on success and failure paths; every enum value is always present.
    by_type = {t.value: 0 for t in GroupType}
    by_confidence = {c.value: 0 for c in ConfidenceLevel}
    for g in groups:
        by_type[g.group_type.value] += 1
        by_confidence[g.confidence.value] += 1
    return {
        "algorithm": _GROUPING_ALGORITHM,
        "version": _GROUPING_VERSION,
        "section_label": section_label,
        "params": {
            "grouping": grouping_params_dict(cfg),
            "implied": None if implied_cfg is None else implied_params_dict(implied_cfg),
        },
        "counts": {
            "fields_in": int(fields_in),
            "groups": len(groups),
            "grouped_fields": sum(len(g.members) for g in groups),
            "by_type": by_type,
            "by_confidence": by_confidence,
            "implied_levels": int(implied_levels),
        },
    }


def _failure(
    error: GroupingError,
    *,
    cfg: GroupingConfig,
    implied_cfg: ImpliedCategoryConfig | None,
    source_relpath: str | None,
) -> SectionGroupingResult:
    return SectionGroupingResult(
        ok=False,
        errors=[error],
        meta=_meta(cfg=cfg, implied_cfg=implied_cfg, section_label="", fields_in=0, groups=[], implied_levels=0),
        groups=[],
        implied=None,
        source_relpath=source_relpath,
    )


def _implied_block(section: SectionInput, implied_cfg: ImpliedCategoryConfig) -> dict[str, Any]:
    combination = infer_category_structure(section.fields, section.section_label, implied_cfg)
    if combination is None:
        return {"combination": None, "mappings": [], "groups": []}
    mappings = create_mappings(section.fields, combination)
    buckets = group_by_implied_categories(mappings, combination)
    return {
        "combination": combination.to_dict(),
        "mappings": [m.to_dict() for m in mappings],
        "groups": [
            {"options": list(key), "field_ids": [m.field_id for m in members]}
            for key, members in buckets.items()
        ],
    }


def run_section_grouping(
    section: SectionInput,
    *,
    cfg: GroupingConfig | None = None,
    implied: bool = False,
    implied_cfg: ImpliedCategoryConfig | None = None,
    source_relpath: str | None = None,
) -> SectionGroupingResult:
    """
    Group one section and optionally infer its implied category structure.

    Pure: the same section and configs always produce the same result.
    """
    cfg = GroupingConfig() if cfg is None else cfg
    if implied and implied_cfg is None:
        implied_cfg = ImpliedCategoryConfig()
    if not implied:
        implied_cfg = None

    groups = analyze_grouping(
        section.fields,
        section.category_combo_structures,
        section.option_sets,
        section.validation_rules,
        cfg,
    )
    implied_out = None if implied_cfg is None else _implied_block(section, implied_cfg)
    levels = 0
    if implied_out is not None and implied_out["combination"] is not None:
        levels = len(implied_out["combination"]["categories"])

    return SectionGroupingResult(
        ok=True,
        errors=[],
        meta=_meta(
            cfg=cfg,
            implied_cfg=implied_cfg,
            section_label=section.section_label,
            fields_in=len(section.fields),
            groups=groups,
            implied_levels=levels,
        ),
        groups=groups,
        implied=implied_out,
        source_relpath=source_relpath,
    )


def run_section_grouping_on_file(
    input_file: Path,
    *,
    cfg: GroupingConfig | None = None,
    implied: bool = False,
    implied_cfg: ImpliedCategoryConfig | None = None,
) -> SectionGroupingResult:
    """Read a section JSON file and group it; read and schema problems become error results."""
    cfg = GroupingConfig() if cfg is None else cfg
    if implied and implied_cfg is None:
        implied_cfg = ImpliedCategoryConfig()
    if not implied:
        implied_cfg = None
    relpath = str(input_file)

    try:
        text = input_file.read_text(encoding="utf-8")
    except OSError as e:
        return _failure(
            GroupingError(
                code="INPUT_READ_FAILED",
                message="Failed to read section input file",
                detail={"input": relpath, "error": repr(e)},
            ),
            cfg=cfg,
            implied_cfg=implied_cfg,
            source_relpath=relpath,
        )

    try:
        payload = json.loads(text)
    except ValueError as e:
        return _failure(
            GroupingError(
                code="INPUT_JSON_INVALID",
                message="Failed to parse section input JSON",
                detail={"input": relpath, "error": repr(e)},
            ),
            cfg=cfg,
            implied_cfg=implied_cfg,
            source_relpath=relpath,
        )

    if not isinstance(payload, dict):
        return _failure(
            GroupingError(
                code="INPUT_SCHEMA_INVALID",
                message="Section input must be a JSON object",
                detail={"input": relpath},
            ),
            cfg=cfg,
            implied_cfg=implied_cfg,
            source_relpath=relpath,
        )

    try:
        section = SectionInput.from_dict(payload)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        return _failure(
            GroupingError(
                code="INPUT_SCHEMA_INVALID",
                message="Section input missing required fields or has the wrong shape",
                detail={"input": relpath, "error": repr(e)},
            ),
            cfg=cfg,
            implied_cfg=implied_cfg,
            source_relpath=relpath,
        )

    logger.debug("section %r: %d fields from %s", section.section_label, len(section.fields), relpath)
    return run_section_grouping(
        section,
        cfg=cfg,
        implied=implied,
        implied_cfg=implied_cfg,
        source_relpath=relpath,
    )
