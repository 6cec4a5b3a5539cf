"""
Implied category inference.

Detects category structure encoded in field display names (separator hierarchies and
"Base (Option)" suffixes) and maps fields onto it. Deterministic; no I/O.
"""

from .config import ImpliedCategoryConfig
from .inference import (
    ImpliedCategoryInferenceService,
    create_mappings,
    group_by_implied_categories,
    infer_category_structure,
)
from .naming import infer_category_name
from .sections import ImpliedCategoryCache, SectionInference, infer_section, infer_sections

__all__ = [
    "ImpliedCategoryCache",
    "ImpliedCategoryConfig",
    "ImpliedCategoryInferenceService",
    "SectionInference",
    "create_mappings",
    "group_by_implied_categories",
    "infer_category_name",
    "infer_category_structure",
    "infer_section",
    "infer_sections",
]
