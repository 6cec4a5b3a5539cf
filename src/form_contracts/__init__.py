"""
Canonical data contracts shared by the field grouping and implied category engines.

These models are the schema boundary between the metadata layer (inputs) and the
rendering layer (outputs). Engine code consumes/produces these objects, never ad-hoc dicts.
"""

from .fields import (
    DEFAULT_CATEGORY_OPTION_COMBO,
    CategoryComboStructure,
    EntryType,
    Field,
    Option,
    OptionSet,
    ValidationRule,
)
from .grouping import (
    ConfidenceLevel,
    Dimension,
    DimensionalPattern,
    GroupingStrategy,
    GroupMetadata,
    GroupType,
    InferredCategory,
    InferredCategoryCombo,
)
from .implied import CategoryPattern, ImpliedCategory, ImpliedCategoryCombination, ImpliedCategoryMapping
from .section import GroupingError, SectionGroupingResult, SectionInput

__all__ = [
    "DEFAULT_CATEGORY_OPTION_COMBO",
    "CategoryComboStructure",
    "EntryType",
    "Field",
    "Option",
    "OptionSet",
    "ValidationRule",
    "ConfidenceLevel",
    "GroupType",
    "Dimension",
    "DimensionalPattern",
    "InferredCategory",
    "InferredCategoryCombo",
    "GroupMetadata",
    "GroupingStrategy",
    "CategoryPattern",
    "ImpliedCategory",
    "ImpliedCategoryCombination",
    "ImpliedCategoryMapping",
    "GroupingError",
    "SectionInput",
    "SectionGroupingResult",
]
