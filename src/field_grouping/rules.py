"""
Validation-rule authority stage.

Rule expressions are a narrow micro-language: `#{fieldId}` / `#{fieldId.comboId}` references,
`+` and bare numeric literals. Tokens are recognized with regular expressions only; nothing is
evaluated.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from form_contracts.fields import Field, ValidationRule
from form_contracts.grouping import ConfidenceLevel, GroupingStrategy, GroupMetadata, GroupType

from .config import GroupingConfig
from .text_utils import without_claimed

logger = logging.getLogger(__name__)

_REF_RE = re.compile(r"#\{\s*([^.{}\s]+)(?:\.([^{}\s]+))?\s*\}")
_NUMBER_RE = re.compile(r"^[+-]?\d+(?:\.\d+)?$")
_TITLE_SUFFIX_RE = re.compile(r"\s+(must be|validation|rule|check)\b.*$", re.IGNORECASE)
_TITLE_COLON_RE = re.compile(r":\s+.*$")

_EQUAL_OPS = frozenset({"EQUAL", "EQUAL_TO", "EQ", "=="})
_LESS_EQUAL_OPS = frozenset({"LESS_THAN_OR_EQUAL_TO", "LE", "<="})
_LESS_OPS = frozenset({"LESS_THAN", "LT", "<"}) | _LESS_EQUAL_OPS


class RuleShape(str, Enum):
    MUTUALLY_EXCLUSIVE = "MUTUALLY_EXCLUSIVE"
    SUMMATION = "SUMMATION"
    BOUNDED_COUNT = "BOUNDED_COUNT"
    NONE = "NONE"


@dataclass(frozen=True, slots=True)
class FieldRef:
    field_id: str
    combo_id: str | None = None

    def matches(self, f: Field) -> bool:
        if f.field_id != self.field_id:
            return False
        return self.combo_id is None or f.category_option_combo_id == self.combo_id


def extract_field_refs(expression: str) -> list[FieldRef]:
    """All bracketed references in order of appearance, de-duplicated."""
    out: list[FieldRef] = []
    for m in _REF_RE.finditer(expression or ""):
        ref = FieldRef(field_id=m.group(1), combo_id=m.group(2))
        if ref not in out:
            out.append(ref)
    return out


def _numeric_literal(expression: str) -> float | None:
    s = (expression or "").strip()
    if not _NUMBER_RE.match(s):
        return None
    return float(s)


def _is_additive(expression: str) -> bool:
    return "+" in (expression or "") and bool(_REF_RE.search(expression))


def classify_rule(rule: ValidationRule) -> RuleShape:
    op = (rule.operator or "").strip().upper()
    if not _is_additive(rule.left_expression):
        return RuleShape.NONE

    right_number = _numeric_literal(rule.right_expression)

    # "= 1" and "<= 1" both mean at most one active member.
    if right_number == 1.0 and (op in _EQUAL_OPS or op in _LESS_EQUAL_OPS):
        return RuleShape.MUTUALLY_EXCLUSIVE

    right_is_ref = bool(_REF_RE.search(rule.right_expression or ""))
    if op in _EQUAL_OPS and (right_is_ref or right_number is not None):
        return RuleShape.SUMMATION

    if op in _LESS_OPS and right_number is not None and right_number.is_integer() and right_number > 1:
        return RuleShape.BOUNDED_COUNT

    return RuleShape.NONE


def extract_group_title(rule_name: str) -> str:
    """
    "School Type must be exactly one" -> "School Type"
    "Ownership validation" -> "Ownership"
    "Location: Only one selected" -> "Location"
    """
    cleaned = _TITLE_COLON_RE.sub("", _TITLE_SUFFIX_RE.sub("", rule_name or "")).strip()
    return cleaned if len(cleaned) >= 3 else (rule_name or "").strip()


_SHAPE_TO_GROUP = {
    RuleShape.MUTUALLY_EXCLUSIVE: GroupType.RADIO_GROUP,
    RuleShape.SUMMATION: GroupType.SEMANTIC_CLUSTER,
    RuleShape.BOUNDED_COUNT: GroupType.CHECKBOX_GROUP,
}

_SHAPE_TO_METHOD = {
    RuleShape.MUTUALLY_EXCLUSIVE: "Validation Rule (Mutually Exclusive)",
    RuleShape.SUMMATION: "Validation Rule (Summation)",
    RuleShape.BOUNDED_COUNT: "Validation Rule (Checkbox)",
}


def group_by_validation_rules(
    remaining: Sequence[Field],
    rules: Sequence[ValidationRule],
    cfg: GroupingConfig,
) -> tuple[list[GroupingStrategy], tuple[Field, ...]]:
    """Each rule is evaluated once, in order, and explains at most one group."""
    strategies: list[GroupingStrategy] = []
    rest = tuple(remaining)

    for rule in rules:
        shape = classify_rule(rule)
        if shape is RuleShape.NONE:
            logger.debug("rule %r: no grouping shape", rule.name)
            continue

        if shape is RuleShape.BOUNDED_COUNT:
            refs = extract_field_refs(rule.left_expression)
        else:
            refs = extract_field_refs(rule.left_expression + " " + rule.right_expression)

        members = [f for f in rest if any(r.matches(f) for r in refs)]
        if len(members) < cfg.min_group_size:
            logger.debug("rule %r: %d unclaimed referenced fields, skipped", rule.name, len(members))
            continue

        title = extract_group_title(rule.name)
        strategies.append(
            GroupingStrategy(
                confidence=ConfidenceLevel.HIGH,
                group_type=_SHAPE_TO_GROUP[shape],
                group_title=title,
                members=members,
                metadata=GroupMetadata(
                    detection_method=f"{_SHAPE_TO_METHOD[shape]}: {rule.name}",
                    mutual_exclusivity_score=(1.0 if shape is RuleShape.MUTUALLY_EXCLUSIVE else None),
                ),
            )
        )
        logger.debug("rule %r: %s %r with %d members", rule.name, shape.value, title, len(members))
        rest = without_claimed(rest, members)

    return strategies, rest
