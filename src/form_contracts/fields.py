from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Sequence

# Well-known id of the "default" category option combo (no explicit category).
DEFAULT_CATEGORY_OPTION_COMBO = "HllvX50cXC0"

# combo id -> ordered [(category_name, [(option_code, option_display_name), ...]), ...]
CategoryComboStructure = list[tuple[str, list[tuple[str, str]]]]


class EntryType(str, Enum):
    TEXT = "TEXT"
    LONG_TEXT = "LONG_TEXT"
    NUMBER = "NUMBER"
    INTEGER = "INTEGER"
    POSITIVE_INTEGER = "POSITIVE_INTEGER"
    NEGATIVE_INTEGER = "NEGATIVE_INTEGER"
    POSITIVE_NUMBER = "POSITIVE_NUMBER"
    NEGATIVE_NUMBER = "NEGATIVE_NUMBER"
    PERCENTAGE = "PERCENTAGE"
    DATE = "DATE"
    COORDINATE = "COORDINATE"
    PHONE_NUMBER = "PHONE_NUMBER"
    YES_NO = "YES_NO"
    YES_ONLY = "YES_ONLY"
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"

    @staticmethod
    def parse(raw: Any) -> "EntryType":
        """Lenient parse used at the JSON boundary; unknown types fall back to TEXT."""
        try:
            return EntryType(str(raw).strip().upper())
        except ValueError:
            return EntryType.TEXT


@dataclass(frozen=True, slots=True)
class Field:
    field_id: str
    display_name: str
    category_option_combo_id: str = DEFAULT_CATEGORY_OPTION_COMBO
    entry_type: EntryType = EntryType.TEXT
    current_value: str | None = None  # read-only; used by empirical scoring only
    section_label: str = ""

    def key(self) -> tuple[str, str]:
        return (self.field_id, self.category_option_combo_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "field_id": self.field_id,
            "display_name": self.display_name,
            "category_option_combo_id": self.category_option_combo_id,
            "entry_type": self.entry_type.value,
            "current_value": self.current_value,
            "section_label": self.section_label,
        }

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "Field":
        return Field(
            field_id=str(d["field_id"]),
            display_name=str(d.get("display_name") or ""),
            category_option_combo_id=str(d.get("category_option_combo_id") or DEFAULT_CATEGORY_OPTION_COMBO),
            entry_type=EntryType.parse(d.get("entry_type", EntryType.TEXT.value)),
            current_value=(None if d.get("current_value") is None else str(d["current_value"])),
            section_label=str(d.get("section_label") or ""),
        )


@dataclass(frozen=True, slots=True)
class Option:
    code: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "name": self.name}

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "Option":
        return Option(code=str(d.get("code", "")), name=str(d.get("name", "")))


@dataclass(frozen=True, slots=True)
class OptionSet:
    id: str
    options: list[Option]  # ordered

    def is_yes_no(self) -> bool:
        """Exactly two options whose codes normalize to {0,1}, {yes,no} or {true,false}."""
        if len(self.options) != 2:
            return False
        codes = {o.code.strip().lower() for o in self.options}
        return codes in ({"0", "1"}, {"yes", "no"}, {"true", "false"})

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "options": [o.to_dict() for o in self.options]}

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "OptionSet":
        return OptionSet(
            id=str(d["id"]),
            options=[Option.from_dict(x) for x in (d.get("options") or [])],
        )


@dataclass(frozen=True, slots=True)
class ValidationRule:
    name: str
    left_expression: str
    operator: str  # symbolic name, e.g. EQUAL_TO, LESS_THAN_OR_EQUAL_TO
    right_expression: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "left_expression": self.left_expression,
            "operator": self.operator,
            "right_expression": self.right_expression,
        }

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "ValidationRule":
        return ValidationRule(
            name=str(d.get("name") or ""),
            left_expression=str(d.get("left_expression") or ""),
            operator=str(d.get("operator") or ""),
            right_expression=str(d.get("right_expression") or ""),
        )


def structure_to_dict(structure: Sequence[tuple[str, Sequence[tuple[str, str]]]]) -> list[dict[str, Any]]:
    return [
        {
            "category": name,
            "options": [{"code": code, "name": label} for code, label in options],
        }
        for name, options in structure
    ]


def structure_from_dict(raw: Sequence[Mapping[str, Any]]) -> CategoryComboStructure:
    out: CategoryComboStructure = []
    for cat in raw:
        opts = [(str(o.get("code", "")), str(o.get("name", ""))) for o in (cat.get("options") or [])]
        out.append((str(cat.get("category", "")), opts))
    return out
