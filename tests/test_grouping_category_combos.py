from __future__ import annotations

import unittest

from field_grouping.analyzer import analyze_grouping
from field_grouping.category_combos import group_by_category_combos
from field_grouping.config import GroupingConfig
from form_contracts.fields import Field
from form_contracts.grouping import ConfidenceLevel, GroupType

_SEX = [("Sex", [("M", "Male"), ("F", "Female")])]


class TestCategoryComboGroups(unittest.TestCase):
    def test_resolved_combo_rows_form_high_grid(self) -> None:
        fields = [
            Field("enrol", "Enrolment", category_option_combo_id="c_m"),
            Field("enrol", "Enrolment", category_option_combo_id="c_f"),
            Field("notes", "Notes"),
        ]

        groups, rest = group_by_category_combos(fields, {"c_m": _SEX, "c_f": _SEX}, GroupingConfig())

        self.assertEqual(len(groups), 1)
        g = groups[0]
        self.assertIs(g.confidence, ConfidenceLevel.HIGH)
        self.assertIs(g.group_type, GroupType.DIMENSIONAL_GRID)
        self.assertEqual(g.group_title, "Enrolment")
        self.assertEqual(g.metadata.category_combo_id, "c_m")
        self.assertEqual(g.metadata.category_combo_structure, _SEX)
        self.assertEqual(g.detection_description(), "Grouped by category combination")
        self.assertEqual([f.field_id for f in rest], ["notes"])

    def test_default_combo_rows_are_never_claimed(self) -> None:
        fields = [Field("a", "Enrolment"), Field("a", "Enrolment")]
        groups, rest = group_by_category_combos(fields, {"HllvX50cXC0": _SEX}, GroupingConfig())

        self.assertEqual(groups, [])
        self.assertEqual(len(rest), 2)

    def test_unresolved_combo_falls_through(self) -> None:
        fields = [
            Field("enrol", "Enrolment", category_option_combo_id="unknown_1"),
            Field("enrol", "Enrolment", category_option_combo_id="unknown_2"),
        ]

        groups = analyze_grouping(fields, {"other": _SEX})

        self.assertFalse(any(g.confidence is ConfidenceLevel.HIGH for g in groups))
        self.assertEqual(sum(len(g.members) for g in groups), 2)

    def test_one_grid_per_field(self) -> None:
        fields = [
            Field("boys", "Boys", category_option_combo_id="c_m"),
            Field("girls", "Girls", category_option_combo_id="c_m"),
            Field("boys", "Boys", category_option_combo_id="c_f"),
        ]

        groups, rest = group_by_category_combos(fields, {"c_m": _SEX}, GroupingConfig())

        self.assertEqual([g.group_title for g in groups], ["Boys", "Girls"])
        self.assertEqual([len(g.members) for g in groups], [2, 1])
        self.assertEqual(rest, ())


if __name__ == "__main__":
    unittest.main()
