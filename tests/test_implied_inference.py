from __future__ import annotations

import unittest

from form_contracts.fields import Field
from form_contracts.implied import CategoryPattern
from implied_categories import (
    ImpliedCategoryConfig,
    ImpliedCategoryInferenceService,
    create_mappings,
    group_by_implied_categories,
    infer_category_structure,
)


def _fields(*names: str) -> list[Field]:
    return [Field(f"de{i}", name) for i, name in enumerate(names)]


_ATTENDANCE = _fields(
    "Attendance - Male - Day 1",
    "Attendance - Female - Day 1",
    "Attendance - Male - Day 2",
    "Attendance - Female - Day 2",
)


class TestInferCategoryStructure(unittest.TestCase):
    def test_shared_prefix_hierarchy(self) -> None:
        combo = infer_category_structure(_ATTENDANCE, "Attendance")

        self.assertIsNotNone(combo)
        self.assertIs(combo.pattern, CategoryPattern.HIERARCHICAL)
        self.assertEqual(combo.separator, " - ")
        self.assertEqual(combo.residual_part_index, 0)
        self.assertEqual([c.level for c in combo.categories], [0, 1])
        self.assertEqual(combo.categories[0].name, "Gender")
        self.assertEqual(combo.categories[0].options, ["Female", "Male"])
        self.assertEqual(combo.categories[1].options, ["Day 1", "Day 2"])
        self.assertEqual(combo.total_data_elements, 4)
        self.assertEqual(combo.structured_data_elements, 4)
        self.assertAlmostEqual(combo.confidence, 0.5 + 0.3 + 0.2 * 2 / 3)

    def test_leading_levels_with_trailing_field_name(self) -> None:
        fields = _fields("Male - Enrolled", "Female - Enrolled", "Male - Dropped out", "Female - Dropped out")

        combo = infer_category_structure(fields, "Enrolment")

        self.assertEqual(combo.residual_part_index, -1)
        self.assertEqual([c.name for c in combo.categories], ["Gender"])
        mappings = create_mappings(fields, combo)
        self.assertEqual(mappings[2].category_options_by_level, {0: "Male"})
        self.assertEqual(mappings[2].residual_field_name, "Dropped out")

    def test_pipe_separator(self) -> None:
        fields = _fields("Q1 | Cases", "Q2 | Cases", "Q1 | Deaths", "Q2 | Deaths")

        combo = infer_category_structure(fields, "Surveillance")

        self.assertIs(combo.pattern, CategoryPattern.PIPE_DELIM)
        self.assertEqual(combo.categories[0].name, "Quarter")

    def test_parenthetical_gender(self) -> None:
        fields = _fields("Weight (Male)", "Weight (Female)", "Height (Male)", "Height (Female)")

        combo = infer_category_structure(fields, "Growth")

        self.assertIs(combo.pattern, CategoryPattern.PARENTHETICAL)
        self.assertEqual(combo.categories[0].name, "Gender")
        self.assertAlmostEqual(combo.confidence, 0.6 + 0.4 * 0.5)
        mappings = create_mappings(fields, combo)
        self.assertEqual(mappings[1].category_options_by_level, {0: "Female"})
        self.assertEqual(mappings[1].residual_field_name, "Weight")

    def test_sparse_gender_suffixes_are_tolerated(self) -> None:
        plain = ("Remarks", "Inspection date", "Headcount", "Latitude", "Longitude")
        gender = _fields("Pupils (Boys)", "Pupils (Girls)", "Staff (Male)", "Staff (Female)", *plain)

        combo = infer_category_structure(gender, "Profile")

        self.assertIsNotNone(combo)
        self.assertIs(combo.pattern, CategoryPattern.PARENTHETICAL)
        self.assertEqual(combo.categories[0].options, ["Boys", "Female", "Girls", "Male"])
        self.assertEqual(combo.structured_data_elements, 4)
        self.assertAlmostEqual(combo.confidence, 0.6 * 4 / 9 + 0.4)

        # Same coverage with non-gender suffixes stays below the parenthetical ratio.
        compass = _fields("Wells (North)", "Wells (South)", "Wells (East)", "Wells (West)", *plain)
        self.assertIsNone(infer_category_structure(compass, "Profile"))

    def test_no_pattern_returns_none(self) -> None:
        self.assertIsNone(infer_category_structure([], "Empty"))
        self.assertIsNone(
            infer_category_structure(_fields("Name of school", "Head teacher phone", "Enrolment total"), "Profile")
        )

    def test_sparse_structure_returns_none(self) -> None:
        fields = _fields("Male - Enrolled", "Female - Enrolled", "Remarks", "Inspection date")
        self.assertIsNone(infer_category_structure(fields, "Mixed"))

    def test_identifier_like_positions_are_dropped(self) -> None:
        fields = _fields("Alpha - Count", "Bravo - Count", "Charlie - Count")
        self.assertIsNone(infer_category_structure(fields, "Names"))

    def test_confidence_floor_is_configurable(self) -> None:
        fields = _fields("Weight (Male)", "Weight (Female)", "Height (Male)", "Remarks")
        self.assertIsNotNone(infer_category_structure(fields, "Growth"))
        strict = ImpliedCategoryConfig(min_confidence=0.95)
        self.assertIsNone(infer_category_structure(fields, "Growth", strict))


class TestMappingsAndGroups(unittest.TestCase):
    def test_every_field_gets_one_mapping_in_order(self) -> None:
        combo = infer_category_structure(_ATTENDANCE, "Attendance")
        fields = [*_ATTENDANCE, Field("notes", "Notes")]

        mappings = create_mappings(fields, combo)

        self.assertEqual([m.field_id for m in mappings], [f.field_id for f in fields])
        self.assertEqual(mappings[0].category_options_by_level, {0: "Male", 1: "Day 1"})
        self.assertEqual(mappings[0].residual_field_name, "Attendance")
        self.assertEqual(mappings[-1].category_options_by_level, {})
        self.assertEqual(mappings[-1].residual_field_name, "Notes")

    def test_group_by_option_tuple(self) -> None:
        combo = infer_category_structure(_ATTENDANCE, "Attendance")
        mappings = create_mappings([*_ATTENDANCE, Field("notes", "Notes")], combo)

        groups = group_by_implied_categories(mappings, combo)

        self.assertEqual(
            list(groups),
            [("Male", "Day 1"), ("Female", "Day 1"), ("Male", "Day 2"), ("Female", "Day 2"), ("", "")],
        )
        self.assertEqual([m.field_id for m in groups[("", "")]], ["notes"])

    def test_service_matches_functions(self) -> None:
        service = ImpliedCategoryInferenceService()
        combo = service.infer_category_structure(_ATTENDANCE, "Attendance")
        self.assertEqual(combo, infer_category_structure(_ATTENDANCE, "Attendance"))

        mappings = service.create_mappings(_ATTENDANCE, combo)
        self.assertEqual(mappings, create_mappings(_ATTENDANCE, combo))
        self.assertEqual(
            service.group_by_implied_categories(mappings, combo),
            group_by_implied_categories(mappings, combo),
        )


if __name__ == "__main__":
    unittest.main()
