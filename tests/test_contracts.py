from __future__ import annotations

import unittest

from field_grouping.config import GroupingConfig
from form_contracts import (
    ConfidenceLevel,
    EntryType,
    Field,
    GroupingStrategy,
    GroupMetadata,
    GroupType,
    ImpliedCategoryMapping,
    Option,
    OptionSet,
    SectionInput,
)
from implied_categories.config import ImpliedCategoryConfig


class TestFieldContracts(unittest.TestCase):
    def test_field_round_trip_and_defaults(self) -> None:
        f = Field("de1", "Enrolment", "combo1", EntryType.INTEGER, "12", "Section A")
        self.assertEqual(Field.from_dict(f.to_dict()), f)

        minimal = Field.from_dict({"field_id": "x", "entry_type": "no-such-type"})
        self.assertEqual(minimal.category_option_combo_id, "HllvX50cXC0")
        self.assertIs(minimal.entry_type, EntryType.TEXT)
        self.assertIsNone(minimal.current_value)

    def test_yes_no_option_set(self) -> None:
        self.assertTrue(OptionSet("a", [Option("1", "Yes"), Option("0", "No")]).is_yes_no())
        self.assertTrue(OptionSet("b", [Option("TRUE", "T"), Option("false", "F")]).is_yes_no())
        self.assertFalse(OptionSet("c", [Option("1", "Yes")]).is_yes_no())
        self.assertFalse(OptionSet("d", [Option("m", "Male"), Option("f", "Female")]).is_yes_no())

    def test_section_input_from_dict(self) -> None:
        section = SectionInput.from_dict(
            {
                "section_label": "S",
                "fields": [{"field_id": "a", "display_name": "A"}],
                "category_combo_structures": {"c": [{"category": "Sex", "options": [{"code": "M", "name": "Male"}]}]},
                "option_sets": {"a": {"id": "yn", "options": [{"code": "1", "name": "Yes"}]}},
                "validation_rules": [{"name": "r", "left_expression": "#{a}", "operator": "EQUAL_TO"}],
            }
        )
        self.assertEqual(section.category_combo_structures["c"], [("Sex", [("M", "Male")])])
        self.assertEqual(section.option_sets["a"].id, "yn")
        self.assertEqual(section.validation_rules[0].right_expression, "")


class TestGroupingStrategyContracts(unittest.TestCase):
    def test_render_and_definitive_flags(self) -> None:
        one = [Field("a", "A")]
        two = [Field("a", "A"), Field("b", "B")]

        radio = GroupingStrategy(ConfidenceLevel.MEDIUM, GroupType.RADIO_GROUP, "T", two)
        self.assertTrue(radio.should_render_as_group())
        self.assertFalse(radio.is_definitive())
        self.assertFalse(GroupingStrategy(ConfidenceLevel.HIGH, GroupType.RADIO_GROUP, "T", one).should_render_as_group())
        self.assertFalse(GroupingStrategy(ConfidenceLevel.LOW, GroupType.FLAT_LIST, "", two).should_render_as_group())

    def test_related_options_description(self) -> None:
        g = GroupingStrategy(
            ConfidenceLevel.MEDIUM,
            GroupType.CHECKBOX_GROUP,
            "Facilities",
            [Field("a", "A"), Field("b", "B")],
            GroupMetadata(detection_method="x", mutual_exclusivity_score=0.42),
        )
        self.assertEqual(g.detection_description(), "Detected related options (42% confidence)")

    def test_strategy_round_trip(self) -> None:
        g = GroupingStrategy(
            ConfidenceLevel.HIGH,
            GroupType.DIMENSIONAL_GRID,
            "Enrolment",
            [Field("a", "Enrolment", "c1")],
            GroupMetadata(
                detection_method="Category Combo",
                category_combo_id="c1",
                category_combo_structure=[("Sex", [("M", "Male")])],
            ),
        )
        self.assertEqual(GroupingStrategy.from_dict(g.to_dict()), g)

    def test_confidence_rank(self) -> None:
        ranked = sorted(ConfidenceLevel, key=lambda c: c.rank())
        self.assertEqual(ranked, [ConfidenceLevel.HIGH, ConfidenceLevel.MEDIUM, ConfidenceLevel.LOW])

    def test_mapping_levels_serialize_as_string_keys(self) -> None:
        m = ImpliedCategoryMapping("a", "Male - Day 1 - X", {1: "Day 1", 0: "Male"}, "X")
        self.assertEqual(m.to_dict()["category_options_by_level"], {"0": "Male", "1": "Day 1"})


class TestConfigValidation(unittest.TestCase):
    def test_grouping_config_rejects_out_of_range(self) -> None:
        with self.assertRaises(ValueError):
            GroupingConfig(min_group_size=1)
        with self.assertRaises(ValueError):
            GroupingConfig(semantic_similarity_threshold=1.5)
        with self.assertRaises(ValueError):
            GroupingConfig(option_set_radio_threshold=0.4, option_set_checkbox_threshold=0.5)
        with self.assertRaises(ValueError):
            GroupingConfig(boolean_radio_threshold=120.0)

    def test_implied_config_rejects_out_of_range(self) -> None:
        with self.assertRaises(ValueError):
            ImpliedCategoryConfig(separators=())
        with self.assertRaises(ValueError):
            ImpliedCategoryConfig(separators=(" - ", ""))
        with self.assertRaises(ValueError):
            ImpliedCategoryConfig(min_confidence=-0.1)
        with self.assertRaises(ValueError):
            ImpliedCategoryConfig(max_options_per_level=1)


if __name__ == "__main__":
    unittest.main()
