from __future__ import annotations

import unittest

from field_grouping.analyzer import analyze_grouping
from field_grouping.booleans import (
    delimiter_subject,
    group_mutually_exclusive_booleans,
    option_text,
    validate_single_word_group,
)
from field_grouping.config import GroupingConfig
from form_contracts.fields import EntryType, Field
from form_contracts.grouping import ConfidenceLevel, GroupType


def _yn(field_id: str, name: str, value: str | None = None) -> Field:
    return Field(field_id, name, entry_type=EntryType.YES_NO, current_value=value)


class TestSubjectExtraction(unittest.TestCase):
    def test_delimiter_subject(self) -> None:
        cfg = GroupingConfig()
        self.assertEqual(delimiter_subject("Ownership - Public", cfg), "Ownership")
        self.assertEqual(delimiter_subject("Water source: Borehole", cfg), "Water source")
        self.assertEqual(delimiter_subject("Toilets (Girls)", cfg), "Toilets")
        self.assertIsNone(delimiter_subject("Ab - Public", cfg))
        self.assertIsNone(delimiter_subject("Electricity", cfg))

    def test_option_text(self) -> None:
        self.assertEqual(option_text("Ownership - Public", "Ownership"), "Public")
        self.assertEqual(option_text("Toilets (Girls)", "Toilets"), "Girls")
        self.assertEqual(option_text("Main water source piped", "Main water source"), "piped")

    def test_generic_single_word_subject_is_rejected(self) -> None:
        self.assertFalse(validate_single_word_group("School", [_yn("a", "School A"), _yn("b", "School B")]))

    def test_taxonomy_single_word_subject_is_accepted(self) -> None:
        fields = [_yn("a", "Location urban area"), _yn("b", "Location rural area"), _yn("c", "Location remote area")]
        self.assertTrue(validate_single_word_group("Location", fields))


class TestBooleanGroups(unittest.TestCase):
    def test_delimiter_pass_with_single_yes_is_radio(self) -> None:
        fields = [
            _yn("pub", "Ownership - Public", "true"),
            _yn("pri", "Ownership - Private", "false"),
            _yn("ngo", "Ownership - NGO"),
        ]

        groups = analyze_grouping(fields)

        self.assertEqual(len(groups), 1)
        g = groups[0]
        self.assertIs(g.group_type, GroupType.RADIO_GROUP)
        self.assertIs(g.confidence, ConfidenceLevel.MEDIUM)
        self.assertEqual(g.group_title, "Ownership")
        self.assertEqual(g.metadata.detection_method, "Pass 1: Delimiter (empirical=100%, name=100%)")
        self.assertAlmostEqual(g.metadata.mutual_exclusivity_score, 1.0)
        self.assertEqual(g.detection_description(), "Detected mutually exclusive options (100% confidence)")

    def test_numeric_stored_values(self) -> None:
        fields = [
            _yn("pub", "Ownership - Public", "1"),
            _yn("pri", "Ownership - Private", "0"),
            _yn("gov", "Ownership - Government", "0"),
        ]

        groups, rest = group_mutually_exclusive_booleans(fields, GroupingConfig())

        self.assertEqual(len(groups), 1)
        self.assertIs(groups[0].group_type, GroupType.RADIO_GROUP)
        self.assertEqual([m.field_id for m in groups[0].members], ["pub", "pri", "gov"])
        self.assertIn("empirical=100%", groups[0].metadata.detection_method)
        self.assertEqual(rest, ())

    def test_many_yes_values_give_checkbox(self) -> None:
        fields = [
            _yn("w", "Facilities - Water", "true"),
            _yn("e", "Facilities - Electricity", "true"),
            _yn("i", "Facilities - Internet", "true"),
        ]

        groups, rest = group_mutually_exclusive_booleans(fields, GroupingConfig())

        self.assertEqual(len(groups), 1)
        self.assertIs(groups[0].group_type, GroupType.CHECKBOX_GROUP)
        self.assertLess(groups[0].metadata.mutual_exclusivity_score, 0.75)
        self.assertEqual(rest, ())

    def test_word_sequence_pass_prefers_longest_subject(self) -> None:
        fields = [
            _yn("p", "Main water source piped"),
            _yn("w", "Main water source well"),
            _yn("r", "Main water source river"),
        ]

        groups, _ = group_mutually_exclusive_booleans(fields, GroupingConfig())

        self.assertEqual(len(groups), 1)
        self.assertEqual(groups[0].group_title, "Main water source")
        self.assertTrue(groups[0].metadata.detection_method.startswith("Pass 2: Word-seq"))

    def test_single_word_pass(self) -> None:
        fields = [
            _yn("s", "Electricity solar"),
            _yn("g", "Electricity grid"),
            _yn("d", "Electricity generator"),
        ]

        groups, _ = group_mutually_exclusive_booleans(fields, GroupingConfig())

        self.assertEqual(len(groups), 1)
        self.assertEqual(groups[0].group_title, "Electricity")
        self.assertTrue(groups[0].metadata.detection_method.startswith("Pass 3: Single-word"))

    def test_generic_subject_falls_back_to_flat_list(self) -> None:
        fields = [_yn("a", "School A"), _yn("b", "School B")]

        groups = analyze_grouping(fields)

        self.assertEqual(len(groups), 1)
        self.assertIs(groups[0].group_type, GroupType.FLAT_LIST)
        self.assertEqual(len(groups[0].members), 2)

    def test_long_options_are_rejected(self) -> None:
        fields = [
            _yn("a", "Reason - the school was closed for the whole of the term"),
            _yn("b", "Reason - the teachers were on strike for most of the year"),
        ]

        groups, rest = group_mutually_exclusive_booleans(fields, GroupingConfig())

        self.assertEqual(groups, [])
        self.assertEqual(len(rest), 2)

    def test_only_yes_no_fields_are_considered(self) -> None:
        fields = [Field("a", "Ownership - Public"), Field("b", "Ownership - Private")]

        groups, rest = group_mutually_exclusive_booleans(fields, GroupingConfig())

        self.assertEqual(groups, [])
        self.assertEqual(len(rest), 2)


if __name__ == "__main__":
    unittest.main()
