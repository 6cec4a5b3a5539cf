"""
Deterministic field grouping.

Partitions the fields of one form section into UI groups:
- explicit metadata first (validation rules, category combos)
- then naming and vocabulary heuristics (dimensional suffixes, option sets, YES/NO subjects)
- then word-overlap clusters, with a flat list for whatever is left

Every field lands in exactly one group. No I/O, no randomness.
"""

from .analyzer import GroupingAnalyzer, analyze_grouping
from .config import GroupingConfig
from .section_module import run_section_grouping, run_section_grouping_on_file

__all__ = [
    "GroupingAnalyzer",
    "GroupingConfig",
    "analyze_grouping",
    "run_section_grouping",
    "run_section_grouping_on_file",
]
