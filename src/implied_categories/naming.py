from __future__ import annotations

import re
from typing import Sequence

_GENDER_PAIRS = (
    frozenset({"male", "female"}),
    frozenset({"men", "women"}),
    frozenset({"boys", "girls"}),
    frozenset({"m", "f"}),
)
_RESPONSE_TOKENS = frozenset({"yes", "no", "true", "false", "y", "n"})
_MONTHS = frozenset(
    {
        "january", "february", "march", "april", "may", "june",
        "july", "august", "september", "october", "november", "december",
        "jan", "feb", "mar", "apr", "jun", "jul", "aug", "sep", "sept", "oct", "nov", "dec",
    }
)
_AGE_UNIT = r"(?:\s*(?:years?|yrs?|y|months?|mths?|m))?"
_AGE_RANGE_RE = re.compile(
    r"^(?:"
    rf"(?:under|below|less than|<)\s*\d+{_AGE_UNIT}"
    rf"|\d+\s*\+{_AGE_UNIT}"
    rf"|\d+{_AGE_UNIT}\s*(?:\+|and above|and over|or more)"
    rf"|\d+\s*-\s*\d+{_AGE_UNIT}"
    rf"|\d+\s+to\s+\d+{_AGE_UNIT}"
    r")$"
)
_GRADE_RE = re.compile(r"^(?:p\.?\s*\d+|grade\s*\d+|g\s*\d+)$")


def infer_category_name(options: Sequence[str], level: int) -> str:
    """Human label for one category level, from its distinct option values."""
    lower = [o.strip().lower() for o in options if o.strip()]
    if not lower:
        return f"Category {level + 1}"
    distinct = frozenset(lower)

    if distinct in _GENDER_PAIRS:
        return "Gender"
    if len(distinct & _RESPONSE_TOKENS) >= 2:
        return "Response"
    if all("trimester" in o for o in lower):
        return "Trimester"
    if all("quarter" in o or o.startswith("q") for o in lower):
        return "Quarter"
    if all(o.rstrip(".") in _MONTHS for o in lower):
        return "Month"
    if all(_AGE_RANGE_RE.match(o) for o in lower):
        return "Age group"
    if all(_GRADE_RE.match(o) for o in lower):
        return "Grade"

    trailing = {o.split()[-1] for o in lower}
    if len(trailing) == 1 and len(lower) >= 2:
        word = next(iter(trailing))
        if word.isalpha():
            return word.title()

    return f"Category {level + 1}"
