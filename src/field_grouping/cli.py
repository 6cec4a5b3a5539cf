from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from form_contracts.section import SectionGroupingResult

from .config import GroupingConfig
from .section_module import run_section_grouping_on_file


def serialize_result(result: SectionGroupingResult) -> str:
    return (
        json.dumps(result.to_dict(), ensure_ascii=False, sort_keys=True, separators=(",", ":"), indent=2)
        + "\n"
    )


def _build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="form-grouping",
        description="Deterministic field grouping for one form section (fields -> UI groups).",
    )
    p.add_argument("--input", required=True, type=Path, help="Path to section input JSON.")
    p.add_argument("--output", required=True, type=Path, help="Path to write grouping result JSON.")
    p.add_argument(
        "--implied",
        action="store_true",
        default=False,
        help="Also infer category structure from field naming conventions.",
    )
    p.add_argument("--semantic-similarity-threshold", type=float, default=0.6)
    p.add_argument("--boolean-radio-threshold", type=float, default=75.0)
    p.add_argument("--verbose", action="store_true", default=False, help="Log heuristic decisions at DEBUG.")
    return p


def main(argv: list[str] | None = None) -> int:
    args = _build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    cfg = GroupingConfig(
        semantic_similarity_threshold=args.semantic_similarity_threshold,
        boolean_radio_threshold=args.boolean_radio_threshold,
    )

    result = run_section_grouping_on_file(args.input, cfg=cfg, implied=args.implied)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(serialize_result(result), encoding="utf-8")

    summary = {
        "ok": result.ok,
        "fields": result.meta["counts"]["fields_in"],
        "groups": result.meta["counts"]["groups"],
        "implied_levels": result.meta["counts"]["implied_levels"],
        "errors": [e.code for e in result.errors],
    }
    print(json.dumps(summary, sort_keys=True, separators=(",", ":"), ensure_ascii=False))

    return 0 if result.ok else 2


if __name__ == "__main__":
    raise SystemExit(main())
