#!/usr/bin/env python3
import argparse
import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ai.repo_analyzer import coerce_analysis  # noqa: E402
from engine.guardrails import validate_ui_guardrails, validate_visualization_bounds  # noqa: E402
from engine.ui_config import DEFAULT_SEED, finalize_ui_configuration, plan_render  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compute the final proposal UI configuration for a repository analysis JSON file."
    )
    parser.add_argument("--analysis", required=True, help="Path to analysis JSON (techStack, issues, opportunities)")
    parser.add_argument("--candidate", help="Path to an untrusted UI configuration JSON to normalize")
    parser.add_argument("--seed", default=DEFAULT_SEED, help="Variation seed, usually a proposal id")
    parser.add_argument("--output", help="Path to write the result JSON (default: stdout)")
    parser.add_argument("--render", action="store_true", help="Include the resolved render plan")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def _load_json(path: Path):
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        raw_analysis = _load_json(Path(args.analysis))
        candidate = _load_json(Path(args.candidate)) if args.candidate else None
    except (OSError, json.JSONDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    if not isinstance(raw_analysis, dict):
        print("error: analysis JSON must be an object", file=sys.stderr)
        return 2

    analysis = coerce_analysis(raw_analysis, {})
    ui = finalize_ui_configuration(candidate, analysis, args.seed)
    result = {"uiConfiguration": ui}
    if args.render:
        result["render"] = plan_render(ui)

    violations = validate_ui_guardrails(ui, analysis) + validate_visualization_bounds(ui)
    for v in violations:
        print(f"warning: {v}", file=sys.stderr)

    text = json.dumps(result, indent=2)
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text + "\n", encoding="utf-8")
        print(f"UI configuration written: {output_path}")
    else:
        print(text)
    return 1 if violations else 0


if __name__ == "__main__":
    raise SystemExit(main())
