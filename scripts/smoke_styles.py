#!/usr/bin/env python3
"""
Smoke-test every style across durations and seeds.

Generates workouts through the real registry, tallies the acceptance flags per
style and writes JSON and markdown reports.
"""

import argparse
import json
import os
import sys
from collections import Counter
from datetime import datetime

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from workout_engine.config import load_config
from workout_engine.style_policies import SUPPORTED_STYLES
from workout_engine.workout_generator import WorkoutGenerator


REPORT_DIR = os.path.join(ROOT_DIR, "output", "smoke_reports")
FLAG_KEYS = ("time_fit", "style_ok", "patterns_locked", "loaded_ratio_ok")
FULL_GYM = ["barbell", "dumbbell", "kettlebell", "machine", "cable", "box", "pull_up_bar", "ring", "rower", "bike", "ball"]


def parse_args():
    parser = argparse.ArgumentParser(description="Smoke-test workout generation for every style.")
    parser.add_argument("--styles", default=",".join(SUPPORTED_STYLES), help="Comma-separated style keys")
    parser.add_argument("--minutes", default="20,30,45,60", help="Comma-separated durations")
    parser.add_argument("--seeds", type=int, default=5, help="Seeds per style/duration")
    parser.add_argument("--intensity", type=int, default=7)
    parser.add_argument(
        "--equipment",
        default=",".join(FULL_GYM),
        help="Comma-separated equipment (use 'bodyweight' for none)",
    )
    parser.add_argument("--strict", action="store_true", help="Exit non-zero when any flag fails")
    return parser.parse_args()


def run_smoke(generator, styles, durations, seeds, intensity, equipment):
    rows = []
    for style in styles:
        for minutes in durations:
            for index in range(seeds):
                seed = f"smoke-{style}-{minutes}-{index}"
                result = generator.generate(
                    {
                        "style": style,
                        "minutes": minutes,
                        "intensity": intensity,
                        "equipment": equipment,
                        "seed": seed,
                    }
                )
                meta = result["workout"]["meta"]
                rows.append(
                    {
                        "style": style,
                        "minutes": minutes,
                        "seed": seed,
                        "template_id": result["choices"]["template_id"],
                        "total_minutes": meta["total_minutes"],
                        "main_loaded_ratio": meta["main_loaded_ratio"],
                        "hardness": meta["hardness"],
                        "flags": meta["acceptance_flags"],
                        "violation_codes": sorted({v["code"] for v in meta["violations"]}),
                    }
                )
    return rows


def summarize(rows):
    by_style = {}
    for row in rows:
        entry = by_style.setdefault(row["style"], {"runs": 0, "flag_passes": Counter(), "violations": Counter()})
        entry["runs"] += 1
        for key in FLAG_KEYS:
            if row["flags"].get(key):
                entry["flag_passes"][key] += 1
        entry["violations"].update(row["violation_codes"])
    return {
        style: {
            "runs": entry["runs"],
            "flag_passes": dict(entry["flag_passes"]),
            "violations": dict(entry["violations"].most_common()),
        }
        for style, entry in by_style.items()
    }


def write_reports(report):
    os.makedirs(REPORT_DIR, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    json_path = os.path.join(REPORT_DIR, f"smoke_styles_{stamp}.json")
    md_path = os.path.join(REPORT_DIR, f"smoke_styles_{stamp}.md")

    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2)

    lines = [
        "# Style Smoke Report",
        "",
        f"- Generated at: {report['generated_at']}",
        f"- Equipment: {', '.join(report['equipment'])}",
        f"- Workouts generated: {len(report['rows'])}",
        f"- All flags passed: {report['passed']}",
        "",
        "## Per-Style Flags",
        "",
        "| Style | Runs | " + " | ".join(FLAG_KEYS) + " |",
        "| --- | --- | " + " | ".join("---" for _ in FLAG_KEYS) + " |",
    ]
    for style, entry in report["summary"].items():
        cells = [f"{entry['flag_passes'].get(key, 0)}/{entry['runs']}" for key in FLAG_KEYS]
        lines.append(f"| {style} | {entry['runs']} | " + " | ".join(cells) + " |")

    lines.append("")
    lines.append("## Violations")
    any_violations = False
    for style, entry in report["summary"].items():
        for code, count in entry["violations"].items():
            any_violations = True
            lines.append(f"- {style}: `{code}` x{count}")
    if not any_violations:
        lines.append("- None")

    with open(md_path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")

    return json_path, md_path


def main():
    args = parse_args()
    styles = [style.strip() for style in args.styles.split(",") if style.strip()]
    durations = [int(value) for value in args.minutes.split(",") if value.strip()]
    equipment = [tag.strip() for tag in args.equipment.split(",") if tag.strip()]

    generator = WorkoutGenerator(config=load_config())
    rows = run_smoke(generator, styles, durations, max(1, args.seeds), args.intensity, equipment)
    summary = summarize(rows)
    passed = all(all(row["flags"].get(key) for key in FLAG_KEYS) for row in rows)

    report = {
        "generated_at": datetime.now().isoformat(),
        "equipment": equipment,
        "passed": passed,
        "summary": summary,
        "rows": rows,
    }
    json_path, md_path = write_reports(report)

    print("=" * 60)
    for style, entry in summary.items():
        cells = "  ".join(f"{key}={entry['flag_passes'].get(key, 0)}/{entry['runs']}" for key in FLAG_KEYS)
        marker = "✓" if all(entry["flag_passes"].get(key, 0) == entry["runs"] for key in FLAG_KEYS) else "⚠"
        print(f"{marker} {style:<22} {cells}")
    print("=" * 60)
    print(f"JSON report: {json_path}")
    print(f"Markdown report: {md_path}")

    if args.strict and not passed:
        sys.exit(1)


if __name__ == "__main__":
    main()
