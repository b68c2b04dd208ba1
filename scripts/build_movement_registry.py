"""
Build a tagged movement registry from a plain list of names.

Reads a YAML file mapping each category to a list of movement names, tags every
name through the taxonomy rules, validates the result by loading it as a
registry, and writes the registry YAML.

Usage:
    python3 scripts/build_movement_registry.py data/movement_sources.yaml -o /tmp/movements.yaml
"""

import argparse
import os
import sys

import yaml

# Ensure project root is on the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from workout_engine.movement_registry import MovementRegistry
from workout_engine.movement_taxonomy import build_movement_record


def build_records(sources):
    """Tag every (category, name) pair; order follows the source file."""
    records = []
    for category, names in (sources or {}).items():
        for name in names or []:
            records.append(build_movement_record(str(name), category))
    return records


def main():
    parser = argparse.ArgumentParser(description="Build a tagged movement registry YAML.")
    parser.add_argument("source", help="YAML mapping category -> [movement names]")
    parser.add_argument("-o", "--output", required=True, help="Registry YAML to write")
    args = parser.parse_args()

    if not os.path.exists(args.source):
        print(f"Source list not found: {args.source}")
        sys.exit(1)

    with open(args.source, "r", encoding="utf-8") as f:
        sources = yaml.safe_load(f) or {}

    records = build_records(sources)
    registry = MovementRegistry(records, source=args.source)

    with open(args.output, "w", encoding="utf-8") as f:
        yaml.safe_dump({"movements": records}, f, sort_keys=False, allow_unicode=True)

    by_category = {}
    for movement in registry:
        by_category[movement["category"]] = by_category.get(movement["category"], 0) + 1

    print(f"\nRegistry built: {len(registry)} movements -> {args.output}")
    for category, count in by_category.items():
        print(f"  {category:<24} {count}")
    flagged = [movement["name"] for movement in registry if movement["banned_in_main_when_equipment"]]
    if flagged:
        print(f"  Main-block fillers flagged: {', '.join(flagged)}")


if __name__ == "__main__":
    main()
