#!/usr/bin/env python3
"""
Workout Engine
Command-line entry point: generate one seeded workout and print it.
"""

import argparse
import json
import sys

from dotenv import load_dotenv

from workout_engine.config import load_config
from workout_engine.movement_registry import RegistryConfigError
from workout_engine.style_policies import SUPPORTED_STYLES
from workout_engine.workout_format import render_workout_markdown, save_workout
from workout_engine.workout_generator import WorkoutGenerator


def print_banner():
    """Print welcome banner."""
    banner = """
╔══════════════════════════════════════════════════════════════╗
║                                                              ║
║        WORKOUT ENGINE                                        ║
║        Seeded, policy-checked workout generation             ║
║                                                              ║
╚══════════════════════════════════════════════════════════════╝
    """
    print(banner)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Generate a deterministic workout.")
    parser.add_argument("--style", default="mixed", help=f"Style or goal ({', '.join(SUPPORTED_STYLES)}, or an alias)")
    parser.add_argument("--minutes", type=int, default=None, help="Requested duration in minutes")
    parser.add_argument("--intensity", type=int, default=None, help="Requested intensity 1-10")
    parser.add_argument(
        "--equipment",
        default=None,
        help="Comma-separated equipment on hand (omit for no equipment filter)",
    )
    parser.add_argument("--seed", default="", help="Seed string; same seed, same workout")
    parser.add_argument(
        "--constraint",
        action="append",
        default=[],
        help="Exclude movements whose name or pattern matches (repeatable)",
    )
    parser.add_argument("--json", action="store_true", help="Print the full response as JSON")
    parser.add_argument("--save", action="store_true", help="Save the workout to the output folder")
    return parser.parse_args(argv)


def main(argv=None):
    """Main application flow."""
    args = parse_args(argv)
    if not args.json:
        print_banner()

    load_dotenv()
    config = load_config()

    request = {
        "style": args.style,
        "minutes": args.minutes,
        "intensity": args.intensity,
        "equipment": args.equipment,
        "seed": args.seed,
        "constraints": args.constraint,
    }

    try:
        generator = WorkoutGenerator(config=config)
        result = generator.generate(request)
    except RegistryConfigError as e:
        print(f"\n❌ Configuration error: {e}")
        return 1

    workout = result["workout"]
    if args.json:
        print(json.dumps(result, indent=2, ensure_ascii=False))
    else:
        print(render_workout_markdown(workout))
        flags = workout["meta"]["acceptance_flags"]
        if all(flags.values()):
            print("✓ All acceptance checks passed")
        else:
            failed = ", ".join(key for key, ok in flags.items() if not ok)
            print(f"⚠ Acceptance checks failed: {failed}")
            for violation in workout["meta"]["violations"]:
                print(f"  - [{violation['code']}] {violation['message']}")

    if args.save:
        output = config["output"]
        save_workout(result, output_folder=output["folder"], format=output["format"])

    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\nExiting...")
        sys.exit(0)
    except Exception as e:
        print(f"\n❌ Unexpected error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
