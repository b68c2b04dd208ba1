"""
Markdown rendering and saving of generated workouts.
"""

import json
import os
import re
from datetime import datetime


FLAG_LABELS = [
    ("time_fit", "Time fit"),
    ("style_ok", "Style OK"),
    ("patterns_locked", "Patterns locked"),
    ("loaded_ratio_ok", "Loaded ratio OK"),
]


def _format_duration(seconds):
    if not seconds:
        return ""
    if seconds % 60 == 0:
        return f"{seconds // 60}:00"
    if seconds >= 60:
        return f"{seconds // 60}:{seconds % 60:02d}"
    return f"{seconds}s"


def format_prescription(prescription):
    """One-line prescription, e.g. '5 x 3 @ 65-80% 1RM' or '4 x 3:00, rest 1:00'."""
    prescription = prescription or {}
    sets = prescription.get("sets")
    reps = prescription.get("reps")
    duration = prescription.get("duration_sec")

    if reps is not None and sets:
        line = f"{sets} x {reps}"
    elif reps is not None:
        line = str(reps)
    elif duration and sets and sets > 1:
        line = f"{sets} x {_format_duration(duration)}"
    elif duration:
        line = _format_duration(duration)
    else:
        line = ""

    if prescription.get("load"):
        line = f"{line} @ {prescription['load']}" if line else prescription["load"]
    if prescription.get("rest_sec"):
        line = f"{line}, rest {_format_duration(prescription['rest_sec'])}"
    if prescription.get("target"):
        line = f"{line} ({prescription['target']})" if line else prescription["target"]
    return line


def render_workout_markdown(workout):
    """Render a workout dict as markdown."""
    meta = workout.get("meta") or {}
    lines = [f"# {workout.get('title', 'Workout')}", ""]
    lines.append(
        f"**Style:** {meta.get('style', '')} | **Minutes:** {meta.get('total_minutes', '')} "
        f"| **Intensity:** {meta.get('estimated_intensity', '')}/10 | **Seed:** `{meta.get('seed', '')}`"
    )
    lines.append("")

    for block in workout.get("blocks", []):
        label = (block.get("scheme") or {}).get("label")
        heading = f"## {block.get('title', block.get('key', ''))} ({block.get('minutes', 0)} min)"
        lines.append(heading)
        if label:
            lines.append(f"*{label}*")
        if block.get("notes"):
            lines.append(f"- **Notes:** {block['notes']}")
        items = block.get("items") or []
        if not items:
            lines.append("- No eligible movements for the available equipment.")
        for item in items:
            detail = format_prescription(item.get("prescription"))
            lines.append(f"- {item.get('exercise', '')}" + (f": {detail}" if detail else ""))
        lines.append("")

    flags = meta.get("acceptance_flags") or {}
    if flags:
        lines.append("## Acceptance")
        for key, label in FLAG_LABELS:
            marker = "✓" if flags.get(key) else "✗"
            lines.append(f"- {marker} {label}")
        lines.append(f"- Main loaded ratio: {meta.get('main_loaded_ratio', 0):.2f}")
        lines.append("")

    for note in meta.get("coaching_notes") or []:
        lines.append(f"> {note}")

    return "\n".join(lines).rstrip() + "\n"


def save_workout(result, output_folder="output", format="markdown"):
    """
    Save a generation result to a file.

    Args:
        result: Generation response dict ({workout, choices}) or a bare workout
        output_folder: Folder to save into
        format: File format (markdown or json)

    Returns:
        Path of the written file, or None when there was nothing to save
    """
    if not result:
        print("No workout to save.")
        return None

    workout = result.get("workout", result)
    os.makedirs(output_folder, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    style = re.sub(r"[^a-z0-9_]+", "_", str((workout.get("meta") or {}).get("style", "workout")).lower())
    extension = "json" if format == "json" else "md"
    filepath = os.path.join(output_folder, f"workout_{style}_{timestamp}.{extension}")

    with open(filepath, "w", encoding="utf-8") as f:
        if format == "json":
            json.dump(result, f, indent=2, ensure_ascii=False)
        else:
            f.write(render_workout_markdown(workout))
    print(f"✓ Workout saved to: {filepath}")
    return filepath
