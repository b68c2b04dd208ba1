"""
Acceptance checks for assembled workouts.

Pure functions over already-built workouts: they never retry or mutate. Can be
run on workouts produced elsewhere; items missing tags are resolved through an
optional movement registry.
"""

from workout_engine.movement_taxonomy import is_loaded
from workout_engine.pattern_packs import time_fit_tolerance
from workout_engine.style_policies import banned_name_match


NON_MAIN_KINDS = ("warmup", "cooldown")


def _add_violation(violations, code, message, block=None, exercise=None):
    violations.append(
        {
            "code": code,
            "message": message,
            "block": block or "",
            "exercise": exercise or "",
        }
    )


def get_main_blocks(workout):
    return [block for block in workout.get("blocks", []) if block.get("kind") not in NON_MAIN_KINDS]


def workout_total_minutes(workout):
    return sum(int(block.get("minutes") or 0) for block in workout.get("blocks", []))


def _resolve_item(item, registry=None):
    """Tags for one item: its own when present, otherwise the registry's."""
    patterns = item.get("patterns")
    equipment = item.get("equipment")
    category = item.get("category")
    if registry is not None and (not patterns or not equipment or not category):
        movement = None
        if item.get("movement_id"):
            movement = registry.get(item["movement_id"])
        if movement is None and item.get("exercise"):
            movement = registry.find_by_name(item["exercise"])
        if movement is not None:
            patterns = patterns or movement["patterns"]
            equipment = equipment or movement["equipment"]
            category = category or movement["category"]
    return {
        "patterns": tuple(patterns or ()),
        "equipment": tuple(equipment or ()),
        "category": category,
    }


def _main_items(workout, registry=None):
    for block in get_main_blocks(workout):
        for item in block.get("items") or []:
            yield block, item, _resolve_item(item, registry)


def check_time_fit(workout, requested_minutes):
    total = workout_total_minutes(workout)
    return abs(total - requested_minutes) <= time_fit_tolerance(requested_minutes)


def main_loaded_ratio(workout, registry=None):
    """Fraction of main-block items whose equipment excludes bodyweight."""
    tags = [resolved for _, _, resolved in _main_items(workout, registry)]
    if not tags:
        return 0.0
    loaded = sum(1 for resolved in tags if is_loaded(resolved["equipment"]))
    return round(loaded / len(tags), 3)


def check_loaded_ratio(workout, policy, registry=None):
    floor = (policy or {}).get("min_loaded_ratio")
    if not floor:
        return True
    return main_loaded_ratio(workout, registry) >= floor


def missing_pattern_groups(workout, groups, registry=None):
    present = set()
    for _, _, resolved in _main_items(workout, registry):
        present.update(resolved["patterns"])
    return [list(group) for group in groups or () if not present.intersection(group)]


def check_required_patterns(workout, policy, registry=None):
    return not missing_pattern_groups(workout, (policy or {}).get("required_pattern_groups"), registry)


def banned_name_hits(workout, policy):
    """(block key, exercise, rule) for every banned name anywhere in the workout."""
    hits = []
    for block in workout.get("blocks", []):
        for item in block.get("items") or []:
            rule = banned_name_match(item.get("exercise", ""), policy or {"banned_name_patterns": ()})
            if rule:
                hits.append((block.get("key"), item.get("exercise", ""), rule))
    return hits


def check_banned_names(workout, policy):
    return not banned_name_hits(workout, policy)


def validate_workout(workout, policy, requested_minutes, registry=None):
    """
    Re-check an assembled workout against its style policy.

    Returns:
        dict with keys: flags, violations, main_loaded_ratio, summary
    """
    violations = []
    policy = policy or {}

    time_fit = check_time_fit(workout, requested_minutes)
    if not time_fit:
        _add_violation(
            violations,
            "time_fit",
            f"Total {workout_total_minutes(workout)} min is outside "
            f"{requested_minutes} ± {time_fit_tolerance(requested_minutes):g} min.",
        )

    for group in missing_pattern_groups(workout, policy.get("required_pattern_groups"), registry):
        _add_violation(violations, "required_pattern", f"No main movement covers {' / '.join(group)}.")

    for block_key, exercise, rule in banned_name_hits(workout, policy):
        _add_violation(violations, "banned_name", f"'{exercise}' matches banned rule '{rule}'.", block_key, exercise)

    banned_main = set(policy.get("banned_main_patterns") or ())
    allowed_categories = set(policy.get("allowed_categories") or ())
    patterns_locked = True

    for block, item, resolved in _main_items(workout, registry):
        exercise = item.get("exercise", "")
        block_key = block.get("key")

        hit = banned_main.intersection(resolved["patterns"])
        if hit:
            _add_violation(
                violations,
                "banned_main_pattern",
                f"'{exercise}' uses {', '.join(sorted(hit))} in a main block.",
                block_key,
                exercise,
            )
        if allowed_categories and resolved["category"] and resolved["category"] not in allowed_categories:
            _add_violation(
                violations,
                "category_not_allowed",
                f"'{exercise}' is {resolved['category']}, outside the style's categories.",
                block_key,
                exercise,
            )
        if policy.get("require_barbell_only") and "barbell" not in resolved["equipment"]:
            _add_violation(violations, "barbell_only", f"'{exercise}' is not a barbell movement.", block_key, exercise)

        selection_patterns = set((block.get("selection") or {}).get("patterns") or ())
        if selection_patterns and not selection_patterns.intersection(resolved["patterns"]):
            patterns_locked = False

    for block in get_main_blocks(workout):
        wanted = (block.get("selection") or {}).get("item_count")
        got = len(block.get("items") or [])
        if wanted and got < wanted:
            patterns_locked = False
            _add_violation(
                violations,
                "block_shortfall",
                f"{block.get('title') or block.get('key')}: {got} of {wanted} movements found.",
                block.get("key"),
            )

    ratio = main_loaded_ratio(workout, registry)
    loaded_ratio_ok = check_loaded_ratio(workout, policy, registry)
    if not loaded_ratio_ok:
        _add_violation(
            violations,
            "loaded_ratio",
            f"Loaded ratio {ratio:.2f} is below {policy.get('min_loaded_ratio'):.2f}.",
        )

    style_codes = {"required_pattern", "banned_name", "banned_main_pattern", "category_not_allowed", "barbell_only"}
    flags = {
        "time_fit": time_fit,
        "style_ok": not any(v["code"] in style_codes for v in violations),
        "patterns_locked": patterns_locked,
        "loaded_ratio_ok": loaded_ratio_ok,
    }

    summary = (
        f"Acceptance: {sum(1 for _ in _main_items(workout, registry))} main movements checked, "
        f"{len(violations)} violation(s)."
    )

    return {
        "flags": flags,
        "violations": violations,
        "main_loaded_ratio": ratio,
        "summary": summary,
    }
