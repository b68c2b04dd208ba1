"""
Deterministic rep/time/load schemes.

A block's scheme is a pure function of (pattern shape, minutes, intensity):
no randomness is involved. Health modifiers cap intensity before schemes are
assigned, and every cap leaves a coaching note.
"""

from workout_engine.movement_taxonomy import is_loaded
from workout_engine.pattern_packs import (
    AMRAP,
    CHIPPER_40_30_20_10,
    E2_00,
    E2_30,
    E3_00,
    EMOM,
    FOR_TIME_21_15_9,
    INTERVALS,
    MOBILITY_QUALITY,
    STEADY,
    VO2,
)


INTENSITY_TABLE = {
    1: {"load_pct": (40, 55), "rest_sec": 60},
    2: {"load_pct": (45, 60), "rest_sec": 75},
    3: {"load_pct": (50, 65), "rest_sec": 90},
    4: {"load_pct": (55, 70), "rest_sec": 105},
    5: {"load_pct": (60, 75), "rest_sec": 120},
    6: {"load_pct": (65, 80), "rest_sec": 135},
    7: {"load_pct": (70, 85), "rest_sec": 150},
    8: {"load_pct": (75, 90), "rest_sec": 165},
    9: {"load_pct": (80, 95), "rest_sec": 180},
    10: {"load_pct": (85, 100), "rest_sec": 200},
}

INTERVAL_SECONDS = {E2_00: 120, E2_30: 150, E3_00: 180, EMOM: 60}

# (metric key, comparison, threshold, intensity cap, coaching note)
HEALTH_CAPS = [
    ("vitality", "lt", 40, 6, "Vitality is low, intensity capped at 6."),
    ("axle_score", "lt", 40, 6, "Readiness score is low, intensity capped at 6."),
    ("performance_potential", "lt", 35, 5, "Performance potential is low, intensity capped at 5."),
    ("stress", "gt", 7, 4, "Stress is high, intensity capped at 4."),
    ("recovery", "lt", 30, 5, "Recovery is poor, intensity capped at 5."),
    ("sleep_score", "lt", 60, 7, "Sleep was short, intensity capped at 7."),
]

CARDIO_TAGS = ("cardio", "cyclical")

# Per-shape hardness credit for each main block
SHAPE_HARDNESS = {
    E2_00: 0.38,
    E2_30: 0.34,
    E3_00: 0.35,
    EMOM: 0.30,
    AMRAP: 0.30,
    FOR_TIME_21_15_9: 0.28,
    CHIPPER_40_30_20_10: 0.32,
}
AEROBIC_STRUCTURE_BONUS = {VO2: 0.25, INTERVALS: 0.18, STEADY: 0.12}


def clamp_intensity(value):
    return max(1, min(10, int(round(value))))


def _metric(health, key):
    value = (health or {}).get(key)
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def apply_health_caps(intensity, health=None):
    """Return (capped intensity, coaching notes); lower health only ever lowers intensity."""
    capped = clamp_intensity(intensity)
    notes = []
    for key, comparison, threshold, cap, note in HEALTH_CAPS:
        value = _metric(health, key)
        if value is None:
            continue
        triggered = value < threshold if comparison == "lt" else value > threshold
        if triggered and capped > cap:
            capped = cap
            notes.append(note)
    return max(1, capped), notes


def intensity_parameters(intensity, health=None):
    """Load and rest targets for a level, eased further when performance potential is low."""
    row = INTENSITY_TABLE[clamp_intensity(intensity)]
    load_low, load_high = row["load_pct"]
    rest_sec = row["rest_sec"]
    potential = _metric(health, "performance_potential")
    if potential is not None and potential < 35:
        load_low, load_high = max(40, load_low - 10), max(60, load_high - 10)
        rest_sec = min(90, rest_sec)
    return {"load_pct": (load_low, load_high), "rest_sec": rest_sec}


def format_load(value):
    """Format load values while preserving meaningful decimal precision."""
    if value is None:
        return ""

    if abs(value - round(value)) < 1e-9:
        return str(int(round(value)))

    return f"{value:.3f}".rstrip("0").rstrip(".")


def _interval_rounds(minutes, rounds_hint=None):
    rounds = rounds_hint or (4 if minutes >= 20 else 3)
    work_min = int(minutes * 0.7 / rounds)
    rest_min = int(minutes * 0.3 / rounds)
    return rounds, max(1, work_min) * 60, rest_min * 60


def assign_scheme(shape, minutes, intensity, item_count=1, health=None):
    """Scheme for one main block. Same inputs always yield the same scheme."""
    level = clamp_intensity(intensity)
    params = intensity_parameters(level, health)
    minutes = int(minutes)
    scheme = {
        "scheme_id": f"{shape}:{minutes}@{level}",
        "pattern_shape": shape,
        "minutes": minutes,
        "intensity": level,
        "item_count": item_count,
        "rounds": None,
        "interval_sec": None,
        "work_sec": None,
        "rest_sec": None,
        "rep_ladder": None,
        "load_pct": params["load_pct"],
        "label": "",
    }

    if shape in (E2_00, E2_30, E3_00):
        interval = INTERVAL_SECONDS[shape]
        rounds = max(1, minutes * 60 // interval)
        scheme.update(rounds=rounds, interval_sec=interval)
        scheme["label"] = f"Every {interval // 60}:{interval % 60:02d} x {rounds}"
    elif shape == EMOM:
        scheme.update(rounds=max(1, minutes), interval_sec=60)
        scheme["label"] = f"EMOM {minutes}"
    elif shape == AMRAP:
        scheme["label"] = f"AMRAP {minutes}"
    elif shape == FOR_TIME_21_15_9:
        scheme["rep_ladder"] = [21, 15, 9]
        scheme["label"] = f"For Time 21-15-9 (cap {minutes}:00)"
    elif shape == CHIPPER_40_30_20_10:
        scheme["rep_ladder"] = [40, 30, 20, 10]
        scheme["label"] = f"Chipper 40-30-20-10 (cap {minutes}:00)"
    elif shape == INTERVALS:
        rounds, work_sec, rest_sec = _interval_rounds(minutes)
        scheme.update(rounds=rounds, work_sec=work_sec, rest_sec=rest_sec)
        scheme["label"] = f"{rounds} x {work_sec // 60}:00 on / {rest_sec // 60}:00 easy"
    elif shape == VO2:
        rounds = 12 if minutes >= 20 else 10 if minutes >= 16 else 8
        rest_sec = max(0, (minutes * 60 - rounds * 60) // rounds)
        scheme.update(rounds=rounds, work_sec=60, rest_sec=rest_sec)
        scheme["label"] = f"{rounds} x 60s on / {rest_sec}s off"
    elif shape == STEADY:
        scheme.update(rounds=1, work_sec=minutes * 60)
        scheme["label"] = f"Steady {minutes}:00"
    elif shape == MOBILITY_QUALITY:
        rounds = max(1, minutes * 60 // (max(1, item_count) * 60))
        scheme.update(rounds=rounds, work_sec=45, rest_sec=15)
        scheme["label"] = f"{rounds} rounds, 45s each"
    else:
        raise ValueError(f"Unknown pattern shape: {shape}")

    return scheme


def _strength_reps(level, olympic):
    if olympic:
        return 2 if level >= 7 else 3
    if level >= 8:
        return 3
    if level >= 6:
        return 5
    if level >= 4:
        return 6
    return 8


def _is_cardio(movement):
    return any(tag in movement["patterns"] for tag in CARDIO_TAGS)


def _load_label(scheme, movement, strength_work):
    if not is_loaded(movement["equipment"]):
        return "bodyweight" if not _is_cardio(movement) else None
    low, high = scheme["load_pct"]
    if strength_work:
        return f"{format_load(low)}-{format_load(high)}% 1RM"
    return "heavy" if scheme["intensity"] >= 7 else "moderate"


def prescribe(scheme, movement, slot_index):
    """Prescription for the movement in `slot_index` of a block."""
    shape = scheme["pattern_shape"]
    level = scheme["intensity"]
    count = max(1, scheme["item_count"])
    prescription = {"sets": None, "reps": None, "duration_sec": None, "load": None, "rest_sec": None, "target": None}

    if shape in (E2_00, E2_30, E3_00, EMOM):
        rounds = scheme["rounds"]
        # Items rotate through the rounds: item i owns rounds i, i+n, i+2n, ...
        prescription["sets"] = max(1, (rounds - slot_index + count - 1) // count)
        if shape == EMOM:
            if _is_cardio(movement):
                prescription["target"] = "12/10 cal" if level >= 6 else "10/8 cal"
            else:
                prescription["reps"] = 12 if level >= 8 else 10 if level >= 5 else 8
            prescription["load"] = _load_label(scheme, movement, strength_work=False)
        else:
            olympic = any(tag.startswith("olympic_") for tag in movement["patterns"])
            prescription["reps"] = _strength_reps(level, olympic)
            prescription["load"] = _load_label(scheme, movement, strength_work=True)
        if count > 1:
            prescription["target"] = prescription["target"] or "alternate each interval"
    elif shape == AMRAP:
        if _is_cardio(movement):
            prescription["target"] = "15/12 cal" if level >= 6 else "12/9 cal"
        else:
            prescription["reps"] = [12, 10, 8][slot_index % 3] + (2 if level >= 8 else 0)
        prescription["load"] = _load_label(scheme, movement, strength_work=False)
        prescription["target"] = prescription["target"] or "max rounds"
    elif shape in (FOR_TIME_21_15_9, CHIPPER_40_30_20_10):
        prescription["reps"] = "-".join(str(rep) for rep in scheme["rep_ladder"])
        prescription["load"] = _load_label(scheme, movement, strength_work=False)
        prescription["target"] = "for time"
    elif shape in (INTERVALS, VO2):
        prescription["sets"] = scheme["rounds"]
        prescription["duration_sec"] = scheme["work_sec"]
        prescription["rest_sec"] = scheme["rest_sec"]
        prescription["target"] = "Z4-Z5" if shape == VO2 else "Z3-Z4"
    elif shape == STEADY:
        prescription["sets"] = 1
        prescription["duration_sec"] = scheme["work_sec"]
        prescription["target"] = "Z2-Z3"
    elif shape == MOBILITY_QUALITY:
        prescription["sets"] = scheme["rounds"]
        prescription["duration_sec"] = scheme["work_sec"]
        prescription["rest_sec"] = scheme["rest_sec"]
        prescription["target"] = "slow nasal breathing"

    return prescription


def estimate_intensity(capped_intensity, loaded_ratio, min_loaded_ratio):
    """Capped intensity scaled by how much of the loaded floor the mains achieved."""
    if not min_loaded_ratio:
        load_factor = 1.0
    else:
        load_factor = min(1.0, max(0.0, loaded_ratio / min_loaded_ratio))
    estimate = capped_intensity * (0.8 + 0.2 * load_factor)
    return max(1.0, min(10.0, round(estimate, 1)))


def compute_hardness(main_blocks, style, equipment=None, intensity=6):
    """Heuristic 0-1 hardness score of the main blocks."""
    gear = [tag for tag in (equipment or []) if tag != "bodyweight"]
    has_gear = equipment is None or bool(gear)
    has_barbell = equipment is None or "barbell" in gear
    score = 0.0

    for block in main_blocks:
        shape = block.get("pattern_shape")
        score += SHAPE_HARDNESS.get(shape, 0.0)
        if has_barbell and shape in SHAPE_HARDNESS:
            score += 0.12

        is_main = block.get("kind") in ("strength", "conditioning")
        items = block.get("items") or []
        loaded = [item for item in items if is_loaded(item.get("equipment"))]
        if is_main and loaded:
            score += 0.10
        if any(tag.startswith("olympic_") for item in items for tag in item.get("patterns") or ()):
            score += 0.08
        if any(set(item.get("patterns") or ()) & {"squat", "hinge", "bench"} for item in loaded):
            score += 0.06
        bodyweight_count = sum(1 for item in items if tuple(item.get("equipment") or ()) == ("bodyweight",))
        if is_main and has_gear and bodyweight_count >= 2:
            score -= 0.10

    if style in ("aerobic", "endurance"):
        main_minutes = sum(block.get("minutes", 0) for block in main_blocks)
        score += min(0.35, main_minutes * 0.02)
        shapes = {block.get("pattern_shape") for block in main_blocks}
        score += max([AEROBIC_STRUCTURE_BONUS.get(shape, 0.0) for shape in shapes] or [0.0])
        if intensity >= 8:
            score += 0.10
        elif intensity >= 7:
            score += 0.06

    return round(min(1.0, max(0.0, score)), 2)
