"""
Pattern pack builder.

Turns (style, minutes, intensity, equipment) into a plan skeleton: warm-up and
cool-down minutes plus an ordered list of main blocks, each carrying the
selection rules the generator draws movements with. Most styles use a static
pack; olympic weightlifting and endurance change shape with the time budget.
"""

import copy

from workout_engine.movement_taxonomy import normalize_equipment
from workout_engine.style_policies import get_policy, normalize_style


# Pattern shapes (timing semantics of a main block)
E2_00 = "E2:00x"
E2_30 = "E2:30x"
E3_00 = "E3:00x"
EMOM = "EMOM"
AMRAP = "AMRAP"
FOR_TIME_21_15_9 = "FOR_TIME_21_15_9"
CHIPPER_40_30_20_10 = "CHIPPER_40_30_20_10"
INTERVALS = "INTERVALS"
STEADY = "STEADY"
VO2 = "VO2"
MOBILITY_QUALITY = "MOBILITY_QUALITY"

MIN_MAIN_BUDGET = 10
MIN_BLOCK_MINUTES = 4


def clamp(value, low, high):
    return max(low, min(high, value))


def time_fit_tolerance(minutes):
    return max(2, minutes * 0.05)


def _block(shape, minutes, kind, categories, patterns, modalities, items, require_loaded=False, title=None, notes=None):
    return {
        "pattern_shape": shape,
        "minutes": minutes,
        "kind": kind,
        "selection": {
            "categories": list(categories),
            "patterns": list(patterns),
            "modalities": list(modalities),
            "item_count": items,
            "require_loaded": require_loaded,
        },
        "title": title,
        "notes": notes,
    }


OLY_AND_PL = ["crossfit", "powerlifting", "olympic_weightlifting"]
BB_ALL = ["bb_full_body", "bb_upper", "bb_lower"]

STATIC_PACKS = {
    "crossfit": {
        "name": "CrossFit",
        "warmup_minutes": 8,
        "cooldown_minutes": 6,
        "hardness_floor": 0.85,
        "main_blocks": [
            _block(E2_30, 12, "strength", OLY_AND_PL,
                   ["squat", "press", "hinge", "olympic_snatch", "olympic_cleanjerk"],
                   ["strength", "skill"], 2, require_loaded=True, title="Strength Density"),
            _block(EMOM, 14, "conditioning", ["crossfit"], ["cardio", "hinge", "squat", "press"],
                   ["conditioning"], 2, require_loaded=True, title="EMOM Engine"),
        ],
    },
    "powerlifting": {
        "name": "Powerlifting",
        "warmup_minutes": 8,
        "cooldown_minutes": 6,
        "hardness_floor": 0.85,
        "main_blocks": [
            _block(E3_00, 15, "strength", ["powerlifting"], ["squat", "bench", "hinge"], ["strength"], 1,
                   require_loaded=True, title="Primary Lift"),
            _block(E2_30, 12, "strength", ["powerlifting"], ["squat", "bench", "hinge"], ["strength"], 1,
                   require_loaded=True, title="Secondary Lift"),
            _block(EMOM, 10, "conditioning", ["powerlifting"], ["pull", "hinge"], ["strength", "conditioning"], 2,
                   require_loaded=True, title="Accessory EMOM"),
        ],
    },
    "bb_full_body": {
        "name": "Bodybuilding Full Body",
        "warmup_minutes": 6,
        "cooldown_minutes": 6,
        "hardness_floor": 0.80,
        "main_blocks": [
            _block(E2_30, 12, "strength", BB_ALL, ["squat", "hinge"], ["strength"], 2,
                   require_loaded=True, title="Lower Compound"),
            _block(E2_00, 12, "strength", BB_ALL, ["press", "pull"], ["strength"], 2,
                   require_loaded=True, title="Upper Compound"),
            _block(EMOM, 10, "conditioning", BB_ALL, ["arms", "shoulders", "core"], ["strength"], 2,
                   require_loaded=True, title="Accessory EMOM"),
        ],
    },
    "bb_upper": {
        "name": "Bodybuilding Upper",
        "warmup_minutes": 6,
        "cooldown_minutes": 6,
        "hardness_floor": 0.80,
        "main_blocks": [
            _block(E2_00, 12, "strength", ["bb_upper"], ["press", "pull"], ["strength"], 2,
                   require_loaded=True, title="Press / Pull"),
            _block(EMOM, 12, "conditioning", ["bb_upper"], ["shoulders", "arms", "pull"], ["strength"], 2,
                   require_loaded=True, title="Pump EMOM"),
        ],
    },
    "bb_lower": {
        "name": "Bodybuilding Lower",
        "warmup_minutes": 6,
        "cooldown_minutes": 6,
        "hardness_floor": 0.80,
        "main_blocks": [
            _block(E2_00, 12, "strength", ["bb_lower"], ["squat", "lunge"], ["strength"], 2,
                   require_loaded=True, title="Squat / Lunge"),
            _block(E2_00, 12, "strength", ["bb_lower"], ["hinge", "glute", "calf"], ["strength"], 2,
                   require_loaded=True, title="Hinge / Glute"),
        ],
    },
    "aerobic": {
        "name": "Aerobic",
        "warmup_minutes": 6,
        "cooldown_minutes": 6,
        "hardness_floor": 0.70,
        "main_blocks": [
            _block(INTERVALS, 16, "aerobic", ["aerobic"], ["cardio", "cyclical"], ["aerobic"], 1,
                   title="Aerobic Intervals"),
            _block(INTERVALS, 12, "aerobic", ["aerobic"], ["cardio", "cyclical"], ["aerobic"], 1,
                   title="Aerobic Intervals II"),
        ],
    },
    "gymnastics": {
        "name": "Gymnastics",
        "warmup_minutes": 6,
        "cooldown_minutes": 6,
        "hardness_floor": 0.75,
        "main_blocks": [
            _block(EMOM, 12, "skill", ["gymnastics"], ["gym_pull", "gym_push", "inversion"], ["skill", "strength"], 2,
                   title="Skill EMOM"),
            _block(AMRAP, 10, "conditioning", ["gymnastics"], ["core", "gym_pull"], ["skill", "strength"], 2,
                   title="Gymnastics AMRAP"),
        ],
    },
    "mobility": {
        "name": "Mobility",
        "warmup_minutes": 4,
        "cooldown_minutes": 4,
        "hardness_floor": 0.40,
        "main_blocks": [
            _block(MOBILITY_QUALITY, 12, "mobility", ["mobility"], ["mobility_dynamic", "mobility_static"],
                   ["mobility"], 4, title="Mobility Flow"),
            _block(MOBILITY_QUALITY, 10, "mobility", ["mobility"], ["mobility_static", "core"], ["mobility"], 4,
                   title="Positional Holds"),
        ],
    },
    "conditioning": {
        "name": "Conditioning",
        "warmup_minutes": 6,
        "cooldown_minutes": 5,
        "hardness_floor": 0.85,
        "main_blocks": [
            _block(AMRAP, 14, "conditioning", ["crossfit", "aerobic", "gymnastics"],
                   ["cardio", "squat", "hinge", "press", "jump"], ["conditioning", "aerobic"], 3, title="AMRAP"),
            _block(FOR_TIME_21_15_9, 10, "conditioning", ["crossfit", "gymnastics"],
                   ["squat", "hinge", "press", "pull", "gym_pull"], ["conditioning", "skill", "strength"], 2,
                   title="21-15-9 Finisher"),
        ],
    },
    "strength": {
        "name": "Strength",
        "warmup_minutes": 8,
        "cooldown_minutes": 6,
        "hardness_floor": 0.85,
        "main_blocks": [
            _block(E3_00, 15, "strength", ["powerlifting", "bb_lower", "bb_full_body"], ["squat", "hinge"],
                   ["strength"], 1, require_loaded=True, title="Heavy Lower"),
            _block(E2_30, 12, "strength", ["powerlifting", "bb_upper", "bb_full_body"], ["press", "pull", "bench"],
                   ["strength"], 2, require_loaded=True, title="Upper Push / Pull"),
        ],
    },
    "mixed": {
        "name": "Mixed",
        "warmup_minutes": 8,
        "cooldown_minutes": 6,
        "hardness_floor": 0.85,
        "main_blocks": [
            _block(E2_30, 12, "strength", ["powerlifting", "crossfit"] + BB_ALL, ["squat", "hinge", "press", "pull"],
                   ["strength"], 2, require_loaded=True, title="Strength"),
            _block(AMRAP, 12, "conditioning", ["crossfit", "aerobic", "gymnastics"],
                   ["cardio", "squat", "hinge", "press", "pull", "gym_pull"], ["conditioning", "aerobic", "skill"], 3,
                   title="Conditioning AMRAP"),
            _block(CHIPPER_40_30_20_10, 10, "conditioning", ["crossfit"], ["cardio", "squat", "hinge", "press"],
                   ["conditioning", "strength"], 2, require_loaded=True, title="Chipper"),
        ],
    },
}


def _finish_pack(style, variant, pack):
    policy = get_policy(style)
    pack["template_id"] = f"{style}:{variant}"
    pack.setdefault("required_patterns", [list(group) for group in policy["required_pattern_groups"]])
    return pack


def build_static_pack(style, total_minutes):
    """Static pack, compressing warm-up/cool-down when the session is tight."""
    pack = copy.deepcopy(STATIC_PACKS[style])
    warmup = pack["warmup_minutes"]
    cooldown = pack["cooldown_minutes"]
    if total_minutes <= warmup + cooldown + MIN_MAIN_BUDGET:
        pack["warmup_minutes"] = max(6, warmup - 2) if warmup > 6 else warmup
        pack["cooldown_minutes"] = max(4, cooldown - 2) if cooldown > 4 else cooldown
    return _finish_pack(style, "static", pack)


def build_olympic_pack(total_minutes):
    """Two lift-specific mains when the budget allows, else one combined main."""
    warmup = 8 if total_minutes >= 35 else 6
    cooldown = 6 if total_minutes >= 35 else 4
    budget = max(0, total_minutes - warmup - cooldown)
    required = [["olympic_snatch"], ["olympic_cleanjerk"]]
    modalities = ["strength", "skill"]

    if budget >= 24:
        # Halves round up: a 31-minute budget gives two 16-minute blocks.
        per_block = clamp(-(-budget // 2), 10, 16)
        main_blocks = [
            _block(E2_00, per_block, "strength", ["olympic_weightlifting"], ["olympic_snatch"], modalities, 1,
                   require_loaded=True, title="Snatch Complex"),
            _block(E2_00, per_block, "strength", ["olympic_weightlifting"], ["olympic_cleanjerk"], modalities, 1,
                   require_loaded=True, title="Clean & Jerk Complex"),
        ]
        variant = "split"
    else:
        main_blocks = [
            _block(E2_00, max(MIN_MAIN_BUDGET, budget), "strength", ["olympic_weightlifting"],
                   ["olympic_snatch", "olympic_cleanjerk"], modalities, 2,
                   require_loaded=True, title="Snatch / Clean & Jerk"),
        ]
        variant = "combined"

    pack = {
        "name": "Olympic Weightlifting",
        "warmup_minutes": warmup,
        "cooldown_minutes": cooldown,
        "hardness_floor": 0.85,
        "required_patterns": required,
        "main_blocks": main_blocks,
    }
    return _finish_pack("olympic_weightlifting", variant, pack)


CYCLICAL_CHOICES = [
    ("rower", "Row", ["row"]),
    ("bike", "Bike", ["bike"]),
    ("treadmill", "Run", ["run"]),
    ("ski", "Ski Erg", ["ski"]),
]
CYCLICAL_FALLBACK = ("Jump Rope", ["jump_rope"])


def pick_cyclical(equipment=None):
    """Best cardio modality for the equipment on hand: (display name, pattern tags)."""
    available = normalize_equipment(equipment) or []
    for tag, name, patterns in CYCLICAL_CHOICES:
        if tag in available:
            return name, list(patterns)
    return CYCLICAL_FALLBACK[0], list(CYCLICAL_FALLBACK[1])


def build_endurance_pack(total_minutes, intensity=6, equipment=None):
    """One cyclical main sized to the whole budget; intensity picks its structure."""
    if total_minutes >= 40:
        warmup, cooldown = 8, 6
    elif total_minutes >= 30:
        warmup, cooldown = 6, 4
    else:
        warmup, cooldown = 5, 3
    budget = max(MIN_MAIN_BUDGET, total_minutes - warmup - cooldown)
    name, patterns = pick_cyclical(equipment)
    level = clamp(int(intensity), 1, 10)

    if level <= 5:
        shape, variant = STEADY, "steady"
        title = f"Steady {name} Z2-Z3"
        notes = f"Steady {budget}:00 continuous @ Z2-Z3. Conversational pace, nasal breathing."
    elif level <= 7:
        shape, variant = INTERVALS, "intervals"
        rounds = 4 if budget >= 20 else 3
        work_min = int(budget * 0.7 / rounds)
        rest_min = int(budget * 0.3 / rounds)
        title = f"Cruise Intervals {name} Z3-Z4"
        notes = f"{rounds} x {work_min}:00 @ Z3-Z4, {rest_min}:00 easy. Comfortably hard, sustainable effort."
    else:
        shape, variant = VO2, "vo2"
        rounds = 12 if budget >= 20 else 10 if budget >= 16 else 8
        rest_sec = max(0, (budget * 60 - rounds * 60) // rounds)
        title = f"VO2 Repeats {name} Z4-Z5"
        notes = f"{rounds} x 60s ON / {rest_sec}s OFF @ Z4-Z5. Hard but smooth, pace by breathing."

    pack = {
        "name": "Endurance",
        "warmup_minutes": warmup,
        "cooldown_minutes": cooldown,
        "hardness_floor": 0.50,
        "main_blocks": [
            _block(shape, budget, "aerobic", ["aerobic"], patterns, ["aerobic"], 1, title=title, notes=notes),
        ],
    }
    return _finish_pack("endurance", variant, pack)


def reserve_main_budget(warmup, cooldown, total_minutes):
    """Shrink warm-up/cool-down until the mains get at least MIN_MAIN_BUDGET minutes."""
    while total_minutes - warmup - cooldown < MIN_MAIN_BUDGET and (warmup > 0 or cooldown > 0):
        if warmup >= cooldown:
            warmup -= 1
        else:
            cooldown -= 1
    return warmup, cooldown


def _scale_minutes(minutes, budget):
    """Proportional split of `budget` with largest-remainder rounding and a per-block floor."""
    planned = sum(minutes) or len(minutes)
    raw = [m * budget / planned for m in minutes]
    alloc = [int(value) for value in raw]
    leftover = budget - sum(alloc)
    order = sorted(range(len(raw)), key=lambda i: (-(raw[i] - alloc[i]), i))
    for i in order[:leftover]:
        alloc[i] += 1

    alloc = [max(MIN_BLOCK_MINUTES, value) for value in alloc]
    excess = sum(alloc) - budget
    while excess > 0:
        i = max(range(len(alloc)), key=lambda k: (alloc[k], -k))
        alloc[i] -= 1
        excess -= 1
    return alloc


def pack_total_minutes(pack):
    return pack["warmup_minutes"] + pack["cooldown_minutes"] + sum(b["minutes"] for b in pack["main_blocks"])


def _merge_unique(first, second):
    merged = list(first)
    for value in second:
        if value not in merged:
            merged.append(value)
    return merged


def fold_dropped_blocks(kept, dropped, required_count=0):
    """
    Fold the selection of dropped blocks into the last kept block.

    The kept blocks together get at least `required_count` item slots, so every
    required pattern group can still be drawn once.
    """
    target = kept[-1]["selection"]
    for block in dropped:
        selection = block["selection"]
        for field in ("categories", "patterns", "modalities"):
            target[field] = _merge_unique(target[field], selection[field])
        target["require_loaded"] = target["require_loaded"] or selection["require_loaded"]

    slots = sum(block["selection"]["item_count"] for block in kept)
    if slots < required_count:
        target["item_count"] += required_count - slots
    return kept


def fit_pack_to_duration(pack, total_minutes):
    """
    Rescale main blocks so the pack lands on the requested duration.

    Packs already within the time-fit tolerance are returned unchanged.
    Trailing blocks are dropped when the budget cannot give each one
    MIN_BLOCK_MINUTES; their selection moves into the last kept block.
    """
    if abs(pack_total_minutes(pack) - total_minutes) <= time_fit_tolerance(total_minutes):
        return pack

    warmup, cooldown = reserve_main_budget(pack["warmup_minutes"], pack["cooldown_minutes"], total_minutes)
    budget = total_minutes - warmup - cooldown
    keep = max(1, min(len(pack["main_blocks"]), budget // MIN_BLOCK_MINUTES))
    blocks = pack["main_blocks"][:keep]
    if keep < len(pack["main_blocks"]):
        fold_dropped_blocks(blocks, pack["main_blocks"][keep:], len(pack.get("required_patterns") or []))
    for block, minutes in zip(blocks, _scale_minutes([b["minutes"] for b in blocks], budget)):
        block["minutes"] = minutes

    pack["warmup_minutes"] = warmup
    pack["cooldown_minutes"] = cooldown
    pack["main_blocks"] = blocks
    return pack


def build_pattern_pack(style, total_minutes, intensity=6, equipment=None):
    """Fresh pack for one generation call, fitted to `total_minutes`."""
    style = normalize_style(style)
    if style == "olympic_weightlifting":
        pack = build_olympic_pack(total_minutes)
    elif style == "endurance":
        pack = build_endurance_pack(total_minutes, intensity, equipment)
    else:
        pack = build_static_pack(style, total_minutes)
    return fit_pack_to_duration(pack, total_minutes)
