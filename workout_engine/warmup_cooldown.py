"""
Warm-up and cool-down blocks built from fixed templates.
"""

WARMUP_TEMPLATE = [
    ("Foam Roll", 60),
    ("Cat-Cow", 30),
    ("World's Greatest Stretch", 45),
    ("PVC Pass-Through", 30),
    ("Leg Swings", 30),
    ("Arm Circles", 30),
]
WARMUP_BARBELL_FINISHER = ("Empty Bar Technique", 60)
WARMUP_BODYWEIGHT_FINISHER = ("Inchworm", 45)

COOLDOWN_TEMPLATE = [
    ("Walk or Light Bike", 90),
    ("Child's Pose", 45),
    ("Pigeon Stretch", 45),
    ("Hamstring Stretch", 45),
    ("Spinal Twist", 30),
    ("Shoulder + Chest Stretch", 30),
]


def _template_items(entries, minutes):
    """Fit template entries into `minutes`, dropping trailing ones that do not fit."""
    budget = minutes * 60
    items = []
    used = 0
    for name, seconds in entries:
        if used + seconds > budget and items:
            break
        items.append(
            {
                "movement_id": None,
                "exercise": name,
                "category": None,
                "patterns": [],
                "equipment": [],
                "prescription": {
                    "sets": 1,
                    "reps": None,
                    "duration_sec": seconds,
                    "load": None,
                    "rest_sec": None,
                    "target": None,
                },
                "notes": "",
            }
        )
        used += seconds
    return items


def build_warmup_block(minutes, equipment=None):
    finisher = WARMUP_BODYWEIGHT_FINISHER
    if equipment is None or "barbell" in equipment:
        finisher = WARMUP_BARBELL_FINISHER
    entries = WARMUP_TEMPLATE[:4] + [finisher] + WARMUP_TEMPLATE[4:]
    return {
        "key": "warmup",
        "kind": "warmup",
        "title": "Warm-up",
        "minutes": minutes,
        "pattern_shape": None,
        "scheme": None,
        "items": _template_items(entries, minutes) if minutes > 0 else [],
    }


def build_cooldown_block(minutes):
    return {
        "key": "cooldown",
        "kind": "cooldown",
        "title": "Cool-down",
        "minutes": minutes,
        "pattern_shape": None,
        "scheme": None,
        "items": _template_items(COOLDOWN_TEMPLATE, minutes) if minutes > 0 else [],
    }
