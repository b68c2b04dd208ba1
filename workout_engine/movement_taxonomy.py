"""
Closed vocabularies and rule-based tagging for the movement catalog.

The runtime registry reads fully tagged records; the inference helpers here are
used by the offline registry builder to tag a plain list of movement names.
"""

import re


CATEGORIES = (
    "olympic_weightlifting",
    "powerlifting",
    "bb_full_body",
    "bb_upper",
    "bb_lower",
    "gymnastics",
    "crossfit",
    "aerobic",
    "mobility",
)

MODALITIES = ("strength", "conditioning", "skill", "aerobic", "mobility")

LEVELS = ("beginner", "intermediate", "advanced")

BODYWEIGHT = "bodyweight"
GENERAL_PATTERN = "general"

# ---------------------------------------------------------------------------
# Equipment aliases (lowered request value -> canonical tag)
# ---------------------------------------------------------------------------
EQUIPMENT_ALIASES = {
    "bw": "bodyweight",
    "body weight": "bodyweight",
    "none": "bodyweight",
    "bb": "barbell",
    "barbells": "barbell",
    "db": "dumbbell",
    "dumbbells": "dumbbell",
    "kb": "kettlebell",
    "kettlebells": "kettlebell",
    "machines": "machine",
    "cables": "cable",
    "cable machine": "cable",
    "bands": "band",
    "resistance band": "band",
    "rings": "ring",
    "gymnastic rings": "ring",
    "air_bike": "bike",
    "air bike": "bike",
    "assault_bike": "bike",
    "assault bike": "bike",
    "echo bike": "bike",
    "bikeerg": "bike",
    "row_erg": "rower",
    "rowerg": "rower",
    "rowing machine": "rower",
    "ski_erg": "ski",
    "skierg": "ski",
    "ski erg": "ski",
    "medicine ball": "ball",
    "wall ball": "ball",
    "slam ball": "ball",
    "sandbags": "sandbag",
}


def normalize_equipment(values):
    """
    Normalize a request equipment list to canonical tags.

    Returns None when no list was supplied (meaning "no equipment filter"),
    otherwise a de-duplicated list in first-seen order.
    """
    if values is None:
        return None
    if isinstance(values, str):
        values = [part for part in re.split(r"[,;]", values)]

    normalized = []
    for value in values:
        key = re.sub(r"\s+", " ", str(value or "").strip().lower())
        if not key:
            continue
        tag = EQUIPMENT_ALIASES.get(key, key.replace(" ", "_"))
        if tag not in normalized:
            normalized.append(tag)
    return normalized


def is_loaded(equipment):
    """A movement is loaded when it needs equipment and none of it is bodyweight."""
    tags = tuple(equipment or ())
    return bool(tags) and BODYWEIGHT not in tags


def slugify(text):
    """Stable, case-insensitive id for a movement name."""
    value = (text or "").lower()
    value = re.sub(r"[()]", "", value)
    value = value.replace("&", " and ")
    value = re.sub(r"[^\w\s-]", "", value)
    value = re.sub(r"[\s_-]+", "-", value)
    return value.strip("-")


# ---------------------------------------------------------------------------
# Pattern inference rules (applied in order, all matches kept)
# ---------------------------------------------------------------------------
PATTERN_RULES = [
    (re.compile(r"snatch", re.IGNORECASE), "olympic_snatch"),
    (re.compile(r"\bclean\b.*\b(jerk|pull)\b|\bjerk\b", re.IGNORECASE), "olympic_cleanjerk"),
    (re.compile(r"squat|box step|lunge|step-?up", re.IGNORECASE), "squat"),
    (re.compile(r"deadlift|\brdl\b|good morning|hinge|hip thrust|bridge|swing", re.IGNORECASE), "hinge"),
    (re.compile(r"bench", re.IGNORECASE), "bench"),
    (re.compile(r"press|push|dip|bench", re.IGNORECASE), "press"),
    (re.compile(r"pull|\brow\b|chin|\blat\b|face pull", re.IGNORECASE), "pull"),
    (re.compile(r"lunge|split squat", re.IGNORECASE), "lunge"),
    (re.compile(r"carry|farmer", re.IGNORECASE), "carry"),
    (re.compile(r"jump|hop|leap|bound", re.IGNORECASE), "jump"),
    (re.compile(r"curl|tricep|skull", re.IGNORECASE), "arms"),
    (re.compile(r"lateral raise|rear delt|shoulder|overhead press", re.IGNORECASE), "shoulders"),
    (re.compile(r"glute|hip thrust|kickback", re.IGNORECASE), "glute"),
    (re.compile(r"calf", re.IGNORECASE), "calf"),
    (
        re.compile(r"plank|crunch|sit-?up|leg raise|hollow|toes.*bar|knee.*elbow|ab wheel|rollout|v-?up", re.IGNORECASE),
        "core",
    ),
]

CARDIO_RULES = [
    (re.compile(r"\brun\b|treadmill|sprint", re.IGNORECASE), ["run"]),
    (re.compile(r"\brow\b|rower|row erg", re.IGNORECASE), ["row", "erg"]),
    (re.compile(r"bike", re.IGNORECASE), ["bike", "erg"]),
    (re.compile(r"\bski\b", re.IGNORECASE), ["ski", "erg"]),
    (re.compile(r"swim", re.IGNORECASE), ["swim"]),
    (re.compile(r"jump rope|double under|single under", re.IGNORECASE), ["jump_rope"]),
    (re.compile(r"burpee", re.IGNORECASE), []),
]

GYMNASTICS_RULES = [
    (re.compile(r"push-?up|dip|handstand", re.IGNORECASE), "gym_push"),
    (re.compile(r"pull-?up|muscle-?up|rope climb|chin", re.IGNORECASE), "gym_pull"),
    (re.compile(r"handstand|inversion|headstand", re.IGNORECASE), "inversion"),
]

MOBILITY_DYNAMIC_RE = re.compile(r"dynamic|swing|circle|rock|flow|crawl|cat-?cow|rotation", re.IGNORECASE)

EQUIPMENT_RULES = [
    (re.compile(r"barbell|\bbb\s", re.IGNORECASE), "barbell"),
    (re.compile(r"dumbbell|\bdb\s", re.IGNORECASE), "dumbbell"),
    (re.compile(r"kettlebell|\bkb\s", re.IGNORECASE), "kettlebell"),
    (re.compile(r"machine|leg press|hack squat|pec deck|smith|leg curl|leg extension", re.IGNORECASE), "machine"),
    (re.compile(r"cable|pulldown|pushdown", re.IGNORECASE), "cable"),
    (re.compile(r"\bband\b|elastic", re.IGNORECASE), "band"),
    (re.compile(r"\bring", re.IGNORECASE), "ring"),
    (re.compile(r"rope climb", re.IGNORECASE), "rope"),
    (re.compile(r"sled", re.IGNORECASE), "sled"),
    (re.compile(r"sandbag", re.IGNORECASE), "sandbag"),
    (re.compile(r"medicine ball|slam ball|wall ball", re.IGNORECASE), "ball"),
    (re.compile(r"assault bike|air bike|echo bike|stationary bike|bike erg", re.IGNORECASE), "bike"),
    (re.compile(r"rower|row erg|rowing machine", re.IGNORECASE), "rower"),
    (re.compile(r"ski erg", re.IGNORECASE), "ski"),
    (re.compile(r"treadmill", re.IGNORECASE), "treadmill"),
    (re.compile(r"pool|swim", re.IGNORECASE), "pool"),
]

BARBELL_DEFAULT_RE = re.compile(r"snatch|clean|jerk|squat|deadlift|press|pull|bench", re.IGNORECASE)

ADVANCED_RE = re.compile(
    r"competition|deficit|weighted|single.?leg|single.?arm|advanced|muscle.?up|handstand|pistol|"
    r"one.?arm|one.?leg|snatch|clean.*jerk|complex",
    re.IGNORECASE,
)
BEGINNER_RE = re.compile(r"wall|\bbox\b|assisted|band|knee|incline|machine|beginner|walk", re.IGNORECASE)

# Filler movements kept out of main blocks whenever real equipment is on hand.
MAIN_FILLER_NAMES = frozenset(
    ["wall sit", "mountain climber", "star jump", "jumping jacks", "jumping jack", "high knees",
     "bicycle crunch", "bicycle crunches", "plank hold", "side plank"]
)


def infer_patterns(name, category):
    patterns = []

    def add(tag):
        if tag not in patterns:
            patterns.append(tag)

    # Cyclical names ("Row", "Bike") are not strength patterns.
    if category != "aerobic":
        for pattern, tag in PATTERN_RULES:
            if pattern.search(name):
                add(tag)

    if category == "gymnastics":
        for pattern, tag in GYMNASTICS_RULES:
            if pattern.search(name):
                add(tag)

    for pattern, tags in CARDIO_RULES:
        if pattern.search(name):
            add("cardio")
            for tag in tags:
                add(tag)
            if category == "aerobic":
                add("cyclical")

    if category == "mobility":
        add("mobility_dynamic" if MOBILITY_DYNAMIC_RE.search(name) else "mobility_static")

    return patterns or [GENERAL_PATTERN]


def infer_equipment(name, category):
    equipment = []
    for pattern, tag in EQUIPMENT_RULES:
        if pattern.search(name) and tag not in equipment:
            equipment.append(tag)

    # Olympic and powerlifting lifts default to the barbell.
    if category in ("olympic_weightlifting", "powerlifting") and not equipment:
        if BARBELL_DEFAULT_RE.search(name):
            equipment.append("barbell")

    return equipment or [BODYWEIGHT]


def infer_modality(category, patterns):
    if category == "aerobic":
        return "aerobic"
    if category == "mobility":
        return "mobility"
    if category == "gymnastics":
        return "skill"
    if any(tag.startswith("olympic_") for tag in patterns):
        return "skill"
    if "cardio" in patterns:
        return "conditioning"
    return "strength"


def infer_level(name):
    if ADVANCED_RE.search(name):
        return "advanced"
    if BEGINNER_RE.search(name):
        return "beginner"
    return "intermediate"


def build_movement_record(name, category):
    """Tag one movement name with every registry field."""
    clean_name = re.sub(r"\s+", " ", re.sub(r"\(.*?\)", "", name or "")).strip()
    if category not in CATEGORIES:
        raise ValueError(f"Unknown movement category: {category}")

    patterns = infer_patterns(clean_name, category)
    equipment = infer_equipment(clean_name, category)
    record = {
        "name": clean_name,
        "category": category,
        "patterns": patterns,
        "equipment": equipment,
        "modality": infer_modality(category, patterns),
        "level": infer_level(clean_name),
    }
    if clean_name.lower() in MAIN_FILLER_NAMES:
        record["banned_in_main_when_equipment"] = True
    return record
