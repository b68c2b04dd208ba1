"""
Style keys and per-style content policies.

Policies are declarative records looked up by canonical style key; the pack
builder and acceptance checks consume them, neither branches on style names.
"""

import re


SUPPORTED_STYLES = (
    "crossfit",
    "olympic_weightlifting",
    "powerlifting",
    "bb_full_body",
    "bb_upper",
    "bb_lower",
    "aerobic",
    "endurance",
    "conditioning",
    "strength",
    "gymnastics",
    "mobility",
    "mixed",
)

DEFAULT_STYLE = "mixed"

STYLE_ALIASES = {
    "cf": "crossfit",
    "wod": "crossfit",
    "oly": "olympic_weightlifting",
    "olympic": "olympic_weightlifting",
    "weightlifting": "olympic_weightlifting",
    "pl": "powerlifting",
    "powerlift": "powerlifting",
    "bodybuilding": "bb_full_body",
    "bb": "bb_full_body",
    "bbfull": "bb_full_body",
    "bb full body": "bb_full_body",
    "full body": "bb_full_body",
    "bb upper": "bb_upper",
    "upper": "bb_upper",
    "upper body": "bb_upper",
    "bb lower": "bb_lower",
    "lower": "bb_lower",
    "lower body": "bb_lower",
    "legs": "bb_lower",
    "cardio": "aerobic",
    "zone 2": "aerobic",
    "run": "endurance",
    "running": "endurance",
    "hiit": "conditioning",
    "metcon": "conditioning",
    "circuit": "conditioning",
    "strength training": "strength",
    "gym": "gymnastics",
    "calisthenics": "gymnastics",
    "stretching": "mobility",
    "recovery": "mobility",
    "yoga": "mobility",
    "hybrid": "mixed",
}

REQUEST_STYLE_FIELDS = ("style", "goal", "focus")


def normalize_style(value):
    """
    Map any input to a supported style key. Never fails: unknown or empty
    input resolves to "mixed".
    """
    raw = re.sub(r"[\s\-]+", " ", str(value if value is not None else "").strip().lower())
    if not raw:
        return DEFAULT_STYLE

    underscored = raw.replace(" ", "_")
    if underscored in SUPPORTED_STYLES:
        return underscored
    if raw in STYLE_ALIASES:
        return STYLE_ALIASES[raw]
    if underscored in STYLE_ALIASES:
        return STYLE_ALIASES[underscored]
    if "olympic" in raw:
        return "olympic_weightlifting"
    if "bodybuilding" in raw:
        return "bb_full_body"
    return DEFAULT_STYLE


def resolve_style(request):
    """Canonical style for a request dict, reading style, then goal, then focus."""
    request = request or {}
    for field in REQUEST_STYLE_FIELDS:
        value = request.get(field)
        if value is not None and str(value).strip():
            return normalize_style(value)
    return DEFAULT_STYLE


OLYMPIC_PATTERNS = ["olympic_snatch", "olympic_cleanjerk"]
BODYBUILDING_CATEGORIES = ["bb_full_body", "bb_upper", "bb_lower"]

STYLE_POLICY_DEFS = {
    "olympic_weightlifting": {
        "allowed_categories": ["olympic_weightlifting"],
        "required_pattern_groups": [["olympic_snatch"], ["olympic_cleanjerk"]],
        "banned_names": [r"db snatch", r"thruster", r"bear crawl", r"star jump", r"burpee", r"mountain climber"],
        "min_loaded_ratio": 0.85,
        "require_barbell_only": True,
        "hardness_floor": 0.85,
    },
    "powerlifting": {
        "allowed_categories": ["powerlifting"],
        "required_pattern_groups": [["squat"], ["bench"], ["hinge"]],
        "banned_names": [r"thruster", r"burpee", r"double under"],
        "min_loaded_ratio": 0.85,
        "hardness_floor": 0.85,
    },
    "crossfit": {
        "allowed_categories": ["crossfit", "powerlifting", "olympic_weightlifting"],
        "banned_names": [r"wall sit", r"star jump", r"high knees", r"jumping jacks?"],
        "min_loaded_ratio": 0.60,
        "hardness_floor": 0.85,
    },
    "bb_full_body": {
        "allowed_categories": BODYBUILDING_CATEGORIES,
        "min_loaded_ratio": 0.70,
        "hardness_floor": 0.80,
    },
    "bb_upper": {
        "allowed_categories": ["bb_upper"],
        "min_loaded_ratio": 0.70,
        "hardness_floor": 0.80,
    },
    "bb_lower": {
        "allowed_categories": ["bb_lower"],
        "min_loaded_ratio": 0.70,
        "hardness_floor": 0.80,
    },
    "aerobic": {
        "allowed_categories": ["aerobic"],
        "banned_main_patterns": OLYMPIC_PATTERNS + ["squat", "hinge", "bench"],
        "hardness_floor": 0.70,
    },
    "endurance": {
        "allowed_categories": ["aerobic"],
        "banned_main_patterns": OLYMPIC_PATTERNS + ["squat", "hinge", "press", "pull", "bench"],
        "hardness_floor": 0.50,
    },
    "gymnastics": {
        "allowed_categories": ["gymnastics"],
        "hardness_floor": 0.75,
    },
    "mobility": {
        "allowed_categories": ["mobility"],
        "hardness_floor": 0.40,
    },
    "conditioning": {
        "allowed_categories": ["crossfit", "aerobic", "gymnastics"],
        "banned_names": [r"wall sit", r"star jump"],
        "hardness_floor": 0.85,
    },
    "strength": {
        "allowed_categories": ["powerlifting"] + BODYBUILDING_CATEGORIES,
        "banned_main_patterns": OLYMPIC_PATTERNS,
        "min_loaded_ratio": 0.70,
        "hardness_floor": 0.85,
    },
    "mixed": {
        "allowed_categories": ["crossfit", "powerlifting", "aerobic", "gymnastics"] + BODYBUILDING_CATEGORIES,
        "min_loaded_ratio": 0.50,
        "hardness_floor": 0.85,
    },
}


def _compile_policy(key, definition):
    return {
        "key": key,
        "allowed_categories": tuple(definition.get("allowed_categories", [])),
        "required_pattern_groups": tuple(tuple(group) for group in definition.get("required_pattern_groups", [])),
        "banned_name_patterns": tuple(
            re.compile(pattern, re.IGNORECASE) for pattern in definition.get("banned_names", [])
        ),
        "banned_main_patterns": tuple(definition.get("banned_main_patterns", [])),
        "min_loaded_ratio": definition.get("min_loaded_ratio"),
        "require_barbell_only": bool(definition.get("require_barbell_only", False)),
        "hardness_floor": float(definition.get("hardness_floor", 0.0)),
    }


STYLE_POLICIES = {key: _compile_policy(key, definition) for key, definition in STYLE_POLICY_DEFS.items()}


def get_policy(style):
    """Policy for any style input; unknown keys get the mixed policy."""
    key = style if style in STYLE_POLICIES else normalize_style(style)
    return STYLE_POLICIES.get(key, STYLE_POLICIES[DEFAULT_STYLE])


def banned_name_match(name, policy):
    """First banned-name rule the name matches, or None."""
    for pattern in policy["banned_name_patterns"]:
        if pattern.search(name or ""):
            return pattern.pattern
    return None
