import unittest

from workout_engine.acceptance import (
    check_banned_names,
    check_required_patterns,
    main_loaded_ratio,
    missing_pattern_groups,
    validate_workout,
    workout_total_minutes,
)
from workout_engine.movement_registry import MovementRegistry
from workout_engine.style_policies import get_policy


def _item(name, patterns, equipment, category="olympic_weightlifting"):
    return {"exercise": name, "patterns": list(patterns), "equipment": list(equipment), "category": category}


def _workout(main_items, selection_patterns, item_count=None, warmup_items=None, minutes=(8, 31, 6)):
    return {
        "title": "Test",
        "blocks": [
            {"key": "warmup", "kind": "warmup", "minutes": minutes[0], "items": warmup_items or []},
            {
                "key": "main_1",
                "kind": "strength",
                "title": "Main",
                "minutes": minutes[1],
                "selection": {"patterns": selection_patterns, "item_count": item_count or len(main_items)},
                "items": main_items,
            },
            {"key": "cooldown", "kind": "cooldown", "minutes": minutes[2], "items": []},
        ],
    }


SNATCH = _item("Power Snatch", ["olympic_snatch"], ["barbell"])
CLEAN_JERK = _item("Clean and Jerk", ["olympic_cleanjerk"], ["barbell"])
DB_SNATCH = _item("DB Snatch", ["olympic_snatch", "hinge"], ["dumbbell"], category="crossfit")
OLY = ["olympic_snatch", "olympic_cleanjerk"]


class ValidateWorkoutTests(unittest.TestCase):
    def setUp(self):
        self.policy = get_policy("olympic_weightlifting")

    def test_clean_olympic_session_passes(self):
        result = validate_workout(_workout([SNATCH, CLEAN_JERK], OLY), self.policy, 45)
        self.assertEqual(
            result["flags"],
            {"time_fit": True, "style_ok": True, "patterns_locked": True, "loaded_ratio_ok": True},
        )
        self.assertEqual(result["violations"], [])
        self.assertEqual(result["main_loaded_ratio"], 1.0)

    def test_db_snatch_breaks_style(self):
        result = validate_workout(_workout([DB_SNATCH, CLEAN_JERK], OLY), self.policy, 45)
        codes = {violation["code"] for violation in result["violations"]}
        self.assertIn("banned_name", codes)
        self.assertIn("category_not_allowed", codes)
        self.assertIn("barbell_only", codes)
        self.assertFalse(result["flags"]["style_ok"])

    def test_banned_name_in_warmup_counts(self):
        warmup = [{"exercise": "Burpee", "movement_id": None}]
        result = validate_workout(_workout([SNATCH, CLEAN_JERK], OLY, warmup_items=warmup), self.policy, 45)
        hits = [violation for violation in result["violations"] if violation["code"] == "banned_name"]
        self.assertEqual(len(hits), 1)
        self.assertEqual(hits[0]["block"], "warmup")

    def test_missing_group_is_style_violation(self):
        result = validate_workout(_workout([SNATCH], OLY), self.policy, 45)
        self.assertFalse(result["flags"]["style_ok"])
        self.assertEqual(missing_pattern_groups(_workout([SNATCH], OLY), self.policy["required_pattern_groups"]),
                         [["olympic_cleanjerk"]])

    def test_individual_checks(self):
        self.assertTrue(check_required_patterns(_workout([SNATCH, CLEAN_JERK], OLY), self.policy))
        self.assertFalse(check_required_patterns(_workout([SNATCH], OLY), self.policy))
        self.assertTrue(check_banned_names(_workout([SNATCH, CLEAN_JERK], OLY), self.policy))
        self.assertFalse(check_banned_names(_workout([DB_SNATCH], OLY), self.policy))

    def test_time_fit(self):
        workout = _workout([SNATCH, CLEAN_JERK], OLY, minutes=(8, 20, 6))
        self.assertEqual(workout_total_minutes(workout), 34)
        result = validate_workout(workout, self.policy, 45)
        self.assertFalse(result["flags"]["time_fit"])
        self.assertEqual(result["violations"][0]["code"], "time_fit")

    def test_shortfall_unlocks_patterns(self):
        result = validate_workout(_workout([SNATCH, CLEAN_JERK], OLY, item_count=3), self.policy, 45)
        self.assertFalse(result["flags"]["patterns_locked"])
        self.assertTrue(result["flags"]["style_ok"])
        self.assertIn("block_shortfall", {violation["code"] for violation in result["violations"]})

    def test_item_outside_block_patterns_unlocks(self):
        result = validate_workout(_workout([SNATCH, CLEAN_JERK], ["olympic_snatch"]), self.policy, 45)
        self.assertFalse(result["flags"]["patterns_locked"])

    def test_loaded_ratio_floor(self):
        box_jump = _item("Box Jump", ["jump"], ["bodyweight", "box"], category="crossfit")
        air_squat = _item("Air Squat", ["squat"], ["bodyweight"], category="crossfit")
        back_squat = _item("Back Squat", ["squat"], ["barbell"], category="powerlifting")
        workout = _workout([back_squat, box_jump, air_squat], ["squat", "jump"])
        self.assertEqual(main_loaded_ratio(workout), 0.333)
        result = validate_workout(workout, get_policy("crossfit"), 45)
        self.assertFalse(result["flags"]["loaded_ratio_ok"])
        self.assertTrue(validate_workout(workout, get_policy("gymnastics"), 45)["flags"]["loaded_ratio_ok"])

    def test_no_main_items_ratio_is_zero(self):
        self.assertEqual(main_loaded_ratio(_workout([], OLY, item_count=0)), 0.0)

    def test_endurance_rejects_strength_patterns(self):
        row = _item("Row", ["cardio", "row", "cyclical"], ["rower"], category="aerobic")
        squat = _item("Back Squat", ["squat"], ["barbell"], category="powerlifting")
        result = validate_workout(_workout([row, squat], ["row", "squat"]), get_policy("endurance"), 45)
        codes = [violation["code"] for violation in result["violations"]]
        self.assertIn("banned_main_pattern", codes)
        self.assertFalse(result["flags"]["style_ok"])

    def test_items_resolved_through_registry(self):
        registry = MovementRegistry([
            {"name": "Power Snatch", "category": "olympic_weightlifting", "patterns": ["olympic_snatch"],
             "equipment": ["barbell"], "modality": "skill", "level": "advanced"},
            {"name": "Clean and Jerk", "category": "olympic_weightlifting", "patterns": ["olympic_cleanjerk"],
             "equipment": ["barbell"], "modality": "skill", "level": "advanced", "aliases": ["C&J"]},
        ])
        items = [{"exercise": "Power Snatch", "movement_id": "power-snatch"}, {"exercise": "C&J"}]
        result = validate_workout(_workout(items, OLY), self.policy, 45, registry=registry)
        self.assertTrue(all(result["flags"].values()))


if __name__ == "__main__":
    unittest.main()
