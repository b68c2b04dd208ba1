import os
import tempfile
import unittest

from workout_engine.movement_registry import (
    MovementRegistry,
    RegistryConfigError,
    get_registry,
    reset_registry,
)
from workout_engine.movement_taxonomy import CATEGORIES


SAMPLE_RECORDS = [
    {"name": "Back Squat", "category": "powerlifting", "patterns": ["squat"], "equipment": ["barbell"],
     "modality": "strength", "level": "intermediate"},
    {"name": "Air Squat", "category": "crossfit", "patterns": ["squat"], "equipment": ["bodyweight"],
     "modality": "conditioning", "level": "beginner"},
    {"name": "KB Swing", "category": "crossfit", "patterns": ["hinge"], "equipment": ["kettlebell"],
     "modality": "conditioning", "level": "beginner", "aliases": ["Kettlebell Swing"]},
    {"name": "Box Jump", "category": "crossfit", "patterns": ["jump", "squat"], "equipment": ["bodyweight", "box"],
     "modality": "conditioning", "level": "beginner"},
    {"name": "Wall Sit", "category": "crossfit", "patterns": ["squat"], "equipment": ["bodyweight"],
     "modality": "conditioning", "level": "beginner", "banned_in_main_when_equipment": True},
]


def _ids(movements):
    return [movement["id"] for movement in movements]


class MovementRegistryQueryTests(unittest.TestCase):
    def setUp(self):
        self.registry = MovementRegistry(SAMPLE_RECORDS)

    def test_query_keeps_registry_order(self):
        self.assertEqual(
            _ids(self.registry.query(patterns=["squat"])),
            ["back-squat", "air-squat", "box-jump", "wall-sit"],
        )

    def test_bodyweight_only_equipment(self):
        self.assertEqual(
            _ids(self.registry.query(patterns=["squat"], equipment=["bodyweight"])),
            ["air-squat", "wall-sit"],
        )

    def test_equipment_is_subset_match_and_bodyweight_always_matches(self):
        self.assertEqual(
            _ids(self.registry.query(categories=["crossfit"], equipment=["kettlebell"])),
            ["air-squat", "kb-swing", "wall-sit"],
        )
        self.assertIn("box-jump", _ids(self.registry.query(categories=["crossfit"], equipment=["box"])))

    def test_and_across_filters_or_within(self):
        results = self.registry.query(categories=["crossfit", "powerlifting"], patterns=["hinge", "jump"])
        self.assertEqual(_ids(results), ["kb-swing", "box-jump"])
        self.assertEqual(_ids(self.registry.query(modalities=["strength"])), ["back-squat"])

    def test_exclusions(self):
        self.assertNotIn("back-squat", _ids(self.registry.query(patterns=["squat"], exclude_ids=["back-squat"])))
        self.assertNotIn("wall-sit", _ids(self.registry.query(patterns=["squat"], exclude_banned_mains=True)))

    def test_lookup_by_id_name_and_alias(self):
        self.assertEqual(self.registry.get("kb-swing")["name"], "KB Swing")
        self.assertEqual(self.registry.find_by_name("kb swing")["id"], "kb-swing")
        self.assertEqual(self.registry.find_by_name("Kettlebell Swing")["id"], "kb-swing")
        self.assertIsNone(self.registry.find_by_name(""))
        self.assertIsNone(self.registry.get("missing"))

    def test_records_are_read_only(self):
        movement = self.registry.get("back-squat")
        with self.assertRaises(TypeError):
            movement["name"] = "Front Squat"
        self.assertIsInstance(movement["patterns"], tuple)

    def test_missing_tags_fall_back(self):
        registry = MovementRegistry(
            [{"name": "Mystery Move", "category": "crossfit", "modality": "conditioning"}]
        )
        movement = registry.get("mystery-move")
        self.assertEqual(movement["patterns"], ("general",))
        self.assertEqual(movement["equipment"], ("bodyweight",))
        self.assertEqual(movement["level"], "intermediate")


class MovementRegistryErrorTests(unittest.TestCase):
    def test_empty_registry_is_fatal(self):
        with self.assertRaises(RegistryConfigError):
            MovementRegistry([])

    def test_duplicate_ids_are_fatal(self):
        records = [SAMPLE_RECORDS[0], dict(SAMPLE_RECORDS[0], name="back squat")]
        with self.assertRaises(RegistryConfigError):
            MovementRegistry(records)

    def test_unknown_category_is_fatal(self):
        with self.assertRaises(RegistryConfigError):
            MovementRegistry([dict(SAMPLE_RECORDS[0], category="zumba")])

    def test_missing_file_is_fatal(self):
        with self.assertRaises(RegistryConfigError):
            MovementRegistry.from_file("/nonexistent/movements.yaml")

    def test_file_without_movement_list_is_fatal(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "movements.yaml")
            with open(path, "w", encoding="utf-8") as f:
                f.write("movements: not-a-list\n")
            with self.assertRaises(RegistryConfigError):
                MovementRegistry.from_file(path)

    def test_file_with_empty_list_is_fatal(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "movements.yaml")
            with open(path, "w", encoding="utf-8") as f:
                f.write("movements: []\n")
            with self.assertRaises(RegistryConfigError):
                MovementRegistry.from_file(path)


class BundledRegistryTests(unittest.TestCase):
    def setUp(self):
        self.registry = MovementRegistry.from_file()

    def test_every_category_is_populated(self):
        for category in CATEGORIES:
            self.assertGreater(self.registry.count_in_categories([category]), 0, category)

    def test_olympic_lifts_cover_both_families_with_barbell(self):
        snatches = self.registry.query(categories=["olympic_weightlifting"], patterns=["olympic_snatch"])
        clean_jerks = self.registry.query(categories=["olympic_weightlifting"], patterns=["olympic_cleanjerk"])
        self.assertGreaterEqual(len(snatches), 3)
        self.assertGreaterEqual(len(clean_jerks), 3)
        for movement in snatches + clean_jerks:
            self.assertIn("barbell", movement["equipment"])

    def test_ids_derive_from_names(self):
        self.assertEqual(self.registry.find_by_name("Clean and Jerk")["id"], "clean-and-jerk")
        self.assertEqual(self.registry.find_by_name("C&J")["id"], "clean-and-jerk")

    def test_singleton(self):
        reset_registry()
        try:
            self.assertIs(get_registry(), get_registry())
        finally:
            reset_registry()


if __name__ == "__main__":
    unittest.main()
