import unittest

from workout_engine.pattern_packs import (
    AMRAP,
    E2_00,
    STATIC_PACKS,
    STEADY,
    VO2,
    INTERVALS,
    build_olympic_pack,
    build_pattern_pack,
    fold_dropped_blocks,
    pack_total_minutes,
    pick_cyclical,
    reserve_main_budget,
    time_fit_tolerance,
)
from workout_engine.style_policies import SUPPORTED_STYLES


def _mains(pack):
    return [block["minutes"] for block in pack["main_blocks"]]


class OlympicPackTests(unittest.TestCase):
    def test_split_variant_for_normal_session(self):
        pack = build_pattern_pack("olympic_weightlifting", 45)
        self.assertEqual(pack["template_id"], "olympic_weightlifting:split")
        self.assertEqual([block["title"] for block in pack["main_blocks"]], ["Snatch Complex", "Clean & Jerk Complex"])
        self.assertEqual([block["pattern_shape"] for block in pack["main_blocks"]], [E2_00, E2_00])
        self.assertEqual(pack["main_blocks"][0]["selection"]["patterns"], ["olympic_snatch"])
        self.assertEqual(pack["main_blocks"][1]["selection"]["patterns"], ["olympic_cleanjerk"])
        self.assertEqual((pack["warmup_minutes"], pack["cooldown_minutes"]), (8, 6))
        self.assertEqual(_mains(pack), [16, 16])
        self.assertEqual(pack_total_minutes(pack), 46)
        self.assertLessEqual(abs(pack_total_minutes(pack) - 45), time_fit_tolerance(45))

    def test_combined_variant_for_short_session(self):
        pack = build_pattern_pack("olympic_weightlifting", 20)
        self.assertEqual(pack["template_id"], "olympic_weightlifting:combined")
        self.assertEqual((pack["warmup_minutes"], pack["cooldown_minutes"]), (6, 4))
        self.assertEqual(_mains(pack), [10])
        block = pack["main_blocks"][0]
        self.assertEqual(block["selection"]["patterns"], ["olympic_snatch", "olympic_cleanjerk"])
        self.assertEqual(block["selection"]["item_count"], 2)

    def test_long_session_grows_both_blocks(self):
        pack = build_pattern_pack("olympic_weightlifting", 60)
        self.assertEqual(_mains(pack), [23, 23])
        self.assertEqual(pack_total_minutes(pack), 60)

    def test_combined_block_takes_whole_budget(self):
        pack = build_olympic_pack(36)
        self.assertEqual(_mains(pack), [22])

    def test_required_patterns(self):
        pack = build_pattern_pack("oly", 45)
        self.assertEqual(pack["required_patterns"], [["olympic_snatch"], ["olympic_cleanjerk"]])


class StaticPackTests(unittest.TestCase):
    def test_crossfit_rescaled_to_45(self):
        pack = build_pattern_pack("crossfit", 45)
        self.assertEqual(pack["template_id"], "crossfit:static")
        self.assertEqual(_mains(pack), [14, 17])
        self.assertEqual(pack_total_minutes(pack), 45)

    def test_tight_session_compresses_warmup_and_cooldown(self):
        pack = build_pattern_pack("crossfit", 24)
        self.assertEqual((pack["warmup_minutes"], pack["cooldown_minutes"]), (6, 4))
        self.assertEqual(_mains(pack), [6, 8])

    def test_blocks_dropped_when_budget_is_small(self):
        pack = build_pattern_pack("powerlifting", 15)
        self.assertEqual((pack["warmup_minutes"], pack["cooldown_minutes"]), (2, 3))
        self.assertEqual(_mains(pack), [6, 4])
        folded = pack["main_blocks"][-1]["selection"]
        self.assertEqual(folded["item_count"], 2)
        for tag in ("squat", "bench", "hinge", "pull"):
            self.assertIn(tag, folded["patterns"])
        self.assertIn("conditioning", folded["modalities"])

    def test_powerlifting_proportional_scaling(self):
        self.assertEqual(_mains(build_pattern_pack("powerlifting", 30)), [7, 5, 4])
        self.assertEqual(_mains(build_pattern_pack("mixed", 45)), [11, 11, 9])

    def test_mobility_keeps_short_warmup(self):
        pack = build_pattern_pack("mobility", 18)
        self.assertEqual((pack["warmup_minutes"], pack["cooldown_minutes"]), (4, 4))
        self.assertEqual(pack_total_minutes(pack), 18)

    def test_packs_are_fresh_copies(self):
        pack = build_pattern_pack("crossfit", 45)
        pack["main_blocks"][0]["minutes"] = 99
        self.assertEqual(STATIC_PACKS["crossfit"]["main_blocks"][0]["minutes"], 12)

    def test_unknown_style_uses_mixed_pack(self):
        self.assertEqual(build_pattern_pack("zumba", 45)["template_id"], "mixed:static")

    def test_every_style_fits_every_duration(self):
        for style in SUPPORTED_STYLES:
            for minutes in (10, 20, 30, 45, 60, 90, 120):
                pack = build_pattern_pack(style, minutes)
                self.assertLessEqual(
                    abs(pack_total_minutes(pack) - minutes), time_fit_tolerance(minutes), f"{style} {minutes}"
                )
                self.assertGreaterEqual(len(pack["main_blocks"]), 1)


    def test_fold_dropped_blocks_keeps_required_slots(self):
        kept = [
            {"selection": {"categories": ["powerlifting"], "patterns": ["squat", "bench"],
                           "modalities": ["strength"], "item_count": 1, "require_loaded": False}},
        ]
        dropped = [
            {"selection": {"categories": ["crossfit"], "patterns": ["bench", "pull"],
                           "modalities": ["conditioning"], "item_count": 2, "require_loaded": True}},
        ]
        fold_dropped_blocks(kept, dropped, required_count=3)
        selection = kept[0]["selection"]
        self.assertEqual(selection["categories"], ["powerlifting", "crossfit"])
        self.assertEqual(selection["patterns"], ["squat", "bench", "pull"])
        self.assertEqual(selection["modalities"], ["strength", "conditioning"])
        self.assertEqual(selection["item_count"], 3)
        self.assertTrue(selection["require_loaded"])


class EndurancePackTests(unittest.TestCase):
    def test_intensity_picks_structure(self):
        self.assertEqual(build_pattern_pack("endurance", 45, intensity=4)["main_blocks"][0]["pattern_shape"], STEADY)
        self.assertEqual(build_pattern_pack("endurance", 45, intensity=6)["main_blocks"][0]["pattern_shape"], INTERVALS)
        self.assertEqual(build_pattern_pack("endurance", 45, intensity=9)["main_blocks"][0]["pattern_shape"], VO2)

    def test_single_block_sized_to_budget(self):
        pack = build_pattern_pack("endurance", 45, intensity=6, equipment=["rower"])
        self.assertEqual(pack["template_id"], "endurance:intervals")
        self.assertEqual(_mains(pack), [31])
        block = pack["main_blocks"][0]
        self.assertEqual(block["selection"]["patterns"], ["row"])
        self.assertIn("Row", block["title"])
        self.assertIn("Z3-Z4", block["notes"])

    def test_ten_minute_session_is_all_main(self):
        pack = build_pattern_pack("endurance", 10)
        self.assertEqual((pack["warmup_minutes"], pack["cooldown_minutes"]), (0, 0))
        self.assertEqual(_mains(pack), [10])

    def test_pick_cyclical(self):
        self.assertEqual(pick_cyclical(["bike", "rower"]), ("Row", ["row"]))
        self.assertEqual(pick_cyclical(["treadmill"]), ("Run", ["run"]))
        self.assertEqual(pick_cyclical(None), ("Jump Rope", ["jump_rope"]))


class BudgetTests(unittest.TestCase):
    def test_reserve_main_budget_shrinks_larger_first(self):
        self.assertEqual(reserve_main_budget(8, 6, 45), (8, 6))
        self.assertEqual(reserve_main_budget(6, 4, 15), (2, 3))
        self.assertEqual(reserve_main_budget(5, 3, 10), (0, 0))

    def test_shapes_in_static_packs(self):
        self.assertEqual(STATIC_PACKS["gymnastics"]["main_blocks"][1]["pattern_shape"], AMRAP)


if __name__ == "__main__":
    unittest.main()
