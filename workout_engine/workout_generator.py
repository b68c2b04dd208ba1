"""
Deterministic workout generation.

request -> style policy + pattern pack -> seeded movement selection per block
-> schemes -> warm-up/main/cool-down workout -> acceptance flags.
"""

import math

from workout_engine.acceptance import validate_workout
from workout_engine.config import DEFAULT_CONFIG
from workout_engine.movement_registry import MovementRegistry, RegistryConfigError, get_registry
from workout_engine.movement_taxonomy import BODYWEIGHT, is_loaded, normalize_equipment
from workout_engine.pattern_packs import build_pattern_pack
from workout_engine.schemes import (
    apply_health_caps,
    assign_scheme,
    compute_hardness,
    estimate_intensity,
    prescribe,
)
from workout_engine.seeded_random import SeededRandom
from workout_engine.style_policies import banned_name_match, get_policy, resolve_style
from workout_engine.warmup_cooldown import build_cooldown_block, build_warmup_block


def _clamp_int(value, default, low, high):
    """Integer in [low, high]; unparseable values and NaN fall back to `default`."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    # Clamp before rounding so infinities never reach int().
    return int(round(max(low, min(high, number))))


def _normalize_constraints(values):
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    terms = []
    for value in values:
        term = str(value or "").strip().lower()
        if term and term not in terms:
            terms.append(term)
    return terms


class WorkoutGenerator:
    """Builds reproducible workouts from a movement registry."""

    def __init__(self, registry=None, config=None):
        """
        Args:
            registry: MovementRegistry to draw from (defaults to the shared registry)
            config: Configuration dictionary (defaults to built-in values)
        """
        self.config = config or DEFAULT_CONFIG
        settings = {**DEFAULT_CONFIG["generator"], **(self.config.get("generator") or {})}
        self.name = settings["name"]
        self.min_minutes = settings["min_minutes"]
        self.max_minutes = settings["max_minutes"]
        self.default_minutes = settings["default_minutes"]
        self.default_intensity = settings["default_intensity"]
        if registry is None:
            registry_path = settings.get("registry_path")
            registry = MovementRegistry.from_file(registry_path) if registry_path else get_registry()
        self.registry = registry

    def normalize_request(self, request):
        """Clamp and canonicalize a raw request dict."""
        request = request or {}
        style = resolve_style(request)
        minutes = _clamp_int(request.get("minutes"), self.default_minutes, self.min_minutes, self.max_minutes)
        intensity = _clamp_int(request.get("intensity"), self.default_intensity, 1, 10)
        equipment = normalize_equipment(request.get("equipment"))

        health = request.get("health")
        if not isinstance(health, dict):
            health = {}

        seed = str(request.get("seed") or "").strip()
        if not seed:
            seed = f"{style}-{minutes}-{intensity}"

        return {
            "style": style,
            "goal": request.get("goal") or request.get("style") or request.get("focus") or style,
            "minutes": minutes,
            "intensity": intensity,
            "equipment": equipment,
            "seed": seed,
            "constraints": _normalize_constraints(request.get("constraints")),
            "health": health,
        }

    def _candidate_pool(self, block, policy, req, used_ids):
        """Ordered candidates for a block: loaded first when the block requires load."""
        selection = block["selection"]
        equipment = req["equipment"]
        has_gear = equipment is None or any(tag != BODYWEIGHT for tag in equipment)
        banned_main = set(policy["banned_main_patterns"])

        candidates = []
        for movement in self.registry.query(
            categories=selection["categories"],
            patterns=selection["patterns"],
            modalities=selection["modalities"],
            equipment=equipment,
            exclude_banned_mains=has_gear,
        ):
            if banned_name_match(movement["name"], policy):
                continue
            if banned_main.intersection(movement["patterns"]):
                continue
            name = movement["name"].lower()
            if any(term in name or term in movement["patterns"] for term in req["constraints"]):
                continue
            candidates.append(movement)

        if policy["require_barbell_only"]:
            barbell = [movement for movement in candidates if "barbell" in movement["equipment"]]
            candidates = barbell or candidates

        fresh = [movement for movement in candidates if movement["id"] not in used_ids]
        if len(fresh) >= selection["item_count"]:
            candidates = fresh

        if selection.get("require_loaded"):
            loaded = [movement for movement in candidates if is_loaded(movement["equipment"])]
            unloaded = [movement for movement in candidates if not is_loaded(movement["equipment"])]
            candidates = loaded + unloaded
        return candidates

    def _select_block(self, block_index, block, pool, req, uncovered_groups):
        """Seeded draw of `item_count` distinct movements from the pool."""
        selection = block["selection"]
        chosen = []
        for slot in range(selection["item_count"]):
            chosen_ids = {movement["id"] for movement in chosen}
            remaining = [movement for movement in pool if movement["id"] not in chosen_ids]
            if not remaining:
                break

            if selection.get("require_loaded"):
                loaded = [movement for movement in remaining if is_loaded(movement["equipment"])]
                remaining = loaded or remaining

            for group in uncovered_groups:
                steered = [movement for movement in remaining if set(group).intersection(movement["patterns"])]
                if steered:
                    remaining = steered
                    break

            rng = SeededRandom.for_slot(req["seed"], block_index, slot)
            pick = remaining[rng.randint(len(remaining))]
            chosen.append(pick)
            uncovered_groups[:] = [
                group for group in uncovered_groups if not set(group).intersection(pick["patterns"])
            ]
        return chosen

    def _build_item(self, movement, scheme, slot):
        return {
            "movement_id": movement["id"],
            "exercise": movement["name"],
            "category": movement["category"],
            "patterns": list(movement["patterns"]),
            "equipment": list(movement["equipment"]),
            "prescription": prescribe(scheme, movement, slot),
            "notes": "",
        }

    def generate(self, request):
        """
        Generate one workout.

        Returns:
            dict with keys: workout, choices
        """
        req = self.normalize_request(request)
        policy = get_policy(req["style"])
        if not self.registry.count_in_categories(policy["allowed_categories"]):
            raise RegistryConfigError(
                f"No movements in the registry for style '{req['style']}' "
                f"(categories: {', '.join(policy['allowed_categories'])})"
            )

        capped, coaching_notes = apply_health_caps(req["intensity"], req["health"])
        pack = build_pattern_pack(req["style"], req["minutes"], capped, req["equipment"])

        uncovered = [list(group) for group in pack.get("required_patterns") or []]
        used_ids = set()
        pool_ids = []
        selection_trace = []
        scheme_ids = []
        main_blocks = []

        for index, block in enumerate(pack["main_blocks"]):
            pool = self._candidate_pool(block, policy, req, used_ids)
            chosen = self._select_block(index, block, pool, req, uncovered)
            used_ids.update(movement["id"] for movement in chosen)
            for movement in pool:
                if movement["id"] not in pool_ids:
                    pool_ids.append(movement["id"])

            scheme = assign_scheme(
                block["pattern_shape"],
                block["minutes"],
                capped,
                item_count=len(chosen) or block["selection"]["item_count"],
                health=req["health"],
            )
            scheme_ids.append(scheme["scheme_id"])
            key = f"main_{index + 1}"
            selection_trace.append(
                {
                    "block": key,
                    "pool": [movement["id"] for movement in pool],
                    "chosen": [movement["id"] for movement in chosen],
                }
            )
            main_blocks.append(
                {
                    "key": key,
                    "kind": block["kind"],
                    "title": block.get("title") or scheme["label"],
                    "minutes": block["minutes"],
                    "pattern_shape": block["pattern_shape"],
                    "scheme": scheme,
                    "selection": block["selection"],
                    "notes": block.get("notes") or "",
                    "items": [self._build_item(movement, scheme, slot) for slot, movement in enumerate(chosen)],
                }
            )

        blocks = []
        if pack["warmup_minutes"] > 0:
            blocks.append(build_warmup_block(pack["warmup_minutes"], req["equipment"]))
        blocks.extend(main_blocks)
        if pack["cooldown_minutes"] > 0:
            blocks.append(build_cooldown_block(pack["cooldown_minutes"]))

        workout = {
            "title": f"{pack['name']} {req['minutes']} min",
            "blocks": blocks,
            "meta": {},
        }
        result = validate_workout(workout, policy, req["minutes"], self.registry)

        estimated = estimate_intensity(capped, result["main_loaded_ratio"], policy["min_loaded_ratio"])
        if estimated < capped:
            coaching_notes.append("Loaded work came in under the style floor, estimated intensity reduced.")

        workout["meta"] = {
            "generator": self.name,
            "seed": req["seed"],
            "style": req["style"],
            "goal": req["goal"],
            "template_id": pack["template_id"],
            "total_minutes": sum(block["minutes"] for block in blocks),
            "requested_minutes": req["minutes"],
            "requested_intensity": req["intensity"],
            "estimated_intensity": estimated,
            "hardness": compute_hardness(main_blocks, req["style"], req["equipment"], capped),
            "hardness_floor": pack["hardness_floor"],
            "main_loaded_ratio": result["main_loaded_ratio"],
            "acceptance_flags": result["flags"],
            "violations": result["violations"],
            "coaching_notes": coaching_notes,
            "selection_trace": selection_trace,
            "equipment": req["equipment"],
        }

        return {
            "workout": workout,
            "choices": {
                "template_id": pack["template_id"],
                "movement_pool_ids": pool_ids,
                "scheme_id": "+".join(scheme_ids),
            },
        }


def generate_workout(request, registry=None, config=None):
    """Generate a workout with a fresh generator."""
    return WorkoutGenerator(registry=registry, config=config).generate(request)
