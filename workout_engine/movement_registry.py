"""
Read-only movement catalog.

Single source of truth for which movements exist and how they are tagged.
Everything downstream (pack selection, acceptance checks) queries this instead
of matching exercise names ad hoc.
"""

import os
import re
from types import MappingProxyType

import yaml

from workout_engine.movement_taxonomy import (
    BODYWEIGHT,
    CATEGORIES,
    GENERAL_PATTERN,
    LEVELS,
    MODALITIES,
    slugify,
)


DEFAULT_REGISTRY_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "movements.yaml")


class RegistryConfigError(RuntimeError):
    """The movement catalog is missing, empty or malformed."""


def _name_key(name):
    return re.sub(r"\s+", " ", (name or "").strip().lower())


def _as_tuple(values):
    if values is None:
        return ()
    if isinstance(values, str):
        values = [values]
    result = []
    for value in values:
        tag = str(value).strip().lower()
        if tag and tag not in result:
            result.append(tag)
    return tuple(result)


def _build_movement(raw):
    """Validate one source record and freeze it into a read-only mapping."""
    if not isinstance(raw, dict):
        raise ValueError(f"Movement record must be a mapping, got {type(raw).__name__}")

    name = re.sub(r"\s+", " ", str(raw.get("name") or "").strip())
    if not name:
        raise ValueError("Movement name cannot be empty")

    category = str(raw.get("category") or "").strip().lower()
    if category not in CATEGORIES:
        raise ValueError(f"{name}: unknown category '{category}'")

    modality = str(raw.get("modality") or "").strip().lower()
    if modality not in MODALITIES:
        raise ValueError(f"{name}: unknown modality '{modality}'")

    level = str(raw.get("level") or "intermediate").strip().lower()
    if level not in LEVELS:
        raise ValueError(f"{name}: unknown level '{level}'")

    return MappingProxyType(
        {
            "id": slugify(name),
            "name": name,
            "category": category,
            "patterns": _as_tuple(raw.get("patterns")) or (GENERAL_PATTERN,),
            "equipment": _as_tuple(raw.get("equipment")) or (BODYWEIGHT,),
            "modality": modality,
            "level": level,
            "banned_in_main_when_equipment": bool(raw.get("banned_in_main_when_equipment", False)),
            "aliases": tuple(str(alias).strip() for alias in raw.get("aliases") or () if str(alias).strip()),
        }
    )


def equipment_available(movement, available):
    """True when every non-bodyweight tag of the movement is in the available set."""
    if available is None:
        return True
    required = [tag for tag in movement["equipment"] if tag != BODYWEIGHT]
    return all(tag in available for tag in required)


class MovementRegistry:
    """
    Immutable, ordered movement catalog.

    Usage:
        registry = MovementRegistry.from_file("workout_engine/data/movements.yaml")
        registry.query(categories=["olympic_weightlifting"], patterns=["olympic_snatch"],
                       equipment=["barbell"])
        registry.find_by_name("power snatch")["id"]  # -> "power-snatch"
    """

    def __init__(self, records, source=None):
        self.source = source or "<memory>"
        movements = []
        by_id = {}
        by_name = {}

        for raw in records or []:
            try:
                movement = _build_movement(raw)
            except ValueError as exc:
                raise RegistryConfigError(f"Invalid movement in {self.source}: {exc}") from exc

            if movement["id"] in by_id:
                raise RegistryConfigError(
                    f"Duplicate movement id '{movement['id']}' in {self.source} ({movement['name']})"
                )
            by_id[movement["id"]] = movement
            movements.append(movement)
            by_name.setdefault(_name_key(movement["name"]), movement)
            for alias in movement["aliases"]:
                by_name.setdefault(_name_key(alias), movement)

        if not movements:
            raise RegistryConfigError(f"Movement registry {self.source} has no entries")

        self._movements = tuple(movements)
        self._by_id = by_id
        self._by_name = by_name

    @classmethod
    def from_file(cls, path=None):
        """Load the catalog from a YAML file with a top-level `movements` list."""
        path = path or DEFAULT_REGISTRY_PATH
        if not os.path.exists(path):
            raise RegistryConfigError(f"Movement registry not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                payload = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise RegistryConfigError(f"Could not read movement registry {path}: {exc}") from exc

        if isinstance(payload, dict):
            records = payload.get("movements")
        else:
            records = payload
        if not isinstance(records, list):
            raise RegistryConfigError(f"Movement registry {path} must contain a 'movements' list")
        return cls(records, source=path)

    def __len__(self):
        return len(self._movements)

    def __iter__(self):
        return iter(self._movements)

    def get(self, movement_id):
        return self._by_id.get(movement_id)

    def find_by_name(self, name):
        """Resolve a display name or alias (case-insensitive) to a movement."""
        key = _name_key(name)
        if not key:
            return None
        if key in self._by_name:
            return self._by_name[key]
        return self._by_id.get(slugify(name))

    def query(
        self,
        categories=None,
        patterns=None,
        equipment=None,
        modalities=None,
        exclude_ids=None,
        exclude_banned_mains=False,
    ):
        """
        Return movements matching every supplied filter, in registry order.

        Within a filter any listed value matches (OR); across filters all must
        match (AND). `equipment` is the caller's available equipment: a movement
        matches when its non-bodyweight requirements are a subset of it, so pure
        bodyweight movements always match. `None` for a filter disables it.
        """
        category_set = set(categories) if categories else None
        pattern_set = set(patterns) if patterns else None
        modality_set = set(modalities) if modalities else None
        available = set(equipment) if equipment is not None else None
        excluded = set(exclude_ids or ())

        results = []
        for movement in self._movements:
            if movement["id"] in excluded:
                continue
            if category_set is not None and movement["category"] not in category_set:
                continue
            if pattern_set is not None and not pattern_set.intersection(movement["patterns"]):
                continue
            if modality_set is not None and movement["modality"] not in modality_set:
                continue
            if exclude_banned_mains and movement["banned_in_main_when_equipment"]:
                continue
            if not equipment_available(movement, available):
                continue
            results.append(movement)
        return results

    def count_in_categories(self, categories):
        category_set = set(categories or ())
        return sum(1 for movement in self._movements if movement["category"] in category_set)


# ---------------------------------------------------------------------------
# Module-level singleton, built once per process and shared read-only
# ---------------------------------------------------------------------------
_default_registry = None


def get_registry(path=None):
    """Get or create the module-level registry."""
    global _default_registry
    if _default_registry is None:
        _default_registry = MovementRegistry.from_file(path or os.getenv("WORKOUT_ENGINE_REGISTRY") or None)
    return _default_registry


def reset_registry():
    """Reset the singleton (useful for testing)."""
    global _default_registry
    _default_registry = None
