"""
Input validation for snapshot documents.

Validates the structure of plain dict snapshots before they are turned
into typed objects:
- Catalog (ammo kinds and ammo sets)
- Weapons and magazine state
- Inventory, loadout and hold records
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List


@dataclass
class ValidationError:
    """A validation error."""
    field: str
    message: str
    value: str = ""


class ValidationResult:
    """Result of validation check."""

    def __init__(self):
        self.errors: List[ValidationError] = []

    def add_error(self, field: str, message: str, value: Any = "") -> None:
        self.errors.append(ValidationError(field, message, str(value)))

    def extend(self, other: "ValidationResult") -> None:
        self.errors.extend(other.errors)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def messages(self) -> List[str]:
        return [f"{e.field}: {e.message}" for e in self.errors]

    def raise_if_invalid(self, context: str = "Validation") -> None:
        if not self.is_valid:
            raise SnapshotError(f"{context} failed:\n" + "\n".join(self.messages()), self)


class SnapshotError(ValueError):
    """Raised when a snapshot document can't be turned into an agent."""

    def __init__(self, message: str, result: ValidationResult):
        super().__init__(message)
        self.result = result


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_count(field: str, value: Any, minimum: int = 0) -> ValidationResult:
    """Validate an integer count with a lower bound."""
    result = ValidationResult()
    if not _is_int(value):
        result.add_error(field, "Must be an integer", value)
    elif value < minimum:
        result.add_error(field, f"Must be >= {minimum}", value)
    return result


def validate_name(field: str, value: Any) -> ValidationResult:
    result = ValidationResult()
    if not isinstance(value, str) or not value.strip():
        result.add_error(field, "Must be a non-empty string", value)
    elif len(value) > 128:
        result.add_error(field, "Too long (max 128 chars)", value[:20])
    return result


def validate_label(field: str, value: Any) -> ValidationResult:
    """Labels may be empty but must be strings."""
    result = ValidationResult()
    if not isinstance(value, str):
        result.add_error(field, "Must be a string", value)
    elif len(value) > 128:
        result.add_error(field, "Too long (max 128 chars)", value[:20])
    return result


def _expect(result: ValidationResult, field: str, value: Any, kind: type, label: str) -> bool:
    if not isinstance(value, kind):
        result.add_error(field, f"Must be a {label}", type(value).__name__)
        return False
    return True


def validate_catalog(catalog: Any, field: str = "catalog") -> ValidationResult:
    """Validate the ammo catalog section."""
    result = ValidationResult()
    if not _expect(result, field, catalog, dict, "mapping"):
        return result

    kinds = catalog.get("ammo_kinds", [])
    if _expect(result, f"{field}.ammo_kinds", kinds, list, "list"):
        for i, kind in enumerate(kinds):
            path = f"{field}.ammo_kinds[{i}]"
            if isinstance(kind, str):
                result.extend(validate_name(path, kind))
            elif _expect(result, path, kind, dict, "mapping or name"):
                result.extend(validate_name(f"{path}.name", kind.get("name")))
                cats = kind.get("categories", [])
                if _expect(result, f"{path}.categories", cats, list, "list"):
                    for j, cat in enumerate(cats):
                        result.extend(validate_name(f"{path}.categories[{j}]", cat))

    sets = catalog.get("ammo_sets", {})
    if _expect(result, f"{field}.ammo_sets", sets, dict, "mapping"):
        for set_name, links in sets.items():
            path = f"{field}.ammo_sets.{set_name}"
            if not _expect(result, path, links, list, "list of links"):
                continue
            for i, link in enumerate(links):
                result.extend(_validate_link(f"{path}[{i}]", link))

    return result


def _validate_link(field: str, link: Any) -> ValidationResult:
    result = ValidationResult()
    if isinstance(link, dict):
        result.extend(validate_label(f"{field}.label", link.get("label", "")))
    adders = link.get("adders") if isinstance(link, dict) else link
    if not _expect(result, field, adders, list, "list of adders"):
        return result
    if not adders:
        result.add_error(field, "Link needs at least one adder")
    for i, adder in enumerate(adders):
        result.extend(_validate_kind_count(f"{field}[{i}]", adder, minimum=1))
    return result


def _validate_kind_count(field: str, data: Any, minimum: int = 0) -> ValidationResult:
    result = ValidationResult()
    if not _expect(result, field, data, dict, "mapping"):
        return result
    result.extend(validate_name(f"{field}.kind", data.get("kind")))
    result.extend(validate_count(f"{field}.count", data.get("count"), minimum))
    return result


def validate_weapon(weapon: Any, field: str) -> ValidationResult:
    """Validate a weapon and its magazine state."""
    result = ValidationResult()
    if not _expect(result, field, weapon, dict, "mapping"):
        return result

    result.extend(validate_name(f"{field}.name", weapon.get("name")))

    user = weapon.get("ammo_user")
    if user is None:
        return result
    if not _expect(result, f"{field}.ammo_user", user, dict, "mapping"):
        return result

    path = f"{field}.ammo_user"
    result.extend(validate_count(f"{path}.magazine_size", user.get("magazine_size")))
    # Negative or overfilled counts are tolerated; the deficit is clamped.
    if not _is_int(user.get("cur_mag_count", 0)):
        result.add_error(f"{path}.cur_mag_count", "Must be an integer", user.get("cur_mag_count"))
    if not isinstance(user.get("use_ammo", True), bool):
        result.add_error(f"{path}.use_ammo", "Must be a boolean", user.get("use_ammo"))
    if user.get("ammo_set") is not None:
        result.extend(validate_name(f"{path}.ammo_set", user["ammo_set"]))
    for key in ("current_link", "selected_link"):
        value = user.get(key)
        if value is not None:
            result.extend(validate_count(f"{path}.{key}", value))
    loaded = user.get("loaded_kinds", [])
    if _expect(result, f"{path}.loaded_kinds", loaded, list, "list"):
        for i, name in enumerate(loaded):
            result.extend(validate_name(f"{path}.loaded_kinds[{i}]", name))
    return result


def validate_snapshot(doc: Any) -> ValidationResult:
    """
    Validate an agent snapshot document.

    Only structure and value ranges are checked here; references to
    unknown ammo kinds, sets or categories are reported when the
    snapshot is built.

    Args:
        doc: Parsed JSON/YAML document

    Returns:
        ValidationResult with one error per problem found
    """
    result = ValidationResult()
    if not _expect(result, "snapshot", doc, dict, "mapping"):
        return result

    result.extend(validate_name("agent_id", doc.get("agent_id")))

    if "drafted" in doc and not isinstance(doc["drafted"], bool):
        result.add_error("drafted", "Must be a boolean", doc["drafted"])

    if "catalog" in doc:
        result.extend(validate_catalog(doc["catalog"]))

    if doc.get("equipped") is not None:
        result.extend(validate_weapon(doc["equipped"], "equipped"))

    inventory = doc.get("inventory")
    if inventory is not None and _expect(result, "inventory", inventory, dict, "mapping"):
        ammo = inventory.get("ammo", [])
        if _expect(result, "inventory.ammo", ammo, list, "list"):
            for i, stack in enumerate(ammo):
                result.extend(_validate_kind_count(f"inventory.ammo[{i}]", stack))
        weapons = inventory.get("ranged_weapons", [])
        if _expect(result, "inventory.ranged_weapons", weapons, list, "list"):
            for i, weapon in enumerate(weapons):
                result.extend(validate_weapon(weapon, f"inventory.ranged_weapons[{i}]"))

    loadout = doc.get("loadout")
    if loadout is not None and _expect(result, "loadout", loadout, dict, "mapping"):
        result.extend(validate_label("loadout.label", loadout.get("label", "")))
        slots = loadout.get("slots", [])
        if _expect(result, "loadout.slots", slots, list, "list"):
            for i, slot in enumerate(slots):
                path = f"loadout.slots[{i}]"
                if not _expect(result, path, slot, dict, "mapping"):
                    continue
                if ("kind" in slot) == ("category" in slot):
                    result.add_error(path, "Slot needs exactly one of kind or category")
                else:
                    ref = "kind" if "kind" in slot else "category"
                    result.extend(validate_name(f"{path}.{ref}", slot[ref]))
                result.extend(validate_count(f"{path}.count", slot.get("count")))

    records = doc.get("hold_records", [])
    if _expect(result, "hold_records", records, list, "list"):
        for i, record in enumerate(records):
            result.extend(_validate_kind_count(f"hold_records[{i}]", record))

    return result
