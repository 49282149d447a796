"""
Tests for validation module.
"""
import pytest

from reload_engine.validation import (
    SnapshotError,
    ValidationResult,
    validate_catalog,
    validate_count,
    validate_snapshot,
    validate_weapon,
)


class TestValidateCount:

    def test_valid(self):
        assert validate_count("count", 0).is_valid
        assert validate_count("count", 12).is_valid

    def test_negative_invalid(self):
        result = validate_count("count", -1)
        assert not result.is_valid
        assert ">= 0" in result.errors[0].message

    def test_bool_is_not_a_count(self):
        assert not validate_count("count", True).is_valid

    def test_minimum(self):
        assert not validate_count("count", 0, minimum=1).is_valid


class TestValidateWeapon:

    def test_melee_weapon_valid(self):
        assert validate_weapon({"name": "Knife"}, "equipped").is_valid

    def test_missing_magazine_size(self):
        result = validate_weapon({"name": "M16", "ammo_user": {}}, "equipped")
        assert not result.is_valid
        assert result.errors[0].field == "equipped.ammo_user.magazine_size"

    def test_negative_loaded_count_tolerated(self):
        weapon = {"name": "M16", "ammo_user": {"magazine_size": 30, "cur_mag_count": -3}}
        assert validate_weapon(weapon, "equipped").is_valid

    def test_use_ammo_must_be_bool(self):
        weapon = {"name": "M16", "ammo_user": {"magazine_size": 30, "use_ammo": "yes"}}
        assert not validate_weapon(weapon, "equipped").is_valid

    def test_ammo_set_must_be_a_name(self):
        for bad in (["556_nato"], {"name": "556_nato"}, 556, ""):
            weapon = {"name": "M16", "ammo_user": {"magazine_size": 30, "ammo_set": bad}}
            result = validate_weapon(weapon, "equipped")
            assert not result.is_valid
            assert result.errors[0].field == "equipped.ammo_user.ammo_set"

    def test_null_ammo_set_allowed(self):
        weapon = {"name": "M16", "ammo_user": {"magazine_size": 30, "ammo_set": None}}
        assert validate_weapon(weapon, "equipped").is_valid


class TestValidateCatalog:

    def test_empty_link_invalid(self):
        result = validate_catalog({"ammo_kinds": ["a"], "ammo_sets": {"s": [[]]}})
        assert not result.is_valid
        assert "at least one adder" in result.errors[0].message

    def test_zero_charge_adder_invalid(self):
        result = validate_catalog({"ammo_sets": {"s": [[{"kind": "a", "count": 0}]]}})
        assert not result.is_valid

    def test_link_label_must_be_string(self):
        link = {"label": ["FMJ"], "adders": [{"kind": "a", "count": 1}]}
        result = validate_catalog({"ammo_kinds": ["a"], "ammo_sets": {"s": [link]}})
        assert not result.is_valid
        assert result.errors[0].field == "catalog.ammo_sets.s[0].label"

    def test_empty_link_label_allowed(self):
        link = {"label": "", "adders": [{"kind": "a", "count": 1}]}
        assert validate_catalog({"ammo_kinds": ["a"], "ammo_sets": {"s": [link]}}).is_valid


class TestValidateSnapshot:

    def test_minimal_valid(self):
        assert validate_snapshot({"agent_id": "pawn"}).is_valid

    def test_slot_needs_exactly_one_target(self):
        doc = {
            "agent_id": "pawn",
            "loadout": {"slots": [{"kind": "a", "category": "b", "count": 1}]},
        }
        result = validate_snapshot(doc)
        assert not result.is_valid
        assert result.errors[0].field == "loadout.slots[0]"

    def test_collects_all_errors(self):
        doc = {
            "agent_id": "",
            "drafted": "no",
            "hold_records": [{"kind": "a", "count": -1}],
        }
        result = validate_snapshot(doc)
        fields = [e.field for e in result.errors]
        assert fields == ["agent_id", "drafted", "hold_records[0].count"]

    def test_inventory_must_be_mapping(self):
        result = validate_snapshot({"agent_id": "pawn", "inventory": []})
        assert not result.is_valid

    def test_loadout_label_must_be_string(self):
        doc = {"agent_id": "pawn", "loadout": {"label": 7, "slots": []}}
        result = validate_snapshot(doc)
        assert [e.field for e in result.errors] == ["loadout.label"]


def test_raise_if_invalid():
    result = ValidationResult()
    result.raise_if_invalid()

    result.add_error("agent_id", "Must be a non-empty string")
    with pytest.raises(SnapshotError) as exc:
        result.raise_if_invalid("Snapshot")
    assert "agent_id: Must be a non-empty string" in str(exc.value)
    assert exc.value.result is result
