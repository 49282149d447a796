"""
Tests for reservation tracking against loadouts and hold records.
"""
from reload_engine.decision import is_reservation_satisfied
from reload_engine.types import AmmoCategory, AmmoKind, HoldRecord, Loadout, LoadoutSlot

FMJ = AmmoKind("556_fmj", frozenset({"rifle"}))
AP = AmmoKind("556_ap", frozenset({"rifle"}))
BUCK = AmmoKind("12g_buck", frozenset({"shotgun"}))
RIFLE = AmmoCategory.tagged("rifle")


def loadout(*slots):
    return Loadout("Test", list(slots))


class TestLoadoutSlots:
    """Deduction over loadout slots."""

    def test_exact_slot_covers_smaller_amount(self):
        lo = loadout(LoadoutSlot.exact(BUCK, 3))
        assert is_reservation_satisfied(lo, [], BUCK, 2)

    def test_exact_slot_does_not_cover_larger_amount(self):
        lo = loadout(LoadoutSlot.exact(BUCK, 3))
        assert not is_reservation_satisfied(lo, [], BUCK, 4)

    def test_exact_amount_is_covered(self):
        lo = loadout(LoadoutSlot.exact(BUCK, 3))
        assert is_reservation_satisfied(lo, [], BUCK, 3)

    def test_non_matching_slots_ignored(self):
        lo = loadout(LoadoutSlot.exact(FMJ, 100), LoadoutSlot.exact(AP, 100))
        assert not is_reservation_satisfied(lo, [], BUCK, 1)

    def test_category_slot_matches_by_predicate(self):
        lo = loadout(LoadoutSlot.generic(RIFLE, 50))
        assert is_reservation_satisfied(lo, [], AP, 50)
        assert not is_reservation_satisfied(lo, [], BUCK, 1)

    def test_slots_accumulate_in_order(self):
        lo = loadout(LoadoutSlot.exact(FMJ, 20), LoadoutSlot.generic(RIFLE, 20))
        assert is_reservation_satisfied(lo, [], FMJ, 40)
        assert not is_reservation_satisfied(lo, [], FMJ, 41)

    def test_stops_at_first_covering_slot(self):
        """Later slots are not consulted once covered."""
        calls = []

        def spy(kind):
            calls.append(kind)
            return True

        lo = loadout(LoadoutSlot.exact(FMJ, 10), LoadoutSlot.generic(AmmoCategory("spy", spy), 5))
        assert is_reservation_satisfied(lo, [], FMJ, 10)
        assert calls == []

    def test_custom_predicate_category(self):
        only_ap = AmmoCategory("armor_piercing", lambda kind: kind.name.endswith("_ap"))
        lo = loadout(LoadoutSlot.generic(only_ap, 10))
        assert is_reservation_satisfied(lo, [], AP, 10)
        assert not is_reservation_satisfied(lo, [], FMJ, 10)


class TestHoldRecords:
    """Fallback to hold records."""

    def test_hold_record_covers_when_loadout_does_not_mention_kind(self):
        lo = loadout(LoadoutSlot.exact(BUCK, 10))
        assert is_reservation_satisfied(lo, [HoldRecord(FMJ, 30)], FMJ, 30)

    def test_remainder_carries_over_from_loadout(self):
        lo = loadout(LoadoutSlot.exact(BUCK, 3))
        assert is_reservation_satisfied(lo, [HoldRecord(BUCK, 1)], BUCK, 4)
        assert not is_reservation_satisfied(lo, [HoldRecord(BUCK, 1)], BUCK, 5)

    def test_non_matching_records_ignored(self):
        lo = loadout(LoadoutSlot.exact(BUCK, 3))
        assert not is_reservation_satisfied(lo, [HoldRecord(FMJ, 100)], BUCK, 4)

    def test_multiple_records_accumulate(self):
        records = [HoldRecord(FMJ, 5), HoldRecord(AP, 50), HoldRecord(FMJ, 5)]
        assert is_reservation_satisfied(loadout(), records, FMJ, 10)
        assert not is_reservation_satisfied(loadout(), records, FMJ, 11)

    def test_missing_records_contribute_nothing(self):
        lo = loadout(LoadoutSlot.exact(BUCK, 3))
        assert not is_reservation_satisfied(lo, None, BUCK, 4)


class TestMonotonicity:
    """More reserved never turns a covered amount into an uncovered one."""

    def test_raising_slot_count(self):
        results = [
            is_reservation_satisfied(loadout(LoadoutSlot.exact(FMJ, n)), [], FMJ, 5)
            for n in range(0, 10)
        ]
        first_true = results.index(True)
        assert all(results[first_true:])
        assert not any(results[:first_true])

    def test_raising_hold_count(self):
        lo = loadout(LoadoutSlot.exact(FMJ, 2))
        results = [
            is_reservation_satisfied(lo, [HoldRecord(FMJ, n)], FMJ, 5)
            for n in range(0, 6)
        ]
        assert results == [False, False, False, True, True, True]


def test_does_not_mutate_inputs():
    lo = loadout(LoadoutSlot.exact(FMJ, 3))
    records = [HoldRecord(FMJ, 2)]
    is_reservation_satisfied(lo, records, FMJ, 5)
    assert lo.slots == [LoadoutSlot.exact(FMJ, 3)]
    assert records == [HoldRecord(FMJ, 2)]
