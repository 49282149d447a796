"""
Reservation tracking against loadouts and hold records.

Answers whether a quantity of an ammo kind is already earmarked by the
agent's loadout or hold records, so pulling it into a weapon doesn't rob
another committed purpose.
"""
from __future__ import annotations

from typing import Iterable, Optional

from ..types import AmmoKind, HoldRecord, Loadout


def is_reservation_satisfied(
    loadout: Optional[Loadout],
    hold_records: Optional[Iterable[HoldRecord]],
    kind: AmmoKind,
    amount: int,
) -> bool:
    """
    Check whether ``amount`` units of ``kind`` are covered by reservations.

    Loadout slots are deducted in order and the check stops at the first
    slot that covers the remainder. Whatever is left is then deducted by
    matching hold records. This is a greedy count, not an exact matching;
    simultaneous checks in one tick may count the same slot twice.

    Callers only invoke this for agents with a non-empty loadout.

    Args:
        loadout: Agent's loadout
        hold_records: Agent's hold records (None = no records)
        kind: Ammo kind to look for
        amount: Units that would need to be covered

    Returns:
        True if the reservations cover ``amount``
    """
    if loadout is not None:
        for slot in loadout.slots:
            if slot.matches(kind):
                amount -= slot.count
            if amount <= 0:
                return True

    # Remainder carries over from the loadout pass.
    for record in hold_records or ():
        if record.kind == kind:
            amount -= record.count

    return amount <= 0
