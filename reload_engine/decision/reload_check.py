"""
Reload decision evaluator.

Scans an agent's equipped weapon and then its carried ranged weapons and
decides whether one of them should be reloaded, and with which ammo link.

Two independent rules can trigger a reload:

- restock: the weapon is loaded with ammo the loadout doesn't cover, and
  the agent carries enough of a covered kind to fill the magazine
- top-off: the weapon isn't full and the agent carries enough of the
  ammo it is already loaded with

The evaluator is a pure function of the snapshot it is given. It keeps
no state between calls and never mutates the agent.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from ..types import Agent, AmmoLink, AmmoUser, Inventory, Weapon
from .tracking import is_reservation_satisfied

logger = logging.getLogger(__name__)


class DecisionReason(str, Enum):
    """Why the evaluator answered the way it did."""
    NOT_APPLICABLE = "not_applicable"  # no inventory
    NO_CANDIDATES = "no_candidates"
    NO_DECISION = "no_decision"
    RELOAD = "reload"


class ReloadBranch(str, Enum):
    RESTOCK = "restock"
    TOP_OFF = "top_off"


@dataclass(frozen=True)
class ReloadDecision:
    """
    Result of a reload evaluation.

    Attributes:
        needed: Whether a reload should be offered
        weapon: Weapon to reload (set only when needed)
        link: Ammo link to load (may be None for weapons without ammo sets)
        reason: Outcome category
        branch: Rule that triggered the reload
    """
    needed: bool
    weapon: Optional[Weapon] = None
    link: Optional[AmmoLink] = None
    reason: DecisionReason = DecisionReason.NO_DECISION
    branch: Optional[ReloadBranch] = None

    @classmethod
    def not_needed(cls, reason: DecisionReason) -> "ReloadDecision":
        return cls(needed=False, reason=reason)

    def as_tuple(self) -> Tuple[bool, Optional[Weapon], Optional[AmmoLink]]:
        return self.needed, self.weapon, self.link

    def to_dict(self) -> dict:
        return {
            "needed": self.needed,
            "weapon": self.weapon.name if self.weapon else None,
            "link": self.link.to_dict() if self.link else None,
            "reason": self.reason.value,
            "branch": self.branch.value if self.branch else None,
        }


def candidate_weapons(agent: Agent) -> List[Weapon]:
    """Equipped weapon first, then carried ranged weapons in carry order."""
    guns: List[Weapon] = []
    if agent.equipped is not None:
        guns.append(agent.equipped)
    if agent.inventory is not None:
        guns.extend(agent.inventory.ranged_weapons)
    return guns


def magazine_deficit(user: AmmoUser) -> int:
    """Charges missing from the magazine, never more than its capacity."""
    return min(user.magazine_size, user.magazine_size - user.cur_mag_count)


def _loaded_ammo_untracked(agent: Agent, user: AmmoUser) -> bool:
    """True when no kind loaded in the weapon is covered by reservations."""
    for kind in user.loaded_kinds:
        if user.current_link is not None:
            amount = user.current_link.amount_to_load_magazine(kind, user.magazine_size)
        else:
            amount = user.magazine_size
        if is_reservation_satisfied(agent.loadout, agent.hold_records, kind, amount):
            return False
    return True


def _find_restock_link(
    agent: Agent,
    inventory: Inventory,
    user: AmmoUser,
    deficit: int,
) -> Optional[AmmoLink]:
    """First carried ammo that is covered and fills the deficit."""
    if user.ammo_set is None:
        return None

    for stack in inventory.ammo:
        max_charge = user.ammo_set.max_charge(stack.kind)
        if max_charge <= 0:
            continue

        # Reservations are checked against whole units, availability
        # against the exact fractional requirement.
        to_fill = deficit / max_charge
        if (
            to_fill > 0
            and is_reservation_satisfied(
                agent.loadout, agent.hold_records, stack.kind, math.ceil(to_fill)
            )
            and to_fill < inventory.ammo_count_of(stack.kind)
        ):
            return user.ammo_set.containing(stack.kind, max_charge)
    return None


def _can_top_off(inventory: Inventory, user: AmmoUser, deficit: int) -> bool:
    """Whether carried ammo of the current link covers the deficit."""
    count_charges = 0
    for adder in user.current_link.adders:
        if adder.count < deficit:
            count_charges += adder.count * inventory.ammo_count_of(adder.kind)
        if count_charges >= deficit:
            return True
    return False


def evaluate_reload_need(agent: Agent) -> ReloadDecision:
    """
    Decide whether the agent should reload, and what.

    Args:
        agent: Snapshot of the agent for this tick

    Returns:
        ReloadDecision; ``needed`` is False when no weapon qualifies
    """
    inventory = agent.inventory
    if inventory is None:
        return ReloadDecision.not_needed(DecisionReason.NOT_APPLICABLE)

    guns = candidate_weapons(agent)
    if not guns:
        return ReloadDecision.not_needed(DecisionReason.NO_CANDIDATES)

    has_loadout = agent.has_loadout

    for gun in guns:
        user = gun.ammo_user
        if user is None or not user.has_magazine:
            continue

        deficit = magazine_deficit(user)

        if user.use_ammo and has_loadout and _loaded_ammo_untracked(agent, user):
            link = _find_restock_link(agent, inventory, user, deficit)
            if link is not None:
                return _decided(agent, gun, link, ReloadBranch.RESTOCK)

        if user.cur_mag_count < user.magazine_size:
            if not user.use_ammo:
                return _decided(agent, gun, user.selected_link, ReloadBranch.TOP_OFF)
            if user.links_match and _can_top_off(inventory, user, deficit):
                return _decided(agent, gun, user.current_link, ReloadBranch.TOP_OFF)

    logger.debug(
        f"No reload for {agent.agent_id}: checked {len(guns)} weapon(s)",
        extra={"agent_id": agent.agent_id, "subsystem": "reload"},
    )
    return ReloadDecision.not_needed(DecisionReason.NO_DECISION)


def _decided(
    agent: Agent,
    gun: Weapon,
    link: Optional[AmmoLink],
    branch: ReloadBranch,
) -> ReloadDecision:
    logger.debug(
        f"Reload {gun.name} for {agent.agent_id} ({branch.value})",
        extra={
            "agent_id": agent.agent_id,
            "subsystem": "reload",
            "weapon": gun.name,
            "event_type": branch.value,
        },
    )
    return ReloadDecision(
        needed=True,
        weapon=gun,
        link=link,
        reason=DecisionReason.RELOAD,
        branch=branch,
    )
