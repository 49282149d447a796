"""
Snapshot data model for reload decisions.

Everything here describes a read-only view of an agent at one decision
tick: what is equipped, what is carried, and which ammunition the agent
is supposed to keep on hand.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple


@dataclass(frozen=True)
class AmmoKind:
    """
    A distinct type of consumable ammunition.

    Attributes:
        name: Catalog identifier (e.g., "556x45_fmj")
        categories: Tags used by generic loadout slots (e.g., {"rifle"})
    """
    name: str
    categories: FrozenSet[str] = frozenset()

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "categories": sorted(self.categories)}


@dataclass(frozen=True)
class AmmoCount:
    """One (kind, count) pair of an ammo link."""
    kind: AmmoKind
    count: int


@dataclass(frozen=True)
class AmmoLink:
    """
    A combination of ammo kinds that together make up one magazine load.

    The count of each adder is how many charges a single unit of that
    kind supplies toward the magazine.
    """
    adders: Tuple[AmmoCount, ...]
    label: str = ""

    def count_of(self, kind: AmmoKind) -> int:
        for adder in self.adders:
            if adder.kind == kind:
                return adder.count
        return 0

    def contains(self, kind: AmmoKind, count: int) -> bool:
        return any(a.kind == kind and a.count == count for a in self.adders)

    def amount_to_load_magazine(self, kind: AmmoKind, magazine_size: int) -> int:
        """
        Units of ``kind`` needed to fill an empty magazine with this link.

        Args:
            kind: Ammo kind to measure
            magazine_size: Capacity of the magazine being filled

        Returns:
            Whole units required, 0 when the link doesn't use ``kind``
        """
        per_unit = self.count_of(kind)
        if per_unit <= 0:
            return 0
        return math.ceil(magazine_size / per_unit)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "adders": [{"kind": a.kind.name, "count": a.count} for a in self.adders],
        }


@dataclass(frozen=True)
class AmmoSet:
    """The links a weapon family can be loaded with, in catalog order."""
    name: str
    links: Tuple[AmmoLink, ...]

    def max_charge(self, kind: AmmoKind) -> int:
        """Largest per-unit charge any link assigns to ``kind`` (0 if none)."""
        best = 0
        for link in self.links:
            best = max(best, link.count_of(kind))
        return best

    def containing(self, kind: AmmoKind, count: int) -> Optional[AmmoLink]:
        """First link holding exactly the (kind, count) pair."""
        for link in self.links:
            if link.contains(kind, count):
                return link
        return None

    def index_of(self, link: Optional[AmmoLink]) -> Optional[int]:
        if link is None:
            return None
        for i, candidate in enumerate(self.links):
            if candidate == link:
                return i
        return None


@dataclass
class AmmoUser:
    """
    Magazine state of a weapon that uses ammunition.

    Attributes:
        magazine_size: Capacity in charges (0 = no magazine)
        cur_mag_count: Charges currently loaded
        use_ammo: False for weapons with a self-contained ammo model
        ammo_set: Links this weapon accepts
        current_link: Link the loaded ammo came from
        selected_link: Link the weapon will load next
        loaded_kinds: Ammo kinds currently contributing to the magazine
    """
    magazine_size: int
    cur_mag_count: int = 0
    use_ammo: bool = True
    ammo_set: Optional[AmmoSet] = None
    current_link: Optional[AmmoLink] = None
    selected_link: Optional[AmmoLink] = None
    loaded_kinds: List[AmmoKind] = field(default_factory=list)

    @property
    def has_magazine(self) -> bool:
        return self.magazine_size > 0

    @property
    def links_match(self) -> bool:
        """Loaded ammo came from the link the weapon is set to use."""
        return self.current_link is not None and self.current_link == self.selected_link

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "magazine_size": self.magazine_size,
            "cur_mag_count": self.cur_mag_count,
            "use_ammo": self.use_ammo,
            "loaded_kinds": [k.name for k in self.loaded_kinds],
        }
        if self.ammo_set is not None:
            data["ammo_set"] = self.ammo_set.name
            data["current_link"] = self.ammo_set.index_of(self.current_link)
            data["selected_link"] = self.ammo_set.index_of(self.selected_link)
        return data


@dataclass
class Weapon:
    """An equipped or carried weapon. Melee weapons have no ammo user."""
    name: str
    ammo_user: Optional[AmmoUser] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name}
        if self.ammo_user is not None:
            data["ammo_user"] = self.ammo_user.to_dict()
        return data


@dataclass
class AmmoStack:
    """A carried stack of one ammo kind."""
    kind: AmmoKind
    count: int


@dataclass
class Inventory:
    """
    Carried-items view of an agent.

    ``ammo`` keeps carry order; a kind may appear in several stacks.
    """
    ammo: List[AmmoStack] = field(default_factory=list)
    ranged_weapons: List[Weapon] = field(default_factory=list)

    def ammo_count_of(self, kind: AmmoKind) -> int:
        return sum(stack.count for stack in self.ammo if stack.kind == kind)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ammo": [{"kind": s.kind.name, "count": s.count} for s in self.ammo],
            "ranged_weapons": [w.to_dict() for w in self.ranged_weapons],
        }


@dataclass(frozen=True)
class AmmoCategory:
    """A generic ammo category matched by predicate."""
    name: str
    predicate: Callable[[AmmoKind], bool] = field(compare=False)

    def accepts(self, kind: AmmoKind) -> bool:
        return bool(self.predicate(kind))

    @classmethod
    def tagged(cls, tag: str) -> "AmmoCategory":
        """Category matching every kind carrying ``tag``."""
        return cls(name=tag, predicate=lambda kind: tag in kind.categories)


@dataclass(frozen=True)
class LoadoutSlot:
    """
    One loadout rule: reserve ``count`` of an exact kind or of a category.

    Exactly one of ``kind`` / ``category`` is set; use the ``exact`` and
    ``generic`` constructors.
    """
    count: int
    kind: Optional[AmmoKind] = None
    category: Optional[AmmoCategory] = None

    def __post_init__(self):
        if (self.kind is None) == (self.category is None):
            raise ValueError("LoadoutSlot needs exactly one of kind or category")

    @classmethod
    def exact(cls, kind: AmmoKind, count: int) -> "LoadoutSlot":
        return cls(count=count, kind=kind)

    @classmethod
    def generic(cls, category: AmmoCategory, count: int) -> "LoadoutSlot":
        return cls(count=count, category=category)

    def matches(self, kind: AmmoKind) -> bool:
        if self.kind is not None:
            return self.kind == kind
        return self.category.accepts(kind)

    def to_dict(self) -> Dict[str, Any]:
        if self.kind is not None:
            return {"kind": self.kind.name, "count": self.count}
        return {"category": self.category.name, "count": self.count}


@dataclass
class Loadout:
    """Ordered reservation rules. Earlier slots are deducted first."""
    label: str
    slots: List[LoadoutSlot] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "slots": [s.to_dict() for s in self.slots]}


@dataclass(frozen=True)
class HoldRecord:
    """A standing reservation kept outside the loadout."""
    kind: AmmoKind
    count: int


@dataclass
class Agent:
    """
    Snapshot of one agent for a single decision tick.

    Attributes:
        agent_id: Identifier used in logs and jobs
        inventory: Carried items, None when the agent can't carry any
        equipped: Primary weapon in hand
        loadout: Active loadout, None when no policy is assigned
        hold_records: Reservations outside the loadout
        drafted: Under manual direction by the player
    """
    agent_id: str
    inventory: Optional[Inventory] = None
    equipped: Optional[Weapon] = None
    loadout: Optional[Loadout] = None
    hold_records: List[HoldRecord] = field(default_factory=list)
    drafted: bool = False

    @property
    def has_loadout(self) -> bool:
        return self.loadout is not None and bool(self.loadout.slots)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the snapshot document layout (see snapshot.py)."""
        data: Dict[str, Any] = {
            "agent_id": self.agent_id,
            "drafted": self.drafted,
            "hold_records": [
                {"kind": r.kind.name, "count": r.count} for r in self.hold_records
            ],
        }
        if self.inventory is not None:
            data["inventory"] = self.inventory.to_dict()
        if self.equipped is not None:
            data["equipped"] = self.equipped.to_dict()
        if self.loadout is not None:
            data["loadout"] = self.loadout.to_dict()
        return data
