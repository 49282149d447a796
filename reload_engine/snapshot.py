"""
Building agent snapshots from JSON/YAML documents.

A snapshot document looks like::

    agent_id: pawn_1
    drafted: false
    catalog:
      ammo_kinds:
        - {name: 556_fmj, categories: [rifle]}
      ammo_sets:
        556_nato:
          - [{kind: 556_fmj, count: 1}]
    equipped:
      name: M16
      ammo_user:
        magazine_size: 30
        cur_mag_count: 12
        ammo_set: 556_nato
        current_link: 0
        selected_link: 0
        loaded_kinds: [556_fmj]
    inventory:
      ammo: [{kind: 556_fmj, count: 60}]
      ranged_weapons: []
    loadout:
      label: Rifleman
      slots:
        - {kind: 556_fmj, count: 90}
        - {category: rifle, count: 30}
    hold_records: [{kind: 556_fmj, count: 10}]

An agent without an ``inventory`` key has no inventory at all, which is
different from an empty one. Ammo kinds and sets may come from the
document's ``catalog`` section, from a shared ``AmmoCatalog``, or both.
"""
from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Iterable, List, Optional

import yaml

from .types import (
    Agent,
    AmmoCategory,
    AmmoCount,
    AmmoKind,
    AmmoLink,
    AmmoSet,
    AmmoStack,
    AmmoUser,
    HoldRecord,
    Inventory,
    Loadout,
    LoadoutSlot,
    Weapon,
)
from .validation import SnapshotError, ValidationResult, validate_catalog, validate_snapshot

logger = logging.getLogger(__name__)


class AmmoCatalog:
    """
    Static catalog of ammo kinds and ammo sets.

    Example:
        >>> catalog = AmmoCatalog([AmmoKind("556_fmj", frozenset({"rifle"}))])
        >>> catalog.kind("556_fmj").categories
        frozenset({'rifle'})
    """

    def __init__(
        self,
        kinds: Iterable[AmmoKind] = (),
        ammo_sets: Iterable[AmmoSet] = (),
    ):
        self.kinds: Dict[str, AmmoKind] = {k.name: k for k in kinds}
        self.ammo_sets: Dict[str, AmmoSet] = {s.name: s for s in ammo_sets}

    def kind(self, name: str) -> Optional[AmmoKind]:
        return self.kinds.get(name)

    def ammo_set(self, name: str) -> Optional[AmmoSet]:
        return self.ammo_sets.get(name)

    @property
    def categories(self) -> List[str]:
        tags = set()
        for kind in self.kinds.values():
            tags.update(kind.categories)
        return sorted(tags)

    def category(self, name: str) -> Optional[AmmoCategory]:
        """Generic category for a tag used by at least one kind."""
        if name not in self.categories:
            return None
        return AmmoCategory.tagged(name)

    def merged(self, other: "AmmoCatalog") -> "AmmoCatalog":
        """
        New catalog with ``other``'s entries taking precedence.

        Sets kept from this catalog are rebuilt so their links refer to
        the merged kinds; a kind redefined by ``other`` would otherwise
        compare unequal to the same-named stacks and loaded kinds.
        """
        merged = AmmoCatalog()
        merged.kinds = {**self.kinds, **other.kinds}
        merged.ammo_sets = {
            name: merged._rebind(s) for name, s in self.ammo_sets.items()
        }
        merged.ammo_sets.update(other.ammo_sets)
        return merged

    def _rebind(self, ammo_set: AmmoSet) -> AmmoSet:
        links = tuple(
            AmmoLink(
                tuple(AmmoCount(self.kinds.get(a.kind.name, a.kind), a.count) for a in link.adders),
                label=link.label,
            )
            for link in ammo_set.links
        )
        return AmmoSet(ammo_set.name, links)

    def __len__(self) -> int:
        return len(self.kinds)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ammo_kinds": [k.to_dict() for k in self.kinds.values()],
            "ammo_sets": {
                name: [link.to_dict() for link in s.links]
                for name, s in self.ammo_sets.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base: Optional["AmmoCatalog"] = None) -> "AmmoCatalog":
        """
        Build a catalog from its document section.

        Args:
            data: The ``catalog`` section of a document
            base: Shared catalog whose kinds links may also refer to

        Raises:
            SnapshotError: If the section is malformed or a link names an
                unknown kind
        """
        result = validate_catalog(data)
        result.raise_if_invalid("Catalog")

        kinds = []
        for entry in data.get("ammo_kinds", []):
            if isinstance(entry, str):
                kinds.append(AmmoKind(entry))
            else:
                kinds.append(AmmoKind(entry["name"], frozenset(entry.get("categories", []))))
        catalog = cls(kinds)
        known = {**(base.kinds if base is not None else {}), **catalog.kinds}

        for set_name, links in data.get("ammo_sets", {}).items():
            built = []
            for i, link in enumerate(links):
                label = link.get("label", "") if isinstance(link, dict) else ""
                adders = link["adders"] if isinstance(link, dict) else link
                counts = []
                for j, adder in enumerate(adders):
                    kind = known.get(adder["kind"])
                    if kind is None:
                        result.add_error(
                            f"catalog.ammo_sets.{set_name}[{i}][{j}].kind",
                            "Unknown ammo kind",
                            adder["kind"],
                        )
                        continue
                    counts.append(AmmoCount(kind, adder["count"]))
                built.append(AmmoLink(tuple(counts), label=label))
            catalog.ammo_sets[set_name] = AmmoSet(set_name, tuple(built))

        result.raise_if_invalid("Catalog")
        return catalog


class _SnapshotBuilder:
    """Resolves catalog references, collecting errors instead of stopping."""

    def __init__(self, catalog: AmmoCatalog):
        self.catalog = catalog
        self.result = ValidationResult()

    def kind(self, field: str, name: str) -> Optional[AmmoKind]:
        kind = self.catalog.kind(name)
        if kind is None:
            self.result.add_error(field, "Unknown ammo kind", name)
        return kind

    def link(self, field: str, ammo_set: Optional[AmmoSet], index: Optional[int]) -> Optional[AmmoLink]:
        if index is None:
            return None
        if ammo_set is None:
            self.result.add_error(field, "Link given without an ammo_set", index)
            return None
        if index >= len(ammo_set.links):
            self.result.add_error(field, f"No link {index} in ammo set {ammo_set.name}", index)
            return None
        return ammo_set.links[index]

    def weapon(self, field: str, data: Dict[str, Any]) -> Weapon:
        user_data = data.get("ammo_user")
        if user_data is None:
            return Weapon(name=data["name"])

        path = f"{field}.ammo_user"
        ammo_set = None
        if user_data.get("ammo_set") is not None:
            ammo_set = self.catalog.ammo_set(user_data["ammo_set"])
            if ammo_set is None:
                self.result.add_error(f"{path}.ammo_set", "Unknown ammo set", user_data["ammo_set"])

        loaded = []
        for i, name in enumerate(user_data.get("loaded_kinds", [])):
            kind = self.kind(f"{path}.loaded_kinds[{i}]", name)
            if kind is not None:
                loaded.append(kind)

        user = AmmoUser(
            magazine_size=user_data["magazine_size"],
            cur_mag_count=user_data.get("cur_mag_count", 0),
            use_ammo=user_data.get("use_ammo", True),
            ammo_set=ammo_set,
            current_link=self.link(f"{path}.current_link", ammo_set, user_data.get("current_link")),
            selected_link=self.link(f"{path}.selected_link", ammo_set, user_data.get("selected_link")),
            loaded_kinds=loaded,
        )
        return Weapon(name=data["name"], ammo_user=user)

    def inventory(self, data: Dict[str, Any]) -> Inventory:
        stacks = []
        for i, stack in enumerate(data.get("ammo", [])):
            kind = self.kind(f"inventory.ammo[{i}].kind", stack["kind"])
            if kind is not None:
                stacks.append(AmmoStack(kind, stack["count"]))
        weapons = [
            self.weapon(f"inventory.ranged_weapons[{i}]", w)
            for i, w in enumerate(data.get("ranged_weapons", []))
        ]
        return Inventory(ammo=stacks, ranged_weapons=weapons)

    def loadout(self, data: Dict[str, Any]) -> Loadout:
        slots = []
        for i, slot in enumerate(data.get("slots", [])):
            path = f"loadout.slots[{i}]"
            if "kind" in slot:
                kind = self.kind(f"{path}.kind", slot["kind"])
                if kind is not None:
                    slots.append(LoadoutSlot.exact(kind, slot["count"]))
            else:
                category = self.catalog.category(slot["category"])
                if category is None:
                    self.result.add_error(f"{path}.category", "Unknown category", slot["category"])
                else:
                    slots.append(LoadoutSlot.generic(category, slot["count"]))
        return Loadout(label=data.get("label", ""), slots=slots)

    def hold_records(self, data: List[Dict[str, Any]]) -> List[HoldRecord]:
        records = []
        for i, rec in enumerate(data):
            kind = self.kind(f"hold_records[{i}].kind", rec["kind"])
            if kind is not None:
                records.append(HoldRecord(kind, rec["count"]))
        return records


def agent_from_dict(doc: Dict[str, Any], catalog: Optional[AmmoCatalog] = None) -> Agent:
    """
    Build an agent snapshot from a parsed document.

    Args:
        doc: Snapshot document
        catalog: Shared catalog; the document's own catalog overrides it

    Returns:
        Agent ready for evaluation

    Raises:
        SnapshotError: If the document is malformed or references
            unknown kinds, sets or categories
    """
    validate_snapshot(doc).raise_if_invalid("Snapshot")

    resolved = catalog or AmmoCatalog()
    if "catalog" in doc:
        resolved = resolved.merged(AmmoCatalog.from_dict(doc["catalog"], base=resolved))

    builder = _SnapshotBuilder(resolved)
    agent = Agent(
        agent_id=doc["agent_id"],
        drafted=doc.get("drafted", False),
        hold_records=builder.hold_records(doc.get("hold_records", [])),
    )
    if doc.get("inventory") is not None:
        agent.inventory = builder.inventory(doc["inventory"])
    if doc.get("equipped") is not None:
        agent.equipped = builder.weapon("equipped", doc["equipped"])
    if doc.get("loadout") is not None:
        agent.loadout = builder.loadout(doc["loadout"])

    builder.result.raise_if_invalid("Snapshot")
    return agent


def read_document(path: str) -> Dict[str, Any]:
    """
    Read a JSON or YAML document, chosen by file extension.

    Raises:
        SnapshotError: If the file can't be read or parsed
    """
    result = ValidationResult()
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
        if path.endswith((".yaml", ".yml")):
            data = yaml.safe_load(content)
        else:
            data = json.loads(content)
    except (OSError, ValueError, yaml.YAMLError) as e:
        result.add_error("file", f"Cannot read {os.path.basename(path)}: {e}", path)
        result.raise_if_invalid("Snapshot")
    return data


def load_snapshot(path: str, catalog: Optional[AmmoCatalog] = None) -> Agent:
    """Load an agent snapshot from a JSON or YAML file."""
    agent = agent_from_dict(read_document(path), catalog)
    logger.debug(f"Loaded snapshot for {agent.agent_id} from {path}")
    return agent


def dump_snapshot(agent: Agent, catalog: Optional[AmmoCatalog] = None) -> Dict[str, Any]:
    """Serialize an agent (and optionally its catalog) to a document."""
    doc = agent.to_dict()
    if catalog is not None:
        doc["catalog"] = catalog.to_dict()
    return doc
