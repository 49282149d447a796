"""
Configuration for the reload job giver.

Priorities can be tuned per deployment and loaded from JSON or YAML
files; built-in presets cover the usual setups.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

# Loadout updater tiers the reload priority has to sit between.
LOADOUT_HIGH_PRIORITY = 9.2
LOADOUT_LOW_PRIORITY = 3.0
RELOAD_PRIORITY = 9.1


@dataclass
class ReloadConfig:
    """
    Scheduler-facing settings for the reload job giver.

    Attributes:
        reload_priority: Priority reported when a reload is needed
        loadout_high_priority: Loadout updater's high tier
        loadout_low_priority: Loadout updater's low tier
        respect_draft: Report priority 0 for agents under manual direction
    """
    reload_priority: float = RELOAD_PRIORITY
    loadout_high_priority: float = LOADOUT_HIGH_PRIORITY
    loadout_low_priority: float = LOADOUT_LOW_PRIORITY
    respect_draft: bool = True

    def __post_init__(self):
        """Reject priorities outside the loadout updater's band."""
        self.loadout_low_priority = max(0.0, self.loadout_low_priority)
        self.loadout_high_priority = max(0.0, self.loadout_high_priority)
        if not self.loadout_low_priority < self.reload_priority < self.loadout_high_priority:
            raise ValueError(
                f"reload_priority {self.reload_priority} must lie strictly between "
                f"{self.loadout_low_priority} and {self.loadout_high_priority}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReloadConfig":
        """Create from dictionary, ignoring unknown keys."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

    def save(self, path: str) -> None:
        """Save config to a JSON or YAML file, chosen by extension."""
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            if path.endswith((".yaml", ".yml")):
                yaml.safe_dump(self.to_dict(), f, sort_keys=False)
            else:
                json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str) -> Optional["ReloadConfig"]:
        """Load config from JSON or YAML. Returns None if missing or invalid."""
        if not os.path.exists(path):
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()

            if path.endswith((".yaml", ".yml")):
                data = yaml.safe_load(content)
            else:
                data = json.loads(content)

            return cls.from_dict(data or {})

        except (OSError, ValueError, TypeError, AttributeError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            return None


DEFAULT_RELOAD_CONFIG = ReloadConfig()

PRESETS: Dict[str, ReloadConfig] = {
    "default": DEFAULT_RELOAD_CONFIG,
    # Just under the loadout updater's high tier.
    "eager": ReloadConfig(reload_priority=9.15),
    # Barely above the low tier; other work usually wins.
    "lazy": ReloadConfig(reload_priority=3.5),
    "ignore_draft": ReloadConfig(respect_draft=False),
}


def get_preset(name: str) -> Optional[ReloadConfig]:
    """Get a built-in config preset by name."""
    return PRESETS.get(name.lower())


def list_presets() -> List[str]:
    """List available preset names."""
    return list(PRESETS.keys())
