"""
Scheduler glue for the reload evaluator.

The scheduler asks twice per decision: once for a priority ("should this
job be offered?") and once for the job itself. Both calls re-run the
evaluator on the current snapshot.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..config import DEFAULT_RELOAD_CONFIG, ReloadConfig
from ..types import Agent, AmmoLink, Weapon
from .reload_check import evaluate_reload_need

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReloadJob:
    """An executable reload job handed back to the scheduler."""
    agent_id: str
    weapon: Weapon
    link: Optional[AmmoLink]

    def to_dict(self) -> dict:
        return {
            "agent_id": self.agent_id,
            "weapon": self.weapon.name,
            "link": self.link.to_dict() if self.link else None,
        }


class ReloadPreparer:
    """
    Prepares a weapon for reloading and builds the job.

    Implemented by whatever executes reloads. ``pre_reload`` commits the
    chosen link; either step may refuse by returning False / None.
    """

    def pre_reload(self, weapon: Weapon, link: Optional[AmmoLink]) -> bool:
        raise NotImplementedError

    def make_reload_job(self, agent: Agent, weapon: Weapon) -> Optional[ReloadJob]:
        raise NotImplementedError


class CommitLinkPreparer(ReloadPreparer):
    """Preparer that selects the link on the weapon and always builds a job."""

    def pre_reload(self, weapon: Weapon, link: Optional[AmmoLink]) -> bool:
        user = weapon.ammo_user
        if user is None:
            return False
        if link is not None:
            user.selected_link = link
        return True

    def make_reload_job(self, agent: Agent, weapon: Weapon) -> Optional[ReloadJob]:
        user = weapon.ammo_user
        return ReloadJob(
            agent_id=agent.agent_id,
            weapon=weapon,
            link=user.selected_link if user else None,
        )


class ReloadJobGiver:
    """
    Offers reload jobs to the scheduler.

    Example:
        >>> giver = ReloadJobGiver()
        >>> if giver.get_priority(agent) > 0:
        ...     job = giver.try_give_job(agent, CommitLinkPreparer())
    """

    def __init__(self, config: Optional[ReloadConfig] = None):
        self.config = config or DEFAULT_RELOAD_CONFIG

    def get_priority(self, agent: Agent) -> float:
        """
        How important reloading is for this agent right now.

        Args:
            agent: Agent snapshot

        Returns:
            The configured reload priority, or 0.0 to not offer the job
        """
        if self.config.respect_draft and agent.drafted:
            return 0.0
        if evaluate_reload_need(agent).needed:
            return self.config.reload_priority
        return 0.0

    def try_give_job(self, agent: Agent, preparer: ReloadPreparer) -> Optional[ReloadJob]:
        """
        Build the reload job for the weapon the evaluator picks.

        Args:
            agent: Agent snapshot
            preparer: Commits the link and builds the job

        Returns:
            ReloadJob, or None if no reload is needed or preparation failed
        """
        decision = evaluate_reload_need(agent)
        if not decision.needed:
            return None

        if not preparer.pre_reload(decision.weapon, decision.link):
            logger.info(
                f"Reload of {decision.weapon.name} refused by preparer",
                extra={"agent_id": agent.agent_id, "subsystem": "reload"},
            )
            return None

        return preparer.make_reload_job(agent, decision.weapon)
