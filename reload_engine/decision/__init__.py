"""
Reload decision layer.

Decides, once per tick and without side effects, whether an agent should
reload one of its weapons and with which ammo link. It does NOT perform
the reload; the scheduler turns the answer into a job.
"""

from .tracking import is_reservation_satisfied
from .reload_check import (
    DecisionReason,
    ReloadBranch,
    ReloadDecision,
    candidate_weapons,
    evaluate_reload_need,
    magazine_deficit,
)
from .job_giver import CommitLinkPreparer, ReloadJob, ReloadJobGiver, ReloadPreparer

__all__ = [
    "is_reservation_satisfied",
    "DecisionReason",
    "ReloadBranch",
    "ReloadDecision",
    "candidate_weapons",
    "evaluate_reload_need",
    "magazine_deficit",
    "CommitLinkPreparer",
    "ReloadJob",
    "ReloadJobGiver",
    "ReloadPreparer",
]
