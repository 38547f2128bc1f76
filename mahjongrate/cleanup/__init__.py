"""Account and identity cleanup workflows."""

from .account import AccountDeletionService, DeletionReport
from .groups import GroupCascadeResolver, GroupOutcome
from .pruner import prune_collection
from .sweeper import StaleIdentitySweeper, SweepReport

__all__ = [
    "AccountDeletionService",
    "DeletionReport",
    "GroupCascadeResolver",
    "GroupOutcome",
    "StaleIdentitySweeper",
    "SweepReport",
    "prune_collection",
]
