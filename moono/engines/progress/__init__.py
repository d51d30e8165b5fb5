"""
Progress Engine - completion facts and status derivation.

Statuses:
- COMPLETED: the item's own completion fact exists
- ACTIVE: first item, or the item right before it is completed
- LOCKED: everything else
"""

from moono.engines.progress.gating import (
    UnitGatingPolicy,
    status,
    compute_statuses,
    compute_unit_statuses,
    unit_completion,
    is_completed,
)
from moono.engines.progress.progress_store import ProgressStore, SqlProgressStore
from moono.engines.progress.path_service import PathService

__all__ = [
    "UnitGatingPolicy",
    "status",
    "compute_statuses",
    "compute_unit_statuses",
    "unit_completion",
    "is_completed",
    "ProgressStore",
    "SqlProgressStore",
    "PathService",
]
