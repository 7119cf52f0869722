# src/keepsake/core/retention/__init__.py
"""Release retention: keep the N most recently deployed releases per group.

Provides RetentionTracker (one bounded recency list per project and
environment) and RetentionCoordinator (replays the deployment history
into trackers and unions their contents).
"""

from keepsake.core.retention.coordinator import (
    RetentionCoordinator,
    RetentionResult,
    compute_releases_to_keep,
)
from keepsake.core.retention.tracker import RetentionTracker

__all__ = [
    "RetentionCoordinator",
    "RetentionResult",
    "RetentionTracker",
    "compute_releases_to_keep",
]
