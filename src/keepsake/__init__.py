"""
Keepsake: release retention for deployment pipelines.

Decides which releases must be kept by retaining the N most recently
deployed distinct releases for every (project, environment) pair.
"""

__version__ = "0.1.0"

from keepsake.core.retention import (
    RetentionCoordinator,
    RetentionResult,
    RetentionTracker,
    compute_releases_to_keep,
)

__all__ = [
    "RetentionCoordinator",
    "RetentionResult",
    "RetentionTracker",
    "__version__",
    "compute_releases_to_keep",
]
