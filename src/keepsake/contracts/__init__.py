"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core.
Settings classes live in keepsake.core.config and are not re-exported here.
"""

from keepsake.contracts.data import (
    Deployment,
    Environment,
    GroupKey,
    Project,
    Release,
    TrackedEntry,
)
from keepsake.contracts.enums import SkipReason
from keepsake.contracts.errors import (
    HistoryLoadError,
    RetentionCapacityError,
    RetentionConsistencyError,
    RetentionError,
)
from keepsake.contracts.events import (
    DeploymentSkipped,
    ReleaseKept,
    RetentionSummary,
)

__all__ = [
    "Deployment",
    "DeploymentSkipped",
    "Environment",
    "GroupKey",
    "HistoryLoadError",
    "Project",
    "Release",
    "ReleaseKept",
    "RetentionCapacityError",
    "RetentionConsistencyError",
    "RetentionError",
    "RetentionSummary",
    "SkipReason",
    "TrackedEntry",
]
