"""Observability events for retention computations.

Emitted by the RetentionCoordinator onto an EventBus and consumed by CLI
formatters. Emission is one-way: handlers never influence the result.
"""

from dataclasses import dataclass
from datetime import datetime

from keepsake.contracts.enums import SkipReason


@dataclass(frozen=True, slots=True)
class ReleaseKept:
    """Emitted once per retained release per group when results are collected.

    Explains why the release was kept: it is among the most recent
    deployments to environment_id within project_id.
    """

    release_id: str
    project_id: str
    environment_id: str
    deployed_on: datetime


@dataclass(frozen=True, slots=True)
class DeploymentSkipped:
    """Emitted when a deployment references something that does not exist.

    Attributes:
        deployment_id: The skipped deployment
        reason: First reference that failed to resolve
        reference: The identifier that failed to resolve
    """

    deployment_id: str
    reason: SkipReason
    reference: str


@dataclass(frozen=True, slots=True)
class RetentionSummary:
    """Emitted once after a computation finishes."""

    releases_to_keep: int
    deployments_total: int
    deployments_skipped: int
    group_count: int
    releases_kept: int
    duration_seconds: float
