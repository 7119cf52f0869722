# src/keepsake/core/retention/coordinator.py
"""Retention coordinator: decides which releases must be kept.

Replays the deployment history in chronological order into one
RetentionTracker per (project, environment) group and returns the union
of what every tracker retained.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from time import perf_counter

from keepsake.contracts.data import (
    Deployment,
    Environment,
    GroupKey,
    Project,
    Release,
)
from keepsake.contracts.enums import SkipReason
from keepsake.contracts.errors import RetentionCapacityError, RetentionConsistencyError
from keepsake.contracts.events import DeploymentSkipped, ReleaseKept, RetentionSummary
from keepsake.core.events import EventBusProtocol, NullEventBus
from keepsake.core.logging import get_logger
from keepsake.core.retention.tracker import RetentionTracker

logger = get_logger(__name__)


@dataclass(frozen=True)
class RetentionResult:
    """Result of a retention computation.

    Attributes:
        releases: Releases to keep, each exactly once. Ordered by group
            creation, then most recent deployment first within a group.
        kept: One ReleaseKept per retained release per group. A release
            kept by two groups appears twice here but once in releases.
        skipped: Deployments excluded because a reference did not resolve
        group_count: Number of (project, environment) groups seen
        duration_seconds: Wall time spent computing
    """

    releases: tuple[Release, ...]
    kept: tuple[ReleaseKept, ...]
    skipped: tuple[DeploymentSkipped, ...]
    group_count: int
    duration_seconds: float

    @property
    def release_ids(self) -> frozenset[str]:
        """Identifiers of the releases to keep."""
        return frozenset(release.id for release in self.releases)


class RetentionCoordinator:
    """Applies a keep-N-most-recent policy to a deployment history.

    A coordinator holds only its configuration; every call to compute()
    builds its own lookup tables and trackers, so one instance can be
    reused and separate instances can run side by side.
    """

    def __init__(
        self,
        releases_to_keep: int,
        *,
        event_bus: EventBusProtocol | None = None,
    ) -> None:
        """Initialize RetentionCoordinator.

        Args:
            releases_to_keep: Releases to keep per (project, environment)
            event_bus: Sink for ReleaseKept/DeploymentSkipped/RetentionSummary
                events (defaults to NullEventBus)

        Raises:
            RetentionCapacityError: If releases_to_keep is not a positive int
        """
        if isinstance(releases_to_keep, bool) or not isinstance(releases_to_keep, int) or releases_to_keep < 1:
            raise RetentionCapacityError(releases_to_keep)
        self._releases_to_keep = releases_to_keep
        self._event_bus: EventBusProtocol = event_bus if event_bus is not None else NullEventBus()

    @property
    def releases_to_keep(self) -> int:
        return self._releases_to_keep

    def compute_releases_to_keep(
        self,
        projects: Iterable[Project],
        environments: Iterable[Environment],
        releases: Iterable[Release],
        deployments: Iterable[Deployment],
    ) -> list[Release]:
        """Return the releases that must be kept.

        See compute() for the rules; this returns only the releases.
        """
        return list(self.compute(projects, environments, releases, deployments).releases)

    def compute(
        self,
        projects: Iterable[Project],
        environments: Iterable[Environment],
        releases: Iterable[Release],
        deployments: Iterable[Deployment],
    ) -> RetentionResult:
        """Run the retention policy over a full deployment history.

        Deployments are replayed in ascending deployed_on order (ties keep
        input order). A deployment is skipped when its release is unknown,
        when the release's project is unknown, or when its environment is
        unknown; skipping is never an error. Each remaining deployment is
        tracked under (release.project_id, deployment.environment_id).

        Args:
            projects: Known projects
            environments: Known environments
            releases: Known releases
            deployments: Deployment history, in any order

        Returns:
            RetentionResult with the releases to keep and diagnostics

        Raises:
            RetentionConsistencyError: If a retained id has no Release record
        """
        start_time = perf_counter()

        releases_by_id = {release.id: release for release in releases}
        project_ids = {project.id for project in projects}
        environment_ids = {environment.id for environment in environments}

        trackers: dict[GroupKey, RetentionTracker] = {}
        skipped: list[DeploymentSkipped] = []
        deployments_total = 0

        for deployment in sorted(deployments, key=lambda d: d.deployed_on):
            deployments_total += 1

            skip = self._check_references(deployment, releases_by_id, project_ids, environment_ids)
            if skip is not None:
                logger.debug(
                    "Deployment skipped",
                    deployment_id=skip.deployment_id,
                    reason=skip.reason.value,
                    reference=skip.reference,
                )
                self._event_bus.emit(skip)
                skipped.append(skip)
                continue

            release = releases_by_id[deployment.release_id]
            key = GroupKey(release.project_id, deployment.environment_id)

            tracker = trackers.get(key)
            if tracker is None:
                tracker = RetentionTracker(self._releases_to_keep)
                trackers[key] = tracker

            tracker.track(deployment.release_id, deployment.environment_id, deployment.deployed_on)

        kept: list[ReleaseKept] = []
        kept_releases: dict[str, Release] = {}

        for key, tracker in trackers.items():
            for entry in tracker.entries():
                event = ReleaseKept(
                    release_id=entry.release_id,
                    project_id=key.project_id,
                    environment_id=entry.environment_id,
                    deployed_on=entry.deployed_on,
                )
                logger.info(
                    "Release kept",
                    release_id=event.release_id,
                    project_id=event.project_id,
                    environment_id=event.environment_id,
                    deployed_on=event.deployed_on.isoformat(),
                )
                self._event_bus.emit(event)
                kept.append(event)

                if entry.release_id not in kept_releases:
                    resolved = releases_by_id.get(entry.release_id)
                    if resolved is None:
                        raise RetentionConsistencyError(entry.release_id)
                    kept_releases[entry.release_id] = resolved

        duration_seconds = perf_counter() - start_time

        summary = RetentionSummary(
            releases_to_keep=self._releases_to_keep,
            deployments_total=deployments_total,
            deployments_skipped=len(skipped),
            group_count=len(trackers),
            releases_kept=len(kept_releases),
            duration_seconds=duration_seconds,
        )
        logger.info(
            "Retention computed",
            releases_to_keep=summary.releases_to_keep,
            deployments_total=summary.deployments_total,
            deployments_skipped=summary.deployments_skipped,
            group_count=summary.group_count,
            releases_kept=summary.releases_kept,
        )
        self._event_bus.emit(summary)

        return RetentionResult(
            releases=tuple(kept_releases.values()),
            kept=tuple(kept),
            skipped=tuple(skipped),
            group_count=len(trackers),
            duration_seconds=duration_seconds,
        )

    @staticmethod
    def _check_references(
        deployment: Deployment,
        releases_by_id: dict[str, Release],
        project_ids: set[str],
        environment_ids: set[str],
    ) -> DeploymentSkipped | None:
        """Return a DeploymentSkipped if any reference fails to resolve.

        The deployment's declared project_id is not checked;
        only the project that owns the release matters.
        """
        release = releases_by_id.get(deployment.release_id)
        if release is None:
            return DeploymentSkipped(deployment.id, SkipReason.UNKNOWN_RELEASE, deployment.release_id)
        if release.project_id not in project_ids:
            return DeploymentSkipped(deployment.id, SkipReason.UNKNOWN_PROJECT, release.project_id)
        if deployment.environment_id not in environment_ids:
            return DeploymentSkipped(deployment.id, SkipReason.UNKNOWN_ENVIRONMENT, deployment.environment_id)
        return None


def compute_releases_to_keep(
    projects: Iterable[Project],
    environments: Iterable[Environment],
    releases: Iterable[Release],
    deployments: Iterable[Deployment],
    releases_to_keep: int,
    *,
    event_bus: EventBusProtocol | None = None,
) -> list[Release]:
    """Return the releases to keep under a keep-N-most-recent policy.

    Convenience wrapper around RetentionCoordinator for one-off calls.

    Raises:
        RetentionCapacityError: If releases_to_keep is not a positive int
    """
    coordinator = RetentionCoordinator(releases_to_keep, event_bus=event_bus)
    return coordinator.compute_releases_to_keep(projects, environments, releases, deployments)
