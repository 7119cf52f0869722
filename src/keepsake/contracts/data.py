"""Records consumed and produced by the retention core.

Project, Environment, Release and Deployment are supplied by the caller
and treated as read-only. TrackedEntry is a snapshot of the state a
RetentionTracker holds for one release; the tracker never hands out its
internal storage.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple


@dataclass(frozen=True, slots=True)
class Project:
    """A deployable project. Releases belong to exactly one project."""

    id: str
    name: str = ""


@dataclass(frozen=True, slots=True)
class Environment:
    """A deployment target (e.g. staging, production)."""

    id: str
    name: str = ""


@dataclass(frozen=True, slots=True)
class Release:
    """A versioned release of a project.

    Attributes:
        id: Release identifier
        project_id: Owning project; this is what groups deployments
        version: Human-readable version label (informational)
        created: When the release was cut (informational)
    """

    id: str
    project_id: str
    version: str | None = None
    created: datetime | None = None


@dataclass(frozen=True, slots=True)
class Deployment:
    """One deploy event of one release to one environment.

    project_id is the project the deployment *declares*. It takes no part
    in validation or grouping: deployments are always grouped under the
    project that owns the release.
    """

    id: str
    release_id: str
    environment_id: str
    deployed_on: datetime
    project_id: str | None = None


@dataclass(frozen=True, slots=True)
class TrackedEntry:
    """Most recent deployment observed for a release within one group."""

    release_id: str
    environment_id: str
    deployed_on: datetime


class GroupKey(NamedTuple):
    """Retention scope: the release's project and the target environment."""

    project_id: str
    environment_id: str
