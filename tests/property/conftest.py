# tests/property/conftest.py
"""Shared Hypothesis strategies for retention property tests.

Histories are drawn from small identifier pools so that collisions
(redeployments, shared environments, dangling references) are common.

Usage:
    from tests.property.conftest import histories

    @given(history=histories())
    def test_property(history: DeploymentHistory) -> None:
        ...
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from hypothesis import strategies as st

from keepsake.contracts.data import Deployment, Environment, Project, Release
from keepsake.core.history import DeploymentHistory

EPOCH = datetime(2024, 1, 1, tzinfo=UTC)

PROJECT_IDS = [f"Project-{i}" for i in range(3)]
ENVIRONMENT_IDS = [f"Environment-{i}" for i in range(3)]
RELEASE_IDS = [f"Release-{i}" for i in range(8)]

# Pools include identifiers that are never declared, to exercise skipping
project_refs = st.sampled_from([*PROJECT_IDS, "Project-404"])
environment_refs = st.sampled_from([*ENVIRONMENT_IDS, "Environment-404"])
release_refs = st.sampled_from([*RELEASE_IDS, "Release-404"])

minutes = st.integers(min_value=0, max_value=500)


def timestamp(minute: int) -> datetime:
    return EPOCH + timedelta(minutes=minute)


@st.composite
def histories(draw: st.DrawFn, *, unique_timestamps: bool = False, max_deployments: int = 40) -> DeploymentHistory:
    """Draw a deployment history over the shared identifier pools."""
    projects = tuple(Project(id=pid) for pid in draw(st.lists(st.sampled_from(PROJECT_IDS), unique=True, min_size=1)))
    environments = tuple(Environment(id=eid) for eid in draw(st.lists(st.sampled_from(ENVIRONMENT_IDS), unique=True, min_size=1)))
    releases = tuple(
        Release(id=rid, project_id=draw(project_refs))
        for rid in draw(st.lists(st.sampled_from(RELEASE_IDS), unique=True, min_size=1))
    )

    deployment_minutes = draw(st.lists(minutes, unique=unique_timestamps, max_size=max_deployments))
    deployments = tuple(
        Deployment(
            id=f"Deployment-{i}",
            release_id=draw(release_refs),
            environment_id=draw(environment_refs),
            deployed_on=timestamp(minute),
        )
        for i, minute in enumerate(deployment_minutes)
    )
    return DeploymentHistory(projects=projects, environments=environments, releases=releases, deployments=deployments)
