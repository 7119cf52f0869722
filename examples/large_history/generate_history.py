#!/usr/bin/env python3
"""
Generate a procedural deployment history for large-scale testing.

Creates a YAML history with configurable deployment count (default 50k):
- 10 projects, each with 200 releases
- 4 environments (Dev, Test, Staging, Production)
- deployments of random releases to random environments, one second apart

Usage:
    python generate_history.py              # 50,000 deployments
    python generate_history.py 100000       # 100,000 deployments

Then:
    keepsake keep -H examples/large_history/history.yaml -n 3 --format json
"""

import random
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import yaml

PROJECTS = 10
RELEASES_PER_PROJECT = 200
ENVIRONMENTS = ["Dev", "Test", "Staging", "Production"]


def generate_history(num_deployments: int = 50_000, output_path: Path | None = None) -> None:
    """Generate a procedural deployment history document."""
    if output_path is None:
        output_path = Path(__file__).parent / "history.yaml"

    base_timestamp = datetime(2024, 1, 1, 0, 0, 0, tzinfo=UTC)

    projects = [{"id": f"Project-{p}", "name": f"Project {p}"} for p in range(1, PROJECTS + 1)]
    environments = [{"id": f"Environment-{i}", "name": name} for i, name in enumerate(ENVIRONMENTS, start=1)]
    releases = [
        {"id": f"Release-{p}-{r}", "projectId": f"Project-{p}", "version": f"{p}.0.{r}"}
        for p in range(1, PROJECTS + 1)
        for r in range(1, RELEASES_PER_PROJECT + 1)
    ]

    print(f"Generating {num_deployments:,} deployments to {output_path}...")  # noqa: T201

    deployments = []
    for i in range(1, num_deployments + 1):
        release = random.choice(releases)
        deployments.append(
            {
                "id": f"Deployment-{i}",
                "releaseId": release["id"],
                "environmentId": random.choice(environments)["id"],
                "deployedOn": (base_timestamp + timedelta(seconds=i)).isoformat(),
            }
        )

        # Progress indicator every 10k deployments
        if i % 10_000 == 0:
            print(f"  {i:,} deployments generated...")  # noqa: T201

    document = {
        "projects": projects,
        "environments": environments,
        "releases": releases,
        "deployments": deployments,
    }
    with open(output_path, "w") as f:
        yaml.safe_dump(document, f, sort_keys=False)

    print(f"✓ Generated {num_deployments:,} deployments successfully")  # noqa: T201


if __name__ == "__main__":
    num_deployments = int(sys.argv[1]) if len(sys.argv) > 1 else 50_000

    if num_deployments < 1 or num_deployments > 1_000_000:
        print("Error: Deployment count must be between 1 and 1,000,000", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    generate_history(num_deployments)
