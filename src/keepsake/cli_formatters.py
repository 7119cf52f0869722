# src/keepsake/cli_formatters.py
"""CLI event formatter factories for retention output.

Each factory returns a dict mapping event types to handler callables,
suitable for subscribing to an EventBus.
"""

from __future__ import annotations

import json
from collections.abc import Callable

import typer

from keepsake.contracts.events import DeploymentSkipped, ReleaseKept, RetentionSummary
from keepsake.core.events import EventBusProtocol


def create_console_formatters(*, show_skipped: bool = False) -> dict[type, Callable[..., None]]:
    """Create console formatters for human-readable CLI output.

    Args:
        show_skipped: Also report deployments excluded for dangling references.
    """

    def _format_release_kept(event: ReleaseKept) -> None:
        typer.echo(
            f"{event.release_id} kept because it was deployed to {event.environment_id} "
            f"on {event.deployed_on.isoformat()} (project {event.project_id})"
        )

    def _format_deployment_skipped(event: DeploymentSkipped) -> None:
        typer.echo(f"  skipped deployment {event.deployment_id}: {event.reason.value} ({event.reference})", err=True)

    def _format_summary(event: RetentionSummary) -> None:
        typer.echo(
            f"\n✓ {event.releases_kept:,} release(s) kept | "
            f"{event.group_count:,} group(s) | "
            f"{event.deployments_total:,} deployment(s), {event.deployments_skipped:,} skipped | "
            f"keep {event.releases_to_keep} per group | "
            f"{event.duration_seconds:.3f}s total"
        )

    formatters: dict[type, Callable[..., None]] = {
        ReleaseKept: _format_release_kept,
        RetentionSummary: _format_summary,
    }
    if show_skipped:
        formatters[DeploymentSkipped] = _format_deployment_skipped
    return formatters


def create_json_formatters() -> dict[type, Callable[..., None]]:
    """Create JSON-lines formatters for structured CLI output."""

    def _format_release_kept_json(event: ReleaseKept) -> None:
        typer.echo(
            json.dumps(
                {
                    "event": "release_kept",
                    "release_id": event.release_id,
                    "project_id": event.project_id,
                    "environment_id": event.environment_id,
                    "deployed_on": event.deployed_on.isoformat(),
                }
            )
        )

    def _format_deployment_skipped_json(event: DeploymentSkipped) -> None:
        typer.echo(
            json.dumps(
                {
                    "event": "deployment_skipped",
                    "deployment_id": event.deployment_id,
                    "reason": event.reason.value,
                    "reference": event.reference,
                }
            )
        )

    def _format_summary_json(event: RetentionSummary) -> None:
        typer.echo(
            json.dumps(
                {
                    "event": "retention_completed",
                    "releases_to_keep": event.releases_to_keep,
                    "deployments_total": event.deployments_total,
                    "deployments_skipped": event.deployments_skipped,
                    "group_count": event.group_count,
                    "releases_kept": event.releases_kept,
                    "duration_seconds": event.duration_seconds,
                }
            )
        )

    return {
        ReleaseKept: _format_release_kept_json,
        DeploymentSkipped: _format_deployment_skipped_json,
        RetentionSummary: _format_summary_json,
    }


def subscribe_formatters(
    event_bus: EventBusProtocol,
    formatters: dict[type, Callable[..., None]],
) -> None:
    """Subscribe all formatters to the event bus.

    Args:
        event_bus: The event bus to subscribe handlers to.
        formatters: Mapping from event type to handler callable.
    """
    for event_type, handler in formatters.items():
        event_bus.subscribe(event_type, handler)
