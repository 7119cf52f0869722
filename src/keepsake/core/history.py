"""Deployment history loading.

Reads a YAML or JSON document describing projects, environments, releases
and deployments, validates its shape with Pydantic and converts it into
contract records for the retention coordinator.

Example document:
    projects:
      - id: Project-1
        name: Payments
    environments:
      - id: Environment-1
        name: Staging
    releases:
      - id: Release-1
        projectId: Project-1
        version: 1.0.0
        created: 2000-01-01T08:00:00
    deployments:
      - id: Deployment-1
        releaseId: Release-1
        environmentId: Environment-1
        deployedOn: 2000-01-01T10:00:00

Only the document's shape is validated here. Dangling references between
records are left for the coordinator, which skips such deployments.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from keepsake.contracts.data import Deployment, Environment, Project, Release
from keepsake.contracts.errors import HistoryLoadError


def _as_utc(value: datetime) -> datetime:
    """Interpret naive timestamps as UTC so every timestamp is comparable."""
    if value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


class _Record(BaseModel):
    model_config = {"frozen": True, "populate_by_name": True, "str_strip_whitespace": True, "coerce_numbers_to_str": True}


class ProjectDocument(_Record):
    id: str = Field(min_length=1)
    name: str = ""


class EnvironmentDocument(_Record):
    id: str = Field(min_length=1)
    name: str = ""


class ReleaseDocument(_Record):
    id: str = Field(min_length=1)
    project_id: str = Field(validation_alias=AliasChoices("project_id", "projectId"))
    version: str | None = None
    created: datetime | None = None

    @field_validator("created")
    @classmethod
    def _created_utc(cls, v: datetime | None) -> datetime | None:
        return None if v is None else _as_utc(v)


class DeploymentDocument(_Record):
    id: str = Field(min_length=1)
    release_id: str = Field(validation_alias=AliasChoices("release_id", "releaseId"))
    environment_id: str = Field(validation_alias=AliasChoices("environment_id", "environmentId"))
    deployed_on: datetime = Field(validation_alias=AliasChoices("deployed_on", "deployedOn"))
    project_id: str | None = Field(default=None, validation_alias=AliasChoices("project_id", "projectId"))

    @field_validator("deployed_on")
    @classmethod
    def _deployed_on_utc(cls, v: datetime) -> datetime:
        return _as_utc(v)


class HistoryDocument(BaseModel):
    """Top-level shape of a deployment history file."""

    model_config = {"frozen": True}

    projects: list[ProjectDocument] = Field(default_factory=list)
    environments: list[EnvironmentDocument] = Field(default_factory=list)
    releases: list[ReleaseDocument] = Field(default_factory=list)
    deployments: list[DeploymentDocument] = Field(default_factory=list)


@dataclass(frozen=True)
class DeploymentHistory:
    """Everything the retention coordinator needs for one computation."""

    projects: tuple[Project, ...] = field(default_factory=tuple)
    environments: tuple[Environment, ...] = field(default_factory=tuple)
    releases: tuple[Release, ...] = field(default_factory=tuple)
    deployments: tuple[Deployment, ...] = field(default_factory=tuple)

    @classmethod
    def from_document(cls, document: HistoryDocument) -> "DeploymentHistory":
        return cls(
            projects=tuple(Project(id=p.id, name=p.name) for p in document.projects),
            environments=tuple(Environment(id=e.id, name=e.name) for e in document.environments),
            releases=tuple(
                Release(id=r.id, project_id=r.project_id, version=r.version, created=r.created) for r in document.releases
            ),
            deployments=tuple(
                Deployment(
                    id=d.id,
                    release_id=d.release_id,
                    environment_id=d.environment_id,
                    deployed_on=d.deployed_on,
                    project_id=d.project_id,
                )
                for d in document.deployments
            ),
        )


def parse_history(raw: Any, *, source: str = "<memory>") -> DeploymentHistory:
    """Validate an already-decoded document and convert it to records.

    Args:
        raw: Decoded YAML/JSON content (must be a mapping)
        source: Name used in error messages

    Raises:
        HistoryLoadError: If the document does not have the expected shape
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise HistoryLoadError(f"{source}: expected a mapping at top level, got {type(raw).__name__}")
    try:
        document = HistoryDocument.model_validate(raw)
    except ValidationError as e:
        raise HistoryLoadError(f"{source}: invalid deployment history:\n{e}") from e
    return DeploymentHistory.from_document(document)


def load_history(path: Path) -> DeploymentHistory:
    """Load a deployment history from a YAML or JSON file.

    JSON is valid YAML, so both go through yaml.safe_load.

    Raises:
        HistoryLoadError: If the file is missing, unreadable or malformed
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise HistoryLoadError(f"Cannot read deployment history {path}: {e}") from e

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise HistoryLoadError(f"{path}: not valid YAML/JSON: {e}") from e

    return parse_history(raw, source=str(path))
