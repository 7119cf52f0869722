"""Status codes and kinds used across subsystem boundaries."""

from enum import StrEnum


class SkipReason(StrEnum):
    """Why a deployment was excluded from every retention group.

    Checked in declaration order; the first failing reference wins.
    """

    UNKNOWN_RELEASE = "unknown_release"
    UNKNOWN_PROJECT = "unknown_project"
    UNKNOWN_ENVIRONMENT = "unknown_environment"
