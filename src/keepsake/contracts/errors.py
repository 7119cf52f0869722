"""Exception taxonomy for retention computations.

Referential problems in the input (a deployment naming an unknown release,
project or environment) are NOT errors: the coordinator skips those
deployments and records a SkipReason. Only misconfiguration and broken
internal invariants raise.
"""


class RetentionError(Exception):
    """Base class for all keepsake errors."""


class RetentionCapacityError(RetentionError, ValueError):
    """Raised when the number of releases to keep is not a positive integer.

    Raised at construction time, before any deployment is processed.
    """

    def __init__(self, capacity: object) -> None:
        super().__init__(f"releases_to_keep must be a positive integer, got {capacity!r}")
        self.capacity = capacity


class RetentionConsistencyError(RetentionError, RuntimeError):
    """Raised when a retained release id cannot be resolved to a Release.

    Every id admitted into a tracker passed validation against the release
    lookup table, so this indicates a bug in the coordinator rather than
    bad input. Never caught inside keepsake.
    """

    def __init__(self, release_id: str) -> None:
        super().__init__(f"Retained release {release_id!r} has no matching Release record")
        self.release_id = release_id


class HistoryLoadError(RetentionError):
    """Raised when a deployment history document cannot be read or parsed."""
