# src/keepsake/core/retention/tracker.py
"""Bounded recency tracker for one (project, environment) group.

Holds the N most recently deployed distinct releases of a group together
with the deployment that put each one there.

Storage is an arena of parallel columns addressed by integer slot handles.
The prev/next columns thread the slots into a doubly linked list ordered
from most to least recently deployed, and a dict maps each release id to
its slot. That gives O(1) insert-at-head, move-to-head and drop-tail, so a
group that sees thousands of redeployments of the same few releases never
re-sorts anything.

The arena is sized to the capacity: when a new release arrives at a full
tracker, the tail's slot is unlinked and reused for the newcomer.
"""

from collections.abc import Iterator
from datetime import datetime

from keepsake.contracts.data import TrackedEntry
from keepsake.contracts.errors import RetentionCapacityError

# Handle value for "no slot" (end of list, empty tracker)
_NIL = -1


class RetentionTracker:
    """Keeps the most recently deployed distinct releases of one group.

    Deployments must be fed in ascending deployed_on order for the result
    to be meaningful; the tracker itself only compares against the stored
    timestamp of a release it already holds.

    Example:
        tracker = RetentionTracker(capacity=2)
        tracker.track("r1", "prod", t1)
        tracker.track("r2", "prod", t2)
        tracker.track("r3", "prod", t3)  # evicts r1
        tracker.retained_ids()  # ["r3", "r2"]
    """

    __slots__ = (
        "_capacity",
        "_deployed_on",
        "_environment_ids",
        "_head",
        "_index",
        "_next",
        "_prev",
        "_release_ids",
        "_tail",
    )

    def __init__(self, capacity: int) -> None:
        """Initialize an empty tracker.

        Args:
            capacity: Maximum number of distinct releases to keep (>= 1)

        Raises:
            RetentionCapacityError: If capacity is not a positive int
        """
        # bool is an int subclass; True as a capacity is a caller bug
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise RetentionCapacityError(capacity)

        self._capacity = capacity
        self._index: dict[str, int] = {}

        # Arena columns, one position per slot
        self._release_ids: list[str] = []
        self._environment_ids: list[str] = []
        self._deployed_on: list[datetime] = []
        self._prev: list[int] = []
        self._next: list[int] = []

        self._head = _NIL
        self._tail = _NIL

    @property
    def capacity(self) -> int:
        """Maximum number of distinct releases held."""
        return self._capacity

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, release_id: object) -> bool:
        return release_id in self._index

    def __repr__(self) -> str:
        return f"RetentionTracker(capacity={self._capacity}, retained={self.retained_ids()!r})"

    def track(self, release_id: str, environment_id: str, deployed_on: datetime) -> bool:
        """Record a deployment of release_id.

        A release the tracker does not hold yet is inserted as the most
        recent entry, evicting the least recent one when the tracker is
        full. A release it already holds is refreshed (new environment and
        timestamp, moved to most recent) only if deployed_on is strictly
        later than the stored timestamp. Equal or older deployments are
        stale and ignored.

        Args:
            release_id: Deployed release
            environment_id: Environment the release was deployed to
            deployed_on: When the deployment happened

        Returns:
            True if the tracker changed, False for a stale deployment.
        """
        slot = self._index.get(release_id)

        if slot is not None:
            if deployed_on <= self._deployed_on[slot]:
                return False
            self._environment_ids[slot] = environment_id
            self._deployed_on[slot] = deployed_on
            if slot != self._head:
                self._unlink(slot)
                self._link_head(slot)
            return True

        if len(self._index) >= self._capacity:
            slot = self._evict_tail()
            self._release_ids[slot] = release_id
            self._environment_ids[slot] = environment_id
            self._deployed_on[slot] = deployed_on
        else:
            slot = len(self._release_ids)
            self._release_ids.append(release_id)
            self._environment_ids.append(environment_id)
            self._deployed_on.append(deployed_on)
            self._prev.append(_NIL)
            self._next.append(_NIL)

        self._index[release_id] = slot
        self._link_head(slot)
        return True

    def retained_ids(self) -> list[str]:
        """Return tracked release ids, most recently deployed first."""
        return [self._release_ids[slot] for slot in self._walk()]

    def entries(self) -> Iterator[TrackedEntry]:
        """Yield a snapshot of every tracked entry, most recent first."""
        for slot in self._walk():
            yield self._snapshot(slot)

    def get(self, release_id: str) -> TrackedEntry | None:
        """Return the tracked entry for release_id, or None if not held."""
        slot = self._index.get(release_id)
        if slot is None:
            return None
        return self._snapshot(slot)

    @property
    def most_recent(self) -> TrackedEntry | None:
        """Entry at the head of the recency list."""
        if self._head == _NIL:
            return None
        return self._snapshot(self._head)

    @property
    def least_recent(self) -> TrackedEntry | None:
        """Entry that the next new release would evict."""
        if self._tail == _NIL:
            return None
        return self._snapshot(self._tail)

    # --- linked-list primitives ---

    def _walk(self) -> Iterator[int]:
        slot = self._head
        while slot != _NIL:
            yield slot
            slot = self._next[slot]

    def _snapshot(self, slot: int) -> TrackedEntry:
        return TrackedEntry(
            release_id=self._release_ids[slot],
            environment_id=self._environment_ids[slot],
            deployed_on=self._deployed_on[slot],
        )

    def _link_head(self, slot: int) -> None:
        """Link a detached slot in front of the current head."""
        self._prev[slot] = _NIL
        self._next[slot] = self._head
        if self._head != _NIL:
            self._prev[self._head] = slot
        self._head = slot
        if self._tail == _NIL:
            self._tail = slot

    def _unlink(self, slot: int) -> None:
        """Detach a slot from any position in the list."""
        prev_slot = self._prev[slot]
        next_slot = self._next[slot]

        if prev_slot != _NIL:
            self._next[prev_slot] = next_slot
        else:
            self._head = next_slot

        if next_slot != _NIL:
            self._prev[next_slot] = prev_slot
        else:
            self._tail = prev_slot

        self._prev[slot] = _NIL
        self._next[slot] = _NIL

    def _evict_tail(self) -> int:
        """Drop the least recent entry and return its now-free slot."""
        slot = self._tail
        del self._index[self._release_ids[slot]]
        self._unlink(slot)
        return slot
