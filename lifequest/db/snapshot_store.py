"""
In-memory progress snapshot store

Keeps one ProgressSnapshot per user with an optimistic version number.
Readers get a deep copy; a write only lands when the caller's snapshot
still carries the stored version, otherwise ConcurrencyConflict is raised
and the caller has to reload.

Production deployments back this with a real database; the contract
(load copy, compare-and-swap save) stays the same.
"""

import asyncio
import logging
from typing import Dict, Optional

from lifequest.exceptions import ConcurrencyConflict, RecordNotFoundError
from lifequest.models import ProgressSnapshot
from lifequest.observability.metrics import record_conflict

logger = logging.getLogger(__name__)


class InMemorySnapshotStore:
    """Versioned snapshot storage keyed by user id"""

    def __init__(self):
        self._snapshots: Dict[str, ProgressSnapshot] = {}
        self._write_lock = asyncio.Lock()

    async def create(self, user_id: str) -> ProgressSnapshot:
        """Provision a snapshot for a new account (no-op if it exists)"""
        async with self._write_lock:
            if user_id not in self._snapshots:
                self._snapshots[user_id] = ProgressSnapshot.new(user_id)
                logger.info(f"Provisioned progress snapshot for user {user_id}")
            return self._snapshots[user_id].model_copy(deep=True)

    async def load(self, user_id: str) -> ProgressSnapshot:
        """Get a private copy of the user's snapshot"""
        snapshot = self._snapshots.get(user_id)
        if snapshot is None:
            raise RecordNotFoundError(
                f"No progress snapshot for user {user_id}",
                record_type="ProgressSnapshot",
                record_id=user_id,
                user_id=user_id,
                operation="load_snapshot",
            )
        return snapshot.model_copy(deep=True)

    async def save(self, snapshot: ProgressSnapshot, expected_version: Optional[int] = None) -> ProgressSnapshot:
        """
        Compare-and-swap write

        Args:
            snapshot: New snapshot to store
            expected_version: Version the caller read (defaults to snapshot.version)

        Returns:
            Stored copy with the bumped version

        Raises:
            ConcurrencyConflict: the stored version moved on since the read
        """
        if expected_version is None:
            expected_version = snapshot.version

        async with self._write_lock:
            current = self._snapshots.get(snapshot.user_id)
            actual_version = current.version if current is not None else None

            if actual_version != expected_version:
                record_conflict()
                raise ConcurrencyConflict(
                    f"Stale snapshot for user {snapshot.user_id}",
                    expected_version=expected_version,
                    actual_version=actual_version,
                    user_id=snapshot.user_id,
                    operation="save_snapshot",
                )

            stored = snapshot.model_copy(deep=True)
            stored.version = expected_version + 1
            self._snapshots[snapshot.user_id] = stored
            logger.debug(f"Saved snapshot for user {snapshot.user_id} at version {stored.version}")
            return stored.model_copy(deep=True)

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._snapshots
