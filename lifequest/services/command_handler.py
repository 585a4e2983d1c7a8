"""
ProgressionCommandHandler - host-side command execution

Wraps ProgressionService with load / compute / save against a snapshot
store. Commands for the same user run one at a time (one asyncio.Lock per
user), and a write that loses a race with another process is retried on a
freshly loaded snapshot. Refused or no-op commands are not written.

Locks only live while a user has commands queued or running.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Callable, Dict, Iterable, List, Optional
from datetime import datetime

from lifequest import config
from lifequest.db.snapshot_store import InMemorySnapshotStore
from lifequest.models import ProgressSnapshot, QuestSuggestion, QuestTemplate
from lifequest.resilience.retry import retry_with_backoff
from lifequest.services.progression_service import ProgressionResult, ProgressionService

logger = logging.getLogger(__name__)


class ProgressionCommandHandler:
    """Serialized, conflict-retrying execution of progression commands"""

    def __init__(
        self,
        store: InMemorySnapshotStore,
        service: ProgressionService,
        max_retries: int = config.MAX_CONFLICT_RETRIES,
        base_delay: float = config.RETRY_BASE_DELAY
    ):
        self.store = store
        self.service = service
        self.max_retries = max_retries
        self.base_delay = base_delay
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    @asynccontextmanager
    async def _user_lock(self, user_id: str):
        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()
        self._lock_users[user_id] = self._lock_users.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[user_id] -= 1
            if self._lock_users[user_id] == 0:
                del self._lock_users[user_id]
                del self._locks[user_id]

    async def _execute(
        self,
        user_id: str,
        command: str,
        apply: Callable[[ProgressSnapshot], ProgressionResult]
    ) -> ProgressionResult:
        async def attempt() -> ProgressionResult:
            snapshot = await self.store.load(user_id)
            result = apply(snapshot)
            if not result.changed:
                logger.debug(f"{command} for user {user_id} changed nothing, skipping save")
                result.snapshot = snapshot
                return result
            result.snapshot = await self.store.save(result.snapshot, expected_version=snapshot.version)
            return result

        attempt.__name__ = command

        async with self._user_lock(user_id):
            return await retry_with_backoff(
                attempt,
                max_retries=self.max_retries,
                base_delay=self.base_delay,
            )

    async def log_activity(
        self,
        user_id: str,
        area: str,
        base_xp: int,
        notes: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> ProgressionResult:
        return await self._execute(
            user_id,
            "log_activity",
            lambda snapshot: self.service.log_activity(snapshot, area, base_xp, notes=notes, now=now),
        )

    async def use_streak_freeze(
        self,
        user_id: str,
        area: str,
        now: Optional[datetime] = None
    ) -> ProgressionResult:
        return await self._execute(
            user_id,
            "use_streak_freeze",
            lambda snapshot: self.service.use_streak_freeze(snapshot, area, now=now),
        )

    async def record_daily_login(self, user_id: str, now: Optional[datetime] = None) -> ProgressionResult:
        return await self._execute(
            user_id,
            "record_daily_login",
            lambda snapshot: self.service.record_daily_login(snapshot, now=now),
        )

    async def accept_quest(
        self,
        user_id: str,
        template_id: str,
        templates: Iterable[QuestTemplate],
        now: Optional[datetime] = None
    ) -> ProgressionResult:
        catalog = list(templates)
        return await self._execute(
            user_id,
            "accept_quest",
            lambda snapshot: self.service.accept_quest(snapshot, template_id, catalog, now=now),
        )

    async def complete_quest(
        self,
        user_id: str,
        quest_id: str,
        now: Optional[datetime] = None
    ) -> ProgressionResult:
        return await self._execute(
            user_id,
            "complete_quest",
            lambda snapshot: self.service.complete_quest(snapshot, quest_id, now=now),
        )

    async def recommend_quests(
        self,
        user_id: str,
        templates: Iterable[QuestTemplate],
        accepted_titles: Optional[Iterable[str]] = None,
        now: Optional[datetime] = None
    ) -> List[QuestSuggestion]:
        """Read-only; no lock or retry needed"""
        snapshot = await self.store.load(user_id)
        return self.service.recommend_quests(snapshot, templates, accepted_titles, now=now)
