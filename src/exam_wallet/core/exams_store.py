"""
exams_store.py: Cached exam catalog with locally applied subscription flags.

The catalog is fetched from the `exams` table through a CollectionCache. Whether
an exam is subscribed is never stored on the exam row: it is derived from the
local SubscriptionMarkers after every replace, and patched in place on
subscribe/unsubscribe. Subscription changes are mirrored to the remote
`user_exam_subscriptions` table in the background; mirror failures are logged
and do not undo the local change.
"""

import asyncio
from dataclasses import replace
from datetime import date, timedelta
from typing import TYPE_CHECKING, Callable, List, Optional, Set

from ..utils.log_utils import get_logger
from .collection_cache import DEFAULT_FRESHNESS_SECONDS, CollectionCache
from .models import EXAM_DAY, REGISTRATION_DEADLINE, Deadline, Exam
from .seed_data import seed_exams
from .subscriptions import SubscriptionMarkers

if TYPE_CHECKING:
    from ..api.remote_store import RemoteStore

logger = get_logger(__name__)

EXAMS_TABLE = "exams"
SUBSCRIPTIONS_TABLE = "user_exam_subscriptions"


class ExamsStore:
    """Exam collection cache plus the user's subscription markers."""

    def __init__(
        self,
        remote: "RemoteStore",
        markers: Optional[SubscriptionMarkers] = None,
        user_id: Optional[str] = None,
        freshness_seconds: float = DEFAULT_FRESHNESS_SECONDS,
        fallback: Optional[Callable[[], List[Exam]]] = seed_exams,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.remote = remote
        self.markers = markers if markers is not None else SubscriptionMarkers()
        self.user_id = user_id
        kwargs = {"clock": clock} if clock is not None else {}
        self.cache: CollectionCache[Exam] = CollectionCache(
            "exams",
            loader=self._load,
            fallback=self._fallback_with_markers if fallback is not None else None,
            freshness_seconds=freshness_seconds,
            **kwargs,
        )
        self._fallback = fallback
        self._mirror_tasks: Set[asyncio.Task] = set()

    @property
    def exams(self) -> List[Exam]:
        return self.cache.items

    async def _load(self) -> List[Exam]:
        rows = await self.remote.query(EXAMS_TABLE)
        # markers are read after the remote read returns
        return [Exam.from_row(row, subscribed=str(row["id"]) in self.markers) for row in rows]

    def _fallback_with_markers(self) -> List[Exam]:
        return [replace(exam, is_subscribed=exam.id in self.markers) for exam in self._fallback()]

    async def fetch_exams(self, force: bool = False) -> List[Exam]:
        """Return the exam list, refreshing it from the remote store when stale.

        Raises:
            RemoteError: if the remote read failed (held or seed data stays visible).
        """
        return await self.cache.fetch(force=force)

    def get(self, exam_id: str) -> Optional[Exam]:
        for exam in self.cache.items:
            if exam.id == exam_id:
                return exam
        return None

    def subscribe(self, exam_id: str) -> None:
        """Mark an exam as subscribed locally and mirror it to the remote store.

        Already subscribed exams are not mirrored again.
        """
        changed = self.markers.add(exam_id)
        self._set_flag(exam_id, True)
        if changed:
            self._mirror(self._mirror_subscribe(exam_id))

    def unsubscribe(self, exam_id: str) -> None:
        """Remove the subscription locally and mirror it to the remote store."""
        changed = self.markers.discard(exam_id)
        self._set_flag(exam_id, False)
        if changed:
            self._mirror(self._mirror_unsubscribe(exam_id))

    def toggle_subscription(self, exam_id: str) -> bool:
        """Flip the subscription for an exam. Returns the new state."""
        if exam_id in self.markers:
            self.unsubscribe(exam_id)
            return False
        self.subscribe(exam_id)
        return True

    def _set_flag(self, exam_id: str, subscribed: bool) -> None:
        self.cache.patch(lambda exam: exam.id == exam_id, lambda exam: replace(exam, is_subscribed=subscribed))

    def _mirror(self, coro) -> None:
        if self.user_id is None:
            logger.debug("No user signed in, subscription kept local only")
            coro.close()
            return
        try:
            task = asyncio.get_running_loop().create_task(coro)
        except RuntimeError:
            logger.warning("No running event loop, subscription change not mirrored")
            coro.close()
            return
        self._mirror_tasks.add(task)
        task.add_done_callback(self._mirror_tasks.discard)

    async def _mirror_subscribe(self, exam_id: str) -> None:
        try:
            await self.remote.insert(SUBSCRIPTIONS_TABLE, {"user_id": self.user_id, "exam_id": exam_id})
        except Exception as e:
            logger.warning(f"Failed to mirror subscription to {exam_id}: {e}")

    async def _mirror_unsubscribe(self, exam_id: str) -> None:
        try:
            await self.remote.delete(SUBSCRIPTIONS_TABLE, {"user_id": self.user_id, "exam_id": exam_id})
        except Exception as e:
            logger.warning(f"Failed to mirror unsubscription from {exam_id}: {e}")

    async def wait_for_mirrors(self) -> None:
        """Wait until all background mirror calls have finished."""
        if self._mirror_tasks:
            await asyncio.gather(*list(self._mirror_tasks))

    def subscribed_exams(self) -> List[Exam]:
        return [exam for exam in self.cache.items if exam.is_subscribed]

    def upcoming_exams(self, limit: int = 3, today: Optional[date] = None) -> List[Exam]:
        """Exams whose exam date is after `today`, soonest first."""
        today = today or date.today()
        upcoming = [exam for exam in self.cache.items if exam.exam_date and exam.exam_date > today]
        upcoming.sort(key=lambda exam: exam.exam_date)
        return upcoming[:limit]

    def by_category(self, category: str) -> List[Exam]:
        return [exam for exam in self.cache.items if exam.category == category]

    def search(
        self,
        query: str = "",
        category: Optional[str] = None,
        open_only: bool = False,
        today: Optional[date] = None,
    ) -> List[Exam]:
        """Filter the held exams.

        Args:
            query: Case-insensitive substring of the name or description. Empty matches all.
            category: Only exams in this category.
            open_only: Only exams whose registration closes or exam day falls after `today`.
        """
        needle = (query or "").strip().lower()
        today = today or date.today()
        result = []
        for exam in self.cache.items:
            if needle and needle not in exam.name.lower() and needle not in exam.description.lower():
                continue
            if category and exam.category != category:
                continue
            if open_only and not _after(exam.registration_end_date, today) and not _after(exam.exam_date, today):
                continue
            result.append(exam)
        return result

    def upcoming_deadlines(self, today: Optional[date] = None, days: int = 30) -> List[Deadline]:
        """Registration closes and exam days of subscribed exams within the next `days` days.

        Deadlines less than a week away are marked urgent. Sorted soonest first.
        """
        today = today or date.today()
        horizon = today + timedelta(days=days)
        deadlines = []
        for exam in self.subscribed_exams():
            for kind, due in ((REGISTRATION_DEADLINE, exam.registration_end_date), (EXAM_DAY, exam.exam_date)):
                if due is not None and today < due < horizon:
                    deadlines.append(Deadline(exam.id, exam.name, kind, due, urgent=(due - today).days < 7))
        deadlines.sort(key=lambda deadline: deadline.due)
        return deadlines


def _after(value: Optional[date], today: date) -> bool:
    return value is not None and value > today
