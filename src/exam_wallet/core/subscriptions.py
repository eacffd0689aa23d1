"""
subscriptions.py - locally persisted set of exam ids the user opted into.

The markers live apart from the exam collection so they survive refreshes;
the exams store re-applies them to every freshly fetched row.
"""

import json
from pathlib import Path
from typing import Iterable, Iterator, Optional, Set

from ..utils.log_utils import get_logger

logger = get_logger(__name__)

MARKERS_VERSION = "1.0"


def load_markers(path: Path) -> Set[str]:
    """Load marker ids from disk (JSON), or return an empty set on failure."""
    if path.is_file():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                return {str(exam_id) for exam_id in data.get("subscribed_exams", [])}
            if isinstance(data, list):
                return {str(exam_id) for exam_id in data}
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load subscription markers: {e}")
    return set()


def save_markers(markers: Iterable[str], path: Path) -> None:
    """Persist marker ids to disk as JSON."""
    payload = {"version": MARKERS_VERSION, "subscribed_exams": sorted(markers)}
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


class SubscriptionMarkers:
    """Set of subscribed exam ids, written through to `path` when one is given."""

    def __init__(self, path: Optional[Path] = None, initial: Iterable[str] = ()):
        self.path = path
        self._ids: Set[str] = load_markers(path) if path is not None else set()
        self._ids.update(str(exam_id) for exam_id in initial)

    def __contains__(self, exam_id: object) -> bool:
        return exam_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._ids))

    def __len__(self) -> int:
        return len(self._ids)

    def add(self, exam_id: str) -> bool:
        """Add a marker. Returns False if it was already present."""
        if exam_id in self._ids:
            return False
        self._ids.add(exam_id)
        self._save()
        return True

    def discard(self, exam_id: str) -> bool:
        """Remove a marker. Returns False if it was not present."""
        if exam_id not in self._ids:
            return False
        self._ids.discard(exam_id)
        self._save()
        return True

    def _save(self) -> None:
        if self.path is not None:
            save_markers(self._ids, self.path)
