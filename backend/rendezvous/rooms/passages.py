"""Per-room passage metadata store."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import threading
import time

from rendezvous.core.logging_config import get_logger
from rendezvous.rooms.models import PassageInfo

DEFAULT_ORPHAN_TTL_SECONDS = 300.0

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class _Entry:
    info: PassageInfo
    stored_at: float


class PassageStore:
    """Map room code to PassageInfo.

    Writes never consult the room registry; metadata may arrive before any
    member joins. Entries are dropped through ``evict`` when their room empties,
    and ``evict_orphans`` collects entries for rooms nobody is in once they are
    older than a grace period.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._lock = threading.Lock()
        self._passages: dict[str, _Entry] = {}
        self._clock = clock

    def set(self, code: str, info: PassageInfo) -> None:
        with self._lock:
            self._passages[code] = _Entry(info=info, stored_at=self._clock())
        title = f" ({info.passage_title})" if info.passage_title else ""
        logger.info("Stored passage for room %s: %s%s", code, info.passage_id, title)

    def get(self, code: str) -> PassageInfo | None:
        with self._lock:
            entry = self._passages.get(code)
        return None if entry is None else entry.info

    def evict(self, code: str) -> None:
        with self._lock:
            removed = self._passages.pop(code, None)
        if removed is not None:
            logger.info("Cleaned up passage for empty room %s", code)

    def evict_orphans(self, is_occupied: Callable[[str], bool], max_age_seconds: float) -> list[str]:
        """Drop entries older than ``max_age_seconds`` whose room has no members.

        ``is_occupied`` is called without the store lock held, because the
        registry calls ``evict`` while holding its own room lock. An entry
        rewritten during the sweep is kept.
        """
        cutoff = self._clock() - max_age_seconds
        with self._lock:
            candidates = [
                (code, entry) for code, entry in self._passages.items() if entry.stored_at <= cutoff
            ]

        orphaned = [(code, entry) for code, entry in candidates if not is_occupied(code)]

        removed: list[str] = []
        with self._lock:
            for code, entry in orphaned:
                if self._passages.get(code) is entry:
                    del self._passages[code]
                    removed.append(code)
        if removed:
            logger.info("Cleaned up %d orphaned passage(s): %s", len(removed), ", ".join(removed))
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._passages)


__all__ = ["DEFAULT_ORPHAN_TTL_SECONDS", "PassageStore"]
