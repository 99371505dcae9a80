import logging
from dataclasses import dataclass
from datetime import date

from .lib import clock
from .store import TodoStore

__all__ = ["RefreshReport", "refresh"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshReport:
    dropped_links: int = 0
    rescheduled: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.dropped_links or self.rescheduled)


def _drop_dangling(parents: list[int], known: set[int]) -> int:
    dropped = 0
    while True:
        dangling = next((p for p in parents if p not in known), None)
        if dangling is None:
            return dropped
        parents.remove(dangling)
        dropped += 1


def refresh(store: TodoStore, today: date | None = None) -> RefreshReport:
    """Repair the store after a load or a removal.

    Drops parent links to todos that no longer exist, and moves the
    scheduled date of unfinished todos that slipped into the past to today.
    Running it twice changes nothing the second time.
    """
    today = today or clock.today()
    known = set(store.all_ids())
    dropped = 0
    rescheduled = 0
    for todo in store:
        n = _drop_dangling(todo.parents, known)
        if n:
            logger.info("dropped %d dangling parent link(s) from %s", n, todo.id)
            dropped += n
        if not todo.completed and todo.scheduled_date and todo.scheduled_date < today:
            logger.debug("rescheduled %s from %s to %s", todo.id, todo.scheduled_date, today)
            todo.scheduled_date = today
            rescheduled += 1
    return RefreshReport(dropped_links=dropped, rescheduled=rescheduled)
