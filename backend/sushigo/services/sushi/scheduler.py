import itertools
import logging
import time
from typing import Callable, Dict


logger = logging.getLogger(__name__)


def run_inline(func, *args, **kwargs):
    """Task starter that runs the task immediately (used under TESTING)."""
    return func(*args, **kwargs)


class RoundAdvanceScheduler:
    """Delayed round advance, one pending task per match.

    Scheduling again for the same match supersedes the earlier task, and
    cancel() drops it. A task that wakes up after being superseded or
    cancelled returns without calling its callback.
    """

    def __init__(self, delay_sec: float, start_task: Callable = run_inline, sleep: Callable = time.sleep):
        self.delay_sec = delay_sec
        self._start_task = start_task
        self._sleep = sleep
        self._pending: Dict[str, int] = {}
        self._tokens = itertools.count(1)

    def schedule(self, match_id: str, callback: Callable[[], None]) -> int:
        token = next(self._tokens)
        self._pending[match_id] = token
        logger.info(f"[timer-set] match={match_id} token={token} delay={self.delay_sec}s")
        self._start_task(self._worker, match_id, token, callback)
        return token

    def cancel(self, match_id: str) -> bool:
        token = self._pending.pop(match_id, None)
        if token is not None:
            logger.info(f"[timer-cancel] match={match_id} token={token}")
        return token is not None

    def is_pending(self, match_id: str) -> bool:
        return match_id in self._pending

    def _worker(self, match_id: str, token: int, callback: Callable[[], None]) -> None:
        if self.delay_sec > 0:
            self._sleep(self.delay_sec)
        if self._pending.get(match_id) != token:
            logger.info(f"[timer-abort] match={match_id} token={token} superseded or cancelled")
            return
        del self._pending[match_id]
        logger.info(f"[timer-fire] match={match_id} token={token}")
        callback()
