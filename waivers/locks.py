"""waivers.locks

Process-local serialization of waiver runs per (league, week).

- Two overlapping runs for the same league/week would both see a player as
  free and both award him; this lock prevents that inside one process.
- Cross-process exclusion (several workers, several hosts) is the host's job:
  a leased job, a DB advisory lock or a single-instance scheduler.
- RLock (re-entrant): a run that re-enters for the same key does not deadlock.
"""

from __future__ import annotations

from contextlib import contextmanager
from threading import Lock, RLock
from typing import Any, Dict, Iterator, List, Tuple

_REGISTRY_GUARD = Lock()
# key -> [lock, users]; users counts holders plus waiters. The entry goes away at zero.
_RUN_LOCKS: Dict[Tuple[str, int], List[Any]] = {}


def _checkout(key: Tuple[str, int]) -> RLock:
    with _REGISTRY_GUARD:
        entry = _RUN_LOCKS.get(key)
        if entry is None:
            entry = [RLock(), 0]
            _RUN_LOCKS[key] = entry
        entry[1] += 1
        return entry[0]


def _checkin(key: Tuple[str, int]) -> None:
    with _REGISTRY_GUARD:
        entry = _RUN_LOCKS.get(key)
        if entry is None:
            return
        entry[1] -= 1
        if entry[1] <= 0:
            del _RUN_LOCKS[key]


@contextmanager
def waiver_run_lock(league_id: str, week: int, *, timeout_s: float | None = None) -> Iterator[None]:
    """Serialize waiver processing for one (league, week) within this process.

    Args:
        timeout_s: seconds to wait for the lock. None waits forever.

    Raises:
        TimeoutError: the lock was not acquired within timeout_s.
        ValueError: timeout_s is not a number.

    Usage:
        with waiver_run_lock("L1", 7, timeout_s=30):
            ...  # resolve + execute + rebalance
    """
    timeout = None
    if timeout_s is not None:
        try:
            timeout = float(timeout_s)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"timeout_s must be a float seconds value, got: {timeout_s!r}") from exc

    key = (str(league_id), int(week))
    lock = _checkout(key)
    try:
        if timeout is None:
            acquired = lock.acquire()
        else:
            # Negative timeout behaves like non-blocking.
            acquired = lock.acquire(timeout=max(0.0, timeout))

        if not acquired:
            raise TimeoutError(f"waiver_run_lock timeout (league_id={league_id}, week={week}, timeout_s={timeout_s})")

        try:
            yield
        finally:
            lock.release()
    finally:
        _checkin(key)


__all__ = [
    "waiver_run_lock",
]
