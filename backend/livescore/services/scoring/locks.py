import threading
import weakref
from contextlib import contextmanager

from .errors import PersistenceError

# One lock per match id; events for the same match are applied one at a time.
# Entries disappear once no request holds the lock.
_match_locks: 'weakref.WeakValueDictionary[int, threading.Lock]' = weakref.WeakValueDictionary()
_registry_guard = threading.Lock()


def _lock_for(match_id: int) -> threading.Lock:
    with _registry_guard:
        lock = _match_locks.get(match_id)
        if lock is None:
            lock = threading.Lock()
            _match_locks[match_id] = lock
        return lock


@contextmanager
def match_lock(match_id: int, timeout: float = 5.0):
    lock = _lock_for(match_id)
    if not lock.acquire(timeout=timeout):
        raise PersistenceError(f'Timed out waiting for match {match_id}')
    try:
        yield
    finally:
        lock.release()
