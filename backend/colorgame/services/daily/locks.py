import threading
from contextlib import contextmanager
from datetime import date
from typing import Dict, List, Tuple

from flask import current_app

from .results import TransientStoreError


# (user_id, date) -> [RLock, number of threads holding or waiting]
_key_locks: Dict[Tuple[str, date], List] = {}
_registry_guard = threading.Lock()


@contextmanager
def key_lock(user_id: str, day: date, timeout: float = None):
    """Serialize work on one (user_id, date) key within this process.

    Re-entrant, so settlement can run inside an admission that already holds
    the key. Other keys never wait on each other. Cross-process safety comes
    from the unique constraints, not from this lock.
    """
    if timeout is None:
        timeout = float(current_app.config.get('ATTEMPT_LOCK_TIMEOUT_SEC', 5))
    key = (user_id, day)
    with _registry_guard:
        slot = _key_locks.setdefault(key, [threading.RLock(), 0])
        slot[1] += 1
    try:
        if not slot[0].acquire(timeout=timeout):
            current_app.logger.warning(f"[lock-timeout] user={user_id} date={day.isoformat()} waited={timeout}s")
            raise TransientStoreError(f'Timed out waiting for daily lock of {user_id} on {day.isoformat()}')
        try:
            yield
        finally:
            slot[0].release()
    finally:
        with _registry_guard:
            slot[1] -= 1
            if slot[1] == 0:
                _key_locks.pop(key, None)
