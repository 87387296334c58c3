"""
In-memory store of editing sessions, keyed by session id, expired after a TTL.
Each entry owns one EditingSession plus the pulls awaiting a decision.
"""
import logging
import os
import threading
import time
import uuid
from typing import Dict, Optional

from .editing_session import EditingSession
from .reconciliation import PendingPull

logger = logging.getLogger(__name__)

_sessions: Dict[str, Dict] = {}
_sessions_lock = threading.Lock()
SESSION_TTL_SECONDS = int(os.environ.get('SESSION_TTL_SECONDS', 3600))


def _cleanup_sessions():
    """Background thread: remove expired sessions."""
    while True:
        time.sleep(300)
        expired = purge_expired()
        if expired:
            logger.info(f"Cleaned up {expired} expired editing sessions")


def purge_expired(now: Optional[float] = None) -> int:
    now = now if now is not None else time.time()
    with _sessions_lock:
        expired = [sid for sid, s in _sessions.items()
                   if now - s.get('touched_at', 0) > SESSION_TTL_SECONDS]
        for sid in expired:
            _sessions.pop(sid, None)
    return len(expired)


threading.Thread(target=_cleanup_sessions, daemon=True).start()


def create_session(session: EditingSession) -> str:
    session_id = str(uuid.uuid4())
    with _sessions_lock:
        _sessions[session_id] = {'session': session, 'pending': {}, 'touched_at': time.time()}
    return session_id


def get_session(session_id: str) -> Optional[EditingSession]:
    with _sessions_lock:
        entry = _sessions.get(session_id)
        if entry is None:
            return None
        entry['touched_at'] = time.time()
        return entry['session']


def add_pending_pull(session_id: str, pending: PendingPull) -> bool:
    with _sessions_lock:
        entry = _sessions.get(session_id)
        if entry is None:
            return False
        entry['pending'][pending.id] = pending
        return True


def get_pending_pull(session_id: str, pull_id: str) -> Optional[PendingPull]:
    with _sessions_lock:
        entry = _sessions.get(session_id)
        return entry['pending'].get(pull_id) if entry else None


def clear_pending_pulls(session_id: str):
    """Drop every pending pull of a session; one decision settles them all."""
    with _sessions_lock:
        entry = _sessions.get(session_id)
        if entry:
            entry['pending'] = {}


def delete_session(session_id: str) -> bool:
    with _sessions_lock:
        return _sessions.pop(session_id, None) is not None
