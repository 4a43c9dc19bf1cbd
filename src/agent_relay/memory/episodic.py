"""Episodic memory for agent-relay.

Every (session, agent) pair owns an append-only timeline of
``RecordEvent``s. Reading a pair that was never written returns an empty
timeline.
"""

import threading
import time
from abc import ABC, abstractmethod

from ..models import RecordEvent
from ..utils import get_logger

logger = get_logger(__name__)


class EpisodicMemoryStore(ABC):
    """Storage contract for episodic timelines."""

    @abstractmethod
    def append(self, session_id: str, agent_id: str, record: RecordEvent) -> None:
        """Append a record to the end of a timeline.

        Args:
            session_id: Session key
            agent_id: Agent identifier
            record: Record to append
        """

    @abstractmethod
    def timeline(self, session_id: str, agent_id: str) -> tuple[RecordEvent, ...]:
        """Get a snapshot of a timeline, oldest first.

        Args:
            session_id: Session key
            agent_id: Agent identifier

        Returns:
            Records in append order; empty when nothing was recorded
        """

    @abstractmethod
    def sessions(self) -> list[str]:
        """List sessions that hold at least one timeline."""

    @abstractmethod
    def evict_session(self, session_id: str) -> bool:
        """Drop every timeline of a session.

        Returns:
            True if the session existed
        """

    @abstractmethod
    def evict_idle(self, max_idle_seconds: float) -> list[str]:
        """Drop sessions with no append for longer than ``max_idle_seconds``.

        Returns:
            Evicted session IDs
        """

    def latest(self, session_id: str, agent_id: str) -> RecordEvent | None:
        """Get the most recent record of a timeline, if any."""
        records = self.timeline(session_id, agent_id)
        return records[-1] if records else None


def _require_key(session_id: str, agent_id: str) -> None:
    if not session_id or not session_id.strip():
        raise ValueError("session_id must not be blank")
    if not agent_id or not agent_id.strip():
        raise ValueError("agent_id must not be blank")


class _Timeline:
    __slots__ = ("records", "lock")

    def __init__(self) -> None:
        self.records: list[RecordEvent] = []
        self.lock = threading.Lock()


class InMemoryEpisodicStore(EpisodicMemoryStore):
    """Process-local episodic store.

    Appends to different (session, agent) pairs never contend: each pair
    has its own lock, and the store-wide lock is only held while a pair is
    created, a session is touched or evicted. Nothing is evicted unless
    ``evict_session`` or ``evict_idle`` is called.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, dict[str, _Timeline]] = {}
        self._last_touched: dict[str, float] = {}
        self._lock = threading.Lock()

    def append(self, session_id: str, agent_id: str, record: RecordEvent) -> None:
        _require_key(session_id, agent_id)
        entry = self._timeline_for(session_id, agent_id)
        with entry.lock:
            entry.records.append(record)
        with self._lock:
            self._last_touched[session_id] = time.monotonic()
        logger.debug(f"Recorded {record.status.value} for {session_id}/{agent_id}")

    def timeline(self, session_id: str, agent_id: str) -> tuple[RecordEvent, ...]:
        _require_key(session_id, agent_id)
        entry = self._sessions.get(session_id, {}).get(agent_id)
        if entry is None:
            return ()
        with entry.lock:
            return tuple(entry.records)

    def sessions(self) -> list[str]:
        with self._lock:
            return list(self._sessions)

    def agents(self, session_id: str) -> list[str]:
        """List agents with a timeline in a session."""
        with self._lock:
            return list(self._sessions.get(session_id, {}))

    def evict_session(self, session_id: str) -> bool:
        with self._lock:
            self._last_touched.pop(session_id, None)
            existed = self._sessions.pop(session_id, None) is not None
        if existed:
            logger.info(f"Evicted episodic memory of session {session_id}")
        return existed

    def evict_idle(self, max_idle_seconds: float) -> list[str]:
        if max_idle_seconds <= 0:
            raise ValueError("max_idle_seconds must be positive")
        cutoff = time.monotonic() - max_idle_seconds
        with self._lock:
            idle = [sid for sid, touched in self._last_touched.items() if touched < cutoff]
        return [sid for sid in idle if self.evict_session(sid)]

    def _timeline_for(self, session_id: str, agent_id: str) -> _Timeline:
        session = self._sessions.get(session_id)
        entry = session.get(agent_id) if session is not None else None
        if entry is not None:
            return entry
        with self._lock:
            session = self._sessions.setdefault(session_id, {})
            return session.setdefault(agent_id, _Timeline())
