# storage.py
"""Session/message store.

``ChatStore`` is the seam for a persistent backend; ``MemoryStore`` keeps
everything in process memory and is lost on restart. One store instance is
built at startup and handed to the request handlers.
"""
import itertools
import random
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, List, Optional

from models import Message, Session

SESSION_ID_MAX = 10_000_000


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatStore(ABC):
    @abstractmethod
    def append(self, session_id: str, content: str, is_user: bool) -> Message:
        """Store a message, creating the session on first use."""

    @abstractmethod
    def list(self, session_id: Optional[str]) -> List[Message]:
        """Messages of a session in chronological order; empty if unknown."""

    @abstractmethod
    def clear(self, session_id: str) -> None:
        """Drop all history for a session. Idempotent."""

    @abstractmethod
    def create_session(self, session_id: Optional[str] = None) -> Session:
        ...

    @abstractmethod
    def get_session(self, session_id: str) -> Optional[Session]:
        ...

    def count(self, session_id: str) -> int:
        return len(self.list(session_id))


class MemoryStore(ChatStore):
    def __init__(self) -> None:
        self._messages: Dict[str, List[Message]] = {}
        self._sessions: Dict[str, Session] = {}
        self._ids = itertools.count(1)
        self._last_ts: Optional[datetime] = None

    def _timestamp(self) -> datetime:
        # never go backwards, even if the wall clock does
        now = utcnow()
        if self._last_ts is not None and now < self._last_ts:
            now = self._last_ts
        self._last_ts = now
        return now

    def append(self, session_id: str, content: str, is_user: bool) -> Message:
        if session_id not in self._sessions:
            self.create_session(session_id)
        message = Message(
            id=next(self._ids),
            content=content,
            is_user=is_user,
            timestamp=self._timestamp(),
        )
        self._messages.setdefault(session_id, []).append(message)
        return message

    def list(self, session_id: Optional[str]) -> List[Message]:
        if not session_id:
            return []
        return list(self._messages.get(session_id, []))

    def clear(self, session_id: str) -> None:
        self._messages.pop(session_id, None)

    def create_session(self, session_id: Optional[str] = None) -> Session:
        if session_id is None:
            session_id = self._new_session_id()
        existing = self._sessions.get(session_id)
        if existing is not None:
            return existing
        session = Session(id=session_id, created_at=utcnow())
        self._sessions[session_id] = session
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def _new_session_id(self) -> str:
        while True:
            candidate = str(random.randint(1, SESSION_ID_MAX))
            if candidate not in self._sessions:
                return candidate
