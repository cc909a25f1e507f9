"""In-memory session affinity between Telegram chats and Dialogflow sessions.

Each chat id maps to one session id and one expiry timestamp. Touching a
chat disarms its previous expiry before arming a new one, so a chat never has
more than one pending expiration. Expired entries are dropped lazily on access
and by a periodic sweep.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, Optional

logger = logging.getLogger("session_store")

DEFAULT_SESSION_TTL = 60 * 60


@dataclass
class SessionEntry:
    session_id: str
    expires_at: float


class SessionStore:
    def __init__(self, ttl_seconds: float = DEFAULT_SESSION_TTL, clock: Callable[[], float] = time.time):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: Dict[Hashable, SessionEntry] = {}

    def resolve_session(self, conversation_id: Hashable) -> str:
        """Return the live session id for a chat, creating one if needed.

        Never awaits: on a single event loop two calls for the same chat
        cannot interleave, so they always agree on the session id.
        """
        now = self.clock()
        entry = self._live_entry(conversation_id, now)
        if entry is None:
            session_id = f"telegram-{conversation_id}-{int(now * 1000)}"
            logger.info(f"Created new session ID for chat ID: {conversation_id}")
        else:
            session_id = entry.session_id

        self._disarm(conversation_id)
        self._arm(conversation_id, session_id, now)
        return session_id

    def get(self, conversation_id: Hashable) -> Optional[str]:
        entry = self._live_entry(conversation_id, self.clock())
        return entry.session_id if entry else None

    def sweep(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self.clock()
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            self._expire(key)
        return len(expired)

    async def run_sweeper(self, interval: float = 60.0) -> None:
        while True:
            await asyncio.sleep(interval)
            removed = self.sweep()
            if removed:
                logger.debug(f"Swept {removed} expired session(s)")

    def _live_entry(self, conversation_id: Hashable, now: float) -> Optional[SessionEntry]:
        entry = self._entries.get(conversation_id)
        if entry is not None and entry.expires_at <= now:
            self._expire(conversation_id)
            return None
        return entry

    def _arm(self, conversation_id: Hashable, session_id: str, now: float) -> None:
        self._entries[conversation_id] = SessionEntry(session_id=session_id, expires_at=now + self.ttl_seconds)

    def _disarm(self, conversation_id: Hashable) -> None:
        self._entries.pop(conversation_id, None)

    def _expire(self, conversation_id: Hashable) -> None:
        self._entries.pop(conversation_id, None)
        logger.info(f"Session expired for chat ID: {conversation_id}")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, conversation_id: Hashable) -> bool:
        return self.get(conversation_id) is not None
