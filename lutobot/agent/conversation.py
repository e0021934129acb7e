"""ConversationStore — bounded, in-process message history per conversation."""

from __future__ import annotations

import threading
import uuid
from collections import deque

from loguru import logger

from lutobot.agent.models import AgentMessage

DEFAULT_HISTORY_LIMIT = 20


class ConversationStore:
    """Conversation id -> most recent messages (sliding window).

    Appending beyond ``limit`` evicts the oldest messages, so each
    conversation holds at most ``limit`` entries in chronological order.
    Conversation ids are never removed.

    Locking: one lock per conversation serializes appends to it; a table
    lock guards creation of new entries only, so different conversations
    never wait on each other.
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit < 1:
            raise ValueError("history limit must be at least 1")
        self.limit = limit
        self._messages: dict[str, deque[AgentMessage]] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._table_lock = threading.Lock()

    def create_conversation(self) -> str:
        """Allocate a fresh conversation id with an empty history."""
        conversation_id = str(uuid.uuid4())
        self._ensure(conversation_id)
        logger.debug(f"Conversation created: {conversation_id}")
        return conversation_id

    def append_message(self, conversation_id: str, message: AgentMessage) -> None:
        """Append ``message``; unknown ids are created on the fly."""
        history, lock = self._ensure(conversation_id)
        with lock:
            history.append(message)
            while len(history) > self.limit:
                history.popleft()

    def get_messages(self, conversation_id: str) -> list[AgentMessage]:
        """Snapshot of the history, oldest first. Unknown id -> []."""
        history = self._messages.get(conversation_id)
        if history is None:
            return []
        with self._locks[conversation_id]:
            return list(history)

    def __contains__(self, conversation_id: str) -> bool:
        return conversation_id in self._messages

    def __len__(self) -> int:
        return len(self._messages)

    def _ensure(self, conversation_id: str) -> tuple[deque[AgentMessage], threading.Lock]:
        with self._table_lock:
            if conversation_id not in self._messages:
                # lock first: get_messages reads _messages without the table lock
                self._locks[conversation_id] = threading.Lock()
                self._messages[conversation_id] = deque()
            return self._messages[conversation_id], self._locks[conversation_id]
