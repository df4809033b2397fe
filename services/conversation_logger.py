"""
Conversation Logger - Fire-and-forget persistence of chat exchanges
===================================================================

Every chat exchange is appended to the chat_conversations table.
Writes run on a detached thread by default so a slow or failing
store never delays or breaks the reply.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from core.database import Database
from core.exceptions import ConversationLogError
from core.logging import get_logger

logger = get_logger("services.conversation_logger")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ConversationRecord:
    """
    One chat exchange as persisted.

    The timestamp is taken when the record is built, not when the
    write lands, so readers can order records from the same user.

    Attributes:
        user_id (str): User who sent the message
        message (str): The user's message
        response (str): The reply returned
        knowledge_base_used (bool): Whether any published article matched
        created_at (str): ISO-8601 UTC timestamp
    """
    user_id: str
    message: str
    response: str
    knowledge_base_used: bool
    created_at: str = field(default_factory=_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "user_id": self.user_id,
            "message": self.message,
            "response": self.response,
            "knowledge_base_used": self.knowledge_base_used,
            "created_at": self.created_at,
        }


class ConversationLogger:
    """
    Appends ConversationRecords to the store.

    ``log`` never raises. In background mode it returns immediately;
    call ``wait`` to join outstanding writes (tests, shutdown).

    Example:
        conversation_logger = ConversationLogger(database)
        conversation_logger.log(record)
    """

    def __init__(self, database: Database, background: bool = True, enabled: bool = True):
        """
        Initialize the logger.

        Args:
            database: Database holding the chat_conversations table
            background: Write on a detached thread instead of inline
            enabled: When False, records are dropped
        """
        self.database = database
        self.background = background
        self.enabled = enabled

        self._pending: List[threading.Thread] = []
        self._lock = threading.Lock()

    def log(self, record: ConversationRecord) -> None:
        """
        Persist a record without blocking or failing the caller.

        Args:
            record: Exchange to persist
        """
        if not self.enabled:
            return

        if not self.background:
            self._write_safely(record)
            return

        thread = threading.Thread(
            target=self._write_safely,
            args=(record,),
            name="conversation-log",
            daemon=True
        )
        with self._lock:
            self._pending = [t for t in self._pending if t.is_alive()]
            self._pending.append(thread)
        thread.start()

    def write(self, record: ConversationRecord) -> int:
        """
        Persist a record synchronously.

        Args:
            record: Exchange to persist

        Returns:
            int: ID of the stored record

        Raises:
            ConversationLogError: If the store rejects the write
        """
        try:
            return self.database.log_conversation(
                user_id=record.user_id,
                message=record.message,
                response=record.response,
                knowledge_base_used=record.knowledge_base_used,
                created_at=record.created_at,
            )
        except Exception as e:
            raise ConversationLogError("Error saving conversation", {"cause": str(e)})

    def _write_safely(self, record: ConversationRecord) -> None:
        try:
            record_id = self.write(record)
            logger.debug(f"Saved conversation {record_id} for user {record.user_id}")
        except ConversationLogError as e:
            logger.error(f"{e}")
        finally:
            if self.background:
                self.database.close()

    def wait(self, timeout: Optional[float] = None) -> None:
        """
        Block until outstanding background writes finish.

        Args:
            timeout: Per-thread join timeout in seconds
        """
        with self._lock:
            pending = list(self._pending)
            self._pending = []

        for thread in pending:
            thread.join(timeout)
