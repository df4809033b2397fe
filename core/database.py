"""
Database Module - SQLite-based storage for articles and chat history
====================================================================

This module provides database operations including:
- Knowledge base article storage
- Conversation log storage (append-only)
- Chat analytics and store statistics
"""

import sqlite3
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, List, Dict, Any
from contextlib import contextmanager
import threading

from .exceptions import DatabaseError
from .logging import get_logger

logger = get_logger("core.database")


class Database:
    """
    SQLite database manager for the support agent.

    Each thread gets its own connection; the conversation logger
    writes from background threads while requests read.

    Attributes:
        db_path (str): Path to SQLite database file
    """

    def __init__(self, db_path: str):
        """
        Initialize database connection.

        Args:
            db_path: Path to SQLite database file

        Raises:
            DatabaseError: If database cannot be initialized
        """
        self.db_path = db_path
        self._local = threading.local()

        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()

    def _get_connection(self) -> sqlite3.Connection:
        """
        Get thread-local database connection.

        Returns:
            sqlite3.Connection: Database connection for current thread
        """
        if getattr(self._local, "connection", None) is None:
            connection = sqlite3.connect(
                self.db_path,
                check_same_thread=False,
                timeout=30.0
            )
            connection.row_factory = sqlite3.Row
            connection.execute("PRAGMA journal_mode = WAL")
            self._local.connection = connection
        return self._local.connection

    @contextmanager
    def transaction(self):
        """
        Context manager for database transactions.

        Commits on success, rolls back and raises DatabaseError on error.

        Yields:
            sqlite3.Connection: Database connection

        Example:
            with db.transaction() as conn:
                conn.execute("INSERT INTO knowledge_base ...")
        """
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception as e:
            conn.rollback()
            raise DatabaseError(f"Transaction failed: {e}")

    def _init_schema(self) -> None:
        """
        Create all tables if they don't exist.

        Raises:
            DatabaseError: If schema creation fails
        """
        schema_sql = """
        -- Help articles; only published rows are visible to the chat assistant
        CREATE TABLE IF NOT EXISTS knowledge_base (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            title TEXT NOT NULL,
            content TEXT NOT NULL,
            category TEXT NOT NULL DEFAULT 'general',
            tags TEXT NOT NULL DEFAULT '[]',
            is_published INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        -- One row per chat exchange, never updated
        CREATE TABLE IF NOT EXISTS chat_conversations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            message TEXT NOT NULL,
            response TEXT NOT NULL,
            knowledge_base_used INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_kb_published ON knowledge_base(is_published);
        CREATE INDEX IF NOT EXISTS idx_kb_category ON knowledge_base(category);
        CREATE INDEX IF NOT EXISTS idx_conversations_user ON chat_conversations(user_id);
        CREATE INDEX IF NOT EXISTS idx_conversations_created ON chat_conversations(created_at);
        """

        try:
            with self.transaction() as conn:
                conn.executescript(schema_sql)
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to initialize database schema: {e}")

    # === Knowledge Base Operations ===

    def add_article(
        self,
        title: str,
        content: str,
        category: str = "general",
        tags: Optional[List[str]] = None,
        is_published: bool = False
    ) -> int:
        """
        Insert a knowledge base article.

        Args:
            title: Article title
            content: Article body
            category: Article category
            tags: Ordered list of tags
            is_published: Whether the chat assistant may use it

        Returns:
            int: ID of inserted article

        Raises:
            DatabaseError: If insertion fails
        """
        now = _utcnow()
        try:
            with self.transaction() as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO knowledge_base (title, content, category, tags, is_published, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (title, content, category, json.dumps(tags or []), int(is_published), now, now)
                )
                return cursor.lastrowid
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to add article: {e}")

    def add_articles(self, articles: List[Dict[str, Any]]) -> List[int]:
        """
        Insert several articles in one transaction.

        Either every article is stored or none is.

        Args:
            articles: Dictionaries with title, content and optional
                category, tags and is_published

        Returns:
            IDs of the inserted articles, in input order

        Raises:
            DatabaseError: If any insertion fails
        """
        now = _utcnow()
        try:
            with self.transaction() as conn:
                ids = []
                for article in articles:
                    cursor = conn.execute(
                        """
                        INSERT INTO knowledge_base (title, content, category, tags, is_published, created_at, updated_at)
                        VALUES (?, ?, ?, ?, ?, ?, ?)
                        """,
                        (
                            article["title"],
                            article["content"],
                            article.get("category") or "general",
                            json.dumps(article.get("tags") or []),
                            int(bool(article.get("is_published", False))),
                            now,
                            now,
                        )
                    )
                    ids.append(cursor.lastrowid)
                return ids
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to add articles: {e}")

    def get_articles(
        self,
        published_only: bool = False,
        category: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Retrieve knowledge base articles in insertion order.

        Args:
            published_only: Only return published articles
            category: Filter by category (optional)

        Returns:
            List of article dictionaries with ``tags`` decoded to a list
        """
        query = "SELECT * FROM knowledge_base WHERE 1=1"
        params: List[Any] = []

        if published_only:
            query += " AND is_published = 1"

        if category:
            query += " AND category = ?"
            params.append(category)

        query += " ORDER BY id ASC"

        try:
            with self.transaction() as conn:
                cursor = conn.execute(query, params)
                return [_decode_article(row) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to get articles: {e}")

    def get_published_articles(self) -> List[Dict[str, Any]]:
        """Articles with ``is_published = true``, in store order."""
        return self.get_articles(published_only=True)

    def set_article_published(self, article_id: int, is_published: bool) -> bool:
        """
        Publish or unpublish an article.

        Args:
            article_id: ID of the article
            is_published: New published flag

        Returns:
            True if an article was updated
        """
        try:
            with self.transaction() as conn:
                cursor = conn.execute(
                    "UPDATE knowledge_base SET is_published = ?, updated_at = ? WHERE id = ?",
                    (int(is_published), _utcnow(), article_id)
                )
                return cursor.rowcount > 0
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to update article: {e}")

    def get_article_titles(self, titles: List[str]) -> List[str]:
        """
        Return which of the given titles already exist.

        Args:
            titles: Titles to look up

        Returns:
            Existing titles
        """
        if not titles:
            return []

        placeholders = ", ".join("?" for _ in titles)
        try:
            with self.transaction() as conn:
                cursor = conn.execute(
                    f"SELECT title FROM knowledge_base WHERE title IN ({placeholders})",
                    list(titles)
                )
                return [row["title"] for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to look up article titles: {e}")

    # === Conversation Operations ===

    def log_conversation(
        self,
        user_id: str,
        message: str,
        response: str,
        knowledge_base_used: bool,
        created_at: Optional[str] = None
    ) -> int:
        """
        Append a chat exchange to the conversation log.

        Args:
            user_id: User who sent the message
            message: The user's message
            response: The reply that was returned
            knowledge_base_used: Whether any published article matched
            created_at: ISO-8601 timestamp (defaults to now, UTC)

        Returns:
            int: ID of the inserted record

        Raises:
            DatabaseError: If insertion fails
        """
        try:
            with self.transaction() as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO chat_conversations (user_id, message, response, knowledge_base_used, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (user_id, message, response, int(knowledge_base_used), created_at or _utcnow())
                )
                return cursor.lastrowid
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to log conversation: {e}")

    def get_conversations(
        self,
        user_id: Optional[str] = None,
        limit: int = 50
    ) -> List[Dict[str, Any]]:
        """
        Retrieve logged conversations, newest first.

        Ordering uses each record's own ``created_at`` rather than the
        order in which the writes landed.

        Args:
            user_id: Filter by user (optional)
            limit: Maximum number of records

        Returns:
            List of conversation dictionaries
        """
        query = "SELECT * FROM chat_conversations WHERE 1=1"
        params: List[Any] = []

        if user_id:
            query += " AND user_id = ?"
            params.append(user_id)

        query += " ORDER BY created_at DESC, id DESC LIMIT ?"
        params.append(limit)

        try:
            with self.transaction() as conn:
                cursor = conn.execute(query, params)
                rows = []
                for row in cursor.fetchall():
                    record = dict(row)
                    record["knowledge_base_used"] = bool(record["knowledge_base_used"])
                    rows.append(record)
                return rows
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to get conversations: {e}")

    # === Statistics ===

    def get_chat_statistics(self, limit: int = 50) -> Dict[str, Any]:
        """
        Chat analytics over the most recent conversations.

        Args:
            limit: Number of recent conversations to consider

        Returns:
            Dictionary with total_conversations, knowledge_base_usage
            and unique_users
        """
        recent = self.get_conversations(limit=limit)
        return {
            "total_conversations": len(recent),
            "knowledge_base_usage": sum(1 for c in recent if c["knowledge_base_used"]),
            "unique_users": len({c["user_id"] for c in recent}),
        }

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get database statistics.

        Returns:
            Dictionary with article and conversation counts
        """
        try:
            with self.transaction() as conn:
                stats = {}

                cursor = conn.execute(
                    "SELECT is_published, COUNT(*) as count FROM knowledge_base GROUP BY is_published"
                )
                by_flag = {row["is_published"]: row["count"] for row in cursor.fetchall()}
                stats["articles"] = {
                    "published": by_flag.get(1, 0),
                    "draft": by_flag.get(0, 0),
                }

                cursor = conn.execute("SELECT COUNT(*) as count FROM chat_conversations")
                stats["conversations"] = cursor.fetchone()["count"]

                cursor = conn.execute(
                    "SELECT COUNT(*) as count FROM chat_conversations WHERE knowledge_base_used = 1"
                )
                stats["knowledge_base_used"] = cursor.fetchone()["count"]

                return stats
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to get statistics: {e}")

    def close(self) -> None:
        """Close database connection for current thread."""
        connection = getattr(self._local, "connection", None)
        if connection is not None:
            connection.close()
            self._local.connection = None


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def _decode_article(row: sqlite3.Row) -> Dict[str, Any]:
    article = dict(row)
    try:
        article["tags"] = json.loads(article.get("tags") or "[]")
    except json.JSONDecodeError:
        logger.warning(f"Article {article.get('id')} has unreadable tags, ignoring them")
        article["tags"] = []
    article["is_published"] = bool(article.get("is_published"))
    return article


def init_database(db_path: str) -> Database:
    """
    Initialize and return a database instance.

    Args:
        db_path: Path to SQLite database file

    Returns:
        Database instance
    """
    return Database(db_path)
