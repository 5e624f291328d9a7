"""SQLite chat store."""

import asyncio
import json
import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from loguru import logger

from synergi.errors import ConversationNotFoundError
from synergi.storage.base import ChatStore, check_page
from synergi.storage.models import Conversation, ConversationSummary, Message, Page, Role, utcnow

T = TypeVar("T")


def _ts(moment: datetime) -> float:
    return moment.timestamp()


def _from_ts(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


class SQLiteChatStore(ChatStore):
    """
    Conversations and messages in a single SQLite file.

    Messages reference their conversation with ON DELETE CASCADE, so
    deleting a conversation removes its messages in the same statement.

    Every query runs in a worker thread via `asyncio.to_thread`, so a slow
    commit never blocks other streams on the event loop. The shared
    connection is guarded by a lock; one operation touches it at a time.
    """

    def __init__(self, db_path: Path, clock: Callable[[], datetime] = utcnow):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._clock = clock
        self._lock = threading.Lock()

        # Connection (created lazily)
        self._conn: Optional[sqlite3.Connection] = None

        self._init_db()
        logger.info(f"SQLiteChatStore initialized: {self.db_path}")

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row

            self._conn.execute("PRAGMA journal_mode=WAL;")
            self._conn.execute("PRAGMA synchronous=NORMAL;")
            self._conn.execute("PRAGMA foreign_keys=ON;")

        return self._conn

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        """Run `fn(conn, *args)` off the event loop while holding the connection lock."""
        def call() -> T:
            with self._lock:
                return fn(self._get_connection(), *args)

        return await asyncio.to_thread(call)

    def _init_db(self):
        conn = self._get_connection()

        conn.execute("""
            CREATE TABLE IF NOT EXISTS conversations (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                title TEXT,
                created_at REAL NOT NULL,
                updated_at REAL NOT NULL
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS messages (
                id TEXT PRIMARY KEY,
                conversation_id TEXT NOT NULL REFERENCES conversations(id) ON DELETE CASCADE,
                user_id TEXT NOT NULL,
                role TEXT NOT NULL,
                content TEXT NOT NULL,
                metadata_json TEXT,
                created_at REAL NOT NULL
            )
        """)

        conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_conversations_user_updated
            ON conversations(user_id, updated_at DESC)
        """)

        conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_messages_conversation_created
            ON messages(conversation_id, created_at)
        """)

        conn.commit()

    # ========== CONVERSATIONS ==========

    async def create_conversation(self, user_id: str, title: Optional[str] = None) -> Conversation:
        now = self._clock()
        conversation = Conversation(
            id=uuid.uuid4().hex,
            user_id=user_id,
            title=title,
            created_at=now,
            updated_at=now,
        )

        def insert(conn: sqlite3.Connection) -> None:
            conn.execute(
                "INSERT INTO conversations (id, user_id, title, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
                (conversation.id, user_id, title, _ts(now), _ts(now)),
            )
            conn.commit()

        await self._run(insert)
        return conversation

    async def get_conversation(self, conversation_id: str, user_id: str) -> Conversation:
        row = await self._run(self._owned_conversation_row, conversation_id, user_id)
        return self._row_to_conversation(row)

    @staticmethod
    def _owned_conversation_row(conn: sqlite3.Connection, conversation_id: str, user_id: str) -> sqlite3.Row:
        row = conn.execute(
            "SELECT * FROM conversations WHERE id = ? AND user_id = ?",
            (conversation_id, user_id),
        ).fetchone()
        if row is None:
            raise ConversationNotFoundError(conversation_id)
        return row

    async def update_conversation(self, conversation_id: str, title: Optional[str] = None) -> Conversation:
        now = _ts(self._clock())

        def update(conn: sqlite3.Connection) -> sqlite3.Row:
            if title is None:
                cursor = conn.execute(
                    "UPDATE conversations SET updated_at = ? WHERE id = ?",
                    (now, conversation_id),
                )
            else:
                cursor = conn.execute(
                    "UPDATE conversations SET updated_at = ?, title = ? WHERE id = ?",
                    (now, title, conversation_id),
                )
            conn.commit()
            if cursor.rowcount == 0:
                raise ConversationNotFoundError(conversation_id)
            return conn.execute("SELECT * FROM conversations WHERE id = ?", (conversation_id,)).fetchone()

        return self._row_to_conversation(await self._run(update))

    async def list_conversations(
        self, user_id: str, page: int = 1, limit: int = 20
    ) -> Page[ConversationSummary]:
        check_page(page, limit)

        def query(conn: sqlite3.Connection) -> tuple[int, list[ConversationSummary]]:
            total = conn.execute(
                "SELECT COUNT(*) FROM conversations WHERE user_id = ?", (user_id,)
            ).fetchone()[0]

            rows = conn.execute(
                """
                SELECT c.*, (SELECT COUNT(*) FROM messages m WHERE m.conversation_id = c.id) AS message_count
                FROM conversations c
                WHERE c.user_id = ?
                ORDER BY c.updated_at DESC, c.rowid DESC
                LIMIT ? OFFSET ?
                """,
                (user_id, limit, (page - 1) * limit),
            ).fetchall()

            items = []
            for row in rows:
                last = conn.execute(
                    """
                    SELECT * FROM messages WHERE conversation_id = ?
                    ORDER BY created_at DESC, rowid DESC LIMIT 1
                    """,
                    (row["id"],),
                ).fetchone()
                items.append(ConversationSummary(
                    conversation=self._row_to_conversation(row),
                    message_count=row["message_count"],
                    last_message=self._row_to_message(last) if last else None,
                ))
            return total, items

        total, items = await self._run(query)
        return Page(items=items, page=page, limit=limit, total=total)

    async def delete_conversation(self, conversation_id: str, user_id: str) -> None:
        def delete(conn: sqlite3.Connection) -> int:
            cursor = conn.execute(
                "DELETE FROM conversations WHERE id = ? AND user_id = ?",
                (conversation_id, user_id),
            )
            conn.commit()
            return cursor.rowcount

        if await self._run(delete) == 0:
            raise ConversationNotFoundError(conversation_id)
        logger.debug(f"Deleted conversation {conversation_id}")

    # ========== MESSAGES ==========

    async def create_message(
        self,
        conversation_id: str,
        user_id: str,
        role: Role,
        content: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Message:
        message = Message(
            id=uuid.uuid4().hex,
            conversation_id=conversation_id,
            user_id=user_id,
            role=role,
            content=content,
            created_at=self._clock(),
            metadata=metadata,
        )

        def insert(conn: sqlite3.Connection) -> None:
            try:
                conn.execute(
                    """
                    INSERT INTO messages (id, conversation_id, user_id, role, content, metadata_json, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        message.id,
                        conversation_id,
                        user_id,
                        role.value,
                        content,
                        json.dumps(metadata) if metadata is not None else None,
                        _ts(message.created_at),
                    ),
                )
            except sqlite3.IntegrityError as e:
                conn.rollback()
                raise ConversationNotFoundError(conversation_id) from e
            conn.commit()

        await self._run(insert)
        return message

    async def list_messages(
        self, conversation_id: str, user_id: str, page: int = 1, limit: int = 50
    ) -> Page[Message]:
        check_page(page, limit)

        def query(conn: sqlite3.Connection) -> tuple[int, list[sqlite3.Row]]:
            self._owned_conversation_row(conn, conversation_id, user_id)
            total = conn.execute(
                "SELECT COUNT(*) FROM messages WHERE conversation_id = ?", (conversation_id,)
            ).fetchone()[0]
            rows = conn.execute(
                """
                SELECT * FROM messages WHERE conversation_id = ?
                ORDER BY created_at DESC, rowid DESC
                LIMIT ? OFFSET ?
                """,
                (conversation_id, limit, (page - 1) * limit),
            ).fetchall()
            return total, rows

        total, rows = await self._run(query)
        items = [self._row_to_message(row) for row in reversed(rows)]
        return Page(items=items, page=page, limit=limit, total=total)

    async def history(self, conversation_id: str) -> list[dict[str, str]]:
        def query(conn: sqlite3.Connection) -> list[sqlite3.Row]:
            return conn.execute(
                """
                SELECT role, content FROM messages WHERE conversation_id = ?
                ORDER BY created_at ASC, rowid ASC
                """,
                (conversation_id,),
            ).fetchall()

        rows = await self._run(query)
        return [{"role": row["role"], "content": row["content"]} for row in rows]

    # ========== ROWS ==========

    def _row_to_conversation(self, row: sqlite3.Row) -> Conversation:
        return Conversation(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            created_at=_from_ts(row["created_at"]),
            updated_at=_from_ts(row["updated_at"]),
        )

    def _row_to_message(self, row: sqlite3.Row) -> Message:
        return Message(
            id=row["id"],
            conversation_id=row["conversation_id"],
            user_id=row["user_id"],
            role=Role(row["role"]),
            content=row["content"],
            created_at=_from_ts(row["created_at"]),
            metadata=json.loads(row["metadata_json"]) if row["metadata_json"] else None,
        )

    async def close(self) -> None:
        """Close database connection."""
        def close_connection() -> None:
            with self._lock:
                if self._conn:
                    self._conn.close()
                    self._conn = None

        await asyncio.to_thread(close_connection)
        logger.debug("SQLiteChatStore connection closed")
