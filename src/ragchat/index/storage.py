"""SQLite-backed embedding store."""

from __future__ import annotations

import json
import sqlite3
import threading
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Mapping, Sequence, Tuple

import numpy as np

from ragchat.models import IndexedDocument, SearchMatch


class SQLiteVectorStore:
    """Persistence layer for text chunks and their embeddings.

    Rows are keyed by an integer primary key (insertion order) and carry a
    separate unique ``embedding_id``. Similarity is cosine; ties keep the
    earlier row first. The connection is shared across threads and guarded
    by a re-entrant lock.
    """

    def __init__(self, db_path: Path, *, dimension: int) -> None:
        self.db_path = Path(db_path)
        self.dimension = dimension
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._conn.execute("PRAGMA synchronous=NORMAL;")
        try:
            self._ensure_schema()
        except ValueError:
            self._conn.close()
            raise

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                yield self._conn
                self._conn.commit()
            except Exception:
                self._conn.rollback()
                raise

    def _ensure_schema(self) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS embeddings (
                    id INTEGER PRIMARY KEY,
                    embedding_id TEXT NOT NULL UNIQUE,
                    text TEXT NOT NULL,
                    metadata TEXT,
                    embedding BLOB NOT NULL,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            conn.execute(
                "CREATE TABLE IF NOT EXISTS meta (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )
            row = conn.execute("SELECT value FROM meta WHERE key = 'dimension'").fetchone()
            if row is None:
                conn.execute(
                    "INSERT INTO meta(key, value) VALUES ('dimension', ?)", (str(self.dimension),)
                )
            elif int(row["value"]) != self.dimension:
                raise ValueError(
                    f"Database {self.db_path} holds {row['value']}-dimensional embeddings, "
                    f"but the embedding model produces {self.dimension}. "
                    "Use the original model or start a new database."
                )

    def _as_vector(self, vector: Any) -> np.ndarray:
        array = np.asarray(vector, dtype="float32").reshape(-1)
        if array.shape[0] != self.dimension:
            raise ValueError(
                f"Expected vector of dimension {self.dimension}, got {array.shape[0]}"
            )
        return array

    def _insert_row(
        self, conn: sqlite3.Connection, vector: Any, text: str, metadata: Mapping[str, Any] | None
    ) -> str:
        array = self._as_vector(vector)
        embedding_id = uuid.uuid4().hex
        conn.execute(
            """
            INSERT INTO embeddings(embedding_id, text, metadata, embedding)
            VALUES (?, ?, ?, ?)
            """,
            (
                embedding_id,
                text,
                json.dumps(dict(metadata or {}), ensure_ascii=True),
                sqlite3.Binary(array.tobytes()),
            ),
        )
        return embedding_id

    def insert(self, vector: Any, text: str, metadata: Mapping[str, Any] | None = None) -> str:
        """Store one embedding and return its embedding id."""
        with self.transaction() as conn:
            return self._insert_row(conn, vector, text, metadata)

    def insert_many(
        self, items: Iterable[Tuple[Any, str, Mapping[str, Any] | None]]
    ) -> List[str]:
        """Store several embeddings atomically; either all rows land or none."""
        with self.transaction() as conn:
            return [self._insert_row(conn, vector, text, metadata) for vector, text, metadata in items]

    def search(self, embedding: Any, *, top_k: int = 1) -> List[SearchMatch]:
        if top_k <= 0:
            return []
        query = self._as_vector(embedding)
        with self._lock:
            rows = self._conn.execute(
                "SELECT id, embedding_id, text, metadata, embedding FROM embeddings ORDER BY id"
            ).fetchall()

        if not rows:
            return []

        embeddings = np.vstack([np.frombuffer(row["embedding"], dtype="float32") for row in rows])
        norms = np.linalg.norm(embeddings, axis=1) * np.linalg.norm(query)
        with np.errstate(divide="ignore", invalid="ignore"):
            scores = np.where(norms > 0, (embeddings @ query) / norms, 0.0)

        # stable sort keeps insertion order among equal scores
        top_indices = np.argsort(-scores, kind="stable")[:top_k]

        results: List[SearchMatch] = []
        for idx in top_indices:
            row = rows[idx]
            results.append(
                SearchMatch(
                    document=IndexedDocument(
                        id=row["id"],
                        embedding_id=row["embedding_id"],
                        text=row["text"],
                        metadata=json.loads(row["metadata"]) if row["metadata"] else {},
                        embedding=embeddings[idx],
                    ),
                    score=float(scores[idx]),
                )
            )
        return results

    def count(self) -> int:
        with self._lock:
            return int(self._conn.execute("SELECT COUNT(*) FROM embeddings").fetchone()[0])

    def remove_all(self) -> int:
        """Delete every stored embedding. Returns the number of removed rows."""
        with self.transaction() as conn:
            return conn.execute("DELETE FROM embeddings").rowcount

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            row = self._conn.execute(
                "SELECT COUNT(*) AS total, COALESCE(SUM(LENGTH(text)), 0) AS chars FROM embeddings"
            ).fetchone()
        return {
            "embedding_count": int(row["total"]),
            "total_chars": int(row["chars"]),
            "dimension": self.dimension,
        }

    def documents(self) -> Sequence[IndexedDocument]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT id, embedding_id, text, metadata FROM embeddings ORDER BY id"
            ).fetchall()
        return [
            IndexedDocument(
                id=row["id"],
                embedding_id=row["embedding_id"],
                text=row["text"],
                metadata=json.loads(row["metadata"]) if row["metadata"] else {},
            )
            for row in rows
        ]
