"""Document store and local storage backed by SQLite.

Documents are JSON objects grouped into named collections and addressed by
``(collection, doc_id)``. Local storage is a flat key/value table used as the
on-device progress cache.
"""
import json
import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from english_tutor.errors import BackendUnavailable, NotFound

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = str(Path.home() / ".english_tutor" / "tutor.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS documents (
    collection TEXT NOT NULL,
    doc_id TEXT NOT NULL,
    data TEXT NOT NULL,
    updated_at TEXT,
    PRIMARY KEY (collection, doc_id)
);

CREATE TABLE IF NOT EXISTS local_storage (
    key TEXT PRIMARY KEY,
    value TEXT
);
"""


@dataclass(frozen=True)
class Increment:
    """Field update that adds ``amount`` to the stored number."""
    amount: float


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


@contextmanager
def _connect(db_path: str):
    try:
        conn = get_connection(db_path)
    except sqlite3.Error as e:
        raise BackendUnavailable(f"cannot open {db_path}: {e}") from e
    try:
        yield conn
        conn.commit()
    except sqlite3.Error as e:
        raise BackendUnavailable(str(e)) from e
    finally:
        conn.close()


def _apply_field(data: dict, path: str, value) -> None:
    # Dotted paths address nested maps, e.g. "questionTypes.matching.total".
    keys = path.split(".")
    target = data
    for key in keys[:-1]:
        if not isinstance(target.get(key), dict):
            target[key] = {}
        target = target[key]
    last = keys[-1]
    if isinstance(value, Increment):
        target[last] = (target.get(last) or 0) + value.amount
    else:
        target[last] = value


def _write(conn: sqlite3.Connection, collection: str, doc_id: str, data: dict) -> None:
    conn.execute(
        """INSERT INTO documents (collection, doc_id, data, updated_at) VALUES (?, ?, ?, ?)
        ON CONFLICT(collection, doc_id) DO UPDATE SET data=excluded.data, updated_at=excluded.updated_at""",
        (collection, doc_id, json.dumps(data), datetime.now().isoformat()),
    )


def _read(conn: sqlite3.Connection, collection: str, doc_id: str) -> dict | None:
    row = conn.execute(
        "SELECT data FROM documents WHERE collection = ? AND doc_id = ?",
        (collection, doc_id),
    ).fetchone()
    return json.loads(row["data"]) if row else None


def get_document(db_path: str, collection: str, doc_id: str) -> dict | None:
    """Return the stored document, or None when it does not exist."""
    with _connect(db_path) as conn:
        return _read(conn, collection, doc_id)


def set_document(db_path: str, collection: str, doc_id: str, data: dict, merge: bool = False) -> None:
    """Write a document, replacing it unless ``merge`` is set."""
    with _connect(db_path) as conn:
        current = _read(conn, collection, doc_id) if merge else None
        doc = {**(current or {}), **data}
        _write(conn, collection, doc_id, doc)
    logger.debug("set %s/%s", collection, doc_id)


def update_document(db_path: str, collection: str, doc_id: str, fields: dict) -> dict:
    """Apply field updates to an existing document and return the result.

    Keys may be dotted paths into nested maps; values may be ``Increment``.
    Raises NotFound when the document does not exist.
    """
    with _connect(db_path) as conn:
        doc = _read(conn, collection, doc_id)
        if doc is None:
            raise NotFound(f"{collection}/{doc_id}")
        for path, value in fields.items():
            _apply_field(doc, path, value)
        _write(conn, collection, doc_id, doc)
    return doc


def delete_document(db_path: str, collection: str, doc_id: str) -> None:
    with _connect(db_path) as conn:
        conn.execute(
            "DELETE FROM documents WHERE collection = ? AND doc_id = ?",
            (collection, doc_id),
        )


def sort_key(value) -> tuple:
    """Numbers (and numeric strings) first, then other text, then missing."""
    if value is None:
        return (2, 0)
    try:
        return (0, float(value))
    except (TypeError, ValueError):
        return (1, str(value))


def list_documents(db_path: str, collection: str, order_by: str | None = None) -> list[dict]:
    """All documents in a collection, each with its ``id`` merged in.

    With ``order_by`` the documents are sorted ascending by that field,
    numerically where the value allows it; documents missing the field sort last.
    """
    with _connect(db_path) as conn:
        rows = conn.execute(
            "SELECT doc_id, data FROM documents WHERE collection = ? ORDER BY doc_id",
            (collection,),
        ).fetchall()
    docs = [{"id": row["doc_id"], **json.loads(row["data"])} for row in rows]
    if order_by:
        docs.sort(key=lambda d: sort_key(d.get(order_by)))
    return docs


def get_local_item(db_path: str, key: str) -> str | None:
    with _connect(db_path) as conn:
        row = conn.execute("SELECT value FROM local_storage WHERE key = ?", (key,)).fetchone()
    return row["value"] if row else None


def set_local_item(db_path: str, key: str, value: str) -> None:
    with _connect(db_path) as conn:
        conn.execute(
            "INSERT INTO local_storage (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
            (key, value, value),
        )


def remove_local_item(db_path: str, key: str) -> None:
    with _connect(db_path) as conn:
        conn.execute("DELETE FROM local_storage WHERE key = ?", (key,))
