"""SQLite journal of outgoing value transfers.

Each send is written as one row of the ``transfers`` table. Amounts are stored
as text since settlement units exceed SQLite's 64-bit integers.
"""
from __future__ import annotations

import datetime
import hashlib
import logging
import os
import sqlite3
import uuid
from typing import Any, Dict

from .transfer import ValueTransfer

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS transfers (
    transfer_id TEXT PRIMARY KEY,
    identity TEXT NOT NULL,
    amount TEXT NOT NULL,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_transfers_identity ON transfers(identity);
"""


def transfer_hash(identity: str, amount: int, nonce: str) -> str:
    canonical = f"{identity.lower()}|{amount}|{nonce}"
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class SqliteTransferJournal(ValueTransfer):
    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self.ensure_db()

    def ensure_db(self) -> None:
        folder = os.path.dirname(self.db_path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        try:
            conn.executescript(SCHEMA)
            conn.commit()
        finally:
            conn.close()

    def send(self, identity: str, amount: int) -> bool:
        transfer_id = transfer_hash(identity, amount, str(uuid.uuid4()))
        created_at = datetime.datetime.now(datetime.timezone.utc).isoformat()
        try:
            conn = sqlite3.connect(self.db_path)
            try:
                conn.execute(
                    "INSERT INTO transfers(transfer_id, identity, amount, created_at) VALUES (?,?,?,?)",
                    (transfer_id, identity, str(amount), created_at),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            logger.error("Transfer of %s to %s not journaled: %s", amount, identity, exc)
            return False
        return True

    def list_transfers(self, limit: int = 100, offset: int = 0, identity: str | None = None) -> list[Dict[str, Any]]:
        conn = sqlite3.connect(self.db_path)
        try:
            cur = conn.cursor()
            sql = "SELECT transfer_id, identity, amount, created_at FROM transfers"
            params: list[Any] = []
            if identity:
                sql += " WHERE identity = ?"
                params.append(identity)
            sql += " ORDER BY rowid DESC LIMIT ? OFFSET ?"
            params.extend([limit, offset])
            cur.execute(sql, tuple(params))
            cols = [c[0] for c in cur.description]
            rows = [dict(zip(cols, r)) for r in cur.fetchall()]
        finally:
            conn.close()
        return rows

    def balance_of(self, identity: str) -> int:
        conn = sqlite3.connect(self.db_path)
        try:
            cur = conn.execute("SELECT amount FROM transfers WHERE identity = ?", (identity,))
            return sum(int(row[0]) for row in cur.fetchall())
        finally:
            conn.close()
