# ============================================================================
# src/prescription_sync/sync/queue.py
# ============================================================================
"""
Pending Prescription Queue

Local SQLite queue for prescriptions captured while the remote store is
unreachable. Raw sqlite3, payload kept as the wire JSON so it can be
decoded again exactly as it came off the tag.
"""

import sqlite3
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from ..config.base_config import store_settings
from ..utils.exceptions import QueueError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingPrescription:
    id: int
    user_id: str
    payload_json: str
    created_at: str


class PendingPrescriptionQueue:
    """FIFO of prescriptions waiting to be ingested."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path or store_settings.PENDING_DB_PATH)
        self._init_database()

    def _connect(self) -> sqlite3.Connection:
        try:
            return sqlite3.connect(str(self.db_path))
        except sqlite3.Error as e:
            raise QueueError(f"Cannot open pending queue at {self.db_path}: {e}") from e

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------
    def _init_database(self):
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._connect()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS pending_prescriptions (
                    id            INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id       TEXT NOT NULL,
                    payload_json  TEXT NOT NULL,
                    created_at    TEXT NOT NULL
                )
            """)
            conn.commit()
        except sqlite3.Error as e:
            raise QueueError(f"Cannot initialize pending queue: {e}") from e
        finally:
            conn.close()
        logger.info(f"Pending queue initialized: {self.db_path}")

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------
    def enqueue(self, user_id: str, payload_json: str) -> int:
        """Store a payload for later ingestion. Returns the queue id."""
        conn = self._connect()
        try:
            cur = conn.execute(
                "INSERT INTO pending_prescriptions (user_id, payload_json, created_at) VALUES (?, ?, ?)",
                (user_id, payload_json, datetime.now(timezone.utc).isoformat()),
            )
            conn.commit()
            pending_id = cur.lastrowid
        except sqlite3.Error as e:
            raise QueueError(f"Cannot enqueue prescription: {e}") from e
        finally:
            conn.close()
        logger.info(f"Queued prescription {pending_id} for later sync")
        return pending_id

    def delete(self, pending_id: int) -> bool:
        conn = self._connect()
        try:
            cur = conn.execute("DELETE FROM pending_prescriptions WHERE id = ?", (pending_id,))
            conn.commit()
            return cur.rowcount > 0
        except sqlite3.Error as e:
            raise QueueError(f"Cannot delete pending prescription {pending_id}: {e}") from e
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------
    def list_all(self) -> List[PendingPrescription]:
        """Queued entries, oldest first."""
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT id, user_id, payload_json, created_at FROM pending_prescriptions ORDER BY id"
            ).fetchall()
        except sqlite3.Error as e:
            raise QueueError(f"Cannot read pending queue: {e}") from e
        finally:
            conn.close()
        return [PendingPrescription(*row) for row in rows]

    def count(self) -> int:
        conn = self._connect()
        try:
            return conn.execute("SELECT COUNT(*) FROM pending_prescriptions").fetchone()[0]
        except sqlite3.Error as e:
            raise QueueError(f"Cannot count pending queue: {e}") from e
        finally:
            conn.close()
