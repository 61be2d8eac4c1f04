import json
import logging
import sqlite3
from contextlib import closing
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from app.core.config import DRAFT_DB_PATH, DRAFT_DEBOUNCE_SECONDS
from app.wizard.debounce import DebouncedWriter
from app.wizard.state import FormState

logger = logging.getLogger(__name__)

class DraftStorage:
    """Локальное key-value хранилище черновиков мастера (SQLite).

    Значения хранятся как JSON-сериализованный FormState. Бот работает в одном
    потоке event loop, поэтому блокировки не нужны.
    """

    def __init__(self, db_path: str):
        self.db_path = Path(db_path)
        self._ensure_database_exists()

    def _get_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path), check_same_thread=False)

    def _ensure_database_exists(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with closing(self._get_connection()) as conn, conn:
            conn.execute(
                "CREATE TABLE IF NOT EXISTS drafts (key TEXT PRIMARY KEY, value TEXT NOT NULL, updated_at TEXT NOT NULL)"
            )

    def get(self, key: str) -> Optional[Any]:
        """Чтение сырого JSON-значения."""
        with closing(self._get_connection()) as conn, conn:
            row = conn.execute("SELECT value FROM drafts WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        return json.loads(row[0])

    def set(self, key: str, value: Any) -> None:
        """Запись значения (JSON)."""
        payload = json.dumps(value, ensure_ascii=False, default=str)
        with closing(self._get_connection()) as conn, conn:
            conn.execute(
                "INSERT INTO drafts (key, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
                (key, payload, datetime.now().isoformat()),
            )
        logger.debug(f"Draft {key} saved")

    def delete(self, key: str) -> None:
        """Удаление черновика."""
        with closing(self._get_connection()) as conn, conn:
            conn.execute("DELETE FROM drafts WHERE key = ?", (key,))
        logger.info(f"Draft {key} removed")

    def load_state(self, key: str) -> Optional[FormState]:
        """Восстановление состояния мастера из черновика."""
        raw = self.get(key)
        if raw is None:
            return None
        try:
            return FormState.model_validate(raw)
        except ValueError as e:
            logger.warning(f"Discarding unreadable draft {key}: {e}")
            self.delete(key)
            return None

    def save_state(self, key: str, state: FormState) -> None:
        """Сохранение состояния мастера."""
        self.set(key, state.model_dump(mode="json"))

def cv_draft_key(telegram_id: int) -> str:
    """Ключ черновика резюме для пользователя."""
    return f"cv_form:{telegram_id}"

draft_storage = DraftStorage(DRAFT_DB_PATH)
draft_writer = DebouncedWriter(DRAFT_DEBOUNCE_SECONDS, draft_storage.set)
