import os
import tempfile
from datetime import date
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

os.environ.setdefault("BOT_TOKEN", "123456:TEST")
os.environ.setdefault("BACKEND_URL", "https://backend.test")
os.environ.setdefault("BACKEND_API_KEY", "test-key")
os.environ.setdefault("DRAFT_DB_PATH", str(Path(tempfile.mkdtemp()) / "drafts.db"))

import pytest
from aiogram.fsm.context import FSMContext
from aiogram.fsm.storage.base import StorageKey
from aiogram.fsm.storage.memory import MemoryStorage

from app.services.draft_storage import DraftStorage
from app.wizard import session as session_module
from app.wizard.debounce import DebouncedWriter

TODAY = date(2025, 6, 1)
USER_ID = 42


class FakeMessage:
    """Минимальная замена aiogram Message для тестов обработчиков."""

    def __init__(self, text: Optional[str] = None, user_id: int = USER_ID, photo: Optional[List[Any]] = None):
        self.text = text
        self.caption = None
        self.photo = photo
        self.from_user = SimpleNamespace(id=user_id)
        self.answer = AsyncMock()
        self.edit_text = AsyncMock()
        self.edit_reply_markup = AsyncMock()
        self.bot = SimpleNamespace(get_file=AsyncMock(), download_file=AsyncMock())

    @property
    def answers(self) -> List[str]:
        return [call.args[0] for call in self.answer.call_args_list]


class FakeCallback:
    """Минимальная замена aiogram CallbackQuery."""

    def __init__(self, user_id: int = USER_ID):
        self.from_user = SimpleNamespace(id=user_id)
        self.message = FakeMessage(user_id=user_id)
        self.answer = AsyncMock()


@pytest.fixture
def fsm_state() -> FSMContext:
    return FSMContext(storage=MemoryStorage(), key=StorageKey(bot_id=1, chat_id=USER_ID, user_id=USER_ID))


@pytest.fixture
def drafts(tmp_path, monkeypatch) -> DraftStorage:
    """Отдельное хранилище черновиков; запись без задержки."""
    storage = DraftStorage(str(tmp_path / "drafts.db"))
    writer = DebouncedWriter(0, storage.set)
    monkeypatch.setattr(session_module, "draft_storage", storage)
    monkeypatch.setattr(session_module, "draft_writer", writer)
    return storage


@pytest.fixture
def cv_data() -> Dict[str, Any]:
    """Полностью заполненная форма резюме (статус azubi)."""
    return {
        "branche": "handwerk",
        "status": "azubi",
        "vorname": "Anna",
        "nachname": "Schmidt",
        "geburtsdatum": "2005-03-14",
        "strasse": "Hauptstraße",
        "hausnummer": "12a",
        "plz": "50667",
        "ort": "Köln",
        "email": "anna@example.com",
        "profilbild": "profile-images/42/avatar.jpg",
        "has_drivers_license": False,
        "ausbildungsberuf": "Tischler",
        "ausbildungsbetrieb": "Holz GmbH",
        "startjahr": 2023,
        "voraussichtliches_ende": 2026,
        "kenntnisse": "Möbelbau und Oberflächenbehandlung",
        "motivation": "Ich arbeite gern mit Holz.",
        "sprachen": [{"sprache": "Deutsch", "niveau": "Muttersprache"}],
        "faehigkeiten": ["Sägen", "Schleifen"],
        "schulbildung": [
            {"schulform": "Realschule", "name": "Goethe-Schule", "ort": "Köln",
             "zeitraum_von": 2015, "zeitraum_bis": 2021, "aktuell": False}
        ],
        "berufserfahrung": [],
        "layout": 2,
        "einwilligung": True,
    }


@pytest.fixture
def job_data() -> Dict[str, Any]:
    """Полностью заполненная форма вакансии."""
    return {
        "title": "Elektroniker (m/w/d)",
        "city": "Hamburg",
        "employment_type": "apprenticeship",
        "start_date": "2025-09-01",
        "skills": ["Schaltpläne lesen", "Teamarbeit"],
        "required_languages": [{"language": "Deutsch", "level": "B2", "required": True}],
        "certifications": [],
        "tasks_md": "• Montage von Anlagen",
        "requirements_md": "• Realschulabschluss",
        "salary_min": 1000,
        "salary_max": 1300,
        "work_mode": "onsite",
        "working_hours": 40,
        "is_public": True,
    }
