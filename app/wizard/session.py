import logging
from typing import Any, Dict, Optional, Tuple

from aiogram.fsm.context import FSMContext

from app.services.draft_storage import DraftStorage, cv_draft_key, draft_storage, draft_writer
from app.wizard.debounce import DebouncedWriter
from app.wizard.derived import derive_augmentations
from app.wizard.navigation import StepNavigator
from app.wizard.state import FormState, FormStore
from app.wizard.steps import CV_WIZARD, JOB_WIZARD, WizardDefinition

logger = logging.getLogger(__name__)

WIZARDS: Dict[str, WizardDefinition] = {"cv": CV_WIZARD, "job": JOB_WIZARD}
DERIVATIONS = {"cv": derive_augmentations}

class WizardSession:
    """Активный мастер пользователя: хранилище формы, навигация, черновик."""

    def __init__(
        self,
        wizard: str,
        form_state: FormState,
        draft_key: Optional[str] = None,
        writer: Optional[DebouncedWriter] = None,
        storage: Optional[DraftStorage] = None,
    ):
        self.wizard = wizard
        self.definition = WIZARDS[wizard]
        self.store = FormStore(form_state, derive=DERIVATIONS.get(wizard))
        self.draft_key = draft_key
        self._writer = writer or draft_writer
        self._storage = storage or draft_storage
        if draft_key:
            self.store.subscribe(self._schedule_draft)
        self.navigator = StepNavigator(self.definition, self.store)

    @property
    def state(self) -> FormState:
        return self.store.state

    @property
    def step(self) -> int:
        return self.navigator.current_step

    def _schedule_draft(self, state: FormState) -> None:
        self._writer.schedule(self.draft_key, state.model_dump(mode="json"))

    def flush_draft(self) -> None:
        """Немедленная запись черновика (смена шага, выход)."""
        if self.draft_key:
            self._writer.flush(self.draft_key)

    def clear_draft(self) -> None:
        """Удаление черновика после успешной отправки."""
        if self.draft_key:
            self._writer.discard(self.draft_key)
            self._storage.delete(self.draft_key)

async def save_session(state: FSMContext, session: WizardSession, **extra: Any) -> None:
    """Сохранение состояния мастера в FSM."""
    await state.update_data(wizard=session.wizard, form_state=session.state.model_dump(mode="json"), **extra)

async def load_session(state: FSMContext, user_id: int) -> Optional[WizardSession]:
    """Восстановление активного мастера из FSM."""
    data: Dict[str, Any] = await state.get_data()
    wizard = data.get("wizard")
    raw = data.get("form_state")
    if wizard not in WIZARDS or raw is None:
        return None
    form_state = FormState.model_validate(raw)
    # смена макета сохраняется сразу в профиль, черновик резюме она не трогает
    draft_key = cv_draft_key(user_id) if wizard == "cv" and not form_state.layout_edit_mode else None
    return WizardSession(wizard, form_state, draft_key=draft_key)

def restore_cv_state(user_id: int) -> Tuple[FormState, bool]:
    """Состояние мастера резюме из локального черновика (или новое)."""
    saved = draft_storage.load_state(cv_draft_key(user_id))
    if saved is None:
        return FormState(), False
    logger.info(f"Restored CV draft for user {user_id} at step {saved.current_step}")
    return saved, True
