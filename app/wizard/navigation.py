import logging
from datetime import date
from typing import Dict, Optional, Tuple

from app.utils.validators import validate_all
from app.wizard.state import FormStore
from app.wizard.steps import WizardDefinition

logger = logging.getLogger(__name__)

class StepNavigator:
    """Контроллер навигации по шагам мастера.

    Вперёд можно перейти только после успешной проверки текущего шага, назад
    переход всегда разрешён. Прямой переход по индикатору прогресса не проверяет
    промежуточные шаги; перед отправкой вызывается validate_all().
    """

    def __init__(self, definition: WizardDefinition, store: FormStore, today: Optional[date] = None):
        self.definition = definition
        self.store = store
        self.errors: Dict[str, str] = {}
        self._today = today
        self.ensure_in_range()

    @property
    def current_step(self) -> int:
        return self.store.state.current_step

    @property
    def restricted(self) -> bool:
        return self.store.state.layout_edit_mode and bool(self.definition.restricted_steps)

    def reachable_steps(self) -> Tuple[int, ...]:
        """Шаги, доступные в активном режиме."""
        return self.definition.active_steps(self.restricted)

    @property
    def min_step(self) -> int:
        return self.reachable_steps()[0]

    @property
    def max_step(self) -> int:
        return self.reachable_steps()[-1]

    @property
    def is_first(self) -> bool:
        return self.current_step == self.min_step

    @property
    def is_last(self) -> bool:
        return self.current_step == self.max_step

    def ensure_in_range(self) -> None:
        """Приведение текущего шага к диапазону активного режима."""
        step = min(max(self.current_step, self.min_step), self.max_step)
        self.store.set_step(step)

    def validate_current(self) -> Dict[str, str]:
        """Ошибки текущего шага."""
        return self.definition.validate_step(self.store.get(), self.current_step, self._today)

    def go_next(self) -> bool:
        """Переход к следующему шагу, если текущий шаг заполнен корректно."""
        step = self.current_step
        if step >= self.max_step:
            self.errors = {}
            return False
        self.errors = self.validate_current()
        if self.errors:
            logger.info(f"{self.definition.name} wizard: step {step} blocked by {sorted(self.errors)}")
            return False
        self.store.set_step(min(step + 1, self.max_step))
        logger.info(f"{self.definition.name} wizard: step {step} -> {self.current_step}")
        return True

    def go_previous(self) -> bool:
        """Переход к предыдущему шагу без проверки."""
        self.errors = {}
        step = self.current_step
        if step <= self.min_step:
            return False
        self.store.set_step(step - 1)
        return True

    def go_to_step(self, step: int) -> bool:
        """Прямой переход к шагу из индикатора прогресса."""
        if step not in self.reachable_steps():
            logger.warning(f"{self.definition.name} wizard: step {step} not reachable (layout_edit={self.restricted})")
            return False
        self.errors = {}
        self.store.set_step(step)
        return True

    def progress(self) -> float:
        """Прогресс в процентах для активного режима."""
        steps = self.reachable_steps()
        if self.restricted:
            return (self.current_step - steps[0]) / len(steps) * 100
        return self.current_step / self.definition.total_steps * 100

    def enter_layout_edit(self) -> None:
        """Включение режима смены макета (шаги 5-6)."""
        self.store.set_layout_edit_mode(True)
        self.store.set_step(self.min_step)

    def exit_layout_edit(self) -> None:
        """Выход из режима смены макета."""
        self.store.set_layout_edit_mode(False)
        self.ensure_in_range()

    def validate_all(self) -> Dict[str, str]:
        """Проверка всех шагов полного сценария."""
        return validate_all(self.definition.validate_step, self.store.get(), self.definition.step_numbers, self._today)
