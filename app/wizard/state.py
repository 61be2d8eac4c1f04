import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

class FormState(BaseModel):
    """Состояние мастера: текущий шаг, данные формы и режим."""
    current_step: int = 1
    form_data: Dict[str, Any] = Field(default_factory=dict)
    layout_edit_mode: bool = False

Subscriber = Callable[[FormState], None]
Derivation = Callable[[Mapping[str, Any]], Dict[str, Any]]

class FormStore:
    """Общее хранилище формы для всех шагов: get / update / subscribe."""

    def __init__(self, state: Optional[FormState] = None, derive: Optional[Derivation] = None):
        self.state = state or FormState()
        self._derive = derive
        self._subscribers: List[Subscriber] = []

    def get(self) -> Dict[str, Any]:
        """Копия текущих данных формы."""
        return dict(self.state.form_data)

    def update(self, partial: Mapping[str, Any]) -> Dict[str, Any]:
        """Слияние частичного обновления с данными формы.

        Поля верхнего уровня заменяются целиком, включая списки. После слияния
        выполняется вычисление производных записей, затем уведомляются подписчики.
        """
        merged = {**self.state.form_data, **partial}
        if self._derive is not None:
            augmentations = self._derive(merged)
            if augmentations:
                logger.debug(f"Derived fields added: {list(augmentations)}")
                merged.update(augmentations)
        self.state.form_data = merged
        self._notify()
        return self.get()

    def set_step(self, step: int) -> None:
        """Смена текущего шага."""
        if step != self.state.current_step:
            self.state.current_step = step
            self._notify()

    def set_layout_edit_mode(self, enabled: bool) -> None:
        """Включение/выключение режима смены макета."""
        self.state.layout_edit_mode = enabled
        self._notify()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Подписка на изменения. Возвращает функцию отписки."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback(self.state)
