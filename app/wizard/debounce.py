import asyncio
import logging
from typing import Any, Callable, Dict

logger = logging.getLogger(__name__)

class DebouncedWriter:
    """Отложенная запись по ключу.

    Новая запись по тому же ключу заменяет ожидающую; flush() записывает сразу.
    """

    def __init__(self, delay: float, sink: Callable[[str, Any], None]):
        self.delay = delay
        self._sink = sink
        self._pending: Dict[str, Any] = {}
        self._tasks: Dict[str, asyncio.Task] = {}

    def schedule(self, key: str, value: Any) -> None:
        """Поставить запись в очередь (требует запущенный event loop)."""
        self._pending[key] = value
        self._cancel(key)
        self._tasks[key] = asyncio.get_running_loop().create_task(self._delayed_write(key))

    def has_pending(self, key: str) -> bool:
        return key in self._pending

    async def _delayed_write(self, key: str) -> None:
        await asyncio.sleep(self.delay)
        if self._tasks.get(key) is asyncio.current_task():
            del self._tasks[key]
        try:
            self._write(key)
        except Exception as e:
            logger.error(f"Debounced write for {key} failed: {e}", exc_info=True)

    def _cancel(self, key: str) -> None:
        task = self._tasks.pop(key, None)
        if task is not None and not task.done():
            task.cancel()

    def _write(self, key: str) -> None:
        if key not in self._pending:
            return
        value = self._pending.pop(key)
        self._sink(key, value)

    def flush(self, key: str) -> None:
        """Немедленная запись ожидающего значения."""
        self._cancel(key)
        self._write(key)

    def discard(self, key: str) -> None:
        """Отмена ожидающей записи без сохранения."""
        self._cancel(key)
        self._pending.pop(key, None)

    def flush_all(self) -> None:
        """Запись всех ожидающих значений (при остановке бота)."""
        for key in list(self._pending):
            self.flush(key)
