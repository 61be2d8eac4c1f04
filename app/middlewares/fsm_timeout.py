import logging
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, Optional
from aiogram import BaseMiddleware
from aiogram.types import TelegramObject
from aiogram.fsm.context import FSMContext
from app.core.config import FSM_TIMEOUT_MINUTES
from app.core.messages import Messages

logger = logging.getLogger(__name__)

class FSMTimeoutMiddleware(BaseMiddleware):
    """Middleware для очистки FSM после таймаута (черновик резюме остаётся в локальном хранилище)."""
    def __init__(self, timeout_minutes: int = FSM_TIMEOUT_MINUTES):
        self.timeout = timedelta(minutes=timeout_minutes)

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any]
    ) -> Any:
        state: Optional[FSMContext] = data.get('state')
        if state:
            state_data: Dict[str, Any] = await state.get_data()
            last_activity: Optional[str] = state_data.get('last_activity')
            if last_activity and datetime.now() - datetime.fromisoformat(last_activity) > self.timeout:
                user = getattr(event, 'from_user', None)
                await state.clear()
                logger.info(f"Cleared FSM state for user {user.id if user else 'unknown'} due to timeout")
                await event.answer(Messages.Common.SESSION_TIMEOUT)
            await state.update_data(last_activity=datetime.now().isoformat())
        return await handler(event, data)
