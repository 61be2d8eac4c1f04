import logging
from typing import Any, Awaitable, Callable, Dict, Optional
from aiogram import BaseMiddleware
from aiogram.types import TelegramObject, Message, CallbackQuery
from aiogram.fsm.context import FSMContext
from app.core.messages import Messages

logger = logging.getLogger(__name__)

MAX_LOGGED_TEXT = 200

class CustomFormatter(logging.Formatter):
    """Formatter с user_id (для системных записей 'system')."""
    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, 'user_id'):
            record.user_id = 'system'
        return super().format(record)

def describe_event(event: TelegramObject) -> str:
    """Краткое описание события для лога."""
    if isinstance(event, Message):
        if event.photo:
            return "photo"
        text = event.text or event.caption or "non-text message"
        return text if len(text) <= MAX_LOGGED_TEXT else f"{text[:MAX_LOGGED_TEXT]}..."
    if isinstance(event, CallbackQuery):
        return f"callback {event.data}"
    return type(event).__name__

class LoggingMiddleware(BaseMiddleware):
    """Middleware для логирования сообщений и коллбеков с user_id и шагом мастера."""
    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any]
    ) -> Any:
        user = getattr(event, 'from_user', None)
        user_id = user.id if user else 'unknown'
        data['user_id'] = user_id

        wizard_context = ""
        state: Optional[FSMContext] = data.get('state')
        if state:
            try:
                state_data: Dict[str, Any] = await state.get_data()
            except Exception as e:
                logger.error(f"FSM state error for user {user_id}: {e}", extra={'user_id': user_id})
                await state.clear()
                if hasattr(event, 'answer'):
                    await event.answer(Messages.Common.SESSION_TIMEOUT)
                return
            form_state = state_data.get('form_state') or {}
            if state_data.get('wizard'):
                wizard_context = f" [{state_data['wizard']} step {form_state.get('current_step')}]"

        logger.info(f"Event from user {user_id}{wizard_context}: {describe_event(event)}", extra={'user_id': user_id})
        try:
            return await handler(event, data)
        except Exception as e:
            logger.error(f"Error handling event for user {user_id}: {e}", exc_info=True, extra={'user_id': user_id})
            if hasattr(event, 'answer'):
                await event.answer(Messages.Common.INTERNAL_ERROR)
            raise
