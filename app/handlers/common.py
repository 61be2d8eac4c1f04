from aiogram import Router, F
from aiogram.types import Message, CallbackQuery
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from app.keyboards.inline import get_role_selection_keyboard, RoleCallback
from app.handlers.cv_wizard import start_cv_wizard
from app.handlers.job_wizard import start_job_wizard
from app.wizard.session import load_session
from app.core.messages import Messages
import logging

router = Router()
logger = logging.getLogger(__name__)

@router.message(Command("start"))
async def cmd_start(message: Message, state: FSMContext) -> None:
    """Обработка команды /start."""
    await state.clear()
    logger.info(f"User {message.from_user.id} started /start")
    await message.answer(Messages.Common.START, reply_markup=get_role_selection_keyboard())

@router.callback_query(RoleCallback.filter(F.role_name == "job_seeker"))
async def cq_select_job_seeker(callback: CallbackQuery, state: FSMContext) -> None:
    """Выбор роли соискателя: мастер резюме."""
    await callback.answer()
    logger.info(f"User {callback.from_user.id} selected job seeker role")
    await callback.message.edit_reply_markup(reply_markup=None)
    await start_cv_wizard(callback.message, state, callback.from_user.id)

@router.callback_query(RoleCallback.filter(F.role_name == "company"))
async def cq_select_company(callback: CallbackQuery, state: FSMContext) -> None:
    """Выбор роли компании: мастер вакансии."""
    await callback.answer()
    logger.info(f"User {callback.from_user.id} selected company role")
    await callback.message.edit_reply_markup(reply_markup=None)
    await start_job_wizard(callback.message, state, callback.from_user.id)

@router.message(Command("cancel"))
async def cmd_cancel(message: Message, state: FSMContext) -> None:
    """Выход из мастера; черновик резюме сохраняется."""
    session = await load_session(state, message.from_user.id)
    if session is not None:
        session.flush_draft()
    logger.info(f"User {message.from_user.id} cancelled wizard")
    await state.clear()
    await message.answer(Messages.Common.CANCELLED)
