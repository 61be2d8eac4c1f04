from aiogram import Router, F
from aiogram.types import Message, CallbackQuery
from aiogram.filters import Command, StateFilter
from aiogram.fsm.context import FSMContext
from typing import Optional
from app.states.wizard import WizardFSM
from app.keyboards.inline import WizardAction
from app.core.messages import Messages
from app.handlers.wizard_processors import edit_step, enter_step, show_summary, step_header
from app.services.api_client import APIRequestError, backend_api_client
from app.services.draft_storage import cv_draft_key
from app.utils.mappers import profile_to_form_data
from app.utils.validators import merge_list_items, parse_int
from app.wizard.session import WizardSession, load_session, restore_cv_state, save_session
from app.wizard.state import FormState
import logging

router = Router()
logger = logging.getLogger(__name__)

async def start_cv_wizard(message: Message, state: FSMContext, user_id: int) -> None:
    """Запуск или продолжение мастера резюме."""
    session = await load_session(state, user_id)
    resumed = session is not None and session.wizard == "cv" and not session.state.layout_edit_mode
    if not resumed:
        form_state, resumed = restore_cv_state(user_id)
        session = WizardSession("cv", form_state, draft_key=cv_draft_key(user_id))
    if session.state.layout_edit_mode:
        session.navigator.exit_layout_edit()
    logger.info(f"User {user_id} opened CV wizard at step {session.step} (resumed={resumed})")
    await message.answer(Messages.CV.RESUMED if resumed else Messages.CV.STARTED)
    await enter_step(message, state, session)

async def _get_cv_session(callback: CallbackQuery, state: FSMContext) -> Optional[WizardSession]:
    session = await load_session(state, callback.from_user.id)
    if session is None or session.wizard != "cv":
        await callback.answer(Messages.Common.NO_ACTIVE_WIZARD, show_alert=True)
        return None
    await callback.answer()
    return session

@router.message(Command("cv"))
async def cmd_cv(message: Message, state: FSMContext) -> None:
    """Обработка команды /cv."""
    await start_cv_wizard(message, state, message.from_user.id)

@router.message(Command("layout"))
async def cmd_layout(message: Message, state: FSMContext) -> None:
    """Смена макета для уже сохранённого резюме."""
    user_id = message.from_user.id
    try:
        profile = await backend_api_client.get_profile_by_telegram_id(user_id)
    except APIRequestError as e:
        logger.error(f"Failed to load profile for user {user_id}: {e}")
        await message.answer(Messages.CV.PROFILE_LOAD_ERROR)
        return
    if not profile:
        await message.answer(Messages.CV.PROFILE_NOT_FOUND)
        return
    session = WizardSession("cv", FormState(form_data=profile_to_form_data(profile)))
    session.navigator.enter_layout_edit()
    logger.info(f"User {user_id} entered layout edit mode")
    await message.answer(Messages.CV.LAYOUT_EDIT_STARTED)
    await message.answer(step_header(session))
    await edit_step(message, state, session)

@router.callback_query(WizardAction.filter(F.action == "suggest_skills"), StateFilter(WizardFSM))
async def handle_suggest_skills(callback: CallbackQuery, state: FSMContext) -> None:
    """Подбор навыков ИИ (шаг 3)."""
    session = await _get_cv_session(callback, state)
    if session is None:
        return
    await callback.message.answer(Messages.Common.AI_RUNNING)
    try:
        suggested = await backend_api_client.suggest_skills(session.store.get())
    except APIRequestError as e:
        logger.error(f"Skill suggestion failed for user {callback.from_user.id}: {e}")
        await callback.message.answer(Messages.Common.AI_ERROR)
        return
    if not suggested:
        await callback.message.answer(Messages.Common.AI_ERROR)
        return
    existing = session.store.get().get("faehigkeiten") or []
    merged = merge_list_items(existing, suggested)
    session.store.update({"faehigkeiten": merged})
    await callback.message.answer(Messages.CV.SKILLS_SUGGESTED.format(count=len(merged) - len(existing)))
    await show_summary(callback.message, state, session)

@router.callback_query(WizardAction.filter(F.action == "submit_cv"), StateFilter(WizardFSM))
async def handle_submit_cv(callback: CallbackQuery, state: FSMContext) -> None:
    """Отправка резюме (шаг 7)."""
    session = await _get_cv_session(callback, state)
    if session is None:
        return
    errors = session.navigator.validate_all()
    if errors:
        logger.info(f"CV submit blocked for user {callback.from_user.id}: {sorted(errors)}")
        session.navigator.errors = errors
        await show_summary(callback.message, state, session)
        return
    try:
        await backend_api_client.save_cv_profile(callback.from_user.id, session.store.get())
    except APIRequestError as e:
        logger.error(f"Failed to save CV for user {callback.from_user.id}: {e}")
        await callback.message.answer(Messages.CV.SUBMIT_ERROR)
        await save_session(state, session)
        return
    session.clear_draft()
    await state.clear()
    await callback.message.answer(Messages.CV.SUBMIT_OK)

@router.callback_query(WizardAction.filter(F.action == "save_layout"), StateFilter(WizardFSM))
async def handle_save_layout(callback: CallbackQuery, state: FSMContext) -> None:
    """Сохранение макета в режиме смены макета (шаг 6)."""
    session = await _get_cv_session(callback, state)
    if session is None:
        return
    errors = session.definition.validate_step(session.store.get(), 5, None)
    if errors:
        session.navigator.errors = errors
        await show_summary(callback.message, state, session)
        return
    layout = parse_int(session.store.get().get("layout"))
    try:
        saved = await backend_api_client.update_profile_layout(callback.from_user.id, layout)
    except APIRequestError as e:
        logger.error(f"Failed to save layout for user {callback.from_user.id}: {e}")
        saved = False
    if not saved:
        await callback.message.answer(Messages.CV.LAYOUT_SAVE_ERROR)
        return
    session.navigator.exit_layout_edit()
    await state.clear()
    await callback.message.answer(Messages.CV.LAYOUT_SAVED)
