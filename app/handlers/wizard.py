from aiogram import Router, F
from aiogram.types import Message, CallbackQuery
from aiogram.filters import Command, StateFilter
from aiogram.fsm.context import FSMContext
from typing import Any, Dict, Optional
from app.states.wizard import WizardFSM
from app.keyboards.inline import ChoiceCallback, ConfirmationCallback, NavCallback, RemoveEntryCallback
from app.core.messages import Messages
from app.handlers.wizard_processors import (
    advance_field, ask_field, edit_step, enter_step, process_entry, process_photo_upload, show_summary, store_field
)
from app.utils.formatters import format_value
from app.wizard.derived import is_derived
from app.wizard.prompts import FieldPrompt, coerce_choice, coerce_text, get_prompt, has_value
from app.wizard.session import WizardSession, load_session
import logging

router = Router()
logger = logging.getLogger(__name__)

async def _current_prompt(state: FSMContext, session: WizardSession) -> Optional[FieldPrompt]:
    data: Dict[str, Any] = await state.get_data()
    field: Optional[str] = data.get('current_field')
    if not field:
        return None
    return get_prompt(session.wizard, session.step, field)

@router.message(Command("skip"), StateFilter(WizardFSM.filling_field, WizardFSM.uploading_photo, WizardFSM.adding_entry))
async def handle_skip(message: Message, state: FSMContext) -> None:
    """Пропуск поля: необязательного или уже заполненного (значение не меняется)."""
    session = await load_session(state, message.from_user.id)
    if session is None:
        await message.answer(Messages.Common.NO_ACTIVE_WIZARD)
        return
    prompt = await _current_prompt(state, session)
    can_skip = prompt is not None and (prompt.optional or has_value(session.store.get().get(prompt.field)))
    if not can_skip:
        await message.answer(Messages.Common.INVALID_INPUT)
        if prompt:
            await message.answer(prompt.message)
        return
    logger.info(f"User {message.from_user.id} skipped {prompt.field}")
    await message.answer(Messages.Common.SKIPPED)
    await advance_field(message, state, session, prompt.field)

@router.message(WizardFSM.filling_field, F.text, ~F.text.startswith("/"))
async def handle_field_text(message: Message, state: FSMContext) -> None:
    """Текстовый ввод значения поля."""
    session = await load_session(state, message.from_user.id)
    prompt = await _current_prompt(state, session) if session else None
    if prompt is None:
        await message.answer(Messages.Common.INVALID_INPUT)
        return
    if await store_field(message, state, session, prompt, coerce_text(prompt, message.text)):
        await advance_field(message, state, session, prompt.field)

@router.callback_query(ChoiceCallback.filter(), WizardFSM.choosing_option)
async def handle_choice(callback: CallbackQuery, callback_data: ChoiceCallback, state: FSMContext) -> None:
    """Выбор значения поля кнопкой."""
    session = await load_session(state, callback.from_user.id)
    prompt = await _current_prompt(state, session) if session else None
    if prompt is None or prompt.field != callback_data.field:
        await callback.answer(Messages.Common.INVALID_INPUT, show_alert=True)
        return
    value = coerce_choice(prompt, callback_data.value)
    if value is None:
        await callback.answer(Messages.Common.INVALID_INPUT, show_alert=True)
        return
    await callback.answer()
    await callback.message.edit_text(f"{prompt.message}\n<b>{format_value(prompt.field, value)}</b>")
    if await store_field(callback.message, state, session, prompt, value):
        await advance_field(callback.message, state, session, prompt.field)

@router.message(WizardFSM.uploading_photo, F.photo)
async def handle_photo(message: Message, state: FSMContext) -> None:
    """Загрузка профильного фото."""
    session = await load_session(state, message.from_user.id)
    prompt = await _current_prompt(state, session) if session else None
    if prompt is None:
        await message.answer(Messages.Common.INVALID_INPUT)
        return
    stored_path = await process_photo_upload(message, session)
    if stored_path is None:
        return
    if await store_field(message, state, session, prompt, stored_path):
        await advance_field(message, state, session, prompt.field)

@router.message(WizardFSM.adding_entry, F.text, ~F.text.startswith("/"))
async def handle_entry(message: Message, state: FSMContext) -> None:
    """Ввод записи списка."""
    session = await load_session(state, message.from_user.id)
    prompt = await _current_prompt(state, session) if session else None
    if prompt is None:
        await message.answer(Messages.Common.INVALID_INPUT)
        return
    await process_entry(message, state, session, prompt)

@router.callback_query(ConfirmationCallback.filter(), WizardFSM.confirm_action)
async def handle_add_another(callback: CallbackQuery, callback_data: ConfirmationCallback, state: FSMContext) -> None:
    """Добавить ещё одну запись или перейти дальше."""
    await callback.answer()
    session = await load_session(state, callback.from_user.id)
    prompt = get_prompt(session.wizard, session.step, callback_data.step) if session else None
    if prompt is None:
        await callback.message.answer(Messages.Common.NO_ACTIVE_WIZARD)
        return
    await callback.message.edit_reply_markup(reply_markup=None)
    if callback_data.action == "yes":
        await ask_field(callback.message, state, prompt)
    else:
        await advance_field(callback.message, state, session, prompt.field)

@router.callback_query(RemoveEntryCallback.filter(), WizardFSM.reviewing_step)
async def handle_remove_entry(callback: CallbackQuery, callback_data: RemoveEntryCallback, state: FSMContext) -> None:
    """Удаление записи списка из сводки шага."""
    session = await load_session(state, callback.from_user.id)
    prompt = get_prompt(session.wizard, session.step, callback_data.field) if session else None
    entries = list(session.store.get().get(callback_data.field) or []) if prompt and prompt.kind == "entry" else []
    if not 0 <= callback_data.index < len(entries) or is_derived(entries[callback_data.index]):
        await callback.answer(Messages.Common.INVALID_INPUT, show_alert=True)
        return
    await callback.answer()
    removed = entries.pop(callback_data.index)
    session.store.update({callback_data.field: entries})
    logger.info(f"User {callback.from_user.id} removed {callback_data.field} entry {callback_data.index}")
    await callback.message.answer(Messages.Common.ENTRY_REMOVED.format(name=format_value(callback_data.field, [removed])))
    await show_summary(callback.message, state, session)

@router.callback_query(NavCallback.filter(), StateFilter(WizardFSM))
async def handle_navigation(callback: CallbackQuery, callback_data: NavCallback, state: FSMContext) -> None:
    """Назад / далее / переход по индикатору / редактирование шага."""
    session = await load_session(state, callback.from_user.id)
    if session is None:
        await callback.answer(Messages.Common.NO_ACTIVE_WIZARD, show_alert=True)
        return
    nav = session.navigator
    previous = session.step
    if callback_data.action == "edit":
        await callback.answer()
        await edit_step(callback.message, state, session)
        return
    if callback_data.action == "next":
        moved = nav.go_next()
    elif callback_data.action == "back":
        moved = nav.go_previous()
    else:
        moved = nav.go_to_step(callback_data.step)
        if not moved:
            await callback.answer(Messages.Common.STEP_UNREACHABLE, show_alert=True)
            return
    await callback.answer()
    if session.step != previous:
        session.flush_draft()
    if moved:
        await enter_step(callback.message, state, session)
    else:
        await show_summary(callback.message, state, session)

@router.message(StateFilter(WizardFSM))
async def invalid_input(message: Message, state: FSMContext) -> None:
    """Fallback для неверного ввода в мастере."""
    current_state: Optional[str] = await state.get_state()
    logger.warning(f"Invalid input from user {message.from_user.id} in state {current_state}: {message.text}")
    await message.answer(Messages.Common.INVALID_INPUT)
    session = await load_session(state, message.from_user.id)
    if session is None:
        return
    if current_state == WizardFSM.uploading_photo.state:
        await message.answer(Messages.Common.SEND_PHOTO)
        return
    prompt = await _current_prompt(state, session)
    if prompt is not None and current_state != WizardFSM.reviewing_step.state:
        await ask_field(message, state, prompt)
    else:
        await show_summary(message, state, session)
