from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4
from aiogram.exceptions import TelegramAPIError
from aiogram.types import Message
from aiogram.fsm.context import FSMContext
from app.states.wizard import WizardFSM
from app.keyboards.inline import get_choice_keyboard, get_confirmation_keyboard, get_navigation_keyboard, step_actions
from app.core.messages import Messages
from app.services.api_client import APIRequestError, backend_api_client
from app.utils.formatters import entry_text, format_cv_preview, format_job_preview, format_step_header, format_step_summary, format_value
from app.utils.validators import format_errors, validate_list_length
from app.wizard.prompts import ENTRY_PARSERS, FieldPrompt, next_prompt, step_prompts
from app.wizard.derived import is_derived
from app.wizard.session import WizardSession, save_session
import logging

logger = logging.getLogger(__name__)

PROFILE_IMAGE_BUCKET = "profile-images"
MAX_ENTRIES = 10

def step_header(session: WizardSession) -> str:
    """Заголовок текущего шага с прогрессом активного режима."""
    nav = session.navigator
    reachable = nav.reachable_steps()
    current = session.definition.step(session.step)
    return format_step_header(reachable.index(session.step) + 1, len(reachable), current.title, nav.progress())

def step_body(session: WizardSession) -> str:
    """Содержимое сводки шага: предпросмотр или заполненные поля."""
    form_data = session.store.get()
    if session.wizard == "cv" and session.step == 6:
        return format_cv_preview(form_data)
    if session.wizard == "job" and session.step == session.definition.total_steps:
        return format_job_preview(form_data)
    fields = [p.field for p in step_prompts(session.wizard, session.step, form_data)]
    return format_step_summary(fields, form_data)

def removable_entries(session: WizardSession) -> List[Tuple[str, int, str]]:
    """Записи списков шага, которые пользователь может удалить (кроме производных)."""
    form_data = session.store.get()
    items: List[Tuple[str, int, str]] = []
    for prompt in step_prompts(session.wizard, session.step, form_data):
        if prompt.kind != "entry":
            continue
        for index, entry in enumerate(form_data.get(prompt.field) or []):
            if not is_derived(entry):
                items.append((prompt.field, index, entry_text(entry)))
    return items

async def show_summary(message: Message, state: FSMContext, session: WizardSession) -> None:
    """Сводка шага с навигационной клавиатурой."""
    nav = session.navigator
    text = f"{step_header(session)}\n\n{step_body(session)}"
    if nav.errors:
        text += "\n\n" + Messages.Common.STEP_BLOCKED.format(errors=format_errors(nav.errors))
    keyboard = get_navigation_keyboard(
        reachable=nav.reachable_steps(),
        current=session.step,
        is_first=nav.is_first,
        is_last=nav.is_last,
        actions=step_actions(session.wizard, session.step, session.state.layout_edit_mode),
        editable=bool(step_prompts(session.wizard, session.step, session.store.get())),
        removable=removable_entries(session),
    )
    await save_session(state, session, current_field=None)
    await state.set_state(WizardFSM.reviewing_step)
    await message.answer(text, reply_markup=keyboard)

async def ask_field(message: Message, state: FSMContext, prompt: FieldPrompt) -> None:
    """Запрос значения поля."""
    await state.update_data(current_field=prompt.field)
    if prompt.kind in ("choice", "bool"):
        await message.answer(prompt.message, reply_markup=get_choice_keyboard(prompt.field, prompt.choices or {}))
        await state.set_state(WizardFSM.choosing_option)
    elif prompt.kind == "photo":
        await message.answer(prompt.message)
        await state.set_state(WizardFSM.uploading_photo)
    elif prompt.kind == "entry":
        await message.answer(prompt.message)
        await state.set_state(WizardFSM.adding_entry)
    else:
        await message.answer(prompt.message)
        await state.set_state(WizardFSM.filling_field)

async def enter_step(message: Message, state: FSMContext, session: WizardSession) -> None:
    """Вход на шаг: запрос незаполненных полей, иначе сводка."""
    prompt = next_prompt(session.wizard, session.step, session.store.get(), only_missing=True)
    if prompt is None:
        await show_summary(message, state, session)
        return
    await save_session(state, session, only_missing=True)
    await message.answer(step_header(session))
    await ask_field(message, state, prompt)

async def edit_step(message: Message, state: FSMContext, session: WizardSession) -> None:
    """Повторный ввод всех полей шага."""
    prompt = next_prompt(session.wizard, session.step, session.store.get())
    if prompt is None:
        await show_summary(message, state, session)
        return
    await save_session(state, session, only_missing=False)
    await ask_field(message, state, prompt)

async def advance_field(message: Message, state: FSMContext, session: WizardSession, after_field: str) -> None:
    """Переход к следующему полю шага или к сводке."""
    data: Dict[str, Any] = await state.get_data()
    prompt = next_prompt(
        session.wizard, session.step, session.store.get(),
        after=after_field, only_missing=data.get("only_missing", False)
    )
    if prompt is None:
        await show_summary(message, state, session)
        return
    await save_session(state, session)
    await ask_field(message, state, prompt)

async def store_field(message: Message, state: FSMContext, session: WizardSession, prompt: FieldPrompt, value: Any) -> bool:
    """Запись значения поля с немедленной проверкой этого поля."""
    session.store.update({prompt.field: value})
    errors = session.navigator.validate_current()
    if prompt.field in errors:
        await save_session(state, session)
        await message.answer(errors[prompt.field])
        await message.answer(prompt.message)
        return False
    return True

async def process_entry(message: Message, state: FSMContext, session: WizardSession, prompt: FieldPrompt) -> None:
    """Добавление записи в список (школа, опыт, язык)."""
    parser = ENTRY_PARSERS[prompt.field]
    try:
        entry = parser(message.text or "")
        entries: List[Dict[str, Any]] = list(session.store.get().get(prompt.field) or [])
        entries.append(entry.model_dump())
        validate_list_length(entries, max_length=MAX_ENTRIES)
    except ValueError as e:
        await message.answer(Messages.Common.ENTRY_INVALID.format(error=str(e)))
        await message.answer(prompt.message)
        return
    session.store.update({prompt.field: entries})
    await save_session(state, session)
    name = format_value(prompt.field, [entries[-1]])
    await message.answer(Messages.Common.ENTRY_ADDED.format(name=name), reply_markup=get_confirmation_keyboard(step=prompt.field))
    await state.set_state(WizardFSM.confirm_action)

async def process_photo_upload(message: Message, session: WizardSession) -> Optional[str]:
    """Загрузка профильного фото в хранилище. Возвращает путь объекта."""
    photo = message.photo[-1]
    try:
        file_info = await message.bot.get_file(photo.file_id)
        file_data = await message.bot.download_file(file_info.file_path)
        extension = (file_info.file_path or "photo.jpg").split('.')[-1].lower()
        content_type = 'image/png' if extension == 'png' else 'image/jpeg'
        path = f"{message.from_user.id}/{uuid4().hex}.{extension}"
        return await backend_api_client.upload_file(PROFILE_IMAGE_BUCKET, path, file_data.read(), content_type)
    except (APIRequestError, TelegramAPIError) as e:
        logger.error(f"Profile image upload failed for user {message.from_user.id}: {e}")
        await message.answer(Messages.Common.UPLOAD_ERROR)
        return None
