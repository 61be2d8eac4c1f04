from aiogram import Router, F
from aiogram.types import Message, CallbackQuery
from aiogram.filters import Command, StateFilter
from aiogram.fsm.context import FSMContext
from typing import Any, Dict, Optional
from app.states.wizard import WizardFSM
from app.keyboards.inline import WizardAction
from app.core.messages import Messages
from app.handlers.wizard_processors import enter_step, show_summary
from app.services.api_client import APIRequestError, backend_api_client
from app.wizard.session import WizardSession, load_session, save_session
from app.wizard.state import FormState
import logging

router = Router()
logger = logging.getLogger(__name__)

async def start_job_wizard(message: Message, state: FSMContext, user_id: int) -> None:
    """Запуск мастера вакансии для компании пользователя."""
    try:
        company = await backend_api_client.get_company_by_owner(user_id)
    except APIRequestError as e:
        logger.error(f"Failed to load company for user {user_id}: {e}")
        await message.answer(Messages.Common.INTERNAL_ERROR)
        return
    if not company:
        await message.answer(Messages.Job.COMPANY_NOT_FOUND)
        return
    session = WizardSession("job", FormState())
    await save_session(state, session, company_id=company["id"], industry=company.get("industry"))
    logger.info(f"User {user_id} started job wizard for company {company['id']}")
    await message.answer(Messages.Job.STARTED)
    await enter_step(message, state, session)

async def _get_job_session(callback: CallbackQuery, state: FSMContext) -> Optional[WizardSession]:
    session = await load_session(state, callback.from_user.id)
    if session is None or session.wizard != "job":
        await callback.answer(Messages.Common.NO_ACTIVE_WIZARD, show_alert=True)
        return None
    await callback.answer()
    return session

@router.message(Command("job"))
async def cmd_job(message: Message, state: FSMContext) -> None:
    """Обработка команды /job."""
    await start_job_wizard(message, state, message.from_user.id)

@router.callback_query(WizardAction.filter(F.action == "generate_description"), StateFilter(WizardFSM))
async def handle_generate_description(callback: CallbackQuery, state: FSMContext) -> None:
    """Генерация текстов вакансии ИИ (шаг 3)."""
    session = await _get_job_session(callback, state)
    if session is None:
        return
    data: Dict[str, Any] = await state.get_data()
    await callback.message.answer(Messages.Common.AI_RUNNING)
    try:
        generated = await backend_api_client.generate_job_description(session.store.get(), industry=data.get("industry"))
    except APIRequestError as e:
        logger.error(f"Job description generation failed for user {callback.from_user.id}: {e}")
        await callback.message.answer(Messages.Common.AI_ERROR)
        return
    if not generated:
        await callback.message.answer(Messages.Common.AI_ERROR)
        return
    session.store.update(generated)
    await callback.message.answer(Messages.Job.DESCRIPTION_GENERATED)
    await show_summary(callback.message, state, session)

@router.callback_query(WizardAction.filter(F.action == "suggest_salary"), StateFilter(WizardFSM))
async def handle_suggest_salary(callback: CallbackQuery, state: FSMContext) -> None:
    """Подсказка диапазона зарплаты ИИ (шаг 4)."""
    session = await _get_job_session(callback, state)
    if session is None:
        return
    await callback.message.answer(Messages.Common.AI_RUNNING)
    try:
        suggestion = await backend_api_client.suggest_salary(session.store.get())
    except APIRequestError as e:
        logger.error(f"Salary suggestion failed for user {callback.from_user.id}: {e}")
        await callback.message.answer(Messages.Common.AI_ERROR)
        return
    if len(suggestion) != 2:
        await callback.message.answer(Messages.Common.AI_ERROR)
        return
    session.store.update(suggestion)
    await callback.message.answer(Messages.Job.SALARY_SUGGESTED.format(**suggestion))
    await show_summary(callback.message, state, session)

async def _create_job_post(callback: CallbackQuery, state: FSMContext, publish: bool) -> None:
    session = await _get_job_session(callback, state)
    if session is None:
        return
    form_data = session.store.get()
    if publish:
        errors = session.navigator.validate_all()
    else:
        errors = session.definition.validate_step(form_data, 1, None)
    if errors:
        logger.info(f"Job post blocked for user {callback.from_user.id} (publish={publish}): {sorted(errors)}")
        session.navigator.errors = errors
        await show_summary(callback.message, state, session)
        return
    data: Dict[str, Any] = await state.get_data()
    try:
        await backend_api_client.create_job_post(data["company_id"], form_data, publish=publish)
    except APIRequestError as e:
        logger.error(f"Failed to create job post for user {callback.from_user.id}: {e}")
        await callback.message.answer(Messages.Job.PUBLISH_ERROR)
        return
    await state.clear()
    await callback.message.answer(Messages.Job.PUBLISH_OK if publish else Messages.Job.DRAFT_OK)

@router.callback_query(WizardAction.filter(F.action == "publish"), StateFilter(WizardFSM))
async def handle_publish(callback: CallbackQuery, state: FSMContext) -> None:
    """Публикация вакансии (шаг 5)."""
    await _create_job_post(callback, state, publish=True)

@router.callback_query(WizardAction.filter(F.action == "save_draft"), StateFilter(WizardFSM))
async def handle_save_draft(callback: CallbackQuery, state: FSMContext) -> None:
    """Сохранение вакансии как черновика (шаг 5)."""
    await _create_job_post(callback, state, publish=False)
