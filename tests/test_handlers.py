import asyncio
import io
from datetime import date
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from aiogram.exceptions import TelegramBadRequest
from aiogram.methods import GetFile

from app.core.messages import Messages
from app.handlers import common, cv_wizard, job_wizard, wizard, wizard_processors
from app.keyboards.inline import ChoiceCallback, ConfirmationCallback, NavCallback, RemoveEntryCallback
from app.services.api_client import APIHTTPError
from app.states.wizard import WizardFSM
from app.wizard import session as session_module
from app.wizard.debounce import DebouncedWriter
from app.wizard.derived import DERIVED_MARKER, derive_augmentations
from app.wizard.state import FormState
from conftest import FakeCallback, FakeMessage, USER_ID

pytestmark = pytest.mark.usefixtures("drafts")


@pytest.fixture
def current_cv_data(cv_data):
    """Форма резюме с годами относительно текущей даты."""
    year = date.today().year
    cv_data.update(startjahr=year - 1, voraussichtliches_ende=year + 1)
    return cv_data


@pytest.fixture
def backend(monkeypatch):
    fake = SimpleNamespace(
        get_profile_by_telegram_id=AsyncMock(),
        save_cv_profile=AsyncMock(return_value={"id": "p1"}),
        update_profile_layout=AsyncMock(return_value=True),
        suggest_skills=AsyncMock(return_value=[]),
        get_company_by_owner=AsyncMock(return_value={"id": "c1", "industry": "Handwerk"}),
        create_job_post=AsyncMock(return_value={"id": "j1"}),
        suggest_salary=AsyncMock(return_value={}),
        generate_job_description=AsyncMock(return_value={}),
        upload_file=AsyncMock(return_value="profile-images/42/avatar.jpg"),
    )
    for module in (cv_wizard, job_wizard, wizard_processors):
        monkeypatch.setattr(module, "backend_api_client", fake)
    return fake


async def _prepare(state, form_data, step, fsm_state=WizardFSM.reviewing_step, wizard_name="cv",
                   layout_edit_mode=False, **extra):
    form_state = FormState(current_step=step, form_data=form_data, layout_edit_mode=layout_edit_mode)
    await state.set_state(fsm_state)
    await state.update_data(wizard=wizard_name, form_state=form_state.model_dump(mode="json"), **extra)


async def _form_state(state) -> FormState:
    return FormState.model_validate((await state.get_data())["form_state"])


class TestCVWizard:
    def test_cv_command_starts_with_first_prompt(self, fsm_state) -> None:
        message = FakeMessage("/cv")

        async def scenario():
            await cv_wizard.cmd_cv(message, fsm_state)
            return await fsm_state.get_state(), await fsm_state.get_data()

        current_state, data = asyncio.run(scenario())
        assert message.answers == [
            Messages.CV.STARTED,
            "<b>Schritt 1 von 7: Branche & Status</b>\n14% abgeschlossen",
            Messages.CV.ENTER_BRANCHE,
        ]
        assert current_state == WizardFSM.choosing_option.state
        assert data["current_field"] == "branche"

    def test_choices_fill_step_and_show_summary(self, fsm_state, drafts) -> None:
        async def scenario():
            await cv_wizard.cmd_cv(FakeMessage("/cv"), fsm_state)
            await wizard.handle_choice(FakeCallback(), ChoiceCallback(field="branche", value="it"), fsm_state)
            callback = FakeCallback()
            await wizard.handle_choice(callback, ChoiceCallback(field="status", value="azubi"), fsm_state)
            await asyncio.sleep(0.01)
            return callback, await fsm_state.get_state(), await _form_state(fsm_state)

        callback, current_state, form_state = asyncio.run(scenario())
        assert current_state == WizardFSM.reviewing_step.state
        assert form_state.form_data == {"branche": "it", "status": "azubi"}
        assert "<b>Status:</b> Auszubildende/r" in callback.message.answers[-1]
        assert drafts.load_state("cv_form:42").form_data == {"branche": "it", "status": "azubi"}

    def test_choice_for_other_field_is_rejected(self, fsm_state) -> None:
        callback = FakeCallback()

        async def scenario():
            await _prepare(fsm_state, {}, 1, WizardFSM.choosing_option, current_field="branche")
            await wizard.handle_choice(callback, ChoiceCallback(field="layout", value="1"), fsm_state)

        asyncio.run(scenario())
        callback.answer.assert_awaited_once_with(Messages.Common.INVALID_INPUT, show_alert=True)

    def test_next_is_blocked_with_errors(self, fsm_state) -> None:
        callback = FakeCallback()

        async def scenario():
            await _prepare(fsm_state, {"branche": "it"}, 1)
            await wizard.handle_navigation(callback, NavCallback(action="next"), fsm_state)
            return await _form_state(fsm_state)

        form_state = asyncio.run(scenario())
        assert form_state.current_step == 1
        assert Messages.Validation.REQUIRED.format(label="Status") in callback.message.answers[-1]

    def test_next_moves_to_first_missing_field_and_flushes_draft(self, fsm_state, drafts) -> None:
        callback = FakeCallback()

        async def scenario():
            await _prepare(fsm_state, {"branche": "it", "status": "azubi"}, 1)
            await wizard.handle_navigation(callback, NavCallback(action="next"), fsm_state)
            return await fsm_state.get_state()

        current_state = asyncio.run(scenario())
        assert current_state == WizardFSM.filling_field.state
        assert callback.message.answers[-1] == Messages.CV.ENTER_VORNAME
        assert drafts.load_state("cv_form:42").current_step == 2

    def test_unreachable_step_in_layout_mode(self, fsm_state) -> None:
        callback = FakeCallback()

        async def scenario():
            await _prepare(fsm_state, {"layout": 1}, 5, layout_edit_mode=True)
            await wizard.handle_navigation(callback, NavCallback(action="goto", step=3), fsm_state)
            return await _form_state(fsm_state)

        form_state = asyncio.run(scenario())
        callback.answer.assert_awaited_once_with(Messages.Common.STEP_UNREACHABLE, show_alert=True)
        assert form_state.current_step == 5

    def test_invalid_text_is_reported_and_field_asked_again(self, fsm_state) -> None:
        invalid, valid = FakeMessage("123"), FakeMessage("50667")

        async def scenario():
            await _prepare(fsm_state, {"status": "azubi"}, 2, WizardFSM.filling_field, current_field="plz")
            await wizard.handle_field_text(invalid, fsm_state)
            field_after_invalid = (await fsm_state.get_data())["current_field"]
            await wizard.handle_field_text(valid, fsm_state)
            return field_after_invalid, await fsm_state.get_data()

        field_after_invalid, data = asyncio.run(scenario())
        assert invalid.answers == [Messages.Validation.INVALID_PLZ, Messages.CV.ENTER_PLZ]
        assert field_after_invalid == "plz"
        assert valid.answers == [Messages.CV.ENTER_ORT]
        assert data["current_field"] == "ort"
        assert data["form_state"]["form_data"]["plz"] == "50667"

    def test_corrected_start_year_does_not_block_education_step(self, fsm_state, current_cv_data) -> None:
        year = date.today().year
        for field in ("startjahr", "voraussichtliches_ende", "berufserfahrung"):
            current_cv_data.pop(field)
        typo, corrected = FakeMessage("zwanzig"), FakeMessage(str(year - 1))
        callback = FakeCallback()

        async def scenario():
            await _prepare(fsm_state, current_cv_data, 2, WizardFSM.filling_field, current_field="startjahr")
            await wizard.handle_field_text(typo, fsm_state)
            after_typo = (await _form_state(fsm_state)).form_data
            await wizard.handle_field_text(corrected, fsm_state)
            form_data = (await _form_state(fsm_state)).form_data
            await _prepare(fsm_state, form_data, 4)
            await wizard.handle_navigation(callback, NavCallback(action="next"), fsm_state)
            return after_typo, form_data, await _form_state(fsm_state)

        after_typo, form_data, form_state = asyncio.run(scenario())
        assert typo.answers[-1] == Messages.CV.ENTER_STARTJAHR
        assert "berufserfahrung" not in after_typo
        assert [entry["zeitraum_von"] for entry in form_data["berufserfahrung"]] == [year - 1]
        assert form_data["berufserfahrung"][0][DERIVED_MARKER] == "ausbildung"
        assert form_state.current_step == 5

    def test_required_field_cannot_be_skipped(self, fsm_state) -> None:
        message = FakeMessage("/skip")

        async def scenario():
            await _prepare(fsm_state, {}, 2, WizardFSM.filling_field, current_field="vorname")
            await wizard.handle_skip(message, fsm_state)

        asyncio.run(scenario())
        assert message.answers == [Messages.Common.INVALID_INPUT, Messages.CV.ENTER_VORNAME]

    def test_school_entry_flow(self, fsm_state) -> None:
        entry_message, skip_message = FakeMessage("schulform: Realschule\nschule: Goethe-Schule\nbis: 2021"), FakeMessage("/skip")
        callback = FakeCallback()

        async def scenario():
            await _prepare(fsm_state, {}, 4, WizardFSM.adding_entry, current_field="schulbildung")
            await wizard.handle_entry(entry_message, fsm_state)
            after_entry = await fsm_state.get_state()
            await wizard.handle_add_another(callback, ConfirmationCallback(action="no", step="schulbildung"), fsm_state)
            await wizard.handle_skip(skip_message, fsm_state)
            return after_entry, await fsm_state.get_state(), await _form_state(fsm_state)

        after_entry, current_state, form_state = asyncio.run(scenario())
        assert after_entry == WizardFSM.confirm_action.state
        assert entry_message.answers[0] == Messages.Common.ENTRY_ADDED.format(name="Realschule, Goethe-Schule (bis 2021)")
        assert callback.message.answers == [Messages.CV.ENTER_BERUFSERFAHRUNG]
        assert skip_message.answers[0] == Messages.Common.SKIPPED
        assert current_state == WizardFSM.reviewing_step.state
        assert form_state.form_data["schulbildung"][0]["name"] == "Goethe-Schule"

    def test_invalid_entry_is_rejected(self, fsm_state) -> None:
        message = FakeMessage("irgendwas")

        async def scenario():
            await _prepare(fsm_state, {}, 4, WizardFSM.adding_entry, current_field="schulbildung")
            await wizard.handle_entry(message, fsm_state)
            return await _form_state(fsm_state), await fsm_state.get_state()

        form_state, current_state = asyncio.run(scenario())
        assert message.answers[0].startswith("❌ Eintrag ungültig")
        assert "schulbildung" not in form_state.form_data
        assert current_state == WizardFSM.adding_entry.state

    def test_entry_can_be_removed_from_summary(self, fsm_state, current_cv_data) -> None:
        primary = {"schulform": "Grundschule", "name": "Astrid-Lindgren-Schule",
                   "zeitraum_von": 2009, "zeitraum_bis": 2015, "aktuell": False}
        current_cv_data["schulbildung"].insert(0, primary)
        current_cv_data.update(derive_augmentations(current_cv_data))
        callback, derived_callback = FakeCallback(), FakeCallback()

        async def scenario():
            await _prepare(fsm_state, current_cv_data, 4)
            await wizard.handle_remove_entry(callback, RemoveEntryCallback(field="schulbildung", index=0), fsm_state)
            await wizard.handle_remove_entry(
                derived_callback, RemoveEntryCallback(field="berufserfahrung", index=0), fsm_state
            )
            return await _form_state(fsm_state), await fsm_state.get_state()

        form_state, current_state = asyncio.run(scenario())
        assert [entry["name"] for entry in form_state.form_data["schulbildung"]] == ["Goethe-Schule"]
        assert len(form_state.form_data["berufserfahrung"]) == 1
        assert callback.message.answers[0] == Messages.Common.ENTRY_REMOVED.format(
            name="Grundschule, Astrid-Lindgren-Schule (2009–2015)"
        )
        assert current_state == WizardFSM.reviewing_step.state
        keyboard = callback.message.answer.call_args.kwargs["reply_markup"]
        remove_buttons = [
            button.callback_data for row in keyboard.inline_keyboard for button in row
            if button.callback_data.startswith("rm_entry")
        ]
        assert remove_buttons == [RemoveEntryCallback(field="schulbildung", index=0).pack()]
        derived_callback.answer.assert_awaited_once_with(Messages.Common.INVALID_INPUT, show_alert=True)

    def test_photo_upload_stores_object_path(self, fsm_state, backend) -> None:
        message = FakeMessage(photo=[SimpleNamespace(file_id="small"), SimpleNamespace(file_id="large")])
        message.bot.get_file.return_value = SimpleNamespace(file_path="photos/file_1.jpg")
        message.bot.download_file.return_value = io.BytesIO(b"jpeg-bytes")

        async def scenario():
            await _prepare(fsm_state, {"status": "azubi"}, 2, WizardFSM.uploading_photo, current_field="profilbild")
            await wizard.handle_photo(message, fsm_state)
            return await _form_state(fsm_state), await fsm_state.get_data()

        form_state, data = asyncio.run(scenario())
        message.bot.get_file.assert_awaited_once_with("large")
        bucket, path, payload, content_type = backend.upload_file.await_args.args
        assert (bucket, payload, content_type) == ("profile-images", b"jpeg-bytes", "image/jpeg")
        assert path.startswith("42/") and path.endswith(".jpg")
        assert form_state.form_data["profilbild"] == "profile-images/42/avatar.jpg"
        assert data["current_field"] == "has_drivers_license"

    def test_failed_upload_keeps_waiting_for_photo(self, fsm_state, backend) -> None:
        backend.upload_file.side_effect = APIHTTPError(413, "too large")
        message = FakeMessage(photo=[SimpleNamespace(file_id="large")])
        message.bot.get_file.return_value = SimpleNamespace(file_path="photos/file_1.jpg")
        message.bot.download_file.return_value = io.BytesIO(b"jpeg-bytes")

        async def scenario():
            await _prepare(fsm_state, {}, 2, WizardFSM.uploading_photo, current_field="profilbild")
            await wizard.handle_photo(message, fsm_state)
            return await fsm_state.get_state()

        assert asyncio.run(scenario()) == WizardFSM.uploading_photo.state
        assert message.answers == [Messages.Common.UPLOAD_ERROR]

    def test_telegram_download_error_keeps_waiting_for_photo(self, fsm_state, backend) -> None:
        message = FakeMessage(photo=[SimpleNamespace(file_id="large")])
        message.bot.get_file.side_effect = TelegramBadRequest(
            method=GetFile(file_id="large"), message="Bad Request: file is too big"
        )

        async def scenario():
            await _prepare(fsm_state, {}, 2, WizardFSM.uploading_photo, current_field="profilbild")
            await wizard.handle_photo(message, fsm_state)
            return await fsm_state.get_state(), await _form_state(fsm_state)

        current_state, form_state = asyncio.run(scenario())
        assert current_state == WizardFSM.uploading_photo.state
        assert message.answers == [Messages.Common.UPLOAD_ERROR]
        assert "profilbild" not in form_state.form_data
        backend.upload_file.assert_not_awaited()

    def test_suggested_skills_are_merged(self, fsm_state, backend) -> None:
        backend.suggest_skills.return_value = ["sägen", "Fräsen"]
        callback = FakeCallback()

        async def scenario():
            await _prepare(fsm_state, {"faehigkeiten": ["Sägen"], "branche": "handwerk"}, 3)
            await cv_wizard.handle_suggest_skills(callback, fsm_state)
            return await _form_state(fsm_state)

        form_state = asyncio.run(scenario())
        assert form_state.form_data["faehigkeiten"] == ["Sägen", "Fräsen"]
        assert Messages.CV.SKILLS_SUGGESTED.format(count=1) in callback.message.answers

    def test_submit_saves_profile_and_clears_draft(self, fsm_state, backend, drafts, current_cv_data) -> None:
        callback = FakeCallback()
        drafts.set("cv_form:42", FormState(current_step=7, form_data=current_cv_data).model_dump(mode="json"))

        async def scenario():
            await _prepare(fsm_state, current_cv_data, 7)
            await cv_wizard.handle_submit_cv(callback, fsm_state)
            return await fsm_state.get_state()

        assert asyncio.run(scenario()) is None
        backend.save_cv_profile.assert_awaited_once_with(USER_ID, current_cv_data)
        assert callback.message.answers == [Messages.CV.SUBMIT_OK]
        assert drafts.get("cv_form:42") is None

    def test_submit_requires_consent(self, fsm_state, backend, current_cv_data) -> None:
        current_cv_data["einwilligung"] = False
        callback = FakeCallback()

        async def scenario():
            await _prepare(fsm_state, current_cv_data, 7)
            await cv_wizard.handle_submit_cv(callback, fsm_state)

        asyncio.run(scenario())
        backend.save_cv_profile.assert_not_awaited()
        assert Messages.Validation.CONSENT_REQUIRED in callback.message.answers[-1]

    def test_submit_error_keeps_wizard_open(self, fsm_state, backend, current_cv_data) -> None:
        backend.save_cv_profile.side_effect = APIHTTPError(500, "boom")
        callback = FakeCallback()

        async def scenario():
            await _prepare(fsm_state, current_cv_data, 7)
            await cv_wizard.handle_submit_cv(callback, fsm_state)
            return await fsm_state.get_state(), await _form_state(fsm_state)

        current_state, form_state = asyncio.run(scenario())
        assert callback.message.answers == [Messages.CV.SUBMIT_ERROR]
        assert current_state == WizardFSM.reviewing_step.state
        assert form_state.current_step == 7

    def test_layout_command_enters_layout_edit(self, fsm_state, backend, cv_data) -> None:
        backend.get_profile_by_telegram_id.return_value = {"id": "p1", "telegram_id": USER_ID, **cv_data}
        message = FakeMessage("/layout")

        async def scenario():
            await cv_wizard.cmd_layout(message, fsm_state)
            return await fsm_state.get_state(), await _form_state(fsm_state)

        current_state, form_state = asyncio.run(scenario())
        assert message.answers == [
            Messages.CV.LAYOUT_EDIT_STARTED,
            "<b>Schritt 1 von 2: Layout</b>\n0% abgeschlossen",
            Messages.CV.ENTER_LAYOUT,
        ]
        assert current_state == WizardFSM.choosing_option.state
        assert form_state.layout_edit_mode is True
        assert form_state.current_step == 5

    def test_layout_command_without_profile(self, fsm_state, backend) -> None:
        backend.get_profile_by_telegram_id.return_value = None
        message = FakeMessage("/layout")
        asyncio.run(cv_wizard.cmd_layout(message, fsm_state))
        assert message.answers == [Messages.CV.PROFILE_NOT_FOUND]

    def test_save_layout_updates_profile(self, fsm_state, backend, drafts) -> None:
        draft = FormState(current_step=3, form_data={"vorname": "Anna"}).model_dump(mode="json")
        drafts.set("cv_form:42", draft)
        callback = FakeCallback()

        async def scenario():
            await _prepare(fsm_state, {"layout": 4}, 6, layout_edit_mode=True)
            await cv_wizard.handle_save_layout(callback, fsm_state)
            return await fsm_state.get_state()

        assert asyncio.run(scenario()) is None
        backend.update_profile_layout.assert_awaited_once_with(USER_ID, 4)
        assert callback.message.answers == [Messages.CV.LAYOUT_SAVED]
        assert drafts.get("cv_form:42") == draft

    def test_layout_edit_leaves_cv_draft_untouched(self, fsm_state, backend, drafts, cv_data) -> None:
        drafts.set("cv_form:42", FormState(current_step=3, form_data={"vorname": "InProgress"}).model_dump(mode="json"))
        backend.get_profile_by_telegram_id.return_value = {
            "id": "p1", "telegram_id": USER_ID, **cv_data, "vorname": "Old", "layout": 1
        }
        resume_message = FakeMessage("/cv")

        async def scenario():
            await cv_wizard.cmd_layout(FakeMessage("/layout"), fsm_state)
            await wizard.handle_choice(FakeCallback(), ChoiceCallback(field="layout", value="4"), fsm_state)
            await wizard.handle_navigation(FakeCallback(), NavCallback(action="next"), fsm_state)
            await cv_wizard.handle_save_layout(FakeCallback(), fsm_state)
            await asyncio.sleep(0.01)
            await cv_wizard.cmd_cv(resume_message, fsm_state)
            return await _form_state(fsm_state)

        form_state = asyncio.run(scenario())
        backend.update_profile_layout.assert_awaited_once_with(USER_ID, 4)
        saved = drafts.load_state("cv_form:42")
        assert (saved.current_step, saved.form_data) == (3, {"vorname": "InProgress"})
        assert resume_message.answers[0] == Messages.CV.RESUMED
        assert form_state.form_data["vorname"] == "InProgress"
        assert form_state.layout_edit_mode is False

    def test_save_layout_failure_stays_in_layout_mode(self, fsm_state, backend) -> None:
        backend.update_profile_layout.return_value = False
        callback = FakeCallback()

        async def scenario():
            await _prepare(fsm_state, {"layout": 4}, 6, layout_edit_mode=True)
            await cv_wizard.handle_save_layout(callback, fsm_state)
            return await _form_state(fsm_state)

        form_state = asyncio.run(scenario())
        assert callback.message.answers == [Messages.CV.LAYOUT_SAVE_ERROR]
        assert form_state.layout_edit_mode is True

    def test_cancel_flushes_draft_and_cv_resumes_it(self, fsm_state, drafts, monkeypatch) -> None:
        monkeypatch.setattr(session_module, "draft_writer", DebouncedWriter(60, drafts.set))
        cancel_message, resume_message = FakeMessage("/cancel"), FakeMessage("/cv")

        async def scenario():
            await cv_wizard.cmd_cv(FakeMessage("/cv"), fsm_state)
            await wizard.handle_choice(FakeCallback(), ChoiceCallback(field="branche", value="bau"), fsm_state)
            await common.cmd_cancel(cancel_message, fsm_state)
            cancelled_state = await fsm_state.get_state()
            await cv_wizard.cmd_cv(resume_message, fsm_state)
            return cancelled_state

        assert asyncio.run(scenario()) is None
        assert cancel_message.answers == [Messages.Common.CANCELLED]
        assert drafts.load_state("cv_form:42").form_data == {"branche": "bau"}
        assert resume_message.answers[0] == Messages.CV.RESUMED
        assert resume_message.answers[-1] == Messages.CV.ENTER_STATUS


class TestJobWizard:
    def test_job_command_requires_company(self, fsm_state, backend) -> None:
        backend.get_company_by_owner.return_value = None
        message = FakeMessage("/job")
        asyncio.run(job_wizard.cmd_job(message, fsm_state))
        assert message.answers == [Messages.Job.COMPANY_NOT_FOUND]

    def test_job_command_starts_wizard(self, fsm_state, backend) -> None:
        message = FakeMessage("/job")

        async def scenario():
            await job_wizard.cmd_job(message, fsm_state)
            return await fsm_state.get_data()

        data = asyncio.run(scenario())
        assert message.answers[0] == Messages.Job.STARTED
        assert message.answers[-1] == Messages.Job.ENTER_TITLE
        assert data["company_id"] == "c1"
        assert data["wizard"] == "job"

    def test_publish_validates_all_steps(self, fsm_state, backend, job_data) -> None:
        job_data.pop("tasks_md")
        job_data["start_date"] = None
        callback = FakeCallback()

        async def scenario():
            await _prepare(fsm_state, job_data, 5, wizard_name="job", company_id="c1")
            await job_wizard.handle_publish(callback, fsm_state)

        asyncio.run(scenario())
        backend.create_job_post.assert_not_awaited()
        assert Messages.Validation.REQUIRED.format(label="Aufgaben") in callback.message.answers[-1]

    def test_publish_creates_active_post(self, fsm_state, backend, job_data) -> None:
        job_data["start_date"] = None
        callback = FakeCallback()

        async def scenario():
            await _prepare(fsm_state, job_data, 5, wizard_name="job", company_id="c1")
            await job_wizard.handle_publish(callback, fsm_state)
            return await fsm_state.get_state()

        assert asyncio.run(scenario()) is None
        backend.create_job_post.assert_awaited_once_with("c1", job_data, publish=True)
        assert callback.message.answers == [Messages.Job.PUBLISH_OK]

    def test_draft_only_needs_basics(self, fsm_state, backend) -> None:
        form_data = {"title": "Koch", "city": "Berlin", "employment_type": "full_time"}
        callback = FakeCallback()

        async def scenario():
            await _prepare(fsm_state, form_data, 5, wizard_name="job", company_id="c1")
            await job_wizard.handle_save_draft(callback, fsm_state)

        asyncio.run(scenario())
        backend.create_job_post.assert_awaited_once_with("c1", form_data, publish=False)
        assert callback.message.answers == [Messages.Job.DRAFT_OK]

    def test_salary_suggestion_is_applied(self, fsm_state, backend) -> None:
        backend.suggest_salary.return_value = {"salary_min": 900, "salary_max": 1100}
        callback = FakeCallback()

        async def scenario():
            await _prepare(fsm_state, {"title": "Koch"}, 4, wizard_name="job", company_id="c1")
            await job_wizard.handle_suggest_salary(callback, fsm_state)
            return await _form_state(fsm_state)

        form_state = asyncio.run(scenario())
        assert form_state.form_data["salary_min"] == 900
        assert form_state.form_data["salary_max"] == 1100
        assert Messages.Job.SALARY_SUGGESTED.format(salary_min=900, salary_max=1100) in callback.message.answers

    def test_description_generation_failure_is_reported(self, fsm_state, backend) -> None:
        backend.generate_job_description.side_effect = APIHTTPError(502, "bad gateway")
        callback = FakeCallback()

        async def scenario():
            await _prepare(fsm_state, {"title": "Koch"}, 3, wizard_name="job", company_id="c1", industry="Gastro")
            await job_wizard.handle_generate_description(callback, fsm_state)

        asyncio.run(scenario())
        assert callback.message.answers == [Messages.Common.AI_RUNNING, Messages.Common.AI_ERROR]
