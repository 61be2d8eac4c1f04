from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton
from aiogram.filters.callback_data import CallbackData
from typing import Any, Dict, Literal, Sequence, Tuple

class RoleCallback(CallbackData, prefix="role"):
    """Callback для выбора роли."""
    role_name: str

class ChoiceCallback(CallbackData, prefix="choice"):
    """Callback для выбора значения поля."""
    field: str
    value: str

class NavCallback(CallbackData, prefix="nav"):
    """Callback навигации по шагам."""
    action: Literal["next", "back", "goto", "edit"]
    step: int = 0

class WizardAction(CallbackData, prefix="wiz_action"):
    """Callback для действий шага (ИИ, отправка, публикация)."""
    action: str

class ConfirmationCallback(CallbackData, prefix="confirm"):
    """Callback для подтверждения действий."""
    action: Literal["yes", "no"]
    step: str

class RemoveEntryCallback(CallbackData, prefix="rm_entry"):
    """Callback для удаления записи списка."""
    field: str
    index: int

MAX_BUTTON_LABEL = 40

STEP_ACTIONS: Dict[str, str] = {
    "suggest_skills": "✨ Fähigkeiten vorschlagen",
    "submit_cv": "✅ Lebenslauf speichern",
    "save_layout": "💾 Layout speichern",
    "generate_description": "✨ Beschreibung generieren",
    "suggest_salary": "✨ Gehalt vorschlagen",
    "save_draft": "💾 Als Entwurf speichern",
    "publish": "🚀 Veröffentlichen",
}

def get_role_selection_keyboard() -> InlineKeyboardMarkup:
    """Клавиатура выбора роли."""
    keyboard = [
        [
            InlineKeyboardButton(
                text="📄 Lebenslauf erstellen",
                callback_data=RoleCallback(role_name="job_seeker").pack(),
            )
        ],
        [
            InlineKeyboardButton(
                text="🏢 Stellenanzeige erstellen",
                callback_data=RoleCallback(role_name="company").pack(),
            )
        ],
    ]
    return InlineKeyboardMarkup(inline_keyboard=keyboard)

def get_choice_keyboard(field: str, choices: Dict[Any, str], columns: int = 2) -> InlineKeyboardMarkup:
    """Клавиатура вариантов значения поля."""
    buttons = [
        InlineKeyboardButton(text=label, callback_data=ChoiceCallback(field=field, value=str(value)).pack())
        for value, label in choices.items()
    ]
    keyboard = [buttons[i:i + columns] for i in range(0, len(buttons), columns)]
    return InlineKeyboardMarkup(inline_keyboard=keyboard)

def get_navigation_keyboard(
    reachable: Sequence[int],
    current: int,
    is_first: bool,
    is_last: bool,
    actions: Sequence[str] = (),
    editable: bool = True,
    removable: Sequence[Tuple[str, int, str]] = (),
) -> InlineKeyboardMarkup:
    """Клавиатура шага: индикатор прогресса, удаление записей, действия, назад/далее."""
    progress_row = [
        InlineKeyboardButton(
            text=f"• {step} •" if step == current else str(step),
            callback_data=NavCallback(action="goto", step=step).pack(),
        )
        for step in reachable
    ]
    keyboard = [progress_row]
    if editable:
        keyboard.append([InlineKeyboardButton(text="✏️ Bearbeiten", callback_data=NavCallback(action="edit").pack())])
    for field, index, label in removable:
        text = label if len(label) <= MAX_BUTTON_LABEL else f"{label[:MAX_BUTTON_LABEL]}..."
        keyboard.append([InlineKeyboardButton(text=f"🗑 {text}", callback_data=RemoveEntryCallback(field=field, index=index).pack())])
    for action in actions:
        keyboard.append([InlineKeyboardButton(text=STEP_ACTIONS[action], callback_data=WizardAction(action=action).pack())])
    nav_row = []
    if not is_first:
        nav_row.append(InlineKeyboardButton(text="⬅️ Zurück", callback_data=NavCallback(action="back").pack()))
    if not is_last:
        nav_row.append(InlineKeyboardButton(text="Weiter ➡️", callback_data=NavCallback(action="next").pack()))
    if nav_row:
        keyboard.append(nav_row)
    return InlineKeyboardMarkup(inline_keyboard=keyboard)

def get_confirmation_keyboard(step: str) -> InlineKeyboardMarkup:
    """Клавиатура подтверждения действия."""
    buttons = [
        [
            InlineKeyboardButton(text="✅ Ja", callback_data=ConfirmationCallback(action="yes", step=step).pack()),
            InlineKeyboardButton(text="❌ Nein, weiter", callback_data=ConfirmationCallback(action="no", step=step).pack())
        ]
    ]
    return InlineKeyboardMarkup(inline_keyboard=buttons)

def step_actions(wizard: str, step: int, layout_edit_mode: bool = False) -> Tuple[str, ...]:
    """Действия, доступные на шаге."""
    if wizard == "cv":
        if layout_edit_mode:
            return ("save_layout",) if step == 6 else ()
        return {3: ("suggest_skills",), 7: ("submit_cv",)}.get(step, ())
    return {3: ("generate_description",), 4: ("suggest_salary",), 5: ("save_draft", "publish")}.get(step, ())
