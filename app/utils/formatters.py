import html
import re
from typing import Any, Dict, List, Mapping

from app.core.choices import BRANCHEN, EMPLOYMENT_TYPES, LAYOUTS, STATUSES, WORK_MODES, label_for
from app.core.messages import Messages
from app.utils.validators import is_truthy, parse_date, parse_int

CHOICE_LABELS: Dict[str, Mapping[Any, str]] = {
    "branche": BRANCHEN,
    "status": STATUSES,
    "layout": LAYOUTS,
    "employment_type": EMPLOYMENT_TYPES,
    "work_mode": WORK_MODES,
}

BOOL_FIELDS = {"has_drivers_license", "einwilligung", "is_public"}

def clean_ai_markdown(text: str) -> str:
    """Очистка markdown из ответа ИИ до простого текста."""
    if not text:
        return ""
    text = text.strip()
    text = re.sub(r"^#{1,6}\s+(.+)$", r"\1", text, flags=re.MULTILINE)
    text = re.sub(r"\*\*(.+?)\*\*", r"\1", text)
    text = re.sub(r"^[-*]\s+", "• ", text, flags=re.MULTILINE)
    return text.strip()

def format_step_header(position: int, total: int, title: str, progress: float) -> str:
    """Заголовок шага с прогрессом."""
    return Messages.Common.STEP_HEADER.format(step=position, total=total, title=title, progress=round(progress))

def entry_text(entry: Any) -> str:
    """Краткое описание записи списка (без HTML)."""
    if not isinstance(entry, dict):
        return str(entry)
    if "titel" in entry:
        end = entry.get("zeitraum_bis") or "heute"
        return f"{entry.get('titel')} – {entry.get('unternehmen')} ({entry.get('zeitraum_von')}–{end})"
    if "schulform" in entry:
        start = f"{entry['zeitraum_von']}–" if entry.get("zeitraum_von") else "bis "
        return f"{entry.get('schulform')}, {entry.get('name')} ({start}{entry.get('zeitraum_bis')})"
    if "sprache" in entry:
        return f"{entry.get('sprache')} ({entry.get('niveau')})"
    if "language" in entry:
        return f"{entry.get('language')} ({entry.get('level')})"
    return str(entry.get("name", entry))

def format_value(field: str, value: Any) -> str:
    """Значение поля для отображения (HTML-экранированное)."""
    if field in BOOL_FIELDS:
        return "Ja" if is_truthy(value) else "Nein"
    if value in (None, "", []):
        return Messages.Common.NOT_SET
    if field == "profilbild":
        return "✅"
    if field in CHOICE_LABELS:
        key = parse_int(value) if field == "layout" else value
        return html.escape(str(CHOICE_LABELS[field].get(key, value)))
    if isinstance(value, list):
        return html.escape(", ".join(entry_text(item) for item in value))
    birth = parse_date(value) if field in ("geburtsdatum", "start_date") else None
    if birth:
        return birth.strftime("%d.%m.%Y")
    return html.escape(str(value))

def format_step_summary(fields: List[str], form_data: Mapping[str, Any]) -> str:
    """Сводка заполненных полей шага."""
    return "\n".join(f"<b>{label_for(field)}:</b> {format_value(field, form_data.get(field))}" for field in fields)

def _entries_block(title: str, entries: List[Any]) -> str:
    if not entries:
        return ""
    lines = "\n".join(f"  • {html.escape(entry_text(entry))}" for entry in entries)
    return f"\n<b>{title}:</b>\n{lines}\n"

def format_cv_preview(form_data: Mapping[str, Any]) -> str:
    """Форматирование резюме для предпросмотра."""
    layout = format_value("layout", form_data.get("layout"))
    name = html.escape(f"{form_data.get('vorname', '')} {form_data.get('nachname', '')}".strip())
    text = (
        f"{Messages.CV.PREVIEW_HEADER.format(layout=layout)}\n\n"
        f"<b>👤 {name or Messages.Common.NOT_SET}</b>\n"
        f"<i>{format_value('status', form_data.get('status'))} · {format_value('branche', form_data.get('branche'))}</i>\n\n"
        f"<b>📍 Adresse:</b> {html.escape(str(form_data.get('strasse', '')))} {html.escape(str(form_data.get('hausnummer', '')))}, "
        f"{html.escape(str(form_data.get('plz', '')))} {html.escape(str(form_data.get('ort', '')))}\n"
        f"<b>✉️ E-Mail:</b> {format_value('email', form_data.get('email'))}\n"
    )
    if form_data.get("telefon"):
        text += f"<b>📞 Telefon:</b> {format_value('telefon', form_data.get('telefon'))}\n"
    if form_data.get("geburtsdatum"):
        text += f"<b>🎂 Geburtsdatum:</b> {format_value('geburtsdatum', form_data.get('geburtsdatum'))}\n"
    if is_truthy(form_data.get("has_drivers_license")):
        text += f"<b>🚗 Führerschein:</b> {format_value('driver_license_class', form_data.get('driver_license_class'))}\n"

    if form_data.get("kenntnisse"):
        text += f"\n<b>💡 Kenntnisse:</b>\n<i>{html.escape(str(form_data['kenntnisse']))}</i>\n"
    if form_data.get("motivation"):
        text += f"\n<b>🎯 Motivation:</b>\n<i>{html.escape(str(form_data['motivation']))}</i>\n"
    if form_data.get("faehigkeiten"):
        text += f"\n<b>🛠 Fähigkeiten:</b> {format_value('faehigkeiten', form_data['faehigkeiten'])}\n"
    if form_data.get("sprachen"):
        text += f"<b>🌍 Sprachen:</b> {format_value('sprachen', form_data['sprachen'])}\n"

    text += _entries_block("🏫 Schulbildung", form_data.get("schulbildung") or [])
    text += _entries_block("💼 Berufserfahrung", form_data.get("berufserfahrung") or [])
    return text

def format_job_preview(form_data: Mapping[str, Any]) -> str:
    """Форматирование вакансии для предпросмотра."""
    text = (
        f"<b>🏢 {format_value('title', form_data.get('title'))}</b>\n"
        f"<i>{format_value('employment_type', form_data.get('employment_type'))} · "
        f"{format_value('work_mode', form_data.get('work_mode'))}</i>\n\n"
        f"<b>📍 Standort:</b> {format_value('city', form_data.get('city'))}\n"
        f"<b>📅 Start:</b> {format_value('start_date', form_data.get('start_date')) if form_data.get('start_date') else 'ab sofort'}\n"
    )
    salary_min, salary_max = form_data.get("salary_min"), form_data.get("salary_max")
    if salary_min or salary_max:
        text += f"<b>💶 Gehalt:</b> {salary_min or '?'} – {salary_max or '?'} €\n"
    if form_data.get("working_hours"):
        text += f"<b>⏱ Wochenstunden:</b> {form_data['working_hours']}\n"
    text += f"<b>🛠 Fähigkeiten:</b> {format_value('skills', form_data.get('skills'))}\n"
    if form_data.get("required_languages"):
        text += f"<b>🌍 Sprachen:</b> {format_value('required_languages', form_data['required_languages'])}\n"

    for field in ("description_md", "tasks_md", "requirements_md", "benefits_description"):
        if form_data.get(field):
            text += f"\n<b>{label_for(field)}:</b>\n{html.escape(str(form_data[field]))}\n"
    text += f"\n<b>{label_for('is_public')}:</b> {'öffentlich' if is_truthy(form_data.get('is_public', True)) else 'intern'}\n"
    return text
