from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from app.core.choices import BRANCHEN, EMPLOYMENT_TYPES, LAYOUTS, STATUSES, WORK_MODES
from app.core.messages import Messages
from app.utils.validators import (
    is_truthy, parse_date, parse_int, parse_list_text,
    parse_job_language_text, parse_language_text, parse_school_text, parse_work_text
)

YES_NO: Dict[str, str] = {"true": "Ja", "false": "Nein"}

Condition = Callable[[Mapping[str, Any]], bool]

@dataclass(frozen=True)
class FieldPrompt:
    """Запрос одного поля формы.

    kind: text, date, number, list (через запятую), entry (запись списка),
    choice, bool, photo.
    """
    field: str
    kind: str
    message: str
    optional: bool = False
    choices: Optional[Dict[Any, str]] = None
    condition: Optional[Condition] = None

    def applies(self, form_data: Mapping[str, Any]) -> bool:
        return self.condition is None or self.condition(form_data)

def _status_is(*statuses: str) -> Condition:
    return lambda data: data.get("status") in statuses

def _has_license(data: Mapping[str, Any]) -> bool:
    return is_truthy(data.get("has_drivers_license"))

CV_PROMPTS: Dict[int, Tuple[FieldPrompt, ...]] = {
    1: (
        FieldPrompt("branche", "choice", Messages.CV.ENTER_BRANCHE, choices=BRANCHEN),
        FieldPrompt("status", "choice", Messages.CV.ENTER_STATUS, choices=STATUSES),
    ),
    2: (
        FieldPrompt("vorname", "text", Messages.CV.ENTER_VORNAME),
        FieldPrompt("nachname", "text", Messages.CV.ENTER_NACHNAME),
        FieldPrompt("geburtsdatum", "date", Messages.CV.ENTER_GEBURTSDATUM),
        FieldPrompt("strasse", "text", Messages.CV.ENTER_STRASSE),
        FieldPrompt("hausnummer", "text", Messages.CV.ENTER_HAUSNUMMER),
        FieldPrompt("plz", "text", Messages.CV.ENTER_PLZ),
        FieldPrompt("ort", "text", Messages.CV.ENTER_ORT),
        FieldPrompt("telefon", "text", Messages.CV.ENTER_TELEFON, optional=True),
        FieldPrompt("email", "text", Messages.CV.ENTER_EMAIL),
        FieldPrompt("profilbild", "photo", Messages.CV.UPLOAD_PROFILBILD),
        FieldPrompt("has_drivers_license", "bool", Messages.CV.ENTER_HAS_LICENSE, choices=YES_NO),
        FieldPrompt("driver_license_class", "text", Messages.CV.ENTER_LICENSE_CLASS, condition=_has_license),
        FieldPrompt("schule", "text", Messages.CV.ENTER_SCHULE, condition=_status_is("schueler")),
        FieldPrompt("geplanter_abschluss", "text", Messages.CV.ENTER_GEPLANTER_ABSCHLUSS, condition=_status_is("schueler")),
        FieldPrompt("abschlussjahr", "number", Messages.CV.ENTER_ABSCHLUSSJAHR, condition=_status_is("schueler")),
        FieldPrompt("ausbildungsberuf", "text", Messages.CV.ENTER_AUSBILDUNGSBERUF, condition=_status_is("azubi", "ausgelernt")),
        FieldPrompt("ausbildungsbetrieb", "text", Messages.CV.ENTER_AUSBILDUNGSBETRIEB, condition=_status_is("azubi")),
        FieldPrompt("startjahr", "number", Messages.CV.ENTER_STARTJAHR, condition=_status_is("azubi")),
        FieldPrompt("voraussichtliches_ende", "number", Messages.CV.ENTER_VORAUSSICHTLICHES_ENDE,
                    optional=True, condition=_status_is("azubi")),
        FieldPrompt("abschlussjahr_ausgelernt", "number", Messages.CV.ENTER_ABSCHLUSSJAHR_AUSGELERNT,
                    condition=_status_is("ausgelernt")),
        FieldPrompt("aktueller_beruf", "text", Messages.CV.ENTER_AKTUELLER_BERUF,
                    optional=True, condition=_status_is("ausgelernt")),
    ),
    3: (
        FieldPrompt("kenntnisse", "text", Messages.CV.ENTER_KENNTNISSE),
        FieldPrompt("motivation", "text", Messages.CV.ENTER_MOTIVATION),
        FieldPrompt("sprachen", "entry", Messages.CV.ENTER_SPRACHEN, optional=True),
        FieldPrompt("faehigkeiten", "list", Messages.CV.ENTER_FAEHIGKEITEN, optional=True),
    ),
    4: (
        FieldPrompt("schulbildung", "entry", Messages.CV.ENTER_SCHULBILDUNG),
        FieldPrompt("berufserfahrung", "entry", Messages.CV.ENTER_BERUFSERFAHRUNG, optional=True),
    ),
    5: (
        FieldPrompt("layout", "choice", Messages.CV.ENTER_LAYOUT, choices=LAYOUTS),
    ),
    7: (
        FieldPrompt("einwilligung", "bool", Messages.CV.ENTER_EINWILLIGUNG, choices=YES_NO),
    ),
}

JOB_PROMPTS: Dict[int, Tuple[FieldPrompt, ...]] = {
    1: (
        FieldPrompt("title", "text", Messages.Job.ENTER_TITLE),
        FieldPrompt("city", "text", Messages.Job.ENTER_CITY),
        FieldPrompt("employment_type", "choice", Messages.Job.ENTER_EMPLOYMENT_TYPE, choices=EMPLOYMENT_TYPES),
        FieldPrompt("start_date", "date", Messages.Job.ENTER_START_DATE, optional=True),
    ),
    2: (
        FieldPrompt("skills", "list", Messages.Job.ENTER_SKILLS),
        FieldPrompt("required_languages", "entry", Messages.Job.ENTER_LANGUAGES, optional=True),
        FieldPrompt("certifications", "list", Messages.Job.ENTER_CERTIFICATIONS, optional=True),
    ),
    3: (
        FieldPrompt("description_md", "text", Messages.Job.ENTER_DESCRIPTION, optional=True),
        FieldPrompt("tasks_md", "text", Messages.Job.ENTER_TASKS),
        FieldPrompt("requirements_md", "text", Messages.Job.ENTER_REQUIREMENTS),
        FieldPrompt("benefits_description", "text", Messages.Job.ENTER_BENEFITS, optional=True),
    ),
    4: (
        FieldPrompt("salary_min", "number", Messages.Job.ENTER_SALARY_MIN, optional=True),
        FieldPrompt("salary_max", "number", Messages.Job.ENTER_SALARY_MAX, optional=True),
        FieldPrompt("work_mode", "choice", Messages.Job.ENTER_WORK_MODE, choices=WORK_MODES),
        FieldPrompt("working_hours", "number", Messages.Job.ENTER_WORKING_HOURS, optional=True),
        FieldPrompt("is_public", "bool", Messages.Job.ENTER_IS_PUBLIC, choices=YES_NO),
    ),
}

PROMPTS: Dict[str, Dict[int, Tuple[FieldPrompt, ...]]] = {"cv": CV_PROMPTS, "job": JOB_PROMPTS}

ENTRY_PARSERS: Dict[str, Callable[[str], Any]] = {
    "schulbildung": parse_school_text,
    "berufserfahrung": parse_work_text,
    "sprachen": parse_language_text,
    "required_languages": parse_job_language_text,
}

def has_value(value: Any) -> bool:
    """Заполнено ли поле формы."""
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, dict)):
        return bool(value)
    return value is not None

def get_prompt(wizard: str, step: int, field: str) -> Optional[FieldPrompt]:
    for prompt in PROMPTS[wizard].get(step, ()):
        if prompt.field == field:
            return prompt
    return None

def step_prompts(wizard: str, step: int, form_data: Mapping[str, Any]) -> List[FieldPrompt]:
    """Поля шага, которые нужно запросить при текущих данных."""
    return [p for p in PROMPTS[wizard].get(step, ()) if p.applies(form_data)]

def next_prompt(
    wizard: str,
    step: int,
    form_data: Mapping[str, Any],
    after: Optional[str] = None,
    only_missing: bool = False,
) -> Optional[FieldPrompt]:
    """Следующее поле шага после `after`; условия проверяются на текущих данных."""
    catalog = PROMPTS[wizard].get(step, ())
    start = 0
    if after is not None:
        names = [p.field for p in catalog]
        start = names.index(after) + 1 if after in names else len(catalog)
    for prompt in catalog[start:]:
        if not prompt.applies(form_data):
            continue
        if only_missing and has_value(form_data.get(prompt.field)):
            continue
        return prompt
    return None

def coerce_text(prompt: FieldPrompt, text: str) -> Any:
    """Значение поля из текстового ввода.

    Неразбираемые даты и числа сохраняются как есть, ошибку покажет проверка шага.
    """
    text = text.strip()
    if prompt.kind == "date":
        parsed = parse_date(text)
        return parsed.isoformat() if parsed else text
    if prompt.kind == "number":
        number = parse_int(text)
        return number if number is not None else text
    if prompt.kind == "list":
        return parse_list_text(text)
    return text

def coerce_choice(prompt: FieldPrompt, raw: str) -> Any:
    """Значение поля из нажатой кнопки; None если варианта нет."""
    if prompt.kind == "bool":
        return raw == "true" if raw in YES_NO else None
    for key in prompt.choices or {}:
        if str(key) == raw:
            return key
    return None
