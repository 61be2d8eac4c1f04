import logging
import re
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Type

import phonenumbers
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from app.core.choices import BRANCHEN, EMPLOYMENT_TYPES, LANGUAGE_LEVELS, LAYOUTS, STATUSES, WORK_MODES, label_for
from app.core.messages import Messages

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PLZ_RE = re.compile(r"^\d{5}$")
DATE_FORMATS = ("%Y-%m-%d", "%d.%m.%Y")
PRESENT_ALIASES = {"heute", "aktuell", "jetzt", "laufend", "present"}
DEFAULT_PHONE_REGION = "DE"
MIN_AGE = 13
MAX_AGE = 100

# Поля шага 2, которые переносятся в производные записи (границы как в SchoolEntry / WorkEntry)
ENTRY_TEXT_LIMITS = {
    "schule": (2, 150),
    "geplanter_abschluss": (2, 100),
    "ausbildungsbetrieb": (2, 150),
    "ausbildungsberuf": (2, 135),
    "ort": (1, 100),
}

Errors = Dict[str, str]
StepValidator = Callable[[Mapping[str, Any], int, Optional[date]], Errors]

def _normalize_level(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        if value.lower() == "muttersprache":
            return "Muttersprache"
        return value.upper()
    return value

def _blank_year_to_none(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value or value.lower() in PRESENT_ALIASES:
            return None
    return value

class SchoolEntry(BaseModel):
    """Запись о школьном образовании."""
    model_config = ConfigDict(str_strip_whitespace=True)

    schulform: str = Field(min_length=2, max_length=100)
    name: str = Field(min_length=2, max_length=150)
    ort: Optional[str] = Field(default=None, max_length=100)
    zeitraum_von: Optional[int] = Field(default=None, ge=1950, le=2100)
    zeitraum_bis: int = Field(ge=1950, le=2100)
    aktuell: bool = False

    @field_validator("zeitraum_von", mode="before")
    @classmethod
    def blank_start(cls, v):
        return _blank_year_to_none(v)

    @model_validator(mode="after")
    def check_period(self):
        if self.zeitraum_von and self.zeitraum_von > self.zeitraum_bis:
            raise ValueError("Beginn liegt nach dem Ende")
        return self

class WorkEntry(BaseModel):
    """Запись об опыте работы."""
    model_config = ConfigDict(str_strip_whitespace=True)

    titel: str = Field(min_length=2, max_length=150)
    unternehmen: str = Field(min_length=2, max_length=150)
    ort: Optional[str] = Field(default=None, max_length=100)
    zeitraum_von: int = Field(ge=1950, le=2100)
    zeitraum_bis: Optional[int] = Field(default=None, ge=1950, le=2100)
    beschreibung: Optional[str] = Field(default=None, max_length=1000)
    aktuell: bool = False

    @field_validator("zeitraum_bis", mode="before")
    @classmethod
    def blank_end(cls, v):
        return _blank_year_to_none(v)

    @model_validator(mode="after")
    def check_period(self):
        if self.zeitraum_bis and self.zeitraum_von > self.zeitraum_bis:
            raise ValueError("Beginn liegt nach dem Ende")
        return self

class LanguageEntry(BaseModel):
    """Язык кандидата."""
    model_config = ConfigDict(str_strip_whitespace=True)

    sprache: str = Field(min_length=2, max_length=50)
    niveau: str

    @field_validator("niveau", mode="before")
    @classmethod
    def check_niveau(cls, v):
        v = _normalize_level(v)
        if v not in LANGUAGE_LEVELS:
            raise ValueError(f"Niveau muss eines von {', '.join(LANGUAGE_LEVELS)} sein")
        return v

class JobSkill(BaseModel):
    """Навык в вакансии."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=50)
    level: int = Field(default=3, ge=1, le=5)
    required: bool = True

class JobLanguage(BaseModel):
    """Требование к языку в вакансии."""
    model_config = ConfigDict(str_strip_whitespace=True)

    language: str = Field(min_length=2, max_length=50)
    level: str
    required: bool = True

    @field_validator("level", mode="before")
    @classmethod
    def check_level(cls, v):
        v = _normalize_level(v)
        if v not in LANGUAGE_LEVELS:
            raise ValueError(f"Niveau muss eines von {', '.join(LANGUAGE_LEVELS)} sein")
        return v

def is_valid_email(email: str) -> bool:
    """Проверка email."""
    return bool(EMAIL_RE.match(email.strip()))

def is_valid_phone(phone: str, region: str = DEFAULT_PHONE_REGION) -> bool:
    """Проверка номера телефона."""
    try:
        parsed = phonenumbers.parse(phone, region)
    except phonenumbers.NumberParseException:
        return False
    return phonenumbers.is_valid_number(parsed)

def parse_date(value: Any) -> Optional[date]:
    """Разбор даты из ISO или немецкого формата."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    value = value.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None

def parse_int(value: Any) -> Optional[int]:
    """Разбор целого числа (допускаются разделители тысяч)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        cleaned = value.strip().replace(" ", "").replace(".", "")
        if cleaned.isdigit():
            return int(cleaned)
    return None

def is_truthy(value: Any) -> bool:
    """Булево значение поля формы."""
    if isinstance(value, str):
        return value.strip().lower() in {"true", "ja", "yes", "1"}
    return value is True

def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""

def _require_text(data: Mapping[str, Any], field: str, errors: Errors) -> Optional[str]:
    value = _text(data.get(field))
    if not value:
        errors[field] = Messages.Validation.REQUIRED.format(label=label_for(field))
        return None
    limits = ENTRY_TEXT_LIMITS.get(field)
    if limits and not limits[0] <= len(value) <= limits[1]:
        errors[field] = Messages.Validation.TEXT_LENGTH.format(label=label_for(field), low=limits[0], high=limits[1])
        return None
    return value

def _require_choice(data: Mapping[str, Any], field: str, choices: Iterable[Any], errors: Errors) -> Optional[Any]:
    value = data.get(field)
    if value in (None, ""):
        errors[field] = Messages.Validation.REQUIRED.format(label=label_for(field))
        return None
    if value not in choices:
        errors[field] = Messages.Validation.INVALID_CHOICE.format(label=label_for(field))
        return None
    return value

def _check_year(data: Mapping[str, Any], field: str, low: int, high: int, errors: Errors, required: bool = True) -> Optional[int]:
    raw = data.get(field)
    if raw in (None, "") or (isinstance(raw, str) and not raw.strip()):
        if required:
            errors[field] = Messages.Validation.REQUIRED.format(label=label_for(field))
        return None
    year = parse_int(raw)
    if year is None or not low <= year <= high:
        errors[field] = Messages.Validation.INVALID_YEAR.format(label=label_for(field), low=low, high=high)
        return None
    return year

def _check_date(data: Mapping[str, Any], field: str, errors: Errors, required: bool = True) -> Optional[date]:
    raw = data.get(field)
    if raw in (None, ""):
        if required:
            errors[field] = Messages.Validation.REQUIRED.format(label=label_for(field))
        return None
    parsed = parse_date(raw)
    if parsed is None:
        errors[field] = Messages.Validation.INVALID_DATE.format(label=label_for(field))
    return parsed

def _check_number(data: Mapping[str, Any], field: str, errors: Errors) -> Optional[int]:
    raw = data.get(field)
    if raw in (None, ""):
        return None
    number = parse_int(raw)
    if number is None or number < 0:
        errors[field] = Messages.Validation.INVALID_NUMBER.format(label=label_for(field))
        return None
    return number

def _describe(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error.get("loc", ()))
    message = error.get("msg", "")
    return f"{location}: {message}" if location else message

def _check_entries(data: Mapping[str, Any], field: str, model: Type[BaseModel], errors: Errors) -> None:
    entries = data.get(field) or []
    for index, entry in enumerate(entries, start=1):
        if isinstance(entry, str):
            entry = {"name": entry}
        try:
            model.model_validate(entry)
        except ValidationError as e:
            errors[field] = Messages.Validation.INVALID_ENTRY.format(index=index, error=_describe(e))
            return

def _age(birth: date, today: date) -> int:
    return today.year - birth.year - ((today.month, today.day) < (birth.month, birth.day))

def _cv_branche_status(data: Mapping[str, Any], today: date) -> Errors:
    errors: Errors = {}
    _require_choice(data, "branche", BRANCHEN, errors)
    _require_choice(data, "status", STATUSES, errors)
    return errors

def _cv_personal(data: Mapping[str, Any], today: date) -> Errors:
    errors: Errors = {}
    for field in ("vorname", "nachname", "strasse", "hausnummer", "ort"):
        _require_text(data, field, errors)

    birth = _check_date(data, "geburtsdatum", errors)
    if birth and not MIN_AGE <= _age(birth, today) <= MAX_AGE:
        errors["geburtsdatum"] = Messages.Validation.INVALID_AGE

    plz = _require_text(data, "plz", errors)
    if plz and not PLZ_RE.match(plz):
        errors["plz"] = Messages.Validation.INVALID_PLZ

    email = _require_text(data, "email", errors)
    if email and not is_valid_email(email):
        errors["email"] = Messages.Validation.INVALID_EMAIL

    telefon = _text(data.get("telefon"))
    if telefon and not is_valid_phone(telefon):
        errors["telefon"] = Messages.Validation.INVALID_PHONE

    if not data.get("profilbild"):
        errors["profilbild"] = Messages.Validation.REQUIRED.format(label=label_for("profilbild"))

    if is_truthy(data.get("has_drivers_license")):
        _require_text(data, "driver_license_class", errors)

    year = today.year
    status = data.get("status")
    if status == "schueler":
        _require_text(data, "schule", errors)
        _require_text(data, "geplanter_abschluss", errors)
        _check_year(data, "abschlussjahr", year - 1, year + 6, errors)
    elif status == "azubi":
        _require_text(data, "ausbildungsberuf", errors)
        _require_text(data, "ausbildungsbetrieb", errors)
        start = _check_year(data, "startjahr", year - 6, year + 1, errors)
        _check_year(data, "voraussichtliches_ende", start or year - 6, year + 6, errors, required=False)
    elif status == "ausgelernt":
        _require_text(data, "ausbildungsberuf", errors)
        _check_year(data, "abschlussjahr_ausgelernt", year - 50, year, errors)
    return errors

def _cv_skills(data: Mapping[str, Any], today: date) -> Errors:
    errors: Errors = {}
    _require_text(data, "kenntnisse", errors)
    _require_text(data, "motivation", errors)
    _check_entries(data, "sprachen", LanguageEntry, errors)
    faehigkeiten = data.get("faehigkeiten") or []
    if any(not _text(item) for item in faehigkeiten):
        errors["faehigkeiten"] = Messages.Validation.REQUIRED.format(label=label_for("faehigkeiten"))
    return errors

def _cv_education(data: Mapping[str, Any], today: date) -> Errors:
    errors: Errors = {}
    if not data.get("schulbildung"):
        errors["schulbildung"] = Messages.Validation.SCHOOL_REQUIRED
    else:
        _check_entries(data, "schulbildung", SchoolEntry, errors)
    _check_entries(data, "berufserfahrung", WorkEntry, errors)
    return errors

def _cv_layout(data: Mapping[str, Any], today: date) -> Errors:
    errors: Errors = {}
    layout = data.get("layout")
    if layout in (None, ""):
        errors["layout"] = Messages.Validation.REQUIRED.format(label=label_for("layout"))
    elif parse_int(layout) not in LAYOUTS:
        errors["layout"] = Messages.Validation.INVALID_CHOICE.format(label=label_for("layout"))
    return errors

def _no_checks(data: Mapping[str, Any], today: date) -> Errors:
    return {}

def _cv_finalize(data: Mapping[str, Any], today: date) -> Errors:
    if not is_truthy(data.get("einwilligung")):
        return {"einwilligung": Messages.Validation.CONSENT_REQUIRED}
    return {}

def _job_basics(data: Mapping[str, Any], today: date) -> Errors:
    errors: Errors = {}
    _require_text(data, "title", errors)
    _require_text(data, "city", errors)
    _require_choice(data, "employment_type", EMPLOYMENT_TYPES, errors)
    start = _check_date(data, "start_date", errors, required=False)
    if start and start < today:
        errors["start_date"] = Messages.Validation.DATE_IN_PAST.format(label=label_for("start_date"))
    return errors

def _job_skills(data: Mapping[str, Any], today: date) -> Errors:
    errors: Errors = {}
    if not data.get("skills"):
        errors["skills"] = Messages.Validation.SKILL_REQUIRED
    else:
        _check_entries(data, "skills", JobSkill, errors)
    _check_entries(data, "required_languages", JobLanguage, errors)
    certifications = data.get("certifications") or []
    if any(not _text(item) for item in certifications):
        errors["certifications"] = Messages.Validation.REQUIRED.format(label=label_for("certifications"))
    return errors

def _job_description(data: Mapping[str, Any], today: date) -> Errors:
    errors: Errors = {}
    _require_text(data, "tasks_md", errors)
    _require_text(data, "requirements_md", errors)
    return errors

def _job_compensation(data: Mapping[str, Any], today: date) -> Errors:
    errors: Errors = {}
    _require_choice(data, "work_mode", WORK_MODES, errors)
    salary_min = _check_number(data, "salary_min", errors)
    salary_max = _check_number(data, "salary_max", errors)
    if salary_min is not None and salary_max is not None and salary_min > salary_max:
        errors["salary_max"] = Messages.Validation.SALARY_RANGE
    hours = data.get("working_hours")
    if hours not in (None, ""):
        parsed = parse_int(hours)
        if parsed is None or not 1 <= parsed <= 60:
            errors["working_hours"] = Messages.Validation.INVALID_HOURS
    return errors

CV_STEP_VALIDATORS: Dict[int, Callable[[Mapping[str, Any], date], Errors]] = {
    1: _cv_branche_status,
    2: _cv_personal,
    3: _cv_skills,
    4: _cv_education,
    5: _cv_layout,
    6: _no_checks,
    7: _cv_finalize,
}

JOB_STEP_VALIDATORS: Dict[int, Callable[[Mapping[str, Any], date], Errors]] = {
    1: _job_basics,
    2: _job_skills,
    3: _job_description,
    4: _job_compensation,
    5: _no_checks,
}

def validate_cv_step(form_data: Mapping[str, Any], step: int, today: Optional[date] = None) -> Errors:
    """Проверка полей одного шага мастера резюме."""
    validator = CV_STEP_VALIDATORS.get(step)
    if validator is None:
        return {}
    return validator(form_data, today or date.today())

def validate_job_step(form_data: Mapping[str, Any], step: int, today: Optional[date] = None) -> Errors:
    """Проверка полей одного шага мастера вакансии."""
    validator = JOB_STEP_VALIDATORS.get(step)
    if validator is None:
        return {}
    return validator(form_data, today or date.today())

def validate_all(validate_step: StepValidator, form_data: Mapping[str, Any], steps: Iterable[int], today: Optional[date] = None) -> Errors:
    """Проверка всех шагов перед отправкой."""
    errors: Errors = {}
    for step in steps:
        for field, message in validate_step(form_data, step, today).items():
            errors.setdefault(field, message)
    return errors

def format_errors(errors: Mapping[str, str]) -> str:
    """Список ошибок для сообщения пользователю."""
    return "\n".join(f"• {message}" for message in errors.values())

def validate_list_length(items: List, max_length: int = 10, item_type: str = "Einträge") -> None:
    """Валидация длины списка."""
    if len(items) > max_length:
        raise ValueError(Messages.Common.TOO_MANY_ENTRIES.format(max_length=max_length, item_type=item_type))

ENTRY_KEY_ALIASES = {
    "von": "zeitraum_von",
    "bis": "zeitraum_bis",
    "firma": "unternehmen",
    "schule": "name",
    "position": "titel",
}

def parse_key_value_text(text: str) -> Dict[str, str]:
    """Разбор строк вида 'ключ: значение'."""
    data: Dict[str, str] = {}
    for line in text.split("\n"):
        if ":" in line:
            key, val = line.split(":", 1)
            key = key.strip().lower()
            data[ENTRY_KEY_ALIASES.get(key, key)] = val.strip()
    return data

def _parse_entry(text: str, model: Type[BaseModel], required_keys: List[str]) -> BaseModel:
    data = parse_key_value_text(text)
    missing = [k for k in required_keys if not data.get(k)]
    if missing:
        raise ValueError(f"Pflichtangaben fehlen: {', '.join(missing)}")
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.error(f"Validation error in {model.__name__}: {e}")
        raise ValueError(_describe(e))

def parse_school_text(text: str) -> SchoolEntry:
    """Разбор текста школьного образования."""
    return _parse_entry(text, SchoolEntry, ["schulform", "name", "zeitraum_bis"])

def parse_work_text(text: str) -> WorkEntry:
    """Разбор текста опыта работы."""
    return _parse_entry(text, WorkEntry, ["titel", "unternehmen", "zeitraum_von"])

def parse_language_text(text: str) -> LanguageEntry:
    """Разбор текста 'Sprache, Niveau'."""
    parts = [part.strip() for part in text.split(",") if part.strip()]
    if len(parts) != 2:
        raise ValueError(Messages.Common.INVALID_INPUT)
    try:
        return LanguageEntry(sprache=parts[0], niveau=parts[1])
    except ValidationError as e:
        raise ValueError(_describe(e))

def parse_list_text(text: str) -> List[str]:
    """Разбор списка через запятую без дубликатов."""
    items: List[str] = []
    for part in text.split(","):
        item = part.strip()
        if item and item.lower() not in {i.lower() for i in items}:
            items.append(item)
    return items

def parse_job_language_text(text: str) -> JobLanguage:
    """Разбор требования к языку 'Sprache, Niveau'."""
    entry = parse_language_text(text)
    return JobLanguage(language=entry.sprache, level=entry.niveau)

def merge_list_items(existing: Iterable[str], new: Iterable[str]) -> List[str]:
    """Объединение списков строк без дубликатов (без учёта регистра)."""
    merged: List[str] = []
    seen = set()
    for item in list(existing) + list(new):
        key = item.strip().lower()
        if key and key not in seen:
            seen.add(key)
            merged.append(item.strip())
    return merged
