from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from app.utils.validators import parse_int, validate_cv_step

DERIVED_MARKER = "abgeleitet"
APPRENTICESHIP = "ausbildung"
SCHOOL = "schule"

APPRENTICESHIP_REQUIRED = ("ausbildungsberuf", "ausbildungsbetrieb", "startjahr")
APPRENTICESHIP_OPTIONAL = ("voraussichtliches_ende",)
SCHOOL_REQUIRED = ("schule", "abschlussjahr")
SCHOOL_OPTIONAL = ("geplanter_abschluss",)

Entry = Dict[str, Any]

def _text(value: Any) -> str:
    return str(value).strip() if value not in (None, "") else ""

def _same(a: Any, b: Any) -> bool:
    return _text(a).lower() == _text(b).lower()

def is_derived(entry: Any) -> bool:
    """Запись создана автоматически из статусных полей."""
    return isinstance(entry, dict) and bool(entry.get(DERIVED_MARKER))

def _sources_valid(form_data: Mapping[str, Any], errors: Mapping[str, str],
                   required: Sequence[str], optional: Sequence[str]) -> bool:
    if any(field in errors for field in (*required, *optional)):
        return False
    return all(_text(form_data.get(field)) for field in required)

def _place(form_data: Mapping[str, Any], errors: Mapping[str, str]) -> Optional[str]:
    return None if "ort" in errors else _text(form_data.get("ort")) or None

def _apprenticeship_entry(form_data: Mapping[str, Any], errors: Mapping[str, str]) -> Entry:
    return {
        "titel": f"Ausbildung als {_text(form_data.get('ausbildungsberuf'))}",
        "unternehmen": _text(form_data.get("ausbildungsbetrieb")),
        "ort": _place(form_data, errors),
        "zeitraum_von": parse_int(form_data.get("startjahr")),
        "zeitraum_bis": parse_int(form_data.get("voraussichtliches_ende")),
        "beschreibung": None,
        "aktuell": True,
        DERIVED_MARKER: APPRENTICESHIP,
    }

def _school_entry(form_data: Mapping[str, Any], errors: Mapping[str, str]) -> Entry:
    return {
        "schulform": _text(form_data.get("geplanter_abschluss")) or "Schule",
        "name": _text(form_data.get("schule")),
        "ort": _place(form_data, errors),
        "zeitraum_von": None,
        "zeitraum_bis": parse_int(form_data.get("abschlussjahr")),
        "aktuell": True,
        DERIVED_MARKER: SCHOOL,
    }

def _same_experience(a: Entry, b: Entry) -> bool:
    return _same(a.get("unternehmen"), b["unternehmen"]) and _same(a.get("titel"), b["titel"])

def _same_school(a: Entry, b: Entry) -> bool:
    return _same(a.get("name"), b["name"])

def _sync(
    entries: Optional[List[Any]],
    kind: str,
    entry: Optional[Entry],
    active: bool,
    identity: Callable[[Entry, Entry], bool],
) -> Optional[List[Any]]:
    """Новый список с актуальной производной записью или None, если менять нечего.

    Пока статус прежний, а исходные поля временно некорректны, последняя
    корректная запись сохраняется. При смене статуса она удаляется.
    """
    current = list(entries or [])
    index = next((i for i, e in enumerate(current) if is_derived(e) and e[DERIVED_MARKER] == kind), None)
    if index is None:
        if entry is None or any(isinstance(e, dict) and identity(e, entry) for e in current):
            return None
        return current + [entry]
    if entry is None:
        if active:
            return None
        return current[:index] + current[index + 1:]
    if current[index] == entry:
        return None
    current[index] = entry
    return current

def derive_augmentations(form_data: Mapping[str, Any], today: Optional[date] = None) -> Dict[str, List[Any]]:
    """Вычисление записей, которые следуют из статусных полей шага 2.

    Запись строится только из полей, прошедших проверку шага 2, и помечается
    маркером; при исправлении исходных полей она заменяется. Возвращает только
    изменённые списки целиком (для shallow merge). Если такая же запись уже
    введена пользователем, ничего не добавляется.
    """
    errors = validate_cv_step(form_data, 2, today)
    status = form_data.get("status")
    updates: Dict[str, List[Any]] = {}

    azubi = status == "azubi"
    apprenticeship = None
    if azubi and _sources_valid(form_data, errors, APPRENTICESHIP_REQUIRED, APPRENTICESHIP_OPTIONAL):
        apprenticeship = _apprenticeship_entry(form_data, errors)
    experiences = _sync(form_data.get("berufserfahrung"), APPRENTICESHIP, apprenticeship, azubi, _same_experience)
    if experiences is not None:
        updates["berufserfahrung"] = experiences

    pupil = status == "schueler"
    school = None
    if pupil and _sources_valid(form_data, errors, SCHOOL_REQUIRED, SCHOOL_OPTIONAL):
        school = _school_entry(form_data, errors)
    schools = _sync(form_data.get("schulbildung"), SCHOOL, school, pupil, _same_school)
    if schools is not None:
        updates["schulbildung"] = schools

    return updates
