from typing import Any, Dict, Mapping

from app.utils.validators import is_truthy, parse_date, parse_int

PROFILE_FIELDS = (
    "branche", "status",
    "vorname", "nachname", "geburtsdatum", "strasse", "hausnummer", "plz", "ort", "telefon", "email",
    "profilbild", "has_drivers_license", "driver_license_class",
    "schule", "geplanter_abschluss", "abschlussjahr",
    "ausbildungsberuf", "ausbildungsbetrieb", "startjahr", "voraussichtliches_ende",
    "abschlussjahr_ausgelernt", "aktueller_beruf",
    "kenntnisse", "motivation", "sprachen", "faehigkeiten",
    "schulbildung", "berufserfahrung",
    "layout",
)

JOB_POST_FIELDS = (
    "title", "city", "employment_type", "start_date",
    "skills", "required_languages", "certifications",
    "description_md", "tasks_md", "requirements_md", "benefits_description",
    "salary_min", "salary_max", "work_mode", "working_hours",
)

def build_profile_row(telegram_id: int, form_data: Mapping[str, Any]) -> Dict[str, Any]:
    """Строка таблицы profiles из данных мастера резюме."""
    row: Dict[str, Any] = {"telegram_id": telegram_id}
    for field in PROFILE_FIELDS:
        if field in form_data:
            row[field] = form_data[field]
    birth = parse_date(form_data.get("geburtsdatum"))
    if birth:
        row["geburtsdatum"] = birth
    if "layout" in form_data:
        row["layout"] = parse_int(form_data["layout"])
    row["has_drivers_license"] = is_truthy(form_data.get("has_drivers_license"))
    row["einwilligung"] = is_truthy(form_data.get("einwilligung"))
    return row

def profile_to_form_data(profile: Mapping[str, Any]) -> Dict[str, Any]:
    """Данные формы из сохранённого профиля (для смены макета)."""
    return {field: profile[field] for field in PROFILE_FIELDS if profile.get(field) is not None}

def build_job_post_row(company_id: str, form_data: Mapping[str, Any], publish: bool) -> Dict[str, Any]:
    """Строка таблицы job_posts из данных мастера вакансии."""
    row: Dict[str, Any] = {"company_id": company_id}
    for field in JOB_POST_FIELDS:
        if form_data.get(field) not in (None, ""):
            row[field] = form_data[field]
    for field in ("salary_min", "salary_max", "working_hours"):
        if field in row:
            row[field] = parse_int(row[field])
    start = parse_date(form_data.get("start_date"))
    if start:
        row["start_date"] = start
    row["start_immediately"] = start is None
    row["skills"] = [s if isinstance(s, dict) else {"name": s, "level": 3, "required": True} for s in row.get("skills", [])]
    row["is_active"] = publish
    row["is_public"] = publish and is_truthy(form_data.get("is_public", True))
    return row
