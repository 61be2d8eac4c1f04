from typing import Dict

BRANCHEN: Dict[str, str] = {
    "handwerk": "Handwerk",
    "it": "IT & Technik",
    "gesundheit": "Gesundheit & Pflege",
    "buero": "Büro & Verwaltung",
    "verkauf": "Verkauf & Handel",
    "gastronomie": "Gastronomie",
    "bau": "Bau & Architektur",
}

STATUSES: Dict[str, str] = {
    "schueler": "Schüler/in",
    "azubi": "Auszubildende/r",
    "ausgelernt": "Ausgelernte/r",
}

LAYOUTS: Dict[int, str] = {
    1: "Berlin",
    2: "München",
    3: "Hamburg",
    4: "Köln",
    5: "Frankfurt",
    6: "Düsseldorf",
}

LANGUAGE_LEVELS = ("A1", "A2", "B1", "B2", "C1", "C2", "Muttersprache")

EMPLOYMENT_TYPES: Dict[str, str] = {
    "apprenticeship": "Ausbildung",
    "dual_study": "Duales Studium",
    "internship": "Praktikum",
    "full_time": "Vollzeit",
    "part_time": "Teilzeit",
}

WORK_MODES: Dict[str, str] = {
    "onsite": "Vor Ort",
    "hybrid": "Hybrid",
    "remote": "Remote",
}

FIELD_LABELS: Dict[str, str] = {
    "branche": "Branche",
    "status": "Status",
    "vorname": "Vorname",
    "nachname": "Nachname",
    "geburtsdatum": "Geburtsdatum",
    "strasse": "Straße",
    "hausnummer": "Hausnummer",
    "plz": "PLZ",
    "ort": "Ort",
    "telefon": "Telefon",
    "email": "E-Mail",
    "profilbild": "Profilbild",
    "has_drivers_license": "Führerschein",
    "driver_license_class": "Führerscheinklasse",
    "schule": "Schule",
    "geplanter_abschluss": "Geplanter Abschluss",
    "abschlussjahr": "Abschlussjahr",
    "ausbildungsberuf": "Ausbildungsberuf",
    "ausbildungsbetrieb": "Ausbildungsbetrieb",
    "startjahr": "Startjahr",
    "voraussichtliches_ende": "Voraussichtliches Ende",
    "abschlussjahr_ausgelernt": "Abschlussjahr",
    "aktueller_beruf": "Aktueller Beruf",
    "kenntnisse": "Kenntnisse",
    "motivation": "Motivation",
    "sprachen": "Sprachen",
    "faehigkeiten": "Fähigkeiten",
    "schulbildung": "Schulbildung",
    "berufserfahrung": "Berufserfahrung",
    "layout": "Layout",
    "einwilligung": "Einwilligung",
    "title": "Berufsbezeichnung",
    "city": "Stadt",
    "employment_type": "Art der Anstellung",
    "start_date": "Startdatum",
    "skills": "Fähigkeiten",
    "required_languages": "Sprachen",
    "certifications": "Zertifikate",
    "description_md": "Beschreibung",
    "tasks_md": "Aufgaben",
    "requirements_md": "Anforderungen",
    "benefits_description": "Benefits",
    "salary_min": "Mindestgehalt",
    "salary_max": "Maximalgehalt",
    "work_mode": "Arbeitsweise",
    "working_hours": "Wochenstunden",
    "is_public": "Sichtbarkeit",
}

def label_for(field: str) -> str:
    """Название поля для сообщений."""
    return FIELD_LABELS.get(field, field)
