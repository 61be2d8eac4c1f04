class Messages:
    """Тексты сообщений бота."""

    class Common:
        START = (
            "👋 Willkommen!\n\n"
            "Erstelle deinen Lebenslauf Schritt für Schritt oder veröffentliche als Unternehmen eine Stellenanzeige."
        )
        INVALID_INPUT = "❌ Ungültige Eingabe. Bitte versuche es noch einmal."
        CANCELLED = "Abgebrochen. Dein Fortschritt bleibt gespeichert."
        SKIPPED = "Übersprungen."
        SESSION_TIMEOUT = "⏳ Die Sitzung ist abgelaufen. Starte neu mit /cv oder /job."
        INTERNAL_ERROR = "❌ Interner Fehler. Bitte versuche es später erneut."
        STEP_HEADER = "<b>Schritt {step} von {total}: {title}</b>\n{progress}% abgeschlossen"
        STEP_BLOCKED = "⚠️ Bitte korrigiere zuerst folgende Angaben:\n{errors}"
        STEP_UNREACHABLE = "Dieser Schritt ist gerade nicht erreichbar."
        ENTRY_ADDED = "✅ Eintrag hinzugefügt: {name}\nWeiteren Eintrag hinzufügen?"
        ENTRY_INVALID = "❌ Eintrag ungültig: {error}"
        ENTRY_REMOVED = "🗑 Eintrag entfernt: {name}"
        SEND_PHOTO = "Bitte sende ein Foto."
        UPLOAD_ERROR = "❌ Das Foto konnte nicht hochgeladen werden. Bitte versuche es erneut."
        AI_RUNNING = "✨ Einen Moment, die KI erstellt Vorschläge..."
        AI_ERROR = "❌ Konnte keine Vorschläge generieren. Bitte versuche es später erneut."
        TOO_MANY_ENTRIES = "Maximal {max_length} {item_type}."
        NOT_SET = "–"
        NO_ACTIVE_WIZARD = "Es läuft gerade kein Assistent. Starte mit /cv oder /job."

    class CV:
        RESUMED = "📄 Dein gespeicherter Entwurf wurde geladen."
        STARTED = "📄 Los geht's mit deinem Lebenslauf!"
        ENTER_BRANCHE = "In welcher Branche möchtest du arbeiten?"
        ENTER_STATUS = "Was beschreibt dich am besten?"
        ENTER_VORNAME = "Wie lautet dein Vorname?"
        ENTER_NACHNAME = "Wie lautet dein Nachname?"
        ENTER_GEBURTSDATUM = "Wann bist du geboren? (TT.MM.JJJJ)"
        ENTER_STRASSE = "Straße?"
        ENTER_HAUSNUMMER = "Hausnummer?"
        ENTER_PLZ = "Postleitzahl?"
        ENTER_ORT = "Wohnort?"
        ENTER_TELEFON = "Telefonnummer? (/skip zum Überspringen)"
        ENTER_EMAIL = "E-Mail-Adresse?"
        UPLOAD_PROFILBILD = "Sende ein Profilbild als Foto."
        ENTER_HAS_LICENSE = "Hast du einen Führerschein?"
        ENTER_LICENSE_CLASS = "Welche Führerscheinklasse? (z.B. B)"
        ENTER_SCHULE = "Welche Schule besuchst du?"
        ENTER_GEPLANTER_ABSCHLUSS = "Welchen Abschluss strebst du an? (z.B. Realschulabschluss)"
        ENTER_ABSCHLUSSJAHR = "In welchem Jahr machst du deinen Abschluss?"
        ENTER_AUSBILDUNGSBERUF = "Welchen Ausbildungsberuf hast du?"
        ENTER_AUSBILDUNGSBETRIEB = "In welchem Betrieb machst du deine Ausbildung?"
        ENTER_STARTJAHR = "In welchem Jahr hast du die Ausbildung begonnen?"
        ENTER_VORAUSSICHTLICHES_ENDE = "Wann endet deine Ausbildung voraussichtlich? (Jahr, /skip)"
        ENTER_ABSCHLUSSJAHR_AUSGELERNT = "In welchem Jahr hast du die Ausbildung abgeschlossen?"
        ENTER_AKTUELLER_BERUF = "Was machst du aktuell beruflich? (/skip)"
        ENTER_KENNTNISSE = "Was kannst du praktisch besonders gut?"
        ENTER_MOTIVATION = "Warum möchtest du in dieser Branche arbeiten?"
        ENTER_SPRACHEN = "Sprache und Niveau, z.B. <i>Deutsch, Muttersprache</i> oder <i>Englisch, B2</i> (/skip)"
        ENTER_FAEHIGKEITEN = "Deine Fähigkeiten, durch Komma getrennt (/skip)"
        ENTER_SCHULBILDUNG = (
            "Schulbildung, ein Eintrag pro Nachricht:\n"
            "<code>schulform: Realschule\nname: Goethe-Schule\nort: Köln\nvon: 2016\nbis: 2022</code>"
        )
        ENTER_BERUFSERFAHRUNG = (
            "Berufserfahrung, ein Eintrag pro Nachricht (/skip):\n"
            "<code>titel: Praktikum\nunternehmen: Muster GmbH\nort: Köln\nvon: 2023\nbis: 2023\nbeschreibung: ...</code>"
        )
        ENTER_LAYOUT = "Wähle ein Layout für deinen Lebenslauf:"
        ENTER_EINWILLIGUNG = "Bist du damit einverstanden, dass dein Profil gespeichert und Unternehmen angezeigt wird?"
        SKILLS_SUGGESTED = "✨ {count} Fähigkeiten wurden hinzugefügt. Du kannst sie jederzeit anpassen."
        PREVIEW_HEADER = "<b>CV-Vorschau im Layout {layout}</b>"
        SUBMIT_OK = "🎉 Dein Lebenslauf wurde gespeichert!"
        SUBMIT_ERROR = "❌ Fehler beim Speichern des Lebenslaufs. Bitte versuche es erneut."
        LAYOUT_EDIT_STARTED = "🎨 Layout ändern: wähle ein neues Layout und prüfe die Vorschau."
        LAYOUT_SAVED = "✅ Layout erfolgreich gespeichert!"
        LAYOUT_SAVE_ERROR = "❌ Fehler beim Speichern des Layouts."
        PROFILE_NOT_FOUND = "Du hast noch kein Profil. Erstelle zuerst deinen Lebenslauf mit /cv."
        PROFILE_LOAD_ERROR = "❌ Dein Profil konnte nicht geladen werden. Bitte versuche es später erneut."

    class Job:
        STARTED = "🏢 Neue Stellenanzeige"
        COMPANY_NOT_FOUND = "Für deinen Account ist kein Unternehmen hinterlegt."
        ENTER_TITLE = "Berufsbezeichnung?"
        ENTER_CITY = "Standort (Stadt)?"
        ENTER_EMPLOYMENT_TYPE = "Art der Anstellung?"
        ENTER_START_DATE = "Startdatum (TT.MM.JJJJ, /skip für sofort)"
        ENTER_SKILLS = "Gesuchte Fähigkeiten, durch Komma getrennt"
        ENTER_LANGUAGES = "Sprachen mit Niveau, z.B. <i>Deutsch, B2</i> (/skip)"
        ENTER_CERTIFICATIONS = "Zertifikate, durch Komma getrennt (/skip)"
        ENTER_DESCRIPTION = "Kurze Beschreibung der Stelle (/skip)"
        ENTER_TASKS = "Aufgaben"
        ENTER_REQUIREMENTS = "Anforderungen"
        ENTER_BENEFITS = "Benefits (/skip)"
        ENTER_SALARY_MIN = "Mindestgehalt pro Jahr in EUR (/skip)"
        ENTER_SALARY_MAX = "Maximalgehalt pro Jahr in EUR (/skip)"
        ENTER_WORK_MODE = "Arbeitsweise?"
        ENTER_WORKING_HOURS = "Wochenstunden (/skip)"
        ENTER_IS_PUBLIC = "Soll die Anzeige öffentlich sichtbar sein?"
        DESCRIPTION_GENERATED = "✨ Beschreibung erfolgreich generiert!"
        SALARY_SUGGESTED = "✨ Gehaltsvorschlag übernommen: {salary_min} – {salary_max} €"
        PUBLISH_OK = "🎉 Die Stellenanzeige wurde veröffentlicht."
        DRAFT_OK = "💾 Entwurf gespeichert."
        PUBLISH_ERROR = "❌ Veröffentlichung fehlgeschlagen. Bitte versuche es erneut."

    class Validation:
        REQUIRED = "{label} ist erforderlich."
        INVALID_CHOICE = "{label}: ungültige Auswahl."
        INVALID_EMAIL = "Bitte gib eine gültige E-Mail-Adresse ein."
        INVALID_PLZ = "Die Postleitzahl muss aus 5 Ziffern bestehen."
        INVALID_PHONE = "Bitte gib eine gültige Telefonnummer ein."
        INVALID_DATE = "{label}: bitte im Format TT.MM.JJJJ angeben."
        INVALID_AGE = "Bitte prüfe dein Geburtsdatum."
        INVALID_YEAR = "{label}: bitte ein Jahr zwischen {low} und {high} angeben."
        DATE_IN_PAST = "{label} darf nicht in der Vergangenheit liegen."
        INVALID_ENTRY = "Eintrag {index}: {error}"
        SCHOOL_REQUIRED = "Bitte füge mindestens eine Schulbildung hinzu."
        SKILL_REQUIRED = "Bitte füge mindestens eine Fähigkeit hinzu."
        CONSENT_REQUIRED = "Bitte bestätige die Einwilligung."
        SALARY_RANGE = "Mindestgehalt darf nicht höher als Maximalgehalt sein."
        INVALID_NUMBER = "{label}: bitte eine positive Zahl angeben."
        INVALID_HOURS = "Wochenstunden müssen zwischen 1 und 60 liegen."
        TEXT_LENGTH = "{label} muss zwischen {low} und {high} Zeichen lang sein."
