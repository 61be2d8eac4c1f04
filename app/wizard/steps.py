from dataclasses import dataclass
from typing import Tuple

from app.utils.validators import StepValidator, validate_cv_step, validate_job_step

@dataclass(frozen=True)
class WizardStep:
    """Описание шага мастера."""
    number: int
    key: str
    title: str

@dataclass(frozen=True)
class WizardDefinition:
    """Упорядоченные шаги мастера и их валидатор."""
    name: str
    steps: Tuple[WizardStep, ...]
    validate_step: StepValidator
    restricted_steps: Tuple[int, ...] = ()

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    @property
    def step_numbers(self) -> Tuple[int, ...]:
        return tuple(s.number for s in self.steps)

    def active_steps(self, restricted: bool = False) -> Tuple[int, ...]:
        """Шаги, доступные в текущем режиме."""
        if restricted and self.restricted_steps:
            return self.restricted_steps
        return self.step_numbers

    def step(self, number: int) -> WizardStep:
        for item in self.steps:
            if item.number == number:
                return item
        raise KeyError(f"{self.name} has no step {number}")

CV_WIZARD = WizardDefinition(
    name="cv",
    steps=(
        WizardStep(1, "branche_status", "Branche & Status"),
        WizardStep(2, "personal", "Persönliche Daten"),
        WizardStep(3, "skills", "Kenntnisse & Motivation"),
        WizardStep(4, "education", "Schule & Erfahrung"),
        WizardStep(5, "layout", "Layout"),
        WizardStep(6, "preview", "Vorschau"),
        WizardStep(7, "finalize", "Abschließen"),
    ),
    validate_step=validate_cv_step,
    restricted_steps=(5, 6),
)

JOB_WIZARD = WizardDefinition(
    name="job",
    steps=(
        WizardStep(1, "basics", "Grundlagen"),
        WizardStep(2, "skills", "Fähigkeiten & Anforderungen"),
        WizardStep(3, "description", "Beschreibung"),
        WizardStep(4, "compensation", "Vergütung & Rahmen"),
        WizardStep(5, "preview", "Vorschau & Veröffentlichen"),
    ),
    validate_step=validate_job_step,
)
