"""
Schemas for the dose engine: catalog records, patient input and results
"""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Literal, Any, Tuple
from dataclasses import dataclass, field
from enum import Enum

NO_ADJUSTMENT = "None required"
STANDARD_DOSE = "Standard dose"

class WarningLevel(str, Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    MAJOR = "major"

# Catalog records

class DosageEntry(BaseModel):
    """Dose and regimen for one age group"""
    dose: str
    regimen: str
    max_daily: Optional[str] = None

class DrugDosage(BaseModel):
    adults: DosageEntry
    pediatrics: DosageEntry

class RenalAdjustmentRule(BaseModel):
    """Renal override keyed on a CrCl band, e.g. 'CrCl 10–50 mL/min'"""
    condition: str
    adjustment: str
    dose_amount: str

class HepaticAdjustmentRule(BaseModel):
    """Hepatic override keyed on a Child-Pugh band, e.g. 'Child-Pugh C'"""
    condition: str
    adjustment: str
    dose_amount: str

class InteractionRule(BaseModel):
    drug: str
    effect: str = ""
    management: str = ""

class DrugIndication(BaseModel):
    type: Literal["Prophylaxis", "Treatment"]
    description: str
    evidence_level: str = ""

class DrugAdministration(BaseModel):
    route: str = ""
    instructions: str = ""

class SideEffects(BaseModel):
    common: List[str] = []
    serious: List[str] = []

class Drug(BaseModel):
    """Drug catalog record. Read-only to the engine."""
    id: str
    name: str
    drug_class: str = Field(alias="class")
    category: Optional[str] = None
    indications: List[DrugIndication] = []
    dosage: DrugDosage
    administration: Optional[DrugAdministration] = None
    renal_adjustment: List[RenalAdjustmentRule] = []
    hepatic_adjustment: List[HepaticAdjustmentRule] = []
    contraindications: List[str] = []
    side_effects: Optional[SideEffects] = None
    interactions: List[InteractionRule] = []

    model_config = {"populate_by_name": True, "frozen": True}

# Patient input

@dataclass
class PatientParameters:
    age: int
    weight: float
    gender: Optional[str] = None
    creatinine: Optional[float] = None
    conditions: List[str] = field(default_factory=list)
    allergies: List[str] = field(default_factory=list)

    @property
    def has_creatinine(self) -> bool:
        return bool(self.creatinine) and self.creatinine > 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PatientParameters":
        """Build parameters from a request payload"""
        return cls(
            age=data.get('age'),
            weight=data.get('weight'),
            gender=data.get('gender'),
            creatinine=data.get('creatinine'),
            conditions=_as_list(data.get('conditions')),
            allergies=_as_list(data.get('allergies'))
        )

def _as_list(value):
    # Non-list payload values are passed through for the validator to reject
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return value

# Pipeline outputs

@dataclass(frozen=True)
class Adjustment:
    """Adjustment label and the dose text it substitutes"""
    adjustment: str = NO_ADJUSTMENT
    dose_amount: str = STANDARD_DOSE

    @property
    def applied(self) -> bool:
        return self.adjustment != NO_ADJUSTMENT

@dataclass(frozen=True)
class BaseDosage:
    dosage: str
    frequency: str

@dataclass(frozen=True)
class DoseWarning:
    level: WarningLevel
    message: str
    recommendation: str

    def to_dict(self) -> Dict[str, str]:
        return {
            'level': self.level.value,
            'message': self.message,
            'recommendation': self.recommendation
        }

@dataclass(frozen=True)
class DoseCalculationResult:
    drug_name: str
    dosage: str
    frequency: str
    duration: str
    total_quantity: str
    clinical_notes: Tuple[str, ...]
    warnings: Tuple[DoseWarning, ...]
    contraindications: Tuple[str, ...]
    renal_adjustment: str
    hepatic_adjustment: str

    @property
    def adjustments(self) -> Dict[str, str]:
        return {'renal': self.renal_adjustment, 'hepatic': self.hepatic_adjustment}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the case-management tool's JSON shape"""
        return {
            'drugName': self.drug_name,
            'dosage': self.dosage,
            'frequency': self.frequency,
            'duration': self.duration,
            'totalQuantity': self.total_quantity,
            'clinicalNotes': list(self.clinical_notes),
            'warnings': [w.to_dict() for w in self.warnings],
            'contraindications': list(self.contraindications),
            'adjustments': self.adjustments
        }
