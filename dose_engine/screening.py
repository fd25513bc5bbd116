"""
Contraindication screening and patient warnings
"""

from typing import List, Optional

from .schema import Drug, PatientParameters, DoseWarning, WarningLevel
from .settings import DosingConfig
from .rules import (is_allergy_contraindication, allergy_matches_drug, condition_matches,
                    contains_ci)

class ContraindicationScreener:
    """Flags drug contraindications triggered by allergies, conditions or age"""

    def __init__(self, config: Optional[DosingConfig] = None):
        self.config = config or DosingConfig()

    def screen(self, drug: Drug, params: PatientParameters) -> List[str]:
        """
        Returns each flagged contraindication once, in catalog order.
        A contraindication hit by several checks (allergy and condition) is
        reported a single time.
        """
        flagged: List[str] = []

        for contraindication in drug.contraindications:
            if self._is_triggered(contraindication, drug, params) and contraindication not in flagged:
                flagged.append(contraindication)

        return flagged

    def _is_triggered(self, contraindication: str, drug: Drug, params: PatientParameters) -> bool:
        if is_allergy_contraindication(contraindication):
            if any(allergy_matches_drug(allergy, drug.name, drug.drug_class) for allergy in params.allergies):
                return True

        if any(condition_matches(contraindication, condition) for condition in params.conditions):
            return True

        if params.age < self.config.pediatric_age and contains_ci(contraindication, 'children'):
            return True
        if params.age > self.config.geriatric_age and contains_ci(contraindication, 'elderly'):
            return True

        return False

class WarningGenerator:
    """Severity-tagged advisories for the calculated dose"""

    def __init__(self, config: Optional[DosingConfig] = None):
        self.config = config or DosingConfig()

    def generate(self, drug: Drug, params: PatientParameters, crcl: float) -> List[DoseWarning]:
        warnings: List[DoseWarning] = []

        if crcl < self.config.renal_warning_crcl and drug.renal_adjustment:
            warnings.append(DoseWarning(
                level=WarningLevel.MODERATE,
                message="Patient has impaired renal function. Dose adjustment required.",
                recommendation="Monitor renal function closely during therapy."
            ))

        if (params.age < self.config.pediatric_warning_age
                and drug.dosage.pediatrics.dose == drug.dosage.adults.dose):
            warnings.append(DoseWarning(
                level=WarningLevel.MINOR,
                message="Pediatric dosing information limited for this drug.",
                recommendation="Consult pediatric dosing guidelines or specialist."
            ))

        if params.age > self.config.elderly_warning_age:
            warnings.append(DoseWarning(
                level=WarningLevel.MINOR,
                message="Elderly patient. Consider conservative dosing.",
                recommendation="Start with lower dose and titrate carefully."
            ))

        warnings.extend(self.basic_interactions(drug, params))
        return warnings

    def basic_interactions(self, drug: Drug, params: PatientParameters) -> List[DoseWarning]:
        """
        Narrow interaction heuristic: only warfarin interactions, and only when
        the patient's condition list carries the literal entry 'anticoagulant'.
        This is not an interaction database.
        """
        warnings = []
        on_anticoagulant = 'anticoagulant' in params.conditions

        for interaction in drug.interactions:
            if contains_ci(interaction.drug, 'warfarin') and on_anticoagulant:
                warnings.append(DoseWarning(
                    level=WarningLevel.MAJOR,
                    message=f"Potential interaction with {interaction.drug}",
                    recommendation=interaction.management
                ))

        return warnings
