"""
Base dosage selection and renal/hepatic dose overrides
"""

import re
import logging
from typing import Optional

from .schema import (Drug, PatientParameters, Adjustment, BaseDosage,
                     RenalAdjustmentRule, HepaticAdjustmentRule)
from .settings import DosingConfig
from .rules import (HepaticSeverity, renal_condition_matches, has_hepatic_condition,
                    first_matching)

logger = logging.getLogger(__name__)

NUMERIC_TOKEN = re.compile(r'(\d+(?:\.\d+)?)')

class BaseDosageResolver:
    """Picks the pediatric or adult entry and applies geriatric scaling"""

    def __init__(self, config: Optional[DosingConfig] = None):
        self.config = config or DosingConfig()

    def resolve(self, drug: Drug, params: PatientParameters) -> BaseDosage:
        is_pediatric = params.age < self.config.pediatric_age
        is_geriatric = params.age > self.config.geriatric_age

        entry = drug.dosage.pediatrics if is_pediatric else drug.dosage.adults

        if is_geriatric and not is_pediatric:
            return BaseDosage(dosage=self.scale_dose(entry.dose), frequency=entry.regimen)

        return BaseDosage(dosage=entry.dose, frequency=entry.regimen)

    def scale_dose(self, dose: str) -> str:
        """Scale the first number in a dose string, e.g. '500 mg' -> '400.0 mg'"""
        match = NUMERIC_TOKEN.search(dose)
        if not match:
            return dose

        adjusted = round(float(match.group(1)) * self.config.geriatric_dose_factor, 2)
        return dose[:match.start(1)] + str(adjusted) + dose[match.end(1):]

class ImpairmentAdjuster:
    """Renal and hepatic dose overrides from the drug's adjustment tables"""

    def renal(self, drug: Drug, crcl: float) -> Adjustment:
        rule: Optional[RenalAdjustmentRule] = first_matching(
            drug.renal_adjustment, lambda condition: renal_condition_matches(condition, crcl)
        )
        if rule is None:
            return Adjustment()
        return Adjustment(adjustment=rule.adjustment, dose_amount=rule.dose_amount)

    def hepatic(self, drug: Drug, params: PatientParameters) -> Adjustment:
        severity = HepaticSeverity.SEVERE if has_hepatic_condition(params.conditions) else HepaticSeverity.MILD

        rule: Optional[HepaticAdjustmentRule] = first_matching(drug.hepatic_adjustment, severity.matches)
        if rule is None:
            return Adjustment()
        return Adjustment(adjustment=rule.adjustment, dose_amount=rule.dose_amount)

    def final_dosage(self, base: BaseDosage, renal: Adjustment, hepatic: Adjustment) -> BaseDosage:
        """Hepatic overrides are applied last and win over renal ones"""
        dosage = base.dosage

        if renal.applied:
            dosage = renal.dose_amount

        if hepatic.applied:
            if renal.applied:
                logger.warning(
                    f"Hepatic adjustment '{hepatic.adjustment}' replaces renal dose "
                    f"'{renal.dose_amount}' with '{hepatic.dose_amount}'"
                )
            dosage = hepatic.dose_amount

        return BaseDosage(dosage=dosage, frequency=base.frequency)
