"""
Creatinine clearance estimation (Cockcroft-Gault)
"""

from typing import Optional

from .schema import PatientParameters
from .settings import DosingConfig

class RenalFunctionEstimator:
    """Computes CrCl in mL/min, never below the configured floor"""

    def __init__(self, config: Optional[DosingConfig] = None):
        self.config = config or DosingConfig()

    def creatinine_clearance(self, params: PatientParameters) -> float:
        """
        CrCl = [(140 - age) x weight (kg)] / [72 x SCr (mg/dL)], x 0.85 for females.
        Falls back to an age/gender default when creatinine was not measured.
        """
        if not params.has_creatinine:
            crcl = self.default_clearance(params.age, params.gender)
        else:
            crcl = ((140 - params.age) * params.weight) / (72 * params.creatinine)
            if params.gender == 'female':
                crcl *= self.config.female_crcl_factor

        return max(crcl, self.config.crcl_floor)

    def default_clearance(self, age: float, gender: Optional[str] = None) -> float:
        column = 'female' if gender == 'female' else 'male'
        for band in self.config.default_crcl_bands:
            max_age = band.get('max_age')
            if max_age is None or age < max_age:
                return float(band[column])
        # Table without an open-ended band: use its oldest row
        return float(self.config.default_crcl_bands[-1][column])
