"""
Patient parameter validation, run before any lookup or calculation
"""

import math
from typing import Optional

from .errors import ValidationError, ErrorCode
from .schema import PatientParameters
from .settings import DosingConfig

VALID_GENDERS = ('male', 'female')

class ParameterValidator:
    """Rejects out-of-range patient inputs"""

    def __init__(self, config: Optional[DosingConfig] = None):
        self.config = config or DosingConfig()

    def validate(self, params: PatientParameters) -> None:
        cfg = self.config

        if not _is_number(params.age) or params.age < cfg.min_age or params.age > cfg.max_age:
            raise ValidationError(
                ErrorCode.DOSE_INVALID_AGE,
                "Invalid patient age",
                details={'age': params.age, 'allowed': [cfg.min_age, cfg.max_age]}
            )

        if not _is_number(params.weight) or params.weight < cfg.min_weight_kg or params.weight > cfg.max_weight_kg:
            raise ValidationError(
                ErrorCode.DOSE_INVALID_WEIGHT,
                "Invalid patient weight",
                details={'weight': params.weight, 'allowed': [cfg.min_weight_kg, cfg.max_weight_kg]}
            )

        # Zero or missing creatinine means "not measured"
        if params.creatinine:
            if (not _is_number(params.creatinine)
                    or params.creatinine < cfg.min_creatinine
                    or params.creatinine > cfg.max_creatinine):
                raise ValidationError(
                    ErrorCode.DOSE_INVALID_CREATININE,
                    "Invalid creatinine level",
                    details={'creatinine': params.creatinine, 'allowed': [cfg.min_creatinine, cfg.max_creatinine]}
                )

        if params.gender is not None and params.gender not in VALID_GENDERS:
            raise ValidationError(
                ErrorCode.DOSE_INVALID_GENDER,
                "Invalid patient gender",
                details={'gender': params.gender, 'allowed': list(VALID_GENDERS)}
            )

        for name in ('conditions', 'allergies'):
            values = getattr(params, name)
            if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
                raise ValidationError(
                    ErrorCode.DOSE_INVALID_PATIENT_LIST,
                    f"Invalid patient {name}",
                    details={name: repr(values), 'expected': 'list of strings'}
                )

def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)
