"""
Course duration and total dispensed quantity
"""

import math
import re
from typing import Optional

from .schema import BaseDosage
from .settings import DosingConfig
from .dosage import NUMERIC_TOKEN

INTERVAL_PATTERN = re.compile(r'Q(\d+)H')
LEADING_INTEGER = re.compile(r'(\d+)')

# Checked in order, case-sensitively; the first keyword found wins, so any
# regimen mentioning "daily" counts once a day
FREQUENCY_KEYWORDS = (
    (1, ('daily', 'QD')),
    (2, ('BID', 'twice')),
    (3, ('TID', 'three')),
    (4, ('QID', 'four')),
)

class QuantityCalculator:

    def __init__(self, config: Optional[DosingConfig] = None):
        self.config = config or DosingConfig()

    def duration(self, drug_class: str) -> str:
        return self.config.durations.get(drug_class.lower(), self.config.default_duration)

    def administrations_per_day(self, frequency: str) -> float:
        interval = INTERVAL_PATTERN.search(frequency)
        if interval and int(interval.group(1)) > 0:
            return 24 / int(interval.group(1))

        for per_day, keywords in FREQUENCY_KEYWORDS:
            if any(keyword in frequency for keyword in keywords):
                return per_day

        return 1

    def course_days(self, duration: str) -> int:
        match = LEADING_INTEGER.search(duration)
        return int(match.group(1)) if match else self.config.default_course_days

    def total_quantity(self, final_dosage: BaseDosage, drug_class: str) -> str:
        """ceil(dose x administrations/day x days) with the dose's unit"""
        match = NUMERIC_TOKEN.search(final_dosage.dosage)
        if not match:
            return "Consult pharmacist"

        per_dose = float(match.group(1))
        per_day = self.administrations_per_day(final_dosage.frequency)
        days = self.course_days(self.duration(drug_class))

        tokens = final_dosage.dosage.split(' ')
        unit = tokens[1] if len(tokens) > 1 and tokens[1] else 'units'

        return f"{math.ceil(per_dose * per_day * days)} {unit}"
