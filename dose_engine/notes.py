"""
Human-readable clinical notes for a dose calculation
"""

from typing import List

from .schema import Drug, PatientParameters, Adjustment

def _format_number(value) -> str:
    # 70.0 -> "70", 72.5 -> "72.5"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)

class ClinicalNoteComposer:

    def compose(self, drug: Drug, params: PatientParameters,
                renal: Adjustment, hepatic: Adjustment) -> List[str]:
        notes = [
            f"Calculated for {_format_number(params.age)} year old {params.gender or 'patient'} "
            f"weighing {_format_number(params.weight)}kg"
        ]

        if renal.applied:
            notes.append(f"Renal adjustment applied: {renal.adjustment}")

        if hepatic.applied:
            notes.append(f"Hepatic adjustment applied: {hepatic.adjustment}")

        if params.conditions:
            notes.append(f"Patient conditions: {', '.join(params.conditions)}")

        if params.allergies:
            notes.append(f"Patient allergies: {', '.join(params.allergies)}")

        if 'antibiotic' in drug.drug_class.lower():
            notes.append("Monitor for signs of infection resolution and adverse reactions")

        return notes
