#!/usr/bin/env python3
"""
Unit tests for contraindication screening and warning generation
"""

import sys
import os

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dose_engine.catalog import FormularyCatalog
import dose_engine
from dose_engine.schema import PatientParameters, DoseWarning, WarningLevel
from dose_engine.settings import DosingConfig
from dose_engine.screening import ContraindicationScreener, WarningGenerator

class TestContraindicationScreener:
    """Test allergy, condition and age screening"""

    def setup_method(self):
        self.catalog = FormularyCatalog()
        self.screener = ContraindicationScreener(DosingConfig())
        self.amoxicillin = self.catalog.get_drug_by_id('amoxicillin')

    def test_class_allergy_flagged(self):
        params = PatientParameters(age=40, weight=70, allergies=['Penicillin'])
        assert self.screener.screen(self.amoxicillin, params) == ['Penicillin allergy']

    def test_unrelated_allergy_not_flagged(self):
        params = PatientParameters(age=40, weight=70, allergies=['Sulfa'])
        assert self.screener.screen(self.amoxicillin, params) == []

    def test_condition_flagged(self):
        params = PatientParameters(age=40, weight=70, conditions=['Infectious mononucleosis'])
        assert self.screener.screen(self.amoxicillin, params) == ['Infectious mononucleosis']

    def test_flagged_once_when_hit_twice(self):
        params = PatientParameters(
            age=40, weight=70,
            allergies=['Penicillin'],
            conditions=['Penicillin allergy', 'Infectious mononucleosis']
        )
        assert self.screener.screen(self.amoxicillin, params) == ['Penicillin allergy', 'Infectious mononucleosis']

    def test_hypersensitivity_wording(self):
        ibuprofen = self.catalog.get_drug_by_id('ibuprofen')
        params = PatientParameters(age=40, weight=70, allergies=['NSAID'])
        assert self.screener.screen(ibuprofen, params) == ['NSAID hypersensitivity']

    def test_age_contraindications(self):
        drug = self.amoxicillin.model_copy(update={
            'contraindications': ['Children under 8 years', 'Elderly with dementia']
        })
        child = PatientParameters(age=7, weight=25)
        adult = PatientParameters(age=40, weight=70)
        elder = PatientParameters(age=70, weight=70)

        assert self.screener.screen(drug, child) == ['Children under 8 years']
        assert self.screener.screen(drug, adult) == []
        assert self.screener.screen(drug, elder) == ['Elderly with dementia']

class TestWarningGenerator:
    """Test warning thresholds"""

    def setup_method(self):
        self.catalog = FormularyCatalog()
        self.generator = WarningGenerator(DosingConfig())

    def test_renal_warning_threshold(self):
        amoxicillin = self.catalog.get_drug_by_id('amoxicillin')
        params = PatientParameters(age=40, weight=70)

        below = self.generator.generate(amoxicillin, params, 29.9)
        assert [w.level for w in below] == [WarningLevel.MODERATE]
        assert below[0].message == "Patient has impaired renal function. Dose adjustment required."

        assert self.generator.generate(amoxicillin, params, 30.0) == []

    def test_no_renal_warning_without_renal_rules(self):
        clindamycin = self.catalog.get_drug_by_id('clindamycin')
        params = PatientParameters(age=40, weight=70)
        assert self.generator.generate(clindamycin, params, 15.0) == []

    def test_pediatric_warning_when_doses_identical(self):
        lidocaine = self.catalog.get_drug_by_id('lidocaine')
        warnings = self.generator.generate(lidocaine, PatientParameters(age=11, weight=35), 110)
        assert len(warnings) == 1
        assert warnings[0].level == WarningLevel.MINOR
        assert warnings[0].message == "Pediatric dosing information limited for this drug."

        assert self.generator.generate(lidocaine, PatientParameters(age=12, weight=40), 110) == []

    def test_no_pediatric_warning_with_pediatric_dose(self):
        amoxicillin = self.catalog.get_drug_by_id('amoxicillin')
        assert self.generator.generate(amoxicillin, PatientParameters(age=6, weight=20), 110) == []

    def test_elderly_warning_threshold(self):
        clindamycin = self.catalog.get_drug_by_id('clindamycin')

        warnings = self.generator.generate(clindamycin, PatientParameters(age=76, weight=70), 70)
        assert len(warnings) == 1
        assert warnings[0].message == "Elderly patient. Consider conservative dosing."

        assert self.generator.generate(clindamycin, PatientParameters(age=75, weight=70), 70) == []

    def test_warfarin_heuristic(self):
        amoxicillin = self.catalog.get_drug_by_id('amoxicillin')
        params = PatientParameters(age=40, weight=70, conditions=['anticoagulant'])

        warnings = self.generator.generate(amoxicillin, params, 100)
        assert len(warnings) == 1
        assert warnings[0].level == WarningLevel.MAJOR
        assert warnings[0].message == "Potential interaction with Warfarin"
        assert warnings[0].recommendation == "Monitor INR closely during and after therapy"

    def test_warfarin_heuristic_needs_exact_entry(self):
        amoxicillin = self.catalog.get_drug_by_id('amoxicillin')
        for conditions in (['Anticoagulant'], ['on anticoagulant therapy'], []):
            params = PatientParameters(age=40, weight=70, conditions=conditions)
            assert self.generator.basic_interactions(amoxicillin, params) == []

    def test_warfarin_heuristic_ignores_drugs_without_warfarin(self):
        clindamycin = self.catalog.get_drug_by_id('clindamycin')
        params = PatientParameters(age=40, weight=70, conditions=['anticoagulant'])
        assert self.generator.basic_interactions(clindamycin, params) == []

    def test_warning_order(self):
        amoxicillin = self.catalog.get_drug_by_id('amoxicillin')
        params = PatientParameters(age=80, weight=60, conditions=['anticoagulant'])
        levels = [w.level for w in self.generator.generate(amoxicillin, params, 20)]
        assert levels == [WarningLevel.MODERATE, WarningLevel.MINOR, WarningLevel.MAJOR]

    def test_warning_to_dict(self):
        amoxicillin = self.catalog.get_drug_by_id('amoxicillin')
        warning = self.generator.generate(amoxicillin, PatientParameters(age=40, weight=70), 20)[0]
        assert isinstance(warning, DoseWarning)
        assert not hasattr(dose_engine, 'Warning')
        assert warning.to_dict() == {
            'level': 'moderate',
            'message': "Patient has impaired renal function. Dose adjustment required.",
            'recommendation': "Monitor renal function closely during therapy."
        }
