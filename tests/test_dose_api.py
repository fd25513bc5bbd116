#!/usr/bin/env python3
"""
Tests for the dose calculation HTTP API
"""

import sys
import os

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import app

PATIENT = {
    'age': 45,
    'weight': 70,
    'gender': 'male',
    'creatinine': 1.0,
    'conditions': [],
    'allergies': []
}

class TestDoseAPI:
    """Test dose API endpoints through the Flask test client"""

    def setup_method(self):
        app.config['TESTING'] = True
        self.client = app.test_client()

    def test_health(self):
        response = self.client.get('/health')
        assert response.status_code == 200
        assert response.get_json()['status'] == 'ok'

    def test_calculate(self):
        response = self.client.post('/api/dose/calculate', json={
            'drug_id': 'amoxicillin',
            'patient_params': PATIENT
        })
        assert response.status_code == 200

        data = response.get_json()
        assert data['drugName'] == 'Amoxicillin'
        assert data['dosage'] == '500 mg'
        assert data['totalQuantity'] == '10500 mg'
        assert data['adjustments'] == {'renal': 'None required', 'hepatic': 'None required'}

    def test_calculate_requires_body(self):
        response = self.client.post('/api/dose/calculate', data='', content_type='application/json')
        assert response.status_code == 400

    def test_calculate_requires_drug_id(self):
        response = self.client.post('/api/dose/calculate', json={'patient_params': PATIENT})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'drug_id is required'

    def test_calculate_requires_patient_params(self):
        response = self.client.post('/api/dose/calculate', json={'drug_id': 'amoxicillin'})
        assert response.status_code == 400

    def test_calculate_invalid_patient(self):
        response = self.client.post('/api/dose/calculate', json={
            'drug_id': 'amoxicillin',
            'patient_params': dict(PATIENT, age=-5)
        })
        assert response.status_code == 400
        assert response.get_json()['error_code'] == 'DOSE_001'

    def test_calculate_unknown_drug(self):
        response = self.client.post('/api/dose/calculate', json={
            'drug_id': 'unknown-drug',
            'patient_params': PATIENT
        })
        assert response.status_code == 404
        assert response.get_json()['error_code'] == 'DRUG_001'

    def test_calculate_multiple(self):
        response = self.client.post('/api/dose/calculate-multiple', json={
            'drug_ids': ['amoxicillin', 'unknown-drug', 'ibuprofen'],
            'patient_params': PATIENT
        })
        assert response.status_code == 200

        data = response.get_json()
        assert data['count'] == 2
        assert data['requested'] == 3
        assert [r['drugName'] for r in data['results']] == ['Amoxicillin', 'Ibuprofen']

    def test_calculate_multiple_invalid_patient(self):
        response = self.client.post('/api/dose/calculate-multiple', json={
            'drug_ids': ['amoxicillin'],
            'patient_params': dict(PATIENT, weight=0)
        })
        assert response.status_code == 400
        assert response.get_json()['error_code'] == 'DOSE_002'

    def test_calculate_multiple_requires_ids(self):
        response = self.client.post('/api/dose/calculate-multiple', json={
            'drug_ids': [],
            'patient_params': PATIENT
        })
        assert response.status_code == 400

    def test_creatinine_clearance(self):
        response = self.client.post('/api/dose/creatinine-clearance', json={
            'age': 50, 'weight': 70, 'gender': 'female', 'creatinine': 1.0
        })
        assert response.status_code == 200
        assert response.get_json() == {'crcl_ml_min': 74.4, 'estimated_from': 'serum_creatinine'}

    def test_creatinine_clearance_default(self):
        response = self.client.post('/api/dose/creatinine-clearance', json={'age': 45, 'weight': 70})
        assert response.get_json() == {'crcl_ml_min': 100.0, 'estimated_from': 'age_default'}

    def test_search_drugs(self):
        response = self.client.get('/api/dose/drugs?q=nsaid')
        data = response.get_json()
        assert data['total'] == 1
        assert data['drugs'][0] == {'id': 'ibuprofen', 'name': 'Ibuprofen', 'class': 'NSAIDs',
                                    'category': 'anti-inflammatory'}

        assert self.client.get('/api/dose/drugs').get_json()['total'] == 7

    def test_get_drug(self):
        response = self.client.get('/api/dose/drugs/lidocaine')
        assert response.status_code == 200
        data = response.get_json()
        assert data['class'] == 'Local Anesthetics'
        assert data['dosage']['adults']['dose'] == '4.4 mg/kg'

        assert self.client.get('/api/dose/drugs/unknown-drug').status_code == 404

    def test_classes(self):
        data = self.client.get('/api/dose/classes').get_json()
        assert data['total'] == 7
        assert 'Penicillins' in data['classes']

    def test_clear_cache(self):
        response = self.client.post('/api/dose/cache/clear')
        assert response.get_json() == {'cleared': True}

    def test_method_not_allowed(self):
        response = self.client.get('/api/dose/calculate')
        assert response.status_code == 405

    def test_calculate_rejects_text_in_place_of_lists(self):
        response = self.client.post('/api/dose/calculate', json={
            'drug_id': 'amoxicillin',
            'patient_params': dict(PATIENT, conditions='Hypertension', allergies='none')
        })
        assert response.status_code == 400
        assert response.get_json()['error_code'] == 'DOSE_005'

    def test_calculate_multiple_rejects_text_in_place_of_lists(self):
        response = self.client.post('/api/dose/calculate-multiple', json={
            'drug_ids': ['amoxicillin'],
            'patient_params': dict(PATIENT, allergies='Penicillin')
        })
        assert response.status_code == 400
        assert response.get_json()['error_code'] == 'DOSE_005'

    def test_json_body_must_be_object(self):
        for endpoint in ('/api/dose/calculate', '/api/dose/calculate-multiple', '/api/dose/creatinine-clearance'):
            response = self.client.post(endpoint, json=['amoxicillin'])
            assert response.status_code == 400, endpoint
            assert response.get_json()['error'] == 'JSON body must be an object'
