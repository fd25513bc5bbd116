#!/usr/bin/env python3
"""
Dose Calculation API
Provides REST endpoints for patient-specific dose recommendations
"""

import os
import logging
from flask import Blueprint, request, jsonify
from typing import Any, Dict

from dose_engine import (create_dose_engine, DuckDBDrugCatalog, FormularyCatalog,
                         PatientParameters, ValidationError, NotFoundError, DoseEngineError)

logger = logging.getLogger(__name__)

# Create Blueprint
dose_api = Blueprint('dose_api', __name__, url_prefix='/api/dose')

def _build_engine():
    formulary_path = os.environ.get('DOSE_ENGINE_FORMULARY')
    duckdb_path = os.environ.get('DOSE_ENGINE_DUCKDB')

    catalog = None
    if duckdb_path:
        catalog = DuckDBDrugCatalog(duckdb_path)
        if catalog.count() == 0:
            catalog.import_formulary(FormularyCatalog(formulary_path))

    return create_dose_engine(
        catalog=catalog,
        config_path=os.environ.get('DOSE_ENGINE_CONFIG'),
        formulary_path=formulary_path
    )

# Initialize engine
dose_engine = _build_engine()

def _drug_summary(drug) -> Dict[str, Any]:
    return {
        'id': drug.id,
        'name': drug.name,
        'class': drug.drug_class,
        'category': drug.category
    }

def _patient_params(data: Dict[str, Any]) -> PatientParameters:
    patient_data = data.get('patient_params')
    if not isinstance(patient_data, dict):
        raise ValueError('patient_params object is required')
    return PatientParameters.from_dict(patient_data)

@dose_api.route('/calculate', methods=['POST'])
def calculate_dose():
    """
    Calculate the dose of one drug for a patient

    Request JSON:
    {
        "drug_id": "amoxicillin",
        "patient_params": {
            "age": 45,
            "weight": 70,
            "gender": "female",
            "creatinine": 1.1,
            "conditions": ["Hypertension"],
            "allergies": []
        }
    }
    """
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'error': 'No JSON data provided'}), 400
        if not isinstance(data, dict):
            return jsonify({'error': 'JSON body must be an object'}), 400

        drug_id = data.get('drug_id')
        if not drug_id:
            return jsonify({'error': 'drug_id is required'}), 400

        patient_params = _patient_params(data)
        result = dose_engine.calculate_drug_dose(drug_id, patient_params)

        if result is None:
            return jsonify({'error': f'Could not calculate dose for {drug_id}'}), 422

        return jsonify(result.to_dict())

    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except ValidationError as e:
        return jsonify({'error': 'Invalid patient parameters', **e.to_dict()}), 400
    except NotFoundError as e:
        return jsonify({'error': 'Drug not found', **e.to_dict()}), 404
    except Exception as e:
        logger.error(f"Error in dose calculation: {e}")
        return jsonify({
            'error': 'Dose calculation failed',
            'message': str(e)
        }), 500

@dose_api.route('/calculate-multiple', methods=['POST'])
def calculate_multiple_doses():
    """
    Calculate doses for several drugs; drugs that fail are omitted

    Request JSON:
    {
        "drug_ids": ["amoxicillin", "ibuprofen"],
        "patient_params": {...}
    }
    """
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'error': 'No JSON data provided'}), 400
        if not isinstance(data, dict):
            return jsonify({'error': 'JSON body must be an object'}), 400

        drug_ids = data.get('drug_ids')
        if not isinstance(drug_ids, list) or not drug_ids:
            return jsonify({'error': 'drug_ids must be a non-empty array'}), 400

        patient_params = _patient_params(data)
        dose_engine.validator.validate(patient_params)
        results = dose_engine.calculate_multiple_drug_doses(drug_ids, patient_params)

        return jsonify({
            'results': [result.to_dict() for result in results],
            'count': len(results),
            'requested': len(drug_ids)
        })

    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except ValidationError as e:
        return jsonify({'error': 'Invalid patient parameters', **e.to_dict()}), 400
    except Exception as e:
        logger.error(f"Error in batch dose calculation: {e}")
        return jsonify({
            'error': 'Dose calculation failed',
            'message': str(e)
        }), 500

@dose_api.route('/creatinine-clearance', methods=['POST'])
def creatinine_clearance():
    """
    Estimate creatinine clearance (Cockcroft-Gault)

    Request JSON:
    {"age": 70, "weight": 60, "gender": "female", "creatinine": 1.4}
    """
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'error': 'No JSON data provided'}), 400
        if not isinstance(data, dict):
            return jsonify({'error': 'JSON body must be an object'}), 400

        patient_params = PatientParameters.from_dict(data)
        crcl = dose_engine.creatinine_clearance(patient_params)

        return jsonify({
            'crcl_ml_min': round(crcl, 1),
            'estimated_from': 'serum_creatinine' if patient_params.has_creatinine else 'age_default'
        })

    except ValidationError as e:
        return jsonify({'error': 'Invalid patient parameters', **e.to_dict()}), 400
    except Exception as e:
        logger.error(f"Error estimating creatinine clearance: {e}")
        return jsonify({
            'error': 'Creatinine clearance estimation failed',
            'message': str(e)
        }), 500

@dose_api.route('/drugs', methods=['GET'])
def search_drugs():
    """Search the catalog by name, class or indication (?q=)"""
    try:
        query = request.args.get('q', '')
        drugs = dose_engine.catalog.search_drugs(query)

        return jsonify({
            'drugs': [_drug_summary(drug) for drug in drugs],
            'total': len(drugs)
        })

    except DoseEngineError as e:
        logger.error(f"Error searching drugs: {e}")
        return jsonify({'error': 'Drug search failed', **e.to_dict()}), 500

@dose_api.route('/drugs/<drug_id>', methods=['GET'])
def get_drug(drug_id: str):
    """Full catalog record for one drug"""
    try:
        drug = dose_engine.get_drug(drug_id)
        if drug is None:
            return jsonify({'error': f'Drug {drug_id} not found'}), 404

        return jsonify(drug.model_dump(by_alias=True))

    except DoseEngineError as e:
        logger.error(f"Error retrieving drug {drug_id}: {e}")
        return jsonify({'error': 'Drug retrieval failed', **e.to_dict()}), 500

@dose_api.route('/classes', methods=['GET'])
def get_drug_classes():
    try:
        classes = dose_engine.catalog.get_drug_classes()
        return jsonify({'classes': classes, 'total': len(classes)})

    except DoseEngineError as e:
        logger.error(f"Error retrieving drug classes: {e}")
        return jsonify({'error': 'Class retrieval failed', **e.to_dict()}), 500

@dose_api.route('/cache/clear', methods=['POST'])
def clear_cache():
    dose_engine.clear_cache()
    return jsonify({'cleared': True})

# Error handlers
@dose_api.errorhandler(404)
def not_found(error):
    return jsonify({'error': 'Endpoint not found'}), 404

@dose_api.errorhandler(405)
def method_not_allowed(error):
    return jsonify({'error': 'Method not allowed'}), 405

@dose_api.errorhandler(500)
def internal_error(error):
    return jsonify({'error': 'Internal server error'}), 500
