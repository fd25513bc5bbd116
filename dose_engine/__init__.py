"""
Dose Engine
Patient-specific drug dose recommendations with renal/hepatic adjustment,
contraindication screening and course quantity calculation.
"""

from .schema import (Drug, PatientParameters, DoseCalculationResult, DoseWarning, WarningLevel,
                     Adjustment)
from .errors import (DoseEngineError, ValidationError, NotFoundError, ComputationFailure,
                     CatalogError, ConfigError, ErrorCode)
from .settings import DosingConfig, load_dosing_config
from .catalog import FormularyCatalog, DuckDBDrugCatalog
from .engine import DoseCalculationEngine, create_dose_engine

__all__ = [
    'Drug', 'PatientParameters', 'DoseCalculationResult', 'DoseWarning', 'WarningLevel', 'Adjustment',
    'DoseEngineError', 'ValidationError', 'NotFoundError', 'ComputationFailure',
    'CatalogError', 'ConfigError', 'ErrorCode',
    'DosingConfig', 'load_dosing_config',
    'FormularyCatalog', 'DuckDBDrugCatalog',
    'DoseCalculationEngine', 'create_dose_engine'
]
