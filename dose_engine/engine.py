"""
Dose Calculation Engine
Sequences validation, drug lookup, renal/hepatic adjustment, screening and
quantity calculation into one advisory dose recommendation.
"""

import logging
from pathlib import Path
from typing import Any, List, Optional

from .schema import Drug, PatientParameters, DoseCalculationResult
from .settings import DosingConfig, load_dosing_config
from .errors import (DoseEngineError, ValidationError, NotFoundError, ComputationFailure,
                     ErrorLogger)
from .cache import DrugCache
from .catalog import FormularyCatalog
from .validation import ParameterValidator
from .renal import RenalFunctionEstimator
from .dosage import BaseDosageResolver, ImpairmentAdjuster
from .screening import ContraindicationScreener, WarningGenerator
from .quantity import QuantityCalculator
from .notes import ClinicalNoteComposer

logger = logging.getLogger(__name__)
error_logger = ErrorLogger(__name__)

class DoseCalculationEngine:
    """
    Calculates patient-specific drug doses.

    The catalog is any object exposing ``get_drug_by_id(drug_id) -> Drug | None``.
    Fetched drugs are memoized in an engine-owned cache until ``clear_cache``.
    """

    def __init__(self, catalog: Any, config: Optional[DosingConfig] = None):
        self.catalog = catalog
        self.config = config or DosingConfig()
        self.cache = DrugCache()

        self.validator = ParameterValidator(self.config)
        self.renal_estimator = RenalFunctionEstimator(self.config)
        self.dosage_resolver = BaseDosageResolver(self.config)
        self.adjuster = ImpairmentAdjuster()
        self.screener = ContraindicationScreener(self.config)
        self.warning_generator = WarningGenerator(self.config)
        self.quantity_calculator = QuantityCalculator(self.config)
        self.note_composer = ClinicalNoteComposer()

    def calculate_drug_dose(
        self,
        drug_id: str,
        patient_params: PatientParameters
    ) -> Optional[DoseCalculationResult]:
        """
        Calculate the dose of one drug for a patient

        Raises:
            ValidationError: patient parameters out of range
            NotFoundError: drug id unknown to the catalog

        Returns:
            The result, or None when the calculation failed unexpectedly
        """
        self.validator.validate(patient_params)

        try:
            drug = self.get_drug(drug_id)
            if drug is None:
                raise NotFoundError(drug_id)

            return self._calculate(drug, patient_params)

        except (ValidationError, NotFoundError):
            raise
        except Exception as e:
            error_logger.log_error(ComputationFailure(drug_id, e))
            return None

    def calculate_multiple_drug_doses(
        self,
        drug_ids: List[str],
        patient_params: PatientParameters
    ) -> List[DoseCalculationResult]:
        """Calculate doses for several drugs, omitting any that fail"""
        results = []

        for drug_id in drug_ids:
            try:
                result = self.calculate_drug_dose(drug_id, patient_params)
            except DoseEngineError as e:
                logger.warning(f"Skipping drug {drug_id}: {e}")
                continue

            if result is not None:
                results.append(result)

        return results

    def clear_cache(self) -> None:
        """Drop memoized drug lookups"""
        self.cache.clear()

    def get_drug(self, drug_id: str) -> Optional[Drug]:
        return self.cache.get_or_load(drug_id, self.catalog.get_drug_by_id)

    def creatinine_clearance(self, patient_params: PatientParameters) -> float:
        """Validated CrCl estimate, for callers that only need renal function"""
        self.validator.validate(patient_params)
        return self.renal_estimator.creatinine_clearance(patient_params)

    def _calculate(self, drug: Drug, params: PatientParameters) -> DoseCalculationResult:
        crcl = self.renal_estimator.creatinine_clearance(params)

        base_dosage = self.dosage_resolver.resolve(drug, params)
        renal = self.adjuster.renal(drug, crcl)
        hepatic = self.adjuster.hepatic(drug, params)

        contraindications = self.screener.screen(drug, params)
        warnings = self.warning_generator.generate(drug, params, crcl)

        final_dosage = self.adjuster.final_dosage(base_dosage, renal, hepatic)
        total_quantity = self.quantity_calculator.total_quantity(final_dosage, drug.drug_class)
        clinical_notes = self.note_composer.compose(drug, params, renal, hepatic)

        logger.debug(f"Calculated {drug.name}: {final_dosage.dosage} {final_dosage.frequency} (CrCl {crcl:.1f})")

        return DoseCalculationResult(
            drug_name=drug.name,
            dosage=final_dosage.dosage,
            frequency=final_dosage.frequency,
            duration=self.quantity_calculator.duration(drug.drug_class),
            total_quantity=total_quantity,
            clinical_notes=tuple(clinical_notes),
            warnings=tuple(warnings),
            contraindications=tuple(contraindications),
            renal_adjustment=renal.adjustment,
            hepatic_adjustment=hepatic.adjustment
        )

def create_dose_engine(
    catalog: Any = None,
    config_path: Optional[str] = None,
    formulary_path: Optional[Path] = None
) -> DoseCalculationEngine:
    """Factory function to create dose engine, defaulting to the bundled formulary"""
    if catalog is None:
        catalog = FormularyCatalog(formulary_path)

    return DoseCalculationEngine(catalog, config=load_dosing_config(config_path))
