"""
Dose engine error codes
Specific, auditable error codes for dose calculation failures.
"""

from enum import Enum
from typing import Dict, Any, Optional
import logging
import uuid
from datetime import datetime, timezone
import json

class ErrorCode(Enum):
    """Error codes for dose engine components"""

    # Patient parameter validation (DOSE_xxx)
    DOSE_INVALID_AGE = "DOSE_001"
    DOSE_INVALID_WEIGHT = "DOSE_002"
    DOSE_INVALID_CREATININE = "DOSE_003"
    DOSE_INVALID_GENDER = "DOSE_004"
    DOSE_INVALID_PATIENT_LIST = "DOSE_005"

    # Drug lookup (DRUG_xxx)
    DRUG_NOT_FOUND = "DRUG_001"

    # Pipeline (CALC_xxx)
    CALC_UNEXPECTED_FAILURE = "CALC_001"

    # Catalog (CAT_xxx)
    CAT_FILE_NOT_FOUND = "CAT_001"
    CAT_INVALID_RECORD = "CAT_002"

    # Configuration (CFG_xxx)
    CFG_INVALID_CONFIG = "CFG_001"

class DoseEngineError(Exception):
    """Base exception for the dose engine with a specific error code"""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.trace_id = str(uuid.uuid4())[:8]

        super().__init__(f"[{error_code.value}] {message}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/API responses"""
        return {
            "error_code": self.error_code.value,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp,
            "trace_id": self.trace_id,
            "original_error": str(self.original_exception) if self.original_exception else None
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

class ValidationError(DoseEngineError):
    """Patient parameters outside their allowed ranges"""

class NotFoundError(DoseEngineError):
    """Drug id does not resolve through the catalog"""

    def __init__(self, drug_id: str):
        super().__init__(
            ErrorCode.DRUG_NOT_FOUND,
            f"Drug with ID '{drug_id}' not found",
            details={"drug_id": drug_id}
        )
        self.drug_id = drug_id

class ComputationFailure(DoseEngineError):
    """Unexpected fault inside the calculation pipeline"""

    def __init__(self, drug_id: str, original_exception: Exception):
        super().__init__(
            ErrorCode.CALC_UNEXPECTED_FAILURE,
            f"Failed to calculate dose for drug {drug_id}",
            details={
                "drug_id": drug_id,
                "error_type": type(original_exception).__name__
            },
            original_exception=original_exception
        )
        self.drug_id = drug_id

class CatalogError(DoseEngineError):
    """Drug catalog could not be loaded"""

class ConfigError(DoseEngineError):
    """Dosing configuration is malformed"""

class ErrorLogger:
    """Centralized error logging with structured output"""

    def __init__(self, logger_name: str = "dose_engine"):
        self.logger = logging.getLogger(logger_name)

    def log_error(self, error: DoseEngineError, level: int = logging.ERROR):
        """Log error with structured format"""
        self.logger.log(
            level,
            f"DOSE_ENGINE_ERROR: {error.error_code.value} - {error.message}",
            extra={
                "error_code": error.error_code.value,
                "trace_id": error.trace_id,
                "details": error.details,
                "error_timestamp": error.timestamp
            }
        )

        if error.original_exception:
            self.logger.debug(
                f"Original exception for {error.trace_id}:",
                exc_info=error.original_exception
            )

ERROR_CODE_DESCRIPTIONS = {
    ErrorCode.DOSE_INVALID_AGE: "Patient age outside allowed range",
    ErrorCode.DOSE_INVALID_WEIGHT: "Patient weight outside allowed range",
    ErrorCode.DOSE_INVALID_CREATININE: "Serum creatinine outside allowed range",
    ErrorCode.DOSE_INVALID_GENDER: "Unrecognized patient gender",
    ErrorCode.DOSE_INVALID_PATIENT_LIST: "Conditions or allergies not a list of strings",
    ErrorCode.DRUG_NOT_FOUND: "Drug not present in catalog",
    ErrorCode.CALC_UNEXPECTED_FAILURE: "Dose calculation failed unexpectedly",
    ErrorCode.CAT_FILE_NOT_FOUND: "Formulary file missing",
    ErrorCode.CAT_INVALID_RECORD: "Formulary record failed validation",
    ErrorCode.CFG_INVALID_CONFIG: "Dosing configuration malformed",
}

def get_error_description(error_code: ErrorCode) -> str:
    """Get human-readable description for error code"""
    return ERROR_CODE_DESCRIPTIONS.get(error_code, "Unknown error")
