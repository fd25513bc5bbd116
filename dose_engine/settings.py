"""
Dosing configuration loaded from YAML
"""

import yaml
import logging
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigError, ErrorCode

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config" / "dosing.yaml"

def _default_crcl_bands() -> List[Dict[str, float]]:
    # Upper age bound (exclusive) -> default CrCl by gender, mL/min
    return [
        {'max_age': 40, 'male': 110, 'female': 95},
        {'max_age': 50, 'male': 100, 'female': 85},
        {'max_age': 60, 'male': 90, 'female': 75},
        {'max_age': 70, 'male': 80, 'female': 65},
        {'max_age': None, 'male': 70, 'female': 55},
    ]

def _default_durations() -> Dict[str, str]:
    return {
        'antibiotics': '7-10 days',
        'penicillins': '7-10 days',
        'macrolides': '7-10 days',
        'lincosamides': '7-10 days',
        'analgesics': '3-5 days PRN',
        'nsaids': '3-5 days PRN',
        'local anesthetics': 'Single dose',
    }

@dataclass
class DosingConfig:
    """Clinical constants used by the dose engine"""
    # Validation ranges
    min_age: int = 0
    max_age: int = 150
    min_weight_kg: float = 1.0
    max_weight_kg: float = 500.0
    min_creatinine: float = 0.1
    max_creatinine: float = 20.0

    # Renal function
    crcl_floor: float = 10.0
    female_crcl_factor: float = 0.85
    default_crcl_bands: List[Dict[str, Any]] = field(default_factory=_default_crcl_bands)

    # Age bands
    pediatric_age: int = 18
    geriatric_age: int = 65
    geriatric_dose_factor: float = 0.8

    # Warning thresholds
    renal_warning_crcl: float = 30.0
    pediatric_warning_age: int = 12
    elderly_warning_age: int = 75

    # Course length
    durations: Dict[str, str] = field(default_factory=_default_durations)
    default_duration: str = "As directed"
    default_course_days: int = 7

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> "DosingConfig":
        """Flatten the sectioned YAML layout into a config"""
        if not isinstance(config_data, dict):
            raise ConfigError(ErrorCode.CFG_INVALID_CONFIG, "Dosing config must be a mapping of sections")

        values: Dict[str, Any] = {}
        values.update(_section(config_data, 'validation'))

        renal = _section(config_data, 'renal')
        if 'crcl_floor' in renal:
            values['crcl_floor'] = renal['crcl_floor']
        if 'female_factor' in renal:
            values['female_crcl_factor'] = renal['female_factor']
        if 'default_crcl' in renal:
            values['default_crcl_bands'] = renal['default_crcl']

        values.update(_section(config_data, 'age_bands'))
        values.update(_section(config_data, 'warnings'))

        course = _section(config_data, 'course')
        if 'durations' in course:
            if not isinstance(course['durations'], dict):
                raise ConfigError(ErrorCode.CFG_INVALID_CONFIG, "course.durations must be a mapping")
            values['durations'] = {str(k).lower(): v for k, v in course['durations'].items()}
        for key in ('default_duration', 'default_course_days'):
            if key in course:
                values[key] = course[key]

        try:
            return cls(**values)
        except TypeError as e:
            raise ConfigError(ErrorCode.CFG_INVALID_CONFIG, f"Unknown dosing config key: {e}")

def _section(config_data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = config_data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(ErrorCode.CFG_INVALID_CONFIG, f"Config section '{name}' must be a mapping")
    return section

def load_dosing_config(config_path: Optional[str] = None, strict: bool = False) -> DosingConfig:
    """Load configuration from YAML file, falling back to defaults"""
    config_file = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    try:
        if not config_file.exists():
            if strict:
                raise ConfigError(ErrorCode.CFG_INVALID_CONFIG, f"Config file {config_file} not found")
            logger.warning(f"Config file {config_file} not found, using defaults")
            return DosingConfig()

        with open(config_file, 'r') as f:
            config_data = yaml.safe_load(f) or {}

        config = DosingConfig.from_dict(config_data)
        logger.info(f"Dosing configuration loaded from {config_file}")
        return config

    except (yaml.YAMLError, ConfigError) as e:
        if strict:
            if isinstance(e, ConfigError):
                raise
            raise ConfigError(ErrorCode.CFG_INVALID_CONFIG, f"Invalid YAML in {config_file}", original_exception=e)
        logger.error(f"Error loading dosing config: {e}")
        return DosingConfig()
