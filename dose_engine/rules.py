"""
Rule matching for catalog free text.

Catalog rules carry their band as text ("CrCl 10–50 mL/min", "Child-Pugh C").
Each band is modelled as a tag with a predicate so that a coded vocabulary can
replace the text inspection without touching the pipeline.
"""

import re
from enum import Enum
from typing import Iterable, List, Optional, Sequence, TypeVar

HEPATIC_CONDITION_KEYWORDS = ('hepat', 'liver', 'cirrhosis')
ALLERGY_KEYWORDS = ('allergy', 'hypersensitivity')

class RenalBucket(Enum):
    """CrCl bands recognised in renal adjustment conditions"""
    ABOVE_50 = ">50"
    FROM_10_TO_50 = "10-50"
    BELOW_10 = "<10"

    def contains(self, crcl: float) -> bool:
        if self is RenalBucket.ABOVE_50:
            return crcl > 50
        if self is RenalBucket.FROM_10_TO_50:
            return 10 <= crcl <= 50
        return crcl < 10

_RENAL_PATTERNS = {
    RenalBucket.ABOVE_50: re.compile(r'>\s*50(?!\d)'),
    RenalBucket.FROM_10_TO_50: re.compile(r'(?<!\d)10\s*[–-]\s*50(?!\d)'),
    RenalBucket.BELOW_10: re.compile(r'<\s*10(?!\d)'),
}

def renal_buckets(condition: str) -> List[RenalBucket]:
    """Bands mentioned in a renal rule condition, in canonical order"""
    text = condition.lower()
    return [bucket for bucket, pattern in _RENAL_PATTERNS.items() if pattern.search(text)]

def renal_condition_matches(condition: str, crcl: float) -> bool:
    return any(bucket.contains(crcl) for bucket in renal_buckets(condition))

class HepaticSeverity(Enum):
    """Child-Pugh groupings used by hepatic adjustment rules"""
    MILD = "A-B"
    SEVERE = "C"

    def matches(self, condition: str) -> bool:
        text = condition.lower()
        if self is HepaticSeverity.MILD:
            return bool(re.search(r'a\s*[–-]\s*b', text)) or 'mild' in text
        # Child-Pugh class C as a standalone token, not any letter c
        return bool(re.search(r'(?<![a-z])c(?![a-z])', text)) or 'severe' in text

def has_hepatic_condition(conditions: Iterable[str]) -> bool:
    return any(mentions_any(condition, HEPATIC_CONDITION_KEYWORDS) for condition in conditions)

R = TypeVar('R')

def first_matching(rules: Sequence[R], predicate) -> Optional[R]:
    """First rule, in catalog order, whose condition satisfies the predicate"""
    for rule in rules:
        if predicate(rule.condition):
            return rule
    return None

# Free-text predicates

def contains_ci(haystack: str, needle: str) -> bool:
    return needle.lower() in haystack.lower()

def mentions_any(text: str, keywords: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)

def is_allergy_contraindication(contraindication: str) -> bool:
    return mentions_any(contraindication, ALLERGY_KEYWORDS)

def overlaps_ci(a: str, b: str) -> bool:
    """Either string contains the other, ignoring case"""
    return contains_ci(a, b) or contains_ci(b, a)

def allergy_matches_drug(allergy: str, drug_name: str, drug_class: str) -> bool:
    """Allergy text names the drug or its class ("Penicillin" vs "Penicillins")"""
    if not allergy.strip():
        return False
    return overlaps_ci(allergy, drug_class) or overlaps_ci(allergy, drug_name)

def condition_matches(contraindication: str, condition: str) -> bool:
    # Blank conditions would match every contraindication
    return bool(condition.strip()) and contains_ci(contraindication, condition)
