"""
Memoizing drug cache with single-flight loading
"""

import threading
import logging
from typing import Callable, Dict, Optional

from .schema import Drug

logger = logging.getLogger(__name__)

class _PendingLoad:
    def __init__(self):
        self.done = threading.Event()
        self.drug: Optional[Drug] = None
        self.error: Optional[BaseException] = None

class DrugCache:
    """
    Maps drug id -> Drug. Concurrent first access to the same id runs the
    loader once; other callers wait for its result. Misses are not stored.
    """

    def __init__(self):
        self._drugs: Dict[str, Drug] = {}
        self._pending: Dict[str, _PendingLoad] = {}
        self._lock = threading.Lock()

    def get_or_load(self, drug_id: str, loader: Callable[[str], Optional[Drug]]) -> Optional[Drug]:
        with self._lock:
            if drug_id in self._drugs:
                return self._drugs[drug_id]
            pending = self._pending.get(drug_id)
            owner = pending is None
            if owner:
                pending = _PendingLoad()
                self._pending[drug_id] = pending

        if not owner:
            pending.done.wait()
            if pending.error is not None:
                raise pending.error
            return pending.drug

        try:
            pending.drug = loader(drug_id)
        except BaseException as e:
            pending.error = e
            raise
        finally:
            with self._lock:
                if pending.drug is not None:
                    self._drugs[drug_id] = pending.drug
                self._pending.pop(drug_id, None)
            pending.done.set()

        return pending.drug

    def clear(self) -> None:
        with self._lock:
            count = len(self._drugs)
            self._drugs.clear()
        logger.info(f"Drug cache cleared ({count} entries)")

    def __contains__(self, drug_id: str) -> bool:
        with self._lock:
            return drug_id in self._drugs

    def __len__(self) -> int:
        with self._lock:
            return len(self._drugs)
