"""
Drug catalogs: formulary JSON file and DuckDB table.
Both satisfy the engine's lookup contract, get_drug_by_id(id) -> Drug | None.
"""

import re
import json
import threading
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import duckdb
from pydantic import ValidationError as RecordValidationError

from .schema import Drug, InteractionRule
from .errors import CatalogError, ErrorCode

logger = logging.getLogger(__name__)

DEFAULT_FORMULARY_PATH = Path(__file__).parent / "config" / "formulary.json"
FORMULARY_SECTIONS = ('antibiotics', 'analgesics', 'local_anesthetics')

def drug_id_from_name(name: str) -> str:
    return re.sub(r'[^a-z0-9]', '-', name.lower())

def parse_drug(record: Dict[str, Any]) -> Drug:
    """Validate one catalog record, deriving its id from the name if absent"""
    record = dict(record)
    if not record.get('id'):
        record['id'] = drug_id_from_name(record.get('name', ''))
    try:
        return Drug.model_validate(record)
    except RecordValidationError as e:
        raise CatalogError(
            ErrorCode.CAT_INVALID_RECORD,
            f"Invalid drug record '{record.get('name', '?')}'",
            details={'errors': e.error_count()},
            original_exception=e
        )

class FormularyCatalog:
    """Drug catalog backed by a formulary JSON file, loaded once on first use"""

    def __init__(self, formulary_path: Optional[Path] = None):
        self.formulary_path = Path(formulary_path) if formulary_path else DEFAULT_FORMULARY_PATH
        self._drugs: List[Drug] = []
        self._loaded = False
        self._lock = threading.Lock()

    def load(self) -> List[Drug]:
        with self._lock:
            if self._loaded:
                return self._drugs

            if not self.formulary_path.exists():
                raise CatalogError(
                    ErrorCode.CAT_FILE_NOT_FOUND,
                    f"Formulary file {self.formulary_path} not found"
                )

            try:
                with open(self.formulary_path, 'r') as f:
                    formulary = json.load(f)
            except json.JSONDecodeError as e:
                raise CatalogError(
                    ErrorCode.CAT_INVALID_RECORD,
                    f"Formulary file {self.formulary_path} is not valid JSON",
                    original_exception=e
                )

            drugs = []
            for section in FORMULARY_SECTIONS:
                drugs.extend(parse_drug(record) for record in formulary.get(section) or [])

            self._drugs = drugs
            self._loaded = True
            logger.info(f"Loaded {len(drugs)} drugs from {self.formulary_path}")
            return self._drugs

    def reload(self) -> List[Drug]:
        with self._lock:
            self._loaded = False
            self._drugs = []
        return self.load()

    def get_drug_by_id(self, drug_id: str) -> Optional[Drug]:
        wanted = drug_id.lower()
        for drug in self.load():
            if drug.id == drug_id or drug.name.lower() == wanted:
                return drug
        return None

    def get_drug_by_name(self, name: str) -> Optional[Drug]:
        wanted = name.lower()
        for drug in self.load():
            if drug.name.lower() == wanted:
                return drug
        return None

    def search_drugs(self, query: Optional[str]) -> List[Drug]:
        """Match name, class or indication text; a blank query returns everything"""
        drugs = self.load()
        if not query or not query.strip():
            return list(drugs)

        term = query.lower().strip()
        return [
            drug for drug in drugs
            if term in drug.name.lower()
            or term in drug.drug_class.lower()
            or any(term in ind.description.lower() or term in ind.type.lower() for ind in drug.indications)
        ]

    def get_drugs_by_class(self, drug_class: str) -> List[Drug]:
        return [drug for drug in self.load() if drug.drug_class.lower() == drug_class.lower()]

    def get_drugs_for_indication(self, indication: str) -> List[Drug]:
        term = indication.lower()
        return [
            drug for drug in self.load()
            if any(term in ind.description.lower() or term in ind.type.lower() for ind in drug.indications)
        ]

    def get_drug_classes(self) -> List[str]:
        return sorted({drug.drug_class for drug in self.load()})

    def check_interaction(self, drug1_name: str, drug2_name: str) -> Optional[InteractionRule]:
        """Interaction listed on either drug's record naming the other"""
        for listed, other in ((drug1_name, drug2_name), (drug2_name, drug1_name)):
            drug = self.get_drug_by_name(listed)
            if not drug:
                continue
            for interaction in drug.interactions:
                if interaction.drug.lower() == other.lower():
                    return interaction

        return None

    def check_contraindications(self, drug_name: str, conditions: Iterable[str]) -> List[str]:
        """Contraindications overlapping any condition text, in either direction"""
        drug = self.get_drug_by_name(drug_name)
        if not drug:
            return []

        lowered = [c.lower() for c in conditions if c.strip()]
        return [
            contraindication for contraindication in drug.contraindications
            if any(c in contraindication.lower() or contraindication.lower() in c for c in lowered)
        ]

    def get_stats(self) -> Dict[str, Any]:
        drugs = self.load()
        return {
            'total_drugs': len(drugs),
            'drug_classes': len(self.get_drug_classes()),
            'source': str(self.formulary_path)
        }

class DuckDBDrugCatalog:
    """Drug catalog stored in a DuckDB table, one JSON record per drug"""

    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = duckdb.connect(db_path)
        self._lock = threading.Lock()
        self.init_schema()

    def init_schema(self):
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS drugs (
                id VARCHAR PRIMARY KEY,
                name VARCHAR NOT NULL,
                drug_class VARCHAR NOT NULL,
                record VARCHAR NOT NULL,  -- Drug serialized as JSON
                imported_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    def import_drugs(self, drugs: Iterable[Drug]) -> int:
        """Insert or replace drugs, returning the number written"""
        count = 0
        with self._lock:
            for drug in drugs:
                self.conn.execute(
                    "INSERT OR REPLACE INTO drugs (id, name, drug_class, record) VALUES (?, ?, ?, ?)",
                    [drug.id, drug.name, drug.drug_class, json.dumps(drug.model_dump(by_alias=True))]
                )
                count += 1
        logger.info(f"Imported {count} drugs into {self.db_path}")
        return count

    def import_formulary(self, formulary: FormularyCatalog) -> int:
        return self.import_drugs(formulary.load())

    def get_drug_by_id(self, drug_id: str) -> Optional[Drug]:
        with self._lock:
            row = self.conn.execute(
                "SELECT record FROM drugs WHERE id = ? OR lower(name) = lower(?) ORDER BY id = ? DESC LIMIT 1",
                [drug_id, drug_id, drug_id]
            ).fetchone()
        return Drug.model_validate(json.loads(row[0])) if row else None

    def search_drugs(self, query: Optional[str]) -> List[Drug]:
        term = f"%{(query or '').lower().strip()}%"
        with self._lock:
            rows = self.conn.execute(
                "SELECT record FROM drugs WHERE lower(name) LIKE ? OR lower(drug_class) LIKE ? ORDER BY name",
                [term, term]
            ).fetchall()
        return [Drug.model_validate(json.loads(row[0])) for row in rows]

    def get_drug_classes(self) -> List[str]:
        with self._lock:
            rows = self.conn.execute("SELECT DISTINCT drug_class FROM drugs ORDER BY drug_class").fetchall()
        return [row[0] for row in rows]

    def count(self) -> int:
        with self._lock:
            return self.conn.execute("SELECT COUNT(*) FROM drugs").fetchone()[0]

    def close(self):
        self.conn.close()
