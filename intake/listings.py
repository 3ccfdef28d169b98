# intake/listings.py
import sqlite3, json, logging
from typing import Any, Dict, List

from intake.errors import NotFoundError, PersistenceError, ValidationError
from intake.normalizer import FILES
from intake.schema_generator import file_columns
from intake.schema_registry import SchemaEntry, SchemaRegistry
from intake.sqlite_utils import Database, StoreUnavailable, quote_ident

logger = logging.getLogger(__name__)


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped.casefold()}%"


class ListingQueryService:
    """Read path over the tables of listed kinds (those with a natural key)."""
    def __init__(self, registry: SchemaRegistry, database: Database):
        self.registry = registry
        self.database = database

    def _listed_entry(self, kind) -> SchemaEntry:
        entry = self.registry.resolve(kind)
        if not entry.listed:
            raise ValidationError(f"{entry.kind.value} submissions are not listed")
        return entry

    def _order_clause(self, entry: SchemaEntry) -> str:
        return f"ORDER BY {quote_ident(entry.id_column) if entry.id_column else 'rowid'} ASC"

    def _decode(self, entry: SchemaEntry, row: Dict[str, Any]) -> Dict[str, Any]:
        for col, ftype in file_columns(entry).items():
            if ftype == FILES and isinstance(row.get(col), str):
                try:
                    row[col] = json.loads(row[col])
                except ValueError:
                    logger.warning("%s.%s holds malformed JSON: %r", entry.table_name, col, row[col])
        return row

    def _fetch(self, entry: SchemaEntry, sql: str, params=()) -> List[Dict[str, Any]]:
        try:
            rows = self.database.fetch_all(sql, params)
        except (sqlite3.Error, StoreUnavailable) as exc:
            logger.error("query on %s failed: %s", entry.table_name, exc)
            raise PersistenceError(f"could not read {entry.kind.value} listings", table=entry.table_name) from exc
        return [self._decode(entry, r) for r in rows]

    def list_all(self, kind) -> List[Dict[str, Any]]:
        entry = self._listed_entry(kind)
        sql = f"SELECT * FROM {quote_ident(entry.table_name)} {self._order_clause(entry)}"
        return self._fetch(entry, sql)

    def search(self, kind, term: str) -> List[Dict[str, Any]]:
        """Case-insensitive substring match, OR across the entry's search columns."""
        entry = self._listed_entry(kind)
        if term is None or not term.strip():
            raise ValidationError("Search term is required")
        if not entry.search_columns:
            raise ValidationError(f"{entry.kind.value} listings are not searchable")
        clauses = " OR ".join(f"casefold({quote_ident(c)}) LIKE ? ESCAPE '\\'" for c in entry.search_columns)
        sql = f"SELECT * FROM {quote_ident(entry.table_name)} WHERE {clauses} {self._order_clause(entry)}"
        pattern = _like_pattern(term)
        return self._fetch(entry, sql, [pattern] * len(entry.search_columns))

    def get_by_natural_key(self, kind, key: str) -> Dict[str, Any]:
        entry = self._listed_entry(kind)
        sql = (f"SELECT * FROM {quote_ident(entry.table_name)} WHERE {quote_ident(entry.natural_key)} = ? "
               f"{self._order_clause(entry)} LIMIT 1")
        rows = self._fetch(entry, sql, [key])
        if not rows:
            raise NotFoundError("Project not found")
        return rows[0]
