# intake/submission.py
import sqlite3, datetime, logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

from intake.asset_store import AssetReference, AssetStore, UploadedBlob
from intake.errors import AssetWriteError, PersistenceError, ValidationError
from intake.normalizer import FILES
from intake.schema_registry import SchemaEntry, SchemaRegistry
from intake.sqlite_utils import Database, StoreUnavailable

logger = logging.getLogger(__name__)


def _nowz() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class SubmissionResult:
    kind: str
    table: str
    id: Optional[int]
    record: Dict[str, Any]
    assets: List[AssetReference] = field(default_factory=list)
    unmapped_fields: List[str] = field(default_factory=list)

    def summary(self) -> Dict[str, Any]:
        out = {"kind": self.kind, "table": self.table, "fields": self.record}
        if self.unmapped_fields:
            out["unmapped_fields"] = self.unmapped_fields
        return out


class SubmissionService:
    """
    Ingest path: resolve kind -> check attachments -> normalize -> store
    assets -> project -> INSERT. Assets are always on disk before the row is
    written; a failed INSERT leaves them there and logs their paths.
    """
    def __init__(self, registry: SchemaRegistry, asset_store: AssetStore, database: Database,
                 clock: Callable[[], str] = _nowz):
        self.registry = registry
        self.asset_store = asset_store
        self.database = database
        self.clock = clock

    def _check_attachments(self, entry: SchemaEntry, attachments: List[UploadedBlob]) -> Dict[str, List[UploadedBlob]]:
        file_fields = entry.file_fields
        grouped: Dict[str, List[UploadedBlob]] = {}
        for blob in attachments:
            spec = file_fields.get(blob.field_name)
            if spec is None:
                raise ValidationError(f"unexpected file field: {blob.field_name}")
            grouped.setdefault(spec.column, []).append(blob)
        for name, spec in file_fields.items():
            count = len(grouped.get(spec.column, []))
            if count > spec.max_files:
                raise ValidationError(f"too many files for {name}: {count} (max {spec.max_files})")
        return grouped

    def _store_assets(self, entry: SchemaEntry, grouped: Dict[str, List[UploadedBlob]]) -> Dict[str, List[AssetReference]]:
        # one store_many call so a failure cleans up every file of this submission
        order = [(col, blob) for col, blobs in grouped.items() for blob in blobs]
        try:
            refs = self.asset_store.store_many([blob for _, blob in order])
        except AssetWriteError as exc:
            logger.error("asset storage failed for %s: %s", entry.kind.value, exc)
            raise
        assets: Dict[str, List[AssetReference]] = {}
        for (col, _), ref in zip(order, refs):
            assets.setdefault(col, []).append(ref)
        return assets

    def submit(self, kind, raw_fields: Dict[str, Any], attachments: Optional[Iterable[UploadedBlob]] = None) -> SubmissionResult:
        entry = self.registry.resolve(kind)
        attachments = list(attachments or [])
        grouped = self._check_attachments(entry, attachments)

        try:
            record = entry.normalizer.normalize(raw_fields)
        except ValidationError as exc:
            logger.warning("rejected %s submission: %s", entry.kind.value, exc.message)
            raise
        unmapped = entry.unmapped_fields(record)
        if unmapped:
            logger.warning("%s submission carried unmapped fields: %s", entry.kind.value, ", ".join(unmapped))

        assets: Dict[str, List[AssetReference]] = {}
        if entry.file_fields and grouped:
            assets = self._store_assets(entry, grouped)
        stored = [ref for refs in assets.values() for ref in refs]

        received_at = self.clock()
        for col in entry.timestamp_columns:
            record[col] = received_at
        values = entry.project(record, assets)

        try:
            row_id = self.database.insert(entry.table_name, entry.ordered_columns, values, returning=entry.id_column)
        except (sqlite3.Error, StoreUnavailable) as exc:
            orphaned = [ref.relative_path for ref in stored]
            logger.error("insert into %s failed for %s submission: %s; orphaned assets: %s",
                         entry.table_name, entry.kind.value, exc, orphaned or "none")
            raise PersistenceError(f"could not save {entry.kind.value} submission",
                                   table=entry.table_name, orphaned_assets=orphaned) from exc

        accepted = dict(zip(entry.ordered_columns, values))
        for spec in entry.fields:
            if spec.is_file:
                refs = assets.get(spec.column, [])
                accepted[spec.column] = [r.stored_name for r in refs] if spec.type == FILES else (refs[0].stored_name if refs else None)
            elif isinstance(record.get(spec.column), list):
                accepted[spec.column] = record[spec.column]
        logger.info("stored %s submission in %s (id=%s, %d assets)", entry.kind.value, entry.table_name, row_id, len(stored))
        return SubmissionResult(
            kind=entry.kind.value,
            table=entry.table_name,
            id=row_id,
            record=accepted,
            assets=stored,
            unmapped_fields=unmapped,
        )
