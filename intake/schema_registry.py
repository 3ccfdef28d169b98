# intake/schema_registry.py
import json
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from intake.asset_store import AssetReference
from intake.errors import SchemaConfigError, UnknownSubmissionKindError
from intake.normalizer import (
    DATE, DECIMAL, FIELD_TYPES, FILE, FILES, INTEGER, TEXT, TIMESTAMP,
    FieldNormalizer, FieldSpec,
)

AssetsByColumn = Mapping[str, Sequence[AssetReference]]
Projector = Callable[[Dict[str, Any], AssetsByColumn], List[Any]]


def project_columns(entry: "SchemaEntry", record: Dict[str, Any], assets: AssetsByColumn) -> List[Any]:
    """Default projection: one value per declared field, in declaration order."""
    values = []
    for spec in entry.fields:
        if spec.type == FILE:
            refs = assets.get(spec.column) or []
            values.append(refs[0].stored_name if refs else None)
        elif spec.type == FILES:
            values.append(json.dumps([r.stored_name for r in assets.get(spec.column) or []]))
        else:
            value = record.get(spec.column)
            if isinstance(value, list):
                value = json.dumps(value)
            values.append(value)
    return values


@dataclass(frozen=True)
class SchemaEntry:
    kind: Enum
    table_name: str
    fields: Tuple[FieldSpec, ...]
    aliases: Tuple[str, ...] = ()
    id_column: Optional[str] = None
    search_columns: Tuple[str, ...] = ()
    natural_key: Optional[str] = None
    ignored_fields: FrozenSet[str] = frozenset()
    projector: Optional[Projector] = field(default=None, compare=False)

    @property
    def ordered_columns(self) -> Tuple[str, ...]:
        return tuple(f.column for f in self.fields)

    @property
    def file_fields(self) -> Dict[str, FieldSpec]:
        """form field name -> spec, for every attachment-bearing field"""
        return {f.form_name: f for f in self.fields if f.is_file}

    @property
    def required_fields(self) -> FrozenSet[str]:
        return frozenset(f.column for f in self.fields if f.required)

    @property
    def timestamp_columns(self) -> Tuple[str, ...]:
        return tuple(f.column for f in self.fields if f.type == TIMESTAMP)

    @property
    def listed(self) -> bool:
        return self.natural_key is not None

    @property
    def normalizer(self) -> FieldNormalizer:
        return FieldNormalizer(self.fields)

    def project(self, record: Dict[str, Any], assets: Optional[AssetsByColumn] = None) -> List[Any]:
        assets = assets or {}
        if self.projector is not None:
            return list(self.projector(record, assets))
        return project_columns(self, record, assets)

    def unmapped_fields(self, record: Dict[str, Any]) -> List[str]:
        """Keys of a normalized record that no column takes and the entry does not ignore."""
        known = set(self.ordered_columns) | set(self.ignored_fields)
        return sorted(k for k in record if k not in known)

    def describe(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "aliases": list(self.aliases),
            "table": self.table_name,
            "id_column": self.id_column,
            "columns": [
                {"name": f.column, "form_field": f.form_name, "type": f.type, "required": f.required}
                for f in self.fields
            ],
            "file_fields": {name: spec.max_files for name, spec in self.file_fields.items()},
            "search_columns": list(self.search_columns),
            "natural_key": self.natural_key,
        }


_SAMPLE_VALUES = {
    TEXT: "sample",
    INTEGER: 1,
    DECIMAL: 1.5,
    DATE: "2024-01-01",
    TIMESTAMP: "2024-01-01T00:00:00Z",
}


def _representative(entry: SchemaEntry):
    record = {}
    assets = {}
    for spec in entry.fields:
        if spec.is_file:
            count = 1 if spec.type == FILE else min(2, spec.max_files)
            assets[spec.column] = [
                AssetReference(spec.form_name, f"sample{i}.bin", f"0-{i}-sample{i}.bin", 0, f"/uploads/0-{i}-sample{i}.bin")
                for i in range(count)
            ]
        else:
            record[spec.column] = _SAMPLE_VALUES[spec.type]
    return record, assets


def check_entry(entry: SchemaEntry):
    """Fail fast on a misconfigured entry; a misaligned projection corrupts unrelated columns."""
    where = f"{entry.kind.value} ({entry.table_name})"
    if not entry.fields:
        raise SchemaConfigError(f"{where}: no columns declared")
    columns = entry.ordered_columns
    if len(set(columns)) != len(columns):
        raise SchemaConfigError(f"{where}: duplicate column names")
    if entry.id_column and entry.id_column in columns:
        raise SchemaConfigError(f"{where}: id column {entry.id_column} must not be a projected column")
    form_names = [f.form_name for f in entry.fields]
    if len(set(form_names)) != len(form_names):
        raise SchemaConfigError(f"{where}: duplicate form field names")
    for spec in entry.fields:
        if spec.type not in FIELD_TYPES:
            raise SchemaConfigError(f"{where}: unknown field type {spec.type!r} for {spec.column}")
        if spec.is_file and spec.max_files < 1:
            raise SchemaConfigError(f"{where}: {spec.column} accepts no files")
        if spec.type == FILE and spec.max_files != 1:
            raise SchemaConfigError(f"{where}: single file column {spec.column} with max_files={spec.max_files}")
    for col in entry.search_columns:
        if col not in columns:
            raise SchemaConfigError(f"{where}: search column {col} is not a column")
    if entry.natural_key and entry.natural_key not in columns:
        raise SchemaConfigError(f"{where}: natural key {entry.natural_key} is not a column")
    overlap = set(entry.ignored_fields) & (set(columns) | set(form_names))
    if overlap:
        raise SchemaConfigError(f"{where}: ignored fields are also projected: {sorted(overlap)}")

    record, assets = _representative(entry)
    try:
        values = entry.project(record, assets)
    except Exception as exc:
        raise SchemaConfigError(f"{where}: projector failed on a representative record: {exc}") from exc
    if len(values) != len(columns):
        raise SchemaConfigError(f"{where}: projector emits {len(values)} values for {len(columns)} columns")


class SchemaRegistry:
    """
    Fixed table of submission kinds. Every entry is self-checked on
    construction; lookups go through a read-only mapping afterwards.
    """
    def __init__(self, entries: Iterable[SchemaEntry]):
        entries = list(entries)
        by_name: Dict[str, SchemaEntry] = {}
        tables = set()
        for entry in entries:
            check_entry(entry)
            if entry.table_name in tables:
                raise SchemaConfigError(f"table {entry.table_name} registered twice")
            tables.add(entry.table_name)
            for name in (entry.kind.value,) + tuple(entry.aliases):
                if name in by_name:
                    raise SchemaConfigError(f"kind or alias {name!r} registered twice")
                by_name[name] = entry
        self._entries = tuple(entries)
        self._by_name = MappingProxyType(by_name)

    def resolve(self, kind) -> SchemaEntry:
        name = kind.value if isinstance(kind, Enum) else kind
        entry = self._by_name.get(name) if isinstance(name, str) else None
        if entry is None:
            raise UnknownSubmissionKindError(kind)
        return entry

    def entries(self) -> Tuple[SchemaEntry, ...]:
        return self._entries

    def describe(self, kind=None):
        if kind is not None:
            return self.resolve(kind).describe()
        return [e.describe() for e in self._entries]

    def __contains__(self, kind) -> bool:
        try:
            self.resolve(kind)
        except UnknownSubmissionKindError:
            return False
        return True
