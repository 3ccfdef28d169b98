# intake/normalizer.py
import re, math, datetime
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from dateutil import parser as dateparser

from intake.errors import ValidationError

TEXT = "text"
INTEGER = "integer"
DECIMAL = "decimal"
DATE = "date"
TIMESTAMP = "timestamp"   # filled at ingestion time, never read from input
FILE = "file"             # one attachment, column holds the stored name
FILES = "files"           # 0..N attachments, column holds a JSON array of stored names

FIELD_TYPES = (TEXT, INTEGER, DECIMAL, DATE, TIMESTAMP, FILE, FILES)
FILE_TYPES = (FILE, FILES)

# explicit "user left it blank" marker
NO_VALUE = None

_RE_INT = re.compile(r'^[+-]?[0-9]+$')
_RE_DECIMAL = re.compile(r'^[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$')
_DEFAULT_A = datetime.datetime(2000, 1, 1)
_DEFAULT_B = datetime.datetime(2001, 2, 2)


@dataclass(frozen=True)
class FieldSpec:
    column: str
    source: Optional[str] = None
    type: str = TEXT
    required: bool = False
    max_files: int = 1

    @property
    def form_name(self) -> str:
        return self.source or self.column

    @property
    def is_file(self) -> bool:
        return self.type in FILE_TYPES


class _Invalid(Exception):
    pass


def _blank_to_none(value):
    # plain string check: "0" and "false" are meaningful values
    if isinstance(value, str) and value == "":
        return NO_VALUE
    if isinstance(value, list):
        return [_blank_to_none(v) for v in value]
    return value


def _scalar(value):
    if isinstance(value, list):
        if len(value) == 1:
            return value[0]
        if not value:
            return NO_VALUE
        raise _Invalid("multiple values")
    return value


def _to_int(value):
    if isinstance(value, bool):
        raise _Invalid("boolean")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _RE_INT.match(value.strip()):
        return int(value.strip(), 10)
    raise _Invalid(value)


def _to_decimal(value):
    if isinstance(value, bool):
        raise _Invalid("boolean")
    if isinstance(value, str):
        if not _RE_DECIMAL.match(value.strip()):
            raise _Invalid(value)
        value = value.strip()
    try:
        f = float(value)
    except (TypeError, ValueError):
        raise _Invalid(value)
    if not math.isfinite(f):
        raise _Invalid(value)
    return f


def _to_date(value):
    value = _to_text(value)
    try:
        # parts missing from the input come from the default; two defaults that
        # differ in year, month and day expose partial dates such as "March"
        first = dateparser.parse(value, default=_DEFAULT_A).date()
        second = dateparser.parse(value, default=_DEFAULT_B).date()
    except (ValueError, OverflowError):
        # free text such as "next weekend" is kept as typed
        return value
    if first != second:
        return value
    return first.isoformat()


def _to_text(value):
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return [v if v is None else _to_text(v) for v in value]
    if isinstance(value, str):
        return value
    return str(value)


_COERCE = {
    INTEGER: _to_int,
    DECIMAL: _to_decimal,
    DATE: _to_date,
}


def coerce(spec: FieldSpec, value):
    """Apply the coercion rule of spec to an already blank-normalized value."""
    if value is NO_VALUE:
        return NO_VALUE
    if spec.type == TEXT:
        return _to_text(value)
    value = _scalar(value)
    if value is NO_VALUE:
        return NO_VALUE
    return _COERCE[spec.type](value)


class FieldNormalizer:
    """
    Maps a raw form record (field name -> str or list of str) onto a canonical
    record keyed by column name.

    Declared fields are looked up by their form name first and their column
    name second, so normalizing a canonical record is a no-op. Undeclared keys
    pass through with only the blank-to-None rule applied. File and timestamp
    columns are left to the caller.
    """
    def __init__(self, fields: Iterable[FieldSpec]):
        self.fields = [f for f in fields if not f.is_file]

    def normalize(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        raw = raw or {}
        record = {}
        consumed = set()
        missing: List[str] = []
        invalid: List[str] = []

        for spec in self.fields:
            if spec.type == TIMESTAMP:
                record[spec.column] = NO_VALUE
                consumed.update((spec.form_name, spec.column))
                continue
            if spec.form_name in raw:
                value = raw[spec.form_name]
            else:
                value = raw.get(spec.column, NO_VALUE)
            consumed.update((spec.form_name, spec.column))
            value = _blank_to_none(value)
            try:
                value = coerce(spec, value)
            except _Invalid:
                if spec.required:
                    invalid.append(spec.form_name)
                value = NO_VALUE
            if value is NO_VALUE and spec.required and spec.form_name not in invalid:
                missing.append(spec.form_name)
            record[spec.column] = value

        for key, value in raw.items():
            if key not in consumed:
                record[key] = _blank_to_none(value)

        if missing or invalid:
            parts = []
            if missing:
                parts.append("missing required field(s): " + ", ".join(missing))
            if invalid:
                parts.append("invalid value for: " + ", ".join(invalid))
            raise ValidationError("; ".join(parts))
        return record
