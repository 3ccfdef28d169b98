# intake/schema_generator.py
from typing import Any, Dict

from intake.normalizer import DATE, DECIMAL, FILE, FILES, INTEGER, TIMESTAMP
from intake.schema_registry import SchemaEntry
from intake.sqlite_utils import quote_ident


# --- SQL type mapping ------------------------------------------------------
def _sql_type(field_type: str) -> str:
    if field_type == INTEGER:
        return "INTEGER"
    if field_type == DECIMAL:
        return "DECIMAL"
    if field_type in (DATE, TIMESTAMP):
        return "TIMESTAMP"
    # FILE holds a stored name, FILES a JSON array of stored names
    return "TEXT"


# --- generators ------------------------------------------------------------
def generate_sql_schema(entry: SchemaEntry) -> Dict[str, Any]:
    """
    Generate the CREATE TABLE statement backing a submission kind.
    Returns {"ddl": "...", "fields": {column: sql type}}
    """
    cols = []
    fields = {}
    if entry.id_column:
        cols.append(f"    {quote_ident(entry.id_column)} INTEGER PRIMARY KEY AUTOINCREMENT")
        fields[entry.id_column] = "INTEGER"
    for spec in entry.fields:
        sqltype = _sql_type(spec.type)
        constraint = " NOT NULL" if spec.required else ""
        if spec.type == FILES:
            constraint = " NOT NULL DEFAULT '[]'"
        cols.append(f"    {quote_ident(spec.column)} {sqltype}{constraint}")
        fields[spec.column] = sqltype
    ddl = f"CREATE TABLE IF NOT EXISTS {quote_ident(entry.table_name)} (\n" + ",\n".join(cols) + "\n);"
    return {"ddl": ddl, "fields": fields}


def generate_all(registry) -> str:
    return "\n".join(generate_sql_schema(e)["ddl"] for e in registry.entries())


def file_columns(entry: SchemaEntry):
    return {spec.column: spec.type for spec in entry.fields if spec.type in (FILE, FILES)}
