# app/api/schema.py
from fastapi import APIRouter, Query
from typing import Optional

from intake.forms import REGISTRY

router = APIRouter()


@router.get("/schema")
def get_schema(kind: Optional[str] = Query(None)):
    """Describe one submission kind, or every registered kind when none is given."""
    if kind:
        return REGISTRY.describe(kind)
    return {"kinds": REGISTRY.describe()}
