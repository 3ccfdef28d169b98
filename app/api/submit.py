# app/api/submit.py
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from typing import Any, Dict, List, Tuple
import json

from app.db import get_submission_service
from app.models import ErrorResponse, SubmitResponse
from intake.asset_store import UploadedBlob
from intake.errors import ValidationError
from intake.submission import SubmissionService

router = APIRouter()

_ERRORS = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


def _add_value(fields: Dict[str, Any], key: str, value: str):
    # repeated form keys (checkbox groups) become lists
    if key in fields:
        prev = fields[key]
        fields[key] = (prev if isinstance(prev, list) else [prev]) + [value]
    else:
        fields[key] = value


async def read_submission(request: Request) -> Tuple[Dict[str, Any], List[UploadedBlob]]:
    """Accept multipart / urlencoded forms or a JSON object body."""
    content_type = request.headers.get("content-type", "")
    fields: Dict[str, Any] = {}
    blobs: List[UploadedBlob] = []
    if "multipart/form-data" in content_type or "application/x-www-form-urlencoded" in content_type:
        form = await request.form()
        try:
            for key, value in form.multi_items():
                if isinstance(value, UploadFile):
                    content = await value.read()
                    if not value.filename and not content:
                        # file input left empty by the browser
                        continue
                    blobs.append(UploadedBlob(
                        field_name=key,
                        original_name=value.filename or key,
                        content=content,
                        content_type=value.content_type,
                    ))
                else:
                    _add_value(fields, key, value)
        finally:
            await form.close()
    else:
        body = await request.body()
        if body.strip():
            try:
                data = json.loads(body.decode("utf-8"))
            except (UnicodeDecodeError, ValueError):
                raise ValidationError("request body is not valid JSON")
            if not isinstance(data, dict):
                raise ValidationError("request body must be a JSON object")
            fields = data
    return fields, blobs


@router.post("/submit-{kind}", response_model=SubmitResponse, status_code=201, responses=_ERRORS)
@router.post("/api/{kind}", response_model=SubmitResponse, status_code=201, responses=_ERRORS)
async def submit(kind: str, request: Request, service: SubmissionService = Depends(get_submission_service)):
    # unknown kinds are rejected before the body is read
    service.registry.resolve(kind)
    fields, blobs = await read_submission(request)
    result = await run_in_threadpool(service.submit, kind, fields, blobs)
    body = SubmitResponse(id=result.id, record=result.summary())
    status_code = 201 if result.id is not None else 200
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))
