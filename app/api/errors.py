# app/api/errors.py
from fastapi import APIRouter, HTTPException
import os, json, uuid, datetime, traceback, logging

from app.config import get_settings

router = APIRouter()
logger = logging.getLogger(__name__)


def _error_log_path() -> str:
    return os.path.join(get_settings().store_dir, "errors.log")


def log_exception(exc: BaseException, context: dict = None) -> str:
    """Append traceback + context to store/errors.log and return the entry id."""
    err_id = f"err_{uuid.uuid4().hex[:8]}"
    now = datetime.datetime.now(datetime.timezone.utc).isoformat().replace("+00:00", "Z")
    entry = {
        "id": err_id,
        "time": now,
        "context": context or {},
        "exc_type": type(exc).__name__,
        "exc_str": str(exc),
        "traceback": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
    }
    path = _error_log_path()
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, ensure_ascii=False, default=str) + "\n")
    except OSError:
        logger.exception("failed to write error log entry %s", err_id)
    return err_id


@router.get("/last_error")
def last_error():
    path = _error_log_path()
    if not os.path.exists(path):
        raise HTTPException(status_code=404, detail="no error log")
    last = None
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                last = json.loads(line)
            except ValueError:
                # skip non-json lines
                continue
    if last is None:
        raise HTTPException(status_code=404, detail="no json errors found")
    last.pop("traceback", None)
    return last
