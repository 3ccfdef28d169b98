# app/main.py
import datetime, logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.api.auth import router as auth_router
from app.api.errors import log_exception, router as errors_router
from app.api.listings import router as listings_router
from app.api.payments import router as payments_router
from app.api.schema import router as schema_router
from app.api.submit import router as submit_router
from app.config import get_settings
from app.logging_setup import configure_logging
from intake.errors import AssetWriteError, IntakeError, PersistenceError

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Form Intake Service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
    allow_credentials=True,
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


@app.exception_handler(IntakeError)
async def intake_error_handler(request: Request, exc: IntakeError):
    if exc.status_code >= 500:
        context = {"path": request.url.path, "method": request.method}
        if isinstance(exc, PersistenceError):
            context.update({"table": exc.table, "orphaned_assets": exc.orphaned_assets})
        log_exception(exc, context=context)
        if isinstance(exc, AssetWriteError):
            # strerror text stays in errors.log
            return _error(exc.status_code, "Could not store uploaded files")
    return _error(exc.status_code, exc.message)


@app.exception_handler(HTTPException)
async def http_exception_handler(_: Request, exc: HTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        where = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        problems.append(f"{where}: {err.get('msg')}" if where else str(err.get("msg")))
    return _error(400, "; ".join(problems) or "invalid request")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    log_exception(exc, context={"path": request.url.path, "method": request.method})
    return _error(500, "Internal server error")


# login and payment routes must be matched before the catch-all /api/{kind}
app.include_router(auth_router, prefix="")
app.include_router(payments_router, prefix="")
app.include_router(listings_router, prefix="")
app.include_router(submit_router, prefix="")
app.include_router(schema_router, prefix="")
app.include_router(errors_router, prefix="")

app.mount(settings.upload_url_prefix, StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")


@app.get("/health")
async def health():
    return {"status": "ok", "time": datetime.datetime.now(datetime.timezone.utc).isoformat().replace("+00:00", "Z")}
