# app/api/auth.py
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import logging

from app.db import get_credential_store
from app.models import LoginRequest, LoginResponse
from intake.credentials import CredentialStore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/api/login", response_model=LoginResponse, responses={401: {"model": LoginResponse}})
def login(payload: LoginRequest, store: CredentialStore = Depends(get_credential_store)):
    if not store.verify_credentials(payload.username, payload.password):
        logger.info("rejected login for %r", payload.username)
        return JSONResponse(
            status_code=401,
            content=LoginResponse(isAuthenticated=False, message="Invalid username or password").model_dump(),
        )
    return LoginResponse(isAuthenticated=True, message="Login successful")
