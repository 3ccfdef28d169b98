# app/db.py — process-wide resources, handed to routes through Depends
import os, logging
from functools import lru_cache

from app.config import get_settings
from intake.asset_store import AssetStore
from intake.credentials import CredentialStore
from intake.forms import REGISTRY
from intake.listings import ListingQueryService
from intake.payments import PaymentOrderGateway
from intake.schema_generator import generate_all
from intake.sqlite_utils import Database
from intake.submission import SubmissionService

logger = logging.getLogger(__name__)


@lru_cache
def get_database() -> Database:
    settings = get_settings()
    db_dir = os.path.dirname(os.path.abspath(settings.database_path))
    os.makedirs(db_dir, exist_ok=True)
    db = Database(settings.database_path, pool_size=settings.pool_size, timeout=settings.pool_timeout)
    db.execute_script(generate_all(REGISTRY))
    logger.info("database ready at %s (%d submission tables)", settings.database_path, len(REGISTRY.entries()))
    return db


@lru_cache
def get_asset_store() -> AssetStore:
    settings = get_settings()
    return AssetStore(settings.upload_dir, url_prefix=settings.upload_url_prefix)


def get_submission_service() -> SubmissionService:
    return SubmissionService(REGISTRY, get_asset_store(), get_database())


def get_listing_service() -> ListingQueryService:
    return ListingQueryService(REGISTRY, get_database())


@lru_cache
def get_credential_store() -> CredentialStore:
    store = CredentialStore(get_database())
    store.ensure_table()
    return store


@lru_cache
def get_payment_gateway() -> PaymentOrderGateway:
    settings = get_settings()
    return PaymentOrderGateway(
        settings.razorpay_key_id,
        settings.razorpay_key_secret,
        api_url=settings.razorpay_api_url,
        timeout=settings.payment_timeout_seconds,
    )


def reset():
    """Drop cached resources (closing the pool); used when settings change."""
    if get_database.cache_info().currsize:
        get_database().close()
    for cached in (get_database, get_asset_store, get_credential_store, get_payment_gateway, get_settings):
        cached.cache_clear()
