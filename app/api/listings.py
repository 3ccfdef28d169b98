# app/api/listings.py
from fastapi import APIRouter, Depends, Query
from typing import Optional

from app.db import get_listing_service
from app.models import ErrorResponse, ListingResponse, ListingsResponse
from intake.forms import SubmissionKind
from intake.listings import ListingQueryService

router = APIRouter()

DEFAULT_KIND = SubmissionKind.FREELANCE.value


@router.get("/listings", response_model=ListingsResponse, responses={400: {"model": ErrorResponse}})
@router.get("/api/freelance/projects", response_model=ListingsResponse, include_in_schema=False)
def list_projects(kind: str = Query(DEFAULT_KIND), service: ListingQueryService = Depends(get_listing_service)):
    return {"projects": service.list_all(kind)}


@router.get("/listings/search", response_model=ListingsResponse, responses={400: {"model": ErrorResponse}})
@router.get("/api/freelance/search", response_model=ListingsResponse, include_in_schema=False)
def search_projects(
    searchTerm: Optional[str] = Query(None),
    kind: str = Query(DEFAULT_KIND),
    service: ListingQueryService = Depends(get_listing_service),
):
    return {"projects": service.search(kind, searchTerm)}


@router.get("/listings/{key}", response_model=ListingResponse, responses={404: {"model": ErrorResponse}})
@router.get("/api/viewdetail/{key}", response_model=ListingResponse, include_in_schema=False)
def view_project(key: str, kind: str = Query(DEFAULT_KIND), service: ListingQueryService = Depends(get_listing_service)):
    return {"project": service.get_by_natural_key(kind, key)}
