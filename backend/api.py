from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query
from fastapi.encoders import jsonable_encoder
from typing import Any, Optional
from pathlib import Path
import math

from dotenv import load_dotenv

load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env", override=False)


def _sanitize(value: Any) -> Any:
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, dict):
        return {k: _sanitize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_sanitize(item) for item in value]
    return value

from .db.repo import Repo, get_repository
from .db.store import QueryError, StoreError
from .models.flat import ApartmentDetails, Flat, InquiryRequest, InquiryResponse, Testimonial
from .services.filters import FilterState, build_flat_query
from .utils.logging import get_logger

LOGGER = get_logger("api")

app = FastAPI(title="Apartment listing relay")
router = APIRouter(prefix="/api")


@router.get("/flats")
def list_flats(
    offerType: Optional[str] = Query(None),
    flatType: Optional[str] = Query(None),
    minPrice: Optional[str] = Query(None),
    maxPrice: Optional[str] = Query(None),
    sortBy: Optional[str] = Query(None),
    searchTerm: Optional[str] = Query(None),
    repo: Repo = Depends(get_repository),
):
    filters = FilterState()
    filters.apply(
        {
            "offerType": offerType,
            "flatType": flatType,
            "minPrice": minPrice,
            "maxPrice": maxPrice,
            "sortBy": sortBy,
            "searchTerm": searchTerm,
        }
    )
    try:
        rows = repo.list_flats(build_flat_query(filters))
    except (StoreError, QueryError) as exc:
        LOGGER.error("Error fetching flats: %s", exc)
        raise HTTPException(500, detail="Failed to fetch apartments")
    return jsonable_encoder([Flat(**_sanitize(row)) for row in rows], by_alias=True)


@router.get("/flats/{flat_id}")
def get_flat(flat_id: str, repo: Repo = Depends(get_repository)):
    try:
        row = repo.get_flat(flat_id)
    except StoreError as exc:
        LOGGER.error("Error fetching flat %s: %s", flat_id, exc)
        raise HTTPException(500, detail="Failed to fetch apartment")
    if row is None:
        raise HTTPException(404, detail="Apartment not found")
    return jsonable_encoder(Flat(**_sanitize(row)), by_alias=True)


@router.post("/inquiries", status_code=201)
def submit_inquiry(req: InquiryRequest, repo: Repo = Depends(get_repository)):
    if not req.is_complete():
        raise HTTPException(400, detail="All fields are required")
    try:
        repo.add_inquiry(req.name.strip(), req.email.strip(), req.message.strip())
    except StoreError as exc:
        LOGGER.error("Error submitting inquiry: %s", exc)
        raise HTTPException(500, detail="Failed to submit inquiry")
    return jsonable_encoder(InquiryResponse())


@router.get("/apartment")
def apartment_details(repo: Repo = Depends(get_repository)):
    try:
        details = repo.get_apartment_details()
    except StoreError as exc:
        LOGGER.error("Error fetching apartment details: %s", exc)
        raise HTTPException(500, detail="Failed to fetch apartment details")
    return jsonable_encoder(ApartmentDetails(**details) if details else ApartmentDetails(), by_alias=True)


@router.get("/testimonials")
def testimonials(repo: Repo = Depends(get_repository)):
    try:
        rows = repo.list_testimonials()
    except StoreError as exc:
        LOGGER.error("Error fetching testimonials: %s", exc)
        raise HTTPException(500, detail="Failed to fetch testimonials")
    return jsonable_encoder([Testimonial(**row) for row in rows])


@router.get("/health")
def health(): return {"status":"ok"}

app.include_router(router)
