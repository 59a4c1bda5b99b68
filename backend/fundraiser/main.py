"""
Donation campaign API.

Run with: uvicorn fundraiser.main:create_app --factory
"""
from fastapi import FastAPI, HTTPException, Depends, Body, Request, APIRouter
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import List
import logging

from . import config, errors, stats
from . import donation_schemas
from .deps import get_store
from .logging_config import configure_logging
from .storage import (
    RecordStore, DONATIONS, NEWSLETTER_SUBSCRIBERS, create_store, parse_fields, seed_default_campaign,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Campaign"])


@router.get('/donations', response_model=List[donation_schemas.Donation])
def list_donations(store: RecordStore = Depends(get_store)):
    try:
        return store.list_all(DONATIONS)
    except errors.StoreError:
        logger.exception("Failed to fetch donations")
        raise HTTPException(status_code=500, detail='Failed to fetch donations')


@router.post('/donations', response_model=donation_schemas.Donation, status_code=201)
def create_donation(payload: dict = Body(...), store: RecordStore = Depends(get_store)):
    data = parse_fields(DONATIONS, payload)
    try:
        return store.insert(DONATIONS, data)
    except (errors.ConflictError, errors.StoreError):
        logger.exception("Failed to create donation")
        raise HTTPException(status_code=500, detail='Failed to create donation')


@router.get('/donations/stats', response_model=donation_schemas.DonationStats)
def get_donation_stats(store: RecordStore = Depends(get_store)):
    try:
        donations = store.list_all(DONATIONS)
    except errors.StoreError:
        logger.exception("Failed to fetch donation stats")
        raise HTTPException(status_code=500, detail='Failed to fetch donation stats')
    return stats.compute_donation_stats(donations)._asdict()


@router.get('/campaign', response_model=donation_schemas.CampaignSettings)
def get_campaign(store: RecordStore = Depends(get_store)):
    try:
        campaign = store.get_active_campaign()
    except errors.StoreError:
        logger.exception("Failed to fetch campaign settings")
        raise HTTPException(status_code=500, detail='Failed to fetch campaign settings')
    if campaign is None:
        raise HTTPException(status_code=404, detail='Campaign not found')
    return campaign


@router.get('/campaign/progress', response_model=donation_schemas.CampaignProgress)
def get_campaign_progress(store: RecordStore = Depends(get_store)):
    """Percent complete, remaining amount and countdown for the active campaign"""
    try:
        campaign = store.get_active_campaign()
        donations = store.list_all(DONATIONS) if campaign is not None else []
    except errors.StoreError:
        logger.exception("Failed to fetch campaign progress")
        raise HTTPException(status_code=500, detail='Failed to fetch campaign progress')
    if campaign is None:
        raise HTTPException(status_code=404, detail='Campaign not found')
    totals = stats.compute_donation_stats(donations)
    return stats.campaign_progress(campaign, totals.total_raised)


@router.post('/newsletter/subscribe', response_model=donation_schemas.NewsletterSubscriber, status_code=201)
def subscribe_newsletter(payload: dict = Body(...), store: RecordStore = Depends(get_store)):
    data = parse_fields(NEWSLETTER_SUBSCRIBERS, payload)
    try:
        return store.insert(NEWSLETTER_SUBSCRIBERS, data)
    except errors.ConflictError as e:
        # duplicates are reported like any other failure
        logger.warning("Newsletter subscription rejected: %s", e.message)
        raise HTTPException(status_code=500, detail='Failed to subscribe to newsletter')
    except errors.StoreError:
        logger.exception("Failed to subscribe to newsletter")
        raise HTTPException(status_code=500, detail='Failed to subscribe to newsletter')


async def validation_error_handler(request: Request, exc: errors.ValidationError):
    return JSONResponse(status_code=400, content={'detail': exc.message, 'errors': exc.errors})


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={'detail': 'Invalid request data', 'errors': errors.field_errors(exc.errors())},
    )


async def not_found_handler(request: Request, exc: errors.NotFoundError):
    return JSONResponse(status_code=404, content={'detail': exc.message})


async def conflict_error_handler(request: Request, exc: errors.ConflictError):
    logger.warning("Unhandled conflict on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=500, content={'detail': 'Internal server error'})


async def store_error_handler(request: Request, exc: errors.StoreError):
    logger.error("Unhandled store failure on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=500, content={'detail': 'Internal server error'})


def create_app(store: RecordStore = None) -> FastAPI:
    """Build the API around an explicitly constructed store.

    Without a store one is created from STORE_BACKEND / DATABASE_URL and the
    default campaign is seeded if no campaign is active.
    """
    configure_logging()
    if store is None:
        store = create_store()
        seed_default_campaign(store)

    app = FastAPI(title="Fundraiser API")
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(errors.ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(errors.NotFoundError, not_found_handler)
    app.add_exception_handler(errors.ConflictError, conflict_error_handler)
    app.add_exception_handler(errors.StoreError, store_error_handler)

    app.include_router(router)

    from .admin_routes import router as admin_router
    app.include_router(admin_router)

    logger.info("Fundraiser API ready (%s)", type(store).__name__)
    return app
