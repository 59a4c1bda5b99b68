"""
Admin dashboard endpoints: donation records, manual donations, dashboard stats
and campaign settings
"""
from fastapi import APIRouter, HTTPException, Depends, Body, Query
from fastapi.responses import Response
from typing import List, Optional
import logging

from . import errors, stats, donation_queries, donation_schemas
from .deps import get_store
from .donation_models import utcnow
from .storage import RecordStore, DONATIONS, NEWSLETTER_SUBSCRIBERS, CAMPAIGN_SETTINGS, parse_fields

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


def _query_donations(store, sort_by, order, anonymity, search):
    try:
        donations = store.list_all(DONATIONS)
    except errors.StoreError:
        logger.exception("Failed to fetch donations for admin view")
        raise HTTPException(status_code=500, detail='Failed to fetch donations')
    try:
        items = donation_queries.filter_donations(donations, search=search, anonymity=anonymity)
        return donation_queries.sort_donations(items, sort_by=sort_by, order=order)
    except ValueError as e:
        raise errors.ValidationError('Invalid query parameters', [{'field': None, 'message': str(e)}])


@router.get("/donations", response_model=List[donation_schemas.Donation])
def list_donations(
    sort_by: str = Query('createdAt', alias='sortBy'),
    order: str = Query('desc'),
    anonymity: str = Query('all'),
    search: Optional[str] = None,
    store: RecordStore = Depends(get_store)
):
    """Donation records with search, anonymity filter and sorting"""
    return _query_donations(store, sort_by, order, anonymity, search)


@router.post("/donations", response_model=donation_schemas.Donation, status_code=201)
def add_donation(payload: dict = Body(...), store: RecordStore = Depends(get_store)):
    """Record a donation received outside the website (cash, bank transfer, ...)"""
    data = parse_fields(DONATIONS, payload)
    try:
        donation = store.insert(DONATIONS, data)
    except (errors.ConflictError, errors.StoreError):
        logger.exception("Failed to add donation")
        raise HTTPException(status_code=500, detail='Failed to add donation')
    logger.info("Admin added donation %s of %s", donation.id, donation.amount)
    return donation


@router.get("/donations/export")
def export_donations(
    sort_by: str = Query('createdAt', alias='sortBy'),
    order: str = Query('desc'),
    anonymity: str = Query('all'),
    search: Optional[str] = None,
    store: RecordStore = Depends(get_store)
):
    """Same selection as the list view, as a CSV download"""
    items = _query_donations(store, sort_by, order, anonymity, search)
    filename = f"donations-{utcnow().date().isoformat()}.csv"
    return Response(
        content=donation_queries.donations_to_csv(items),
        media_type='text/csv',
        headers={'Content-Disposition': f'attachment; filename="{filename}"'},
    )


@router.get("/stats", response_model=donation_schemas.AdminStats)
def get_admin_stats(store: RecordStore = Depends(get_store)):
    """Totals plus newsletter count and progress of the active campaign"""
    try:
        donations = store.list_all(DONATIONS)
        newsletter_count = store.count(NEWSLETTER_SUBSCRIBERS)
        campaign = store.get_active_campaign()
    except errors.StoreError:
        logger.exception("Failed to fetch admin stats")
        raise HTTPException(status_code=500, detail='Failed to fetch admin stats')
    totals = stats.compute_donation_stats(donations)
    result = totals._asdict()
    result['newsletter_count'] = newsletter_count
    result['campaign'] = stats.campaign_progress(campaign, totals.total_raised) if campaign else None
    return result


@router.put("/campaign", response_model=donation_schemas.CampaignSettings, status_code=201)
def update_campaign(payload: dict = Body(...), store: RecordStore = Depends(get_store)):
    """Update the active campaign, or create it when none is active"""
    data = parse_fields(CAMPAIGN_SETTINGS, payload)
    try:
        campaign = store.upsert_campaign(data)
    except (errors.ConflictError, errors.StoreError):
        logger.exception("Failed to update campaign settings")
        raise HTTPException(status_code=500, detail='Failed to update campaign settings')
    return campaign
