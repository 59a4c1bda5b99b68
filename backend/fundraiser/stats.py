"""
Donation totals and campaign progress.

Everything here is a pure function of its arguments. Totals are recomputed
from the full donation set on every call; there is no running counter to
keep in sync with the store.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, NamedTuple, Optional, Tuple
import datetime

from .donation_models import utcnow, to_naive_utc

ZERO = Decimal('0')
HUNDRED = Decimal('100')
CENTS = Decimal('0.01')


class DonationTotals(NamedTuple):
    total_raised: Decimal
    donor_count: int
    average_donation: Decimal
    largest_donation: Decimal


class Countdown(NamedTuple):
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0


def _cents(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_donation_stats(donations: Iterable) -> DonationTotals:
    """Sum, count, average and maximum of the donation amounts.

    Anonymous donations count like any other record. An empty set gives
    zeros across the board.
    """
    amounts = [Decimal(d.amount) for d in donations]
    total = sum(amounts, ZERO)
    count = len(amounts)
    if count == 0:
        return DonationTotals(ZERO, 0, ZERO, ZERO)
    return DonationTotals(
        total_raised=total,
        donor_count=count,
        average_donation=_cents(total / count),
        largest_donation=max(amounts),
    )


def compute_progress(target_amount: Decimal, total_raised: Decimal) -> Tuple[Decimal, Decimal]:
    """Return (progress_percentage, remaining_amount).

    The percentage is clamped to [0, 100] and is 0 for a non-positive
    target; the remaining amount never goes below 0.
    """
    target = Decimal(target_amount)
    raised = Decimal(total_raised)
    if target > 0:
        pct = _cents(raised / target * HUNDRED)
        pct = max(ZERO, min(HUNDRED, pct))
    else:
        pct = ZERO
    remaining = max(ZERO, target - raised)
    return pct, remaining


def campaign_progress(campaign, total_raised: Decimal, now: Optional[datetime.datetime] = None) -> dict:
    """Progress and countdown for a campaign record, as a plain dict."""
    pct, remaining = compute_progress(campaign.target_amount, total_raised)
    return {
        'campaign_title': campaign.campaign_title,
        'target_amount': campaign.target_amount,
        'total_raised': total_raised,
        'progress_percentage': pct,
        'remaining_amount': remaining,
        'end_date': campaign.end_date,
        'countdown': compute_countdown(campaign.end_date, now)._asdict(),
    }


def compute_countdown(end_date: Optional[datetime.datetime], now: Optional[datetime.datetime] = None) -> Countdown:
    """Time left until end_date, truncated at each unit."""
    if end_date is None:
        return Countdown()
    now = to_naive_utc(now) if now is not None else utcnow()
    remaining = to_naive_utc(end_date) - now
    if remaining <= datetime.timedelta(0):
        return Countdown()
    total_seconds = remaining // datetime.timedelta(seconds=1)
    days, rest = divmod(total_seconds, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    return Countdown(days, hours, minutes, seconds)
