"""
Admin views over the donation list: search, anonymity filter, sorting and CSV export.
"""
import csv
import io
from decimal import Decimal
from typing import Iterable, List, Optional

SORT_FIELDS = {
    'createdAt': 'created_at',
    'created_at': 'created_at',
    'amount': 'amount',
    'donorName': 'donor_name',
    'donor_name': 'donor_name',
}
ANONYMITY_FILTERS = ('all', 'anonymous', 'named')
CSV_HEADERS = ['Date', 'Donor Name', 'Email', 'Amount', 'Message', 'Anonymous']


def _matches(donation, needle: str) -> bool:
    for value in (donation.donor_name, donation.email, donation.message):
        if value and needle in value.lower():
            return True
    return needle in str(donation.amount)


def filter_donations(donations: Iterable, search: Optional[str] = None, anonymity: str = 'all') -> List:
    if anonymity not in ANONYMITY_FILTERS:
        raise ValueError(f"anonymity must be one of {', '.join(ANONYMITY_FILTERS)}")
    items = list(donations)
    if anonymity == 'anonymous':
        items = [d for d in items if d.is_anonymous]
    elif anonymity == 'named':
        items = [d for d in items if not d.is_anonymous]
    if search and search.strip():
        needle = search.strip().lower()
        items = [d for d in items if _matches(d, needle)]
    return items


def sort_donations(donations: Iterable, sort_by: str = 'createdAt', order: str = 'desc') -> List:
    if sort_by not in SORT_FIELDS:
        raise ValueError(f"sortBy must be one of {', '.join(sorted(SORT_FIELDS))}")
    if order not in ('asc', 'desc'):
        raise ValueError("order must be asc or desc")
    attr = SORT_FIELDS[sort_by]

    def key(d):
        value = getattr(d, attr)
        if attr == 'donor_name':
            # missing names sort as empty strings
            return (value or '').lower()
        return value if value is not None else Decimal('0')

    return sorted(donations, key=key, reverse=(order == 'desc'))


def donations_to_csv(donations: Iterable) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator='\n')
    writer.writerow(CSV_HEADERS)
    for d in donations:
        writer.writerow([
            d.created_at.strftime('%Y-%m-%d %H:%M') if d.created_at else '',
            'Anonymous' if d.is_anonymous else (d.donor_name or ''),
            d.email or '',
            str(d.amount),
            d.message or '',
            'Yes' if d.is_anonymous else 'No',
        ])
    return buf.getvalue()
