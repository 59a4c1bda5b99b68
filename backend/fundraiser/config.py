"""
Runtime configuration read from environment variables.
Values are read at call time so tests can monkeypatch the environment.
"""
import os
from decimal import Decimal
from typing import List, Optional
import datetime


def database_url() -> str:
    # Default to a sqlite file in the working directory for dev.
    return os.getenv('DATABASE_URL', 'sqlite:///./fundraiser.db')


def store_backend() -> str:
    """'sql' (default) or 'memory'."""
    return os.getenv('STORE_BACKEND', 'sql').strip().lower()


def log_level() -> str:
    return os.getenv('LOG_LEVEL', 'INFO').upper()


def cors_origins() -> List[str]:
    raw = os.getenv('CORS_ORIGINS', '*')
    return [o.strip() for o in raw.split(',') if o.strip()]


def default_campaign_title() -> str:
    return os.getenv('DEFAULT_CAMPAIGN_TITLE', 'Chinpangura Outreach - Helping Underprivileged Kids')


def default_target_amount() -> Decimal:
    return Decimal(os.getenv('DEFAULT_TARGET_AMOUNT', '4000.00'))


def default_campaign_end_date() -> Optional[datetime.datetime]:
    raw = os.getenv('DEFAULT_CAMPAIGN_END_DATE')
    if not raw:
        return None
    # fromisoformat does not accept a trailing Z before 3.11
    return datetime.datetime.fromisoformat(raw.replace('Z', '+00:00'))


def client_base_url() -> str:
    return os.getenv('CAMPAIGN_API_URL', 'http://localhost:8000')


def client_timeout() -> float:
    return float(os.getenv('CAMPAIGN_API_TIMEOUT', '10'))


# poll intervals in seconds
def stats_poll_interval() -> float:
    return float(os.getenv('STATS_POLL_INTERVAL', '5'))


def donations_poll_interval() -> float:
    return float(os.getenv('DONATIONS_POLL_INTERVAL', '30'))


COUNTDOWN_INTERVAL = 1.0
