"""Initialize database (create tables, seed the default campaign). Run: python backend/init_db.py"""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from fundraiser import config
from fundraiser.logging_config import configure_logging
from fundraiser.storage import SqlStore, seed_default_campaign


def init(url=None):
    store = SqlStore.from_url(url or config.database_url())
    return seed_default_campaign(store)


if __name__ == '__main__':
    configure_logging()
    print('Initializing DB...')
    campaign = init()
    print(f'DB initialized. Active campaign: {campaign.campaign_title} (target {campaign.target_amount})')
