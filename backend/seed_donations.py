"""
Seed script to populate sample donations and subscribers for local development.
Run: python backend/seed_donations.py
"""
import sys
from pathlib import Path

# Add backend to path
backend_path = Path(__file__).resolve().parent
sys.path.insert(0, str(backend_path))

from fundraiser import config, errors
from fundraiser.storage import DONATIONS, NEWSLETTER_SUBSCRIBERS, SqlStore, seed_default_campaign

SAMPLE_DONATIONS = [
    {"donor_name": "Tatenda M.", "email": "tatenda@gmail.com", "amount": "50.00", "message": "Keep up the great work!"},
    {"donor_name": "Grace N.", "amount": "25.00", "message": "For school shoes"},
    {"amount": "100.00", "is_anonymous": True, "message": "Every child deserves a chance"},
    {"donor_name": "Peter K.", "email": "peterk@outlook.com", "amount": "15.50"},
    {"donor_name": "Rumbi S.", "amount": "200.00", "message": "From the whole family"},
]

SAMPLE_SUBSCRIBERS = ["tatenda@gmail.com", "grace.n@yahoo.com", "peterk@outlook.com"]


def seed(url=None):
    store = SqlStore.from_url(url or config.database_url())
    campaign = seed_default_campaign(store)
    print(f"Campaign: {campaign.campaign_title} (target {campaign.target_amount})")

    for d in SAMPLE_DONATIONS:
        donation = store.insert(DONATIONS, d)
        print(f"Added donation {donation.amount} ({donation.donor_name or 'anonymous'})")

    for email in SAMPLE_SUBSCRIBERS:
        try:
            store.insert(NEWSLETTER_SUBSCRIBERS, {"email": email})
            print(f"Subscribed: {email}")
        except errors.ConflictError:
            print(f"Skipped (exists): {email}")

    print("\nSeeding completed!")


if __name__ == "__main__":
    seed()
