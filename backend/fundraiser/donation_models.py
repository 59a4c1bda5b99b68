from sqlalchemy import Column, String, Text, Numeric, Boolean, DateTime
from .database import Base
import datetime
import uuid


def utcnow():
    """Naive UTC timestamp; every stored datetime uses this convention."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def to_naive_utc(value):
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(datetime.timezone.utc).replace(tzinfo=None)


def new_id():
    return uuid.uuid4().hex


class Donation(Base):
    __tablename__ = 'donations'
    id = Column(String(32), primary_key=True, default=new_id)
    donor_name = Column(Text, nullable=True)  # null when anonymous
    email = Column(Text, nullable=True)
    amount = Column(Numeric(10, 2), nullable=False)
    message = Column(Text, nullable=True)
    is_anonymous = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class CampaignSettings(Base):
    """Fundraising goal; at most one row has is_active set"""
    __tablename__ = 'campaign_settings'
    id = Column(String(32), primary_key=True, default=new_id)
    target_amount = Column(Numeric(10, 2), nullable=False)
    campaign_title = Column(Text, nullable=False)
    end_date = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, index=True)


class NewsletterSubscriber(Base):
    __tablename__ = 'newsletter_subscribers'
    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String(320), nullable=False, unique=True, index=True)
    subscribed_at = Column(DateTime, default=utcnow, index=True)
