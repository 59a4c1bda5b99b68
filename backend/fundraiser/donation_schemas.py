from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from decimal import Decimal
from typing import Optional
import datetime

from .donation_models import to_naive_utc

CENTS = Decimal('0.01')


class CamelModel(BaseModel):
    # JSON uses camelCase; snake_case is accepted on input too
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def _blank_to_none(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


class DonationCreate(CamelModel):
    donor_name: Optional[str] = None
    email: Optional[EmailStr] = None
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    message: Optional[str] = None
    is_anonymous: bool = False

    @field_validator('donor_name', 'email', 'message', mode='before')
    @classmethod
    def _blank_optional(cls, v):
        return _blank_to_none(v)

    @field_validator('amount')
    @classmethod
    def _to_cents(cls, v: Decimal) -> Decimal:
        return v.quantize(CENTS)

    @model_validator(mode='after')
    def _drop_name_when_anonymous(self):
        if self.is_anonymous:
            self.donor_name = None
        return self


class Donation(CamelModel):
    id: str
    donor_name: Optional[str] = None
    email: Optional[str] = None
    amount: Decimal
    message: Optional[str] = None
    is_anonymous: bool
    created_at: datetime.datetime
    updated_at: Optional[datetime.datetime] = None


class DonationStats(CamelModel):
    total_raised: Decimal
    donor_count: int
    average_donation: Decimal
    largest_donation: Decimal = Decimal('0')


class CampaignSettingsUpdate(CamelModel):
    campaign_title: str = Field(..., min_length=1)
    target_amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    end_date: Optional[datetime.datetime] = None
    is_active: bool = True

    @field_validator('campaign_title', mode='before')
    @classmethod
    def _strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator('end_date', mode='before')
    @classmethod
    def _empty_end_date(cls, v):
        return _blank_to_none(v)

    @field_validator('end_date')
    @classmethod
    def _end_date_utc(cls, v):
        return to_naive_utc(v)

    @field_validator('target_amount')
    @classmethod
    def _to_cents(cls, v: Decimal) -> Decimal:
        return v.quantize(CENTS)


class CampaignSettings(CamelModel):
    id: str
    target_amount: Decimal
    campaign_title: str
    end_date: Optional[datetime.datetime] = None
    is_active: bool
    created_at: datetime.datetime


class Countdown(CamelModel):
    days: int
    hours: int
    minutes: int
    seconds: int


class CampaignProgress(CamelModel):
    """Derived display values for the active campaign"""
    campaign_title: str
    target_amount: Decimal
    total_raised: Decimal
    progress_percentage: Decimal
    remaining_amount: Decimal
    end_date: Optional[datetime.datetime] = None
    countdown: Countdown


class NewsletterSubscribe(CamelModel):
    email: EmailStr

    @field_validator('email', mode='before')
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator('email')
    @classmethod
    def _lower(cls, v):
        return v.lower()


class NewsletterSubscriber(CamelModel):
    id: str
    email: str
    subscribed_at: datetime.datetime


class AdminStats(DonationStats):
    newsletter_count: int
    campaign: Optional[CampaignProgress] = None
