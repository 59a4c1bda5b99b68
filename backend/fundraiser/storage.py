"""
Record store for donations, campaign settings and newsletter subscribers.

Two interchangeable implementations share one contract:

- MemoryStore keeps records in process memory (lost on restart)
- SqlStore persists them through SQLAlchemy (sqlite for dev, Postgres in production)

Stores are constructed explicitly and handed to the web app; there is no
module-level store instance.
"""
import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Union

import pydantic
from sqlalchemy import func, inspect
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from . import config, errors
from . import donation_models, donation_schemas
from .database import init_db, make_engine, make_session_factory

logger = logging.getLogger(__name__)

DONATIONS = 'donations'
CAMPAIGN_SETTINGS = 'campaign_settings'
NEWSLETTER_SUBSCRIBERS = 'newsletter_subscribers'

MODELS = {
    DONATIONS: donation_models.Donation,
    CAMPAIGN_SETTINGS: donation_models.CampaignSettings,
    NEWSLETTER_SUBSCRIBERS: donation_models.NewsletterSubscriber,
}

# creation-time column used for newest-first ordering
CREATED_FIELD = {
    DONATIONS: 'created_at',
    CAMPAIGN_SETTINGS: 'created_at',
    NEWSLETTER_SUBSCRIBERS: 'subscribed_at',
}

INPUT_SCHEMAS = {
    DONATIONS: donation_schemas.DonationCreate,
    CAMPAIGN_SETTINGS: donation_schemas.CampaignSettingsUpdate,
    NEWSLETTER_SUBSCRIBERS: donation_schemas.NewsletterSubscribe,
}

INVALID_MESSAGES = {
    DONATIONS: 'Invalid donation data',
    CAMPAIGN_SETTINGS: 'Invalid campaign settings',
    NEWSLETTER_SUBSCRIBERS: 'Invalid email address',
}

Fields = Union[Dict[str, Any], pydantic.BaseModel]


def _check_entity(entity: str):
    if entity not in MODELS:
        raise ValueError(f"Unknown entity: {entity!r}")


def _detached(record):
    # callers get a copy; the held instance is only changed under the lock
    mapper = inspect(type(record))
    return type(record)(**{attr.key: getattr(record, attr.key) for attr in mapper.column_attrs})


def parse_fields(entity: str, fields: Fields) -> Dict[str, Any]:
    """Run fields through the entity's input schema, return snake_case values."""
    _check_entity(entity)
    if isinstance(fields, pydantic.BaseModel):
        fields = fields.model_dump()
    try:
        parsed = INPUT_SCHEMAS[entity].model_validate(fields)
    except pydantic.ValidationError as e:
        raise errors.ValidationError(INVALID_MESSAGES[entity], errors.field_errors(e.errors())) from e
    return parsed.model_dump()


class RecordStore:
    """Contract shared by all store implementations."""

    def list_all(self, entity: str) -> List[Any]:
        """All records of an entity, newest first."""
        raise NotImplementedError

    def insert(self, entity: str, fields: Fields):
        """Validate and insert one record; returns it with id and timestamps set."""
        raise NotImplementedError

    def count(self, entity: str) -> int:
        raise NotImplementedError

    def get_active_campaign(self) -> Optional[donation_models.CampaignSettings]:
        raise NotImplementedError

    def upsert_campaign(self, fields: Fields) -> donation_models.CampaignSettings:
        """Update the active campaign in place, or insert one if none is active."""
        raise NotImplementedError


class MemoryStore(RecordStore):
    """Volatile store; records live for the lifetime of the instance."""

    def __init__(self):
        self._records = {entity: [] for entity in MODELS}
        self._lock = threading.Lock()

    def list_all(self, entity):
        _check_entity(entity)
        key = CREATED_FIELD[entity]
        with self._lock:
            # reversed first so that equal timestamps keep newest-inserted first
            items = [_detached(r) for r in reversed(self._records[entity])]
        return sorted(items, key=lambda r: getattr(r, key), reverse=True)

    def insert(self, entity, fields):
        data = parse_fields(entity, fields)
        now = donation_models.utcnow()
        with self._lock:
            if entity == NEWSLETTER_SUBSCRIBERS:
                if any(s.email == data['email'] for s in self._records[entity]):
                    raise errors.ConflictError(f"Email already subscribed: {data['email']}")
                data['subscribed_at'] = now
            elif entity == DONATIONS:
                data['created_at'] = now
                data['updated_at'] = now
            else:
                data['created_at'] = now
                if data.get('is_active'):
                    self._deactivate_campaigns()
            record = MODELS[entity](id=donation_models.new_id(), **data)
            self._records[entity].append(record)
            record = _detached(record)
        logger.info("Inserted %s record %s", entity, record.id)
        return record

    def count(self, entity):
        _check_entity(entity)
        with self._lock:
            return len(self._records[entity])

    def get_active_campaign(self):
        active = [c for c in self.list_all(CAMPAIGN_SETTINGS) if c.is_active]
        return active[0] if active else None

    def upsert_campaign(self, fields):
        data = parse_fields(CAMPAIGN_SETTINGS, fields)
        with self._lock:
            current = next((c for c in reversed(self._records[CAMPAIGN_SETTINGS]) if c.is_active), None)
            if current is not None:
                for k, v in data.items():
                    setattr(current, k, v)
                logger.info("Updated campaign settings %s", current.id)
                return _detached(current)
        return self.insert(CAMPAIGN_SETTINGS, data)

    def _deactivate_campaigns(self):
        # caller holds the lock
        for c in self._records[CAMPAIGN_SETTINGS]:
            c.is_active = False


class SqlStore(RecordStore):
    """Durable store backed by relational tables; one session per call."""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    @classmethod
    def from_url(cls, url: str = None) -> 'SqlStore':
        engine = make_engine(url)
        init_db(engine)
        return cls(make_session_factory(engine))

    @contextmanager
    def _session(self):
        db = self._session_factory()
        try:
            yield db
        except IntegrityError as e:
            db.rollback()
            raise errors.ConflictError("Record violates a uniqueness constraint") from e
        except SQLAlchemyError as e:
            db.rollback()
            raise errors.StoreError(f"Database operation failed: {e.__class__.__name__}") from e
        finally:
            db.close()

    def list_all(self, entity):
        _check_entity(entity)
        model = MODELS[entity]
        column = getattr(model, CREATED_FIELD[entity])
        with self._session() as db:
            # rows sharing a timestamp come back in no particular order
            return db.query(model).order_by(column.desc()).all()

    def insert(self, entity, fields):
        data = parse_fields(entity, fields)
        model = MODELS[entity]
        with self._session() as db:
            if entity == CAMPAIGN_SETTINGS and data.get('is_active'):
                self._deactivate_campaigns(db)
            record = model(**data)
            db.add(record)
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                if entity == NEWSLETTER_SUBSCRIBERS:
                    raise errors.ConflictError(f"Email already subscribed: {data['email']}") from e
                raise
            db.refresh(record)
        logger.info("Inserted %s record %s", entity, record.id)
        return record

    def count(self, entity):
        _check_entity(entity)
        model = MODELS[entity]
        with self._session() as db:
            return db.query(func.count(model.id)).scalar() or 0

    def get_active_campaign(self):
        model = donation_models.CampaignSettings
        with self._session() as db:
            return (
                db.query(model)
                .filter(model.is_active.is_(True))
                .order_by(model.created_at.desc())
                .first()
            )

    def upsert_campaign(self, fields):
        data = parse_fields(CAMPAIGN_SETTINGS, fields)
        model = donation_models.CampaignSettings
        with self._session() as db:
            current = (
                db.query(model)
                .filter(model.is_active.is_(True))
                .order_by(model.created_at.desc())
                .first()
            )
            if current is not None:
                for k, v in data.items():
                    setattr(current, k, v)
                db.commit()
                db.refresh(current)
                logger.info("Updated campaign settings %s", current.id)
                return current
        return self.insert(CAMPAIGN_SETTINGS, data)

    @staticmethod
    def _deactivate_campaigns(db):
        model = donation_models.CampaignSettings
        db.query(model).filter(model.is_active.is_(True)).update(
            {model.is_active: False}, synchronize_session=False
        )


def create_store() -> RecordStore:
    """Build the store selected by STORE_BACKEND."""
    backend = config.store_backend()
    if backend == 'memory':
        logger.info("Using in-memory record store; data is lost on restart")
        return MemoryStore()
    if backend == 'sql':
        return SqlStore.from_url(config.database_url())
    raise ValueError(f"Unsupported STORE_BACKEND: {backend!r}")


def seed_default_campaign(store: RecordStore):
    """Create the default campaign when none is active yet."""
    existing = store.get_active_campaign()
    if existing is not None:
        return existing
    campaign = store.upsert_campaign({
        'campaign_title': config.default_campaign_title(),
        'target_amount': config.default_target_amount(),
        'end_date': config.default_campaign_end_date(),
        'is_active': True,
    })
    logger.info("Seeded default campaign %r", campaign.campaign_title)
    return campaign
