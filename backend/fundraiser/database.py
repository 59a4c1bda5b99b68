from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from . import config

Base = declarative_base()


def make_engine(url: str = None):
    url = url or config.database_url()
    # If using sqlite, ensure check_same_thread option
    connect_args = {"check_same_thread": False} if url.startswith('sqlite') else {}
    kwargs = {}
    if url in ('sqlite://', 'sqlite:///:memory:'):
        # in-memory sqlite lives on one connection only
        kwargs['poolclass'] = StaticPool
    # pool_pre_ping for reliability with hosted Postgres providers
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True, **kwargs)


def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine):
    # models must be imported so their tables are registered on Base
    from . import donation_models  # noqa: F401
    Base.metadata.create_all(bind=engine)
