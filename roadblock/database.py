from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def build_engine(database_url: str):
    connect_args = {}
    if database_url.startswith('sqlite'):
        # requests are served from a threadpool
        connect_args['check_same_thread'] = False
    return create_engine(database_url, connect_args=connect_args)


def build_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine):
    # models must be imported so their tables are registered on Base
    from roadblock import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
