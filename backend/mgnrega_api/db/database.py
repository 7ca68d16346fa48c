from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from mgnrega_api.core.config import settings

Base = declarative_base()


def make_engine(database_url):
    # psycopg3 driver instead of psycopg2
    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+psycopg://", 1)

    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            future=True,
        )

    return create_engine(
        database_url,
        pool_size=20,
        max_overflow=40,
        pool_pre_ping=True,
        future=True,
    )


def make_session_factory(bind):
    return sessionmaker(autocommit=False, autoflush=False, bind=bind, future=True)


engine = make_engine(settings.DATABASE_URL)
SessionLocal = make_session_factory(engine)
