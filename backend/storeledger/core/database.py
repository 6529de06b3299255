from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from storeledger.core.config import settings

# SQLite connections are shared across the threadpool FastAPI runs sync routes on
_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args,
    pool_pre_ping=True,
    future=True,
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True,
)
