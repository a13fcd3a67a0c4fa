# easybuy/data/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from easybuy.utils.settings import DATABASE_URL
from easybuy.utils.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()


def make_engine(url: str):
    #sqlite (dev/testy) - sesje FastAPI chodza w threadpoolu
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True)


engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(bind=None):
    # import modeli zeby zarejestrowaly sie w Base.metadata przed create_all
    import easybuy.data.models  # noqa: F401

    bind = bind or engine
    logger.info(f"Creating tables: {list(Base.metadata.tables.keys())}")
    Base.metadata.create_all(bind=bind)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
