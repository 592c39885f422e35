import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from quizhub.core.config import settings

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False} if settings.is_sqlite() else {}
engine = create_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO, future=True,
                       pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db(bind=None):
    """Create the schema if it does not exist yet."""
    from quizhub.models.orm import Base
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database schema ensured")
