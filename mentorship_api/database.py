from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from mentorship_api.config import settings

engine = create_engine(settings.database_url, pool_timeout=settings.db_pool_timeout)
SessionLocal = sessionmaker(bind=engine)


class Base(DeclarativeBase):
    pass
