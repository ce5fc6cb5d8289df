# database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base
import databases

from config import DATABASE_URL

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args)

database = databases.Database(DATABASE_URL)

Base = declarative_base()


def create_tables():
    # registers the tables on Base.metadata
    import models  # noqa: F401
    Base.metadata.create_all(bind=engine)


def drop_tables():
    import models  # noqa: F401
    Base.metadata.drop_all(bind=engine)


async def get_db():
    yield database
