import importlib
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from musicos.config import settings

log = logging.getLogger("db")

DATABASE_URL = settings.DATABASE_URL
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, future=True, echo=False, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# every model module must be imported before create_all so metadata is populated
MODEL_MODULES = [
    "musicos.models.offer",
    "musicos.models.cart",
    "musicos.models.cart_item",
    "musicos.models.order",
    "musicos.models.user",
    "musicos.models.rate_limit",
]


def init_db(reset: bool = False):
    """
    Initialize DB schema.

    With reset=True all tables are dropped and recreated, which is what the
    test suite uses to start every module from a clean database.
    """
    for mod in MODEL_MODULES:
        importlib.import_module(mod)

    if reset:
        log.info("Resetting database schema")
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)
    log.info("Database initialized (%s)", engine.url.render_as_string(hide_password=True))


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
