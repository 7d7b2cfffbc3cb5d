import logging

from sqlmodel import SQLModel, create_engine, Session

from config import DATABASE_URL, SQL_ECHO

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, echo=SQL_ECHO, connect_args=connect_args)


def init_db() -> None:
    """Create any missing tables."""
    import models  # noqa: F401  registers the tables on SQLModel.metadata

    logger.info("Ensuring schema at %s", engine.url.render_as_string(hide_password=True))
    SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session
