import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import scoped_session, sessionmaker
from sqlalchemy.exc import SQLAlchemyError

from models.base_model import Base
from models.character import Character

logger = logging.getLogger(__name__)

# Map model names for easy querying
classes = {
    "Character": Character,
}


class DBStorage:
    """Engine + scoped session for the character store, one per app."""

    def __init__(self, database_url: str = "sqlite:///characters.db", echo: bool = False):
        """
        Initialize engine. Each request thread gets its own session and its
        own pooled connection, so one request's rollback never touches
        another's transaction. In-memory SQLite would force every thread onto
        a single shared connection and is refused.
        """
        url = make_url(database_url)
        if url.get_backend_name() == "sqlite":
            if url.database in (None, "", ":memory:") or url.query.get("mode") == "memory":
                raise ValueError("In-memory SQLite cannot be shared between request threads; use a file URL")
            # wait for a competing writer instead of failing with "database is locked"
            self.__engine = create_engine(database_url, echo=echo, connect_args={"timeout": 15})
        else:
            self.__engine = create_engine(database_url, echo=echo, pool_pre_ping=True)
        self.__session = None

    def reload(self):
        """Create tables and start session"""
        Base.metadata.create_all(self.__engine)
        session_factory = sessionmaker(bind=self.__engine, expire_on_commit=False)
        self.__session = scoped_session(session_factory)

    def new(self, obj):
        """Add object to session"""
        self.__session.add(obj)

    def save(self):
        """Commit session"""
        try:
            self.__session.commit()
        except SQLAlchemyError:
            logger.exception("Commit failed, rolling back")
            self.__session.rollback()
            raise

    def delete(self, obj=None):
        """Delete object if exists (hard delete)"""
        if obj:
            self.__session.delete(obj)

    def get(self, cls, id):
        """Fetch one object by class and ID"""
        if cls in classes.values():
            return self.__session.get(cls, id)
        return None

    def close(self):
        """Remove session (for API teardown)"""
        self.__session.remove()

    def ping(self) -> bool:
        """True if the database answers a trivial query"""
        try:
            with self.__engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            logger.exception("Database ping failed")
            return False

    def dispose(self):
        self.__session.remove()
        self.__engine.dispose()

    # expose the SQLAlchemy session for advanced querying (ordering, paging)
    def get_session(self):
        return self.__session
