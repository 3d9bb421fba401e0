# backend/database.py
import logging

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()


def normalize_url(url: str) -> str:
    # Azure/Heroku style URLs use postgres://, SQLAlchemy requires postgresql://
    if url and url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


class Database:
    """Owns the engine and session factory for one process.

    Created by the entry point, handed to the app and closed with dispose().
    """

    def __init__(self, url: str, timeout: float = 5.0, echo: bool = False):
        self.url = normalize_url(url)
        self.is_sqlite = self.url.startswith("sqlite")

        if self.is_sqlite:
            connect_args = {"check_same_thread": False, "timeout": timeout}
        else:
            ms = int(timeout * 1000)
            connect_args = {"options": f"-c lock_timeout={ms} -c statement_timeout={ms}"}

        self.engine = create_engine(self.url, connect_args=connect_args, echo=echo)

        if self.is_sqlite:
            self._install_sqlite_locking()

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def _install_sqlite_locking(self):
        # SQLite has no SELECT ... FOR UPDATE. Taking the write lock at BEGIN
        # gives the same serialization for read-modify-write sequences.
        @event.listens_for(self.engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(self.engine, "begin")
        def _on_begin(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    def create_all(self):
        # Import models so Base.metadata knows every table
        import models.users  # noqa: F401
        import models.category  # noqa: F401
        import models.product  # noqa: F401
        import models.stock  # noqa: F401
        import models.log  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def session(self):
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def dispose(self):
        logger.info("Closing database connections")
        self.engine.dispose()


def get_db(request: Request):
    yield from request.app.state.db.session()
