"""Core database functionality and configuration.

This module provides database management with proper configuration,
connection pooling, and session handling. Each application (and each
maintenance script) owns its own ``Database`` instance; requests borrow a
session from it and hand it back when they finish.
"""

from contextlib import contextmanager
import logging
from pathlib import Path
from typing import Optional, Dict, Any, Generator
from urllib.parse import quote_plus
import os

from sqlalchemy import create_engine, Engine, inspect, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from ..models import Base
from ..config.environment import IS_PRODUCTION_ENVIRONMENT
from ..errors import BookingError, Unavailable

logger = logging.getLogger(__name__)

DEFAULT_SQLITE_PATH = Path(__file__).parent.parent.parent / 'data' / 'ellarises.db'

def _postgres_url_from_parts() -> Optional[str]:
    """Assemble a PostgreSQL URL from RDS_* variables, falling back to DB_* ones."""
    host = os.environ.get('RDS_HOSTNAME') or os.environ.get('DB_HOST')
    database = os.environ.get('RDS_DB_NAME') or os.environ.get('DB_NAME')
    if not host or not database:
        return None

    port = os.environ.get('RDS_PORT') or os.environ.get('DB_PORT') or '5432'
    user = os.environ.get('RDS_USERNAME') or os.environ.get('DB_USER') or 'postgres'
    password = os.environ.get('RDS_PASSWORD') or os.environ.get('DB_PASSWORD') or ''

    url = f"postgresql+psycopg2://{quote_plus(user)}:{quote_plus(password)}@{host}:{port}/{database}"
    # RDS requires SSL
    if os.environ.get('RDS_HOSTNAME') or os.environ.get('DB_SSL', '').lower() == 'true':
        url += '?sslmode=require'
    return url

class DatabaseConfig:
    """Database configuration settings."""

    def __init__(
        self,
        url: Optional[str] = None,
        sqlite_path: Optional[Path] = None,
        echo: bool = False,
        pool_size: int = 2,
        max_overflow: int = 8,
        pool_timeout: int = 30,
        pool_recycle: int = 1800,
        pool_pre_ping: bool = True
    ):
        """
        Initialize database configuration.

        The URL is resolved in this order: the ``url`` argument, the
        DATABASE_URL environment variable, then the RDS_*/DB_* connection
        variables. Outside production a SQLite file is used when none of them
        is set.

        Args:
            url: Full SQLAlchemy connection URL
            sqlite_path: Path to SQLite database file (development fallback)
            echo: Whether to echo SQL statements
            pool_size: Size of the connection pool (permanent connections)
            max_overflow: Maximum number of extra connections to allow temporarily
                        (total connections = pool_size + max_overflow)
            pool_timeout: Seconds to wait for an available connection
            pool_recycle: Seconds before connections are recycled (prevent stale)
            pool_pre_ping: Whether to ping connections before using them

        Raises:
            ValueError: If in production environment and no database connection
                      settings are available
        """
        self.url = url or os.environ.get('DATABASE_URL') or _postgres_url_from_parts()

        if not self.url:
            if IS_PRODUCTION_ENVIRONMENT:
                raise ValueError(
                    "Database URL must be provided either via DATABASE_URL or the "
                    "RDS_*/DB_* environment variables when in production environment"
                )
            path = sqlite_path or DEFAULT_SQLITE_PATH
            path.parent.mkdir(parents=True, exist_ok=True)
            self.url = f"sqlite:///{path}"

        # Heroku-style URLs use the old scheme name
        if self.url.startswith('postgres://'):
            self.url = 'postgresql://' + self.url[len('postgres://'):]

        self.echo = echo
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_timeout = pool_timeout
        self.pool_recycle = pool_recycle
        self.pool_pre_ping = pool_pre_ping

    @property
    def connection_url(self) -> str:
        """Get the database connection URL."""
        return self.url

    @property
    def is_sqlite(self) -> bool:
        return make_url(self.url).get_backend_name() == 'sqlite'

    def get_engine_args(self) -> Dict[str, Any]:
        """Get SQLAlchemy engine arguments based on configuration."""
        args: Dict[str, Any] = {"echo": self.echo}

        # SQLite-specific configuration
        if self.is_sqlite:
            args["connect_args"] = {
                "check_same_thread": False,
                "timeout": 15,
            }
            database = make_url(self.url).database
            if not database or database == ':memory:':
                # One shared connection, otherwise every checkout sees an empty database
                args["poolclass"] = StaticPool

        # PostgreSQL-specific configuration
        else:
            args.update({
                "pool_size": self.pool_size,
                "max_overflow": self.max_overflow,
                "pool_timeout": self.pool_timeout,
                "pool_recycle": self.pool_recycle,
                "pool_pre_ping": self.pool_pre_ping
            })

        return args

class DatabaseError(Exception):
    """Base exception for database-related errors."""
    pass

class ConnectionError(DatabaseError):
    """Raised when there are issues connecting to the database."""
    pass

class SessionError(DatabaseError):
    """Raised when there are issues with database sessions."""
    pass

class Database:
    """Owns the engine, the session factory and the availability flag."""

    def __init__(self, config: Optional[DatabaseConfig] = None):
        self.config = config or DatabaseConfig()
        self.engine: Optional[Engine] = None
        self._session_factory = sessionmaker(expire_on_commit=False)
        self._tables_checked = False
        # None until the startup connectivity check has run; scripts never run it
        self.available: Optional[bool] = None

        self._setup_engine()

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name if self.engine else ''

    def _setup_engine(self) -> None:
        """Set up the SQLAlchemy engine."""
        try:
            self.engine = create_engine(
                self.config.connection_url,
                **self.config.get_engine_args()
            )
            self._session_factory.configure(bind=self.engine)
        except Exception as e:
            raise ConnectionError(f"Failed to create database engine: {e}") from e

    def check_connection(self) -> None:
        """Run ``SELECT 1``. Raises ConnectionError when the database can't be reached."""
        if not self.engine:
            raise ConnectionError("Database engine not initialized")
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            raise ConnectionError(f"Database connectivity check failed: {e}") from e

    def mark_available(self, available: bool) -> None:
        self.available = available
        if available:
            logger.info("Database marked available")
        else:
            logger.warning("Database marked unavailable; booking and admin operations will be refused")

    def init_db(self) -> None:
        """Initialize the database schema."""
        if not self.engine:
            raise ConnectionError("Database engine not initialized")

        try:
            Base.metadata.create_all(self.engine)
            logger.info("Database schema initialized successfully")
        except Exception as e:
            raise DatabaseError(f"Failed to initialize database schema: {e}") from e

    def ensure_tables_exist(self) -> None:
        """Ensure all required database tables exist."""
        if self._tables_checked:
            return
        if not self.engine:
            raise ConnectionError("Database engine not initialized")

        try:
            inspector = inspect(self.engine)
            existing_tables = {name.lower() for name in inspector.get_table_names()}
            required_tables = set(Base.metadata.tables)

            missing = required_tables - existing_tables
            if missing:
                logger.info(f"Tables missing ({', '.join(sorted(missing))}), initializing database schema")
                Base.metadata.create_all(self.engine)
                logger.info("Database schema initialized successfully")

            self._tables_checked = True

        except Exception as e:
            raise DatabaseError(f"Failed to verify/create database schema: {e}") from e

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope around a series of operations.

        Commits when the block exits normally and rolls back otherwise.
        Domain errors (``BookingError``) propagate unchanged so callers can
        report them; anything else is wrapped in ``SessionError``.

        Example:
            with db.session() as session:
                template = session.get(EventTemplate, 1)
                template.name = "New Name"

        Raises:
            Unavailable: If the startup connectivity check marked the database unreachable
            SessionError: If there are issues with the session
        """
        if self.available is False:
            raise Unavailable("The database is currently unavailable")

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except BookingError:
            session.rollback()
            raise
        except Exception as e:
            session.rollback()
            raise SessionError(f"Database session error: {e}") from e
        finally:
            session.close()

    def dispose(self) -> None:
        """Close all pooled connections."""
        if self.engine:
            self.engine.dispose()
