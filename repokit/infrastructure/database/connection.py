"""Database connection management module."""
from typing import Optional

from sqlalchemy import MetaData, create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool, QueuePool, StaticPool

from repokit.core.config import Settings
from repokit.infrastructure.database.named_queries import NamedQueryRegistry
from repokit.infrastructure.database.unit_of_work import UnitOfWork
from repokit.infrastructure.exceptions import DatabaseConnectionError
from repokit.infrastructure.logging import get_logger

logger = get_logger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseConnection:
    """Factory of units of work bound to one named persistence unit."""

    def __init__(
        self,
        database_url: str,
        unit_name: str = "site",
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_timeout: int = 30,
        echo: bool = False,
        named_queries: Optional[NamedQueryRegistry] = None
    ):
        self._engine: Optional[Engine] = None
        self._sessionmaker: Optional[sessionmaker] = None
        self.database_url = database_url
        self.unit_name = unit_name
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_timeout = pool_timeout
        self.echo = echo
        self.named_queries = named_queries if named_queries is not None else NamedQueryRegistry()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        named_queries: Optional[NamedQueryRegistry] = None
    ) -> "DatabaseConnection":
        return cls(
            settings.database_url,
            unit_name=settings.persistence_unit,
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
            pool_timeout=settings.pool_timeout,
            echo=settings.echo_sql,
            named_queries=named_queries,
        )

    @property
    def is_sqlite(self) -> bool:
        return make_url(self.database_url).get_backend_name() == "sqlite"

    @property
    def is_memory_sqlite(self) -> bool:
        database = make_url(self.database_url).database
        return self.is_sqlite and database in (None, "", ":memory:")

    @property
    def safe_url(self) -> str:
        """Database URL with the password masked, for logs."""
        return make_url(self.database_url).render_as_string(hide_password=True)

    def connect(self) -> None:
        """Initialize database connection."""
        if self._engine is not None:
            return

        # Choose pool class based on database type
        if self.is_memory_sqlite:
            # Every session must see the same in-memory database
            engine = create_engine(
                self.database_url,
                echo=self.echo,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        elif self.is_sqlite:
            engine = create_engine(
                self.database_url,
                echo=self.echo,
                poolclass=NullPool,
                connect_args={"check_same_thread": False},
            )
        else:
            engine = create_engine(
                self.database_url,
                echo=self.echo,
                poolclass=QueuePool,
                pool_size=self.pool_size,
                max_overflow=self.max_overflow,
                pool_timeout=self.pool_timeout,
                pool_pre_ping=True,  # Verify connections before use
            )

        if self.is_sqlite:
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)

        self._engine = engine
        self._sessionmaker = sessionmaker(
            self._engine,
            class_=Session,
            expire_on_commit=False,
            autoflush=False,
        )

        logger.info(
            "database_connected",
            unit=self.unit_name,
            url=self.safe_url,
        )

    def disconnect(self) -> None:
        """Close database connection."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._sessionmaker = None
            logger.info("database_disconnected", unit=self.unit_name)

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    def create_unit_of_work(self) -> UnitOfWork:
        """Open a new unit of work."""
        if self._sessionmaker is None:
            raise DatabaseConnectionError(
                f"Database not connected for persistence unit '{self.unit_name}'"
            )
        return UnitOfWork(self._sessionmaker(), unit_name=self.unit_name)

    def create_schema(self, metadata: MetaData) -> None:
        """Create all tables of ``metadata`` that do not exist yet."""
        metadata.create_all(self.engine)
        logger.info("schema_created", unit=self.unit_name, tables=sorted(metadata.tables))

    def drop_schema(self, metadata: MetaData) -> None:
        metadata.drop_all(self.engine)
        logger.info("schema_dropped", unit=self.unit_name)

    @property
    def engine(self) -> Engine:
        """Get database engine."""
        if self._engine is None:
            raise DatabaseConnectionError("Database not connected")
        return self._engine

    def __enter__(self) -> "DatabaseConnection":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()
