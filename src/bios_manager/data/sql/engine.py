from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, MutableMapping

from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

from bios_manager.config import Settings
from bios_manager.errors import (
    BiosManagerError,
    ConnectionFailureError,
    StatementFailureError,
)
from bios_manager.utils import get_logger


logger = get_logger(__name__)

# Classic DB-Library network library names mapped to ODBC protocol prefixes.
NETWORK_PROTOCOLS: dict[str, str] = {
    "DBMSSOCN": "tcp",
    "DBNMPNTW": "np",
    "DBMSLPCN": "lpc",
}


@dataclass(slots=True)
class DatabaseConfig:
    """Connection options for the MDT database."""

    url: str | URL
    echo: bool = False
    connect_args: MutableMapping[str, object] = field(default_factory=dict)

    @classmethod
    def from_settings(cls, settings: Settings) -> "DatabaseConfig":
        settings.require()
        if settings.database_url:
            return cls(url=settings.database_url)
        server = settings.database_server or ""
        protocol = NETWORK_PROTOCOLS.get((settings.network_library or "").upper())
        if protocol and ":" not in server:
            server = f"{protocol}:{server}"
        url = URL.create(
            "mssql+pyodbc",
            host=server,
            database=settings.database,
            query={
                "driver": settings.odbc_driver,
                "trusted_connection": "yes",
                "TrustServerCertificate": "yes",
            },
        )
        return cls(url=url)

    def render(self) -> str:
        if isinstance(self.url, URL):
            return self.url.render_as_string(hide_password=True)
        return self.url

    @property
    def is_sqlite(self) -> bool:
        return self.render().startswith("sqlite")


class DatabaseManager:
    """Creates the SQLAlchemy engine and hands out short-lived sessions."""

    def __init__(self, config: DatabaseConfig) -> None:
        self._config = config
        self._engine: Engine | None = None

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    # ------------------------------------------------------------------ Engine

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            logger.debug("Creating database engine", url=self._config.render())
            self._engine = create_engine(
                self._config.url,
                echo=self._config.echo,
                connect_args=dict(self._config.connect_args),
            )
        return self._engine

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    # ---------------------------------------------------------------- Schema

    def ensure_schema(self) -> None:
        """Create the identity and settings tables when they are missing."""
        with self._connection() as connection:
            SQLModel.metadata.create_all(connection)
            connection.commit()
        logger.info("Ensured database schema", url=self._config.render())

    # ------------------------------------------------------------- Sessions

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session on a fresh connection, translating engine failures."""
        with self._connection() as connection:
            try:
                with Session(bind=connection) as session:
                    yield session
            except BiosManagerError:
                raise
            except SQLAlchemyError as exc:
                logger.warning("Database statement failed", error=str(exc))
                raise StatementFailureError(
                    message=f"Database statement failed: {exc}",
                    inner_error=exc,
                ) from exc

    # ------------------------------------------------------------ Connection

    @contextmanager
    def _connection(self):
        try:
            connection = self.engine.connect()
        except (SQLAlchemyError, ImportError) as exc:
            logger.warning(
                "Database connection failed",
                url=self._config.render(),
                error=str(exc),
            )
            raise ConnectionFailureError(
                message=f"Unable to connect to {self._config.render()}: {exc}",
                inner_error=exc,
            ) from exc
        try:
            yield connection
        finally:
            connection.close()


__all__ = ["DatabaseConfig", "DatabaseManager", "NETWORK_PROTOCOLS"]
