"""
Storage engine built on async SQLAlchemy 2.0.
Owns the engine and the single shared session every repository statement runs through.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncIterator, Iterable, List, Mapping, Optional

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from phonebook.db.base import Base
from phonebook.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of a statement executed for effect."""
    rowcount: int
    inserted_id: Optional[int] = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """SQLite ships with foreign key enforcement off; turn it on per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class StorageEngine:
    """
    Durable relational store for contacts and phones.

    All statements run in submission order against one shared session. A lock
    serializes callers; an open transaction keeps the lock until it commits or
    rolls back, so statements from other tasks never land inside it.
    """

    def __init__(self, database_url: str, echo: bool = False):
        """
        Initialize the storage engine. Nothing is opened until connect().

        Args:
            database_url: SQLAlchemy async database URL
            echo: Log every SQL statement
        """
        self.database_url = database_url
        self.echo = echo
        self.engine: Optional[AsyncEngine] = None
        self._session: Optional[AsyncSession] = None
        self._lock = asyncio.Lock()
        self._transaction_owner: Optional[asyncio.Task] = None

    @property
    def is_connected(self) -> bool:
        return self._session is not None

    async def connect(self) -> None:
        """Create the engine and open the shared session."""
        if self.engine is not None:
            return

        url = make_url(self.database_url)

        if url.get_backend_name() == "sqlite":
            self._ensure_database_directory(url.database)
            # StaticPool keeps exactly one DBAPI connection for the whole process
            self.engine = create_async_engine(
                url,
                echo=self.echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        else:
            self.engine = create_async_engine(
                url,
                echo=self.echo,
                pool_size=1,
                max_overflow=0,
                pool_pre_ping=True,
            )

        session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._session = session_maker()

        logger.info(
            "Storage engine connected",
            extra={"backend": url.get_backend_name(), "database": url.database},
        )

    async def close(self) -> None:
        """Close the shared session and dispose of the engine."""
        if self._session is not None:
            await self._session.close()
            self._session = None

        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            logger.info("Storage engine closed")

    async def create_schema(self) -> None:
        """Create the contacts and phones tables and their indexes if missing."""
        import phonebook.models  # noqa: F401 (registers models with Base.metadata)

        self._require_session()
        async with self._lock:
            try:
                conn = await self._session.connection()
                await conn.run_sync(Base.metadata.create_all)
                await self._session.commit()
            except BaseException:
                await self._session.rollback()
                raise

        logger.info("Database schema ready", extra={"tables": sorted(Base.metadata.tables)})

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    async def execute(self, statement: Any) -> ExecutionResult:
        """
        Execute a statement for effect.

        Returns:
            Rows affected and, for single-row inserts, the generated primary key
        """
        async with self._statement_scope():
            conn = await self._session.connection()
            result = await conn.execute(statement)

            inserted_id = None
            if result.is_insert and result.inserted_primary_key:
                inserted_id = result.inserted_primary_key[0]

            return ExecutionResult(rowcount=result.rowcount, inserted_id=inserted_id)

    async def execute_many(
        self,
        statement: Any,
        rows: Iterable[Mapping[str, Any]],
    ) -> ExecutionResult:
        """
        Insert several rows with one multi-row INSERT statement.

        Args:
            statement: An insert() construct without values
            rows: Column values, one mapping per row
        """
        rows = list(rows)
        if not rows:
            return ExecutionResult(rowcount=0)

        async with self._statement_scope():
            conn = await self._session.connection()
            result = await conn.execute(statement.values(rows))
            rowcount = result.rowcount if result.rowcount >= 0 else len(rows)
            return ExecutionResult(rowcount=rowcount)

    async def fetch_one(self, statement: Any) -> Optional[Any]:
        """Return the first entity or scalar of a query, or None."""
        async with self._statement_scope():
            result = await self._session.execute(statement)
            return result.scalars().first()

    async def fetch_all(self, statement: Any) -> List[Any]:
        """Return every entity or scalar of a query."""
        async with self._statement_scope():
            result = await self._session.execute(statement)
            return list(result.scalars().all())

    async def fetch_value(self, statement: Any) -> Any:
        """Return the single scalar produced by a query (counts, existence checks)."""
        async with self._statement_scope():
            result = await self._session.execute(statement)
            return result.scalar()

    async def ping(self) -> bool:
        """Check that the store answers a trivial query."""
        try:
            return await self.fetch_value(text("SELECT 1")) == 1
        except SQLAlchemyError as e:
            logger.warning(f"Storage ping failed: {e}")
            return False

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def begin(self) -> None:
        """Start a transaction owned by the current task. Blocks other callers until it ends."""
        self._require_session()
        if self._owns_transaction():
            raise RuntimeError("A transaction is already open for this task")

        await self._lock.acquire()
        try:
            await self._session.begin()
        except BaseException:
            self._lock.release()
            raise

        self._transaction_owner = asyncio.current_task()
        logger.debug("Transaction started")

    async def commit(self) -> None:
        """
        Commit the current task's transaction.
        On failure the transaction stays open; the caller must roll back.
        """
        self._require_owner()
        await self._session.commit()
        self._end_transaction()
        logger.debug("Transaction committed")

    async def rollback(self) -> None:
        """Roll back the current task's transaction. A failing rollback still releases the lock."""
        self._require_owner()
        try:
            await self._session.rollback()
        finally:
            self._end_transaction()
        logger.debug("Transaction rolled back")

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["StorageEngine"]:
        """
        All-or-nothing unit of writes.

        Commits when the block exits normally. On any error the transaction is
        rolled back and the original exception is re-raised unchanged; a
        failing rollback propagates with the original error as its context.
        """
        await self.begin()
        try:
            yield self
            await self.commit()
        except BaseException as exc:
            logger.warning(
                "Rolling back transaction",
                extra={"exception_type": type(exc).__name__},
            )
            await self.rollback()
            raise

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _statement_scope(self) -> AsyncIterator[None]:
        """
        Run one statement. Inside the caller's own transaction it joins that
        transaction; otherwise it takes the lock and commits on its own.
        """
        self._require_session()

        if self._owns_transaction():
            yield
            return

        async with self._lock:
            try:
                yield
                await self._session.commit()
            except BaseException:
                await self._session.rollback()
                raise
            finally:
                self._session.expunge_all()

    def _owns_transaction(self) -> bool:
        return (
            self._transaction_owner is not None
            and self._transaction_owner is asyncio.current_task()
        )

    def _end_transaction(self) -> None:
        self._transaction_owner = None
        self._session.expunge_all()
        self._lock.release()

    def _require_session(self) -> None:
        if self._session is None:
            raise RuntimeError("Storage engine is not connected; call connect() first")

    def _require_owner(self) -> None:
        if not self._owns_transaction():
            raise RuntimeError("No transaction is open for the current task")

    @staticmethod
    def _ensure_database_directory(database: Optional[str]) -> None:
        """Create the parent directory of a file-backed SQLite database."""
        if not database or database == ":memory:" or database.startswith("file:"):
            return
        Path(database).parent.mkdir(parents=True, exist_ok=True)
