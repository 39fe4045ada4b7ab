"""Per-user SQLite stores.

Every user gets an isolated SQLite file ``<database_dir>/<user_id>.db``
holding their projects and time entries. Isolation is structural: a request
can only reach the store its session factory points at, so per-user tables
carry no user column.

``UserStoreRegistry`` owns the lifecycle. It is created once per app,
hung on ``app.state``, and injected wherever a store is needed:
    registry = UserStoreRegistry(settings.database_dir)
    await registry.create_store(user.id)      # idempotent, bounded by timeout
    factory = await registry.get_store(user.id)
    async with factory() as session:
        ...
    await registry.dispose_all()              # app shutdown
"""

import asyncio
import os
import uuid
from pathlib import Path

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from timereport.core.database import create_engine
from timereport.core.errors import UserStoreError
from timereport.models import UserStoreBase

logger = structlog.get_logger()

_DEFAULT_CREATE_TIMEOUT = 30.0


def _sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


class UserStoreRegistry:
    """Process-wide registry of per-user store handles.

    One engine and session factory per user id, opened on first access and
    reused until ``dispose_all``.
    """

    def __init__(
        self,
        database_dir: str | Path,
        *,
        create_timeout: float = _DEFAULT_CREATE_TIMEOUT,
        echo: bool = False,
    ) -> None:
        """Initialize the registry.

        Args:
            database_dir: Directory holding the per-user SQLite files.
            create_timeout: Upper bound in seconds for materializing a store.
            echo: Log SQL emitted against per-user stores.
        """
        self._database_dir = Path(database_dir).resolve()
        self._create_timeout = create_timeout
        self._echo = echo
        self._engines: dict[str, AsyncEngine] = {}
        self._factories: dict[str, async_sessionmaker[AsyncSession]] = {}
        self._create_locks: dict[str, asyncio.Lock] = {}

    @property
    def database_dir(self) -> Path:
        """Directory holding the per-user SQLite files."""
        return self._database_dir

    def store_path(self, user_id: uuid.UUID | str) -> Path:
        """Canonical file location of a user's store."""
        return self._database_dir / f"{user_id}.db"

    def store_exists(self, user_id: uuid.UUID | str) -> bool:
        """Whether the user's store has been materialized."""
        return self.store_path(user_id).is_file()

    async def get_store(
        self, user_id: uuid.UUID | str
    ) -> async_sessionmaker[AsyncSession]:
        """Return the cached session factory for a user's store.

        The lookup and insert run without an ``await`` in between, so
        concurrent callers on the event loop always share one engine per
        user id.

        Args:
            user_id: Owner of the store.

        Returns:
            Session factory bound to the user's SQLite file.
        """
        key = str(user_id)
        factory = self._factories.get(key)
        if factory is None:
            engine = create_engine(_sqlite_url(self.store_path(key)), echo=self._echo)
            factory = async_sessionmaker(
                engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
            self._engines[key] = engine
            self._factories[key] = factory
        return factory

    async def create_store(self, user_id: uuid.UUID | str) -> None:
        """Materialize an empty store for a user, once.

        No-op when the file already exists. Racing callers for the same id
        serialize on a per-id lock; the loser sees the finished file and
        returns. The schema is written to a temporary file and renamed into
        place, so a failed attempt never leaves a half-built store behind.

        Args:
            user_id: Owner of the new store.

        Raises:
            UserStoreError: On I/O or schema failure, or when materializing
                takes longer than ``create_timeout`` seconds.
        """
        key = str(user_id)
        if self.store_exists(key):
            return

        lock = self._create_locks.setdefault(key, asyncio.Lock())
        async with lock:
            if self.store_exists(key):
                return
            try:
                async with asyncio.timeout(self._create_timeout):
                    await self._materialize(key)
            except TimeoutError as exc:
                msg = f"Timed out creating store for user {key}"
                raise UserStoreError(msg) from exc
            except (OSError, SQLAlchemyError) as exc:
                msg = f"Failed to create store for user {key}"
                raise UserStoreError(msg) from exc

        # Later callers return early on the existing file
        if self._create_locks.get(key) is lock:
            del self._create_locks[key]
        logger.info("user_store_created", user_id=key)

    async def _materialize(self, key: str) -> None:
        final_path = self.store_path(key)
        await asyncio.to_thread(final_path.parent.mkdir, parents=True, exist_ok=True)
        tmp_path = final_path.with_name(f"{final_path.name}.{uuid.uuid4().hex}.tmp")

        try:
            engine = create_engine(_sqlite_url(tmp_path))
            try:
                async with engine.begin() as conn:
                    await conn.run_sync(UserStoreBase.metadata.create_all)
            finally:
                await engine.dispose()
            await asyncio.to_thread(os.replace, tmp_path, final_path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

    async def dispose_all(self) -> None:
        """Close every cached engine and forget all handles."""
        engines = list(self._engines.values())
        self._engines.clear()
        self._factories.clear()
        self._create_locks.clear()
        await asyncio.gather(*(engine.dispose() for engine in engines))
