"""Pooled PostgreSQL access for the ledger and identity stores."""
import asyncio
import functools
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple, TypeVar

import psycopg2
from psycopg2.extras import RealDictCursor
from psycopg2.pool import ThreadedConnectionPool

from banking_chatbot.config import Settings


logger = logging.getLogger(__name__)

LEDGER = "ledger"
ACCOUNTS = "accounts"

T = TypeVar("T")


class StorePool:
    """A named, process-wide connection pool for one logical store."""

    def __init__(
        self,
        name: str,
        pool: Optional[Any] = None,
        host: str = "",
        port: int = 5432,
        database: str = "",
        minconn: int = 0,
        maxconn: int = 10,
        **connect_kwargs: Any,
    ):
        self.name = name
        self.host = host
        self.port = port
        self.database = database
        # minconn=0 keeps construction offline; connections open on first use
        self._pool = pool if pool is not None else ThreadedConnectionPool(
            minconn,
            maxconn,
            host=host,
            port=port,
            dbname=database,
            **connect_kwargs,
        )
        # One worker per pooled connection; a stalled store only ever ties up its own threads
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, maxconn),
            thread_name_prefix=f"{name}-db",
        )
        self._closed = False
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, name: str, settings: Settings) -> "StorePool":
        prefix = "ledger_db" if name == LEDGER else "accounts_db"
        return cls(
            name,
            host=getattr(settings, f"{prefix}_host"),
            port=getattr(settings, f"{prefix}_port"),
            database=getattr(settings, f"{prefix}_name"),
            user=getattr(settings, f"{prefix}_user"),
            password=getattr(settings, f"{prefix}_password"),
            minconn=settings.db_pool_min,
            maxconn=settings.db_pool_max,
            connect_timeout=settings.db_connect_timeout,
        )

    @property
    def closed(self) -> bool:
        return self._closed

    @contextmanager
    def connection(self) -> Iterator[Any]:
        """Borrow a connection; it goes back to the pool even when the query fails."""
        conn = self._pool.getconn()
        try:
            yield conn
        finally:
            self._pool.putconn(conn, close=bool(getattr(conn, "closed", False)))

    def fetch_all(self, query: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """Run a parameterized SELECT and return the rows as dicts."""
        with self.connection() as conn:
            with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                cursor.execute(query, tuple(params))
                return [dict(row) for row in cursor.fetchall()]

    async def run(self, func: Callable[..., T], *args: Any) -> T:
        """Run blocking store I/O on this store's worker threads."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, functools.partial(func, *args))

    def ping(self) -> None:
        self.fetch_all("SELECT 1")

    def version(self) -> str:
        rows = self.fetch_all("SELECT version()")
        return rows[0]["version"] if rows else "unknown"

    def close(self) -> bool:
        """Close every pooled connection. Returns False when already closed."""
        with self._lock:
            if self._closed:
                return False
            self._closed = True
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._pool.closeall()
        return True


class ConnectionManager:
    """Owns both store pools and checks that they are reachable."""

    def __init__(
        self,
        ledger: StorePool,
        accounts: StorePool,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 5.0,
    ):
        self.ledger = ledger
        self.accounts = accounts
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self._closed = False
        self._close_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConnectionManager":
        return cls(
            StorePool.from_settings(LEDGER, settings),
            StorePool.from_settings(ACCOUNTS, settings),
            max_retries=settings.probe_max_retries,
            retry_delay=settings.probe_retry_delay,
            timeout=settings.probe_timeout,
        )

    async def probe(self, store: StorePool) -> bool:
        """
        Verify a store answers a trivial query.

        Each attempt is bounded by ``timeout``; attempts are separated by
        ``retry_delay * attempt`` seconds. Returns False once retries run out.
        """
        for attempt in range(1, self.max_retries + 1):
            logger.info("Attempting to connect to %s database", store.name)
            try:
                await asyncio.wait_for(store.run(store.ping), timeout=self.timeout)
            except asyncio.TimeoutError:
                self._log_failure(store, attempt, f"Connection timeout after {self.timeout}s", None)
            except (psycopg2.Error, OSError) as e:
                self._log_failure(store, attempt, str(e).strip(), getattr(e, "pgcode", None))
            else:
                logger.info("Connected to %s database successfully", store.name)
                return True

            if attempt < self.max_retries:
                delay = self.retry_delay * attempt
                logger.info("Retrying %s database in %.1fs", store.name, delay)
                await asyncio.sleep(delay)
        return False

    def _log_failure(self, store: StorePool, attempt: int, error: str, code: Optional[str]) -> None:
        logger.error(
            "Failed to connect to %s database (attempt %d/%d)",
            store.name,
            attempt,
            self.max_retries,
            extra={
                "store": store.name,
                "attempt": attempt,
                "max_attempts": self.max_retries,
                "timeout_s": self.timeout,
                "error": error,
                "code": code,
            },
        )

    async def probe_all(self) -> Tuple[bool, bool]:
        """Probe the ledger and identity stores concurrently."""
        ledger_ok, accounts_ok = await asyncio.gather(
            self.probe(self.ledger),
            self.probe(self.accounts),
        )
        return ledger_ok, accounts_ok

    async def check_connectivity(self) -> Dict[str, Optional[str]]:
        """Log each store's server version, or a structured error when unreachable."""
        logger.info("Checking database connectivity...")
        versions: Dict[str, Optional[str]] = {}
        for store in (self.ledger, self.accounts):
            try:
                version = await asyncio.wait_for(store.run(store.version), timeout=self.timeout)
            except asyncio.TimeoutError:
                versions[store.name] = None
                self._log_connectivity_error(store, f"Connection timeout after {self.timeout}s", None)
            except (psycopg2.Error, OSError) as e:
                versions[store.name] = None
                self._log_connectivity_error(store, str(e).strip(), getattr(e, "pgcode", None))
            else:
                versions[store.name] = version
                logger.info("%s DB version: %s", store.name.capitalize(), version)
        return versions

    def _log_connectivity_error(self, store: StorePool, error: str, code: Optional[str]) -> None:
        logger.error(
            "%s DB connection error",
            store.name.capitalize(),
            extra={
                "host": store.host,
                "port": store.port,
                "database": store.database,
                "error": error,
                "code": code,
            },
        )

    def close(self) -> None:
        """Close both pools exactly once; later calls are no-ops."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        for store in (self.ledger, self.accounts):
            try:
                store.close()
            except psycopg2.Error as e:
                logger.error("Error closing %s database connections: %s", store.name, e)
        logger.info("Database connections closed")
