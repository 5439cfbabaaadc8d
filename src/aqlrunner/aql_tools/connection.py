"""ArangoDB connection pool and cursor execution."""

import logging
import queue
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import unquote, urlsplit, urlunsplit

import requests
from arango import ArangoClient
from arango.database import StandardDatabase

from .errors import QueryCancelled, RemoteError
from .models import BoundQuery, Catalog


logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "_system"


def split_endpoint(endpoint: str) -> Tuple[str, Optional[str]]:
    """
    Split an endpoint URL into host URL and database name.

    ``http://db:8529/_db/shop/`` -> (``http://db:8529``, ``shop``)
    ``http://db:8529/``          -> (``http://db:8529``, None)
    """
    parts = urlsplit(endpoint)
    host = urlunsplit((parts.scheme, parts.netloc, "", "", ""))
    segments = [s for s in parts.path.split("/") if s]
    if len(segments) >= 2 and segments[0] == "_db":
        return host, unquote(segments[1])
    return host, None


@dataclass
class ConnectionSettings:
    """Everything needed to open a database handle."""
    hosts: str
    database: str
    username: str
    password: str
    pool_size: int = 4
    acquire_timeout: float = 10.0
    request_timeout: float = 60.0
    batch_size: int = 1000
    max_runtime: float = 0.0
    stream: bool = True

    def __repr__(self):
        return (
            f"ConnectionSettings(hosts={self.hosts!r}, database={self.database!r}, "
            f"username={self.username!r}, password='***', pool_size={self.pool_size})"
        )

    @classmethod
    def from_catalog(cls, catalog: Catalog, database: Optional[str] = None, **kwargs) -> "ConnectionSettings":
        hosts, endpoint_db = split_endpoint(catalog.arangodb_endpoint)
        return cls(
            hosts=hosts,
            database=database or catalog.database or endpoint_db or DEFAULT_DATABASE,
            username=catalog.username,
            password=catalog.password.get_secret_value(),
            **kwargs,
        )


class CancelToken:
    """Cooperative cancellation flag shared between caller and worker thread."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class ConnectionPool:
    """
    Bounded pool of database handles.

    Handles are created lazily up to ``pool_size``. When all are in use,
    ``acquire`` waits up to ``acquire_timeout`` seconds and then raises
    RemoteError. Handles that hit a transport error are discarded.
    """

    def __init__(
        self,
        settings: ConnectionSettings,
        factory: Optional[Callable[[ConnectionSettings], Any]] = None,
    ):
        if settings.pool_size < 1:
            raise ValueError("pool_size must be at least 1")
        self.settings = settings
        self._factory = factory or self._connect
        self._idle: "queue.LifoQueue[Any]" = queue.LifoQueue()
        self._created = 0
        self._lock = threading.Lock()
        # Keyed by id() of the database handle each client backs
        self._clients: Dict[int, ArangoClient] = {}

    def _connect(self, settings: ConnectionSettings) -> StandardDatabase:
        logger.debug(f"Creating database connection: {settings.hosts} db={settings.database}")
        client = ArangoClient(hosts=settings.hosts, request_timeout=settings.request_timeout)
        # verify=False: no round trip here, auth problems surface on first query
        db = client.db(
            settings.database,
            username=settings.username,
            password=settings.password,
            verify=False,
        )
        with self._lock:
            self._clients[id(db)] = client
        return db

    def _checkout(self, timeout: float) -> Any:
        try:
            return self._idle.get_nowait()
        except queue.Empty:
            pass

        with self._lock:
            create = self._created < self.settings.pool_size
            if create:
                self._created += 1

        if create:
            try:
                return self._factory(self.settings)
            except Exception:
                with self._lock:
                    self._created -= 1
                raise

        try:
            return self._idle.get(timeout=timeout)
        except queue.Empty:
            raise RemoteError(
                f"Timed out after {timeout}s waiting for a database connection",
                {"reason": "pool_timeout"},
            )

    def _discard(self, db: Any):
        with self._lock:
            self._created -= 1
            client = self._clients.pop(id(db), None)
        if client is not None:
            _close_client(client)

    @contextmanager
    def acquire(self, timeout: Optional[float] = None):
        """Check out a handle for the duration of the block."""
        timeout = self.settings.acquire_timeout if timeout is None else timeout
        db = self._checkout(timeout)
        try:
            yield db
        except requests.RequestException:
            logger.warning("Discarding database connection after transport error")
            self._discard(db)
            raise
        except BaseException:
            self._idle.put(db)
            raise
        else:
            self._idle.put(db)

    @property
    def size(self) -> int:
        return self._created

    def close(self):
        """Close all HTTP sessions owned by the pool."""
        with self._lock:
            clients = list(self._clients.values())
            self._clients = {}
            self._created = 0
        while True:
            try:
                self._idle.get_nowait()
            except queue.Empty:
                break
        for client in clients:
            _close_client(client)


def _close_client(client: ArangoClient):
    try:
        client.close()
    except Exception as e:
        logger.error(f"Error closing database client: {e}")


def run_cursor(
    db: Any,
    bound: BoundQuery,
    settings: ConnectionSettings,
    cancel: Optional[CancelToken] = None,
) -> List[Any]:
    """
    Execute a bound query and drain its cursor.

    The cancel token is checked between documents; on cancellation the
    server-side cursor is released and QueryCancelled is raised.
    """
    options = {
        'bind_vars': bound.bind_vars,
        'batch_size': settings.batch_size,
        'stream': settings.stream,
    }
    if settings.max_runtime > 0:
        options['max_runtime'] = settings.max_runtime

    cursor = db.aql.execute(bound.query, **options)

    docs = []
    try:
        for doc in cursor:
            if cancel is not None and cancel.cancelled:
                raise QueryCancelled("Query cancelled during execution")
            docs.append(doc)
    except QueryCancelled:
        cursor.close(ignore_missing=True)
        raise
    return docs
