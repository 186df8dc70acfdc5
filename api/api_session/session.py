import logging
from threading import Lock

from pymongo import MongoClient
import redis

from api import config
from api.api_auth.auth_functions import RequestTokenAuth

logger = logging.getLogger(__name__)


class DataSession:
    """
    Backend handles shared by the movie and auth services.

    Args:
        client (MongoClient): MongoDB client.
        database (Database): Database holding the movie collections.
        cache (Redis | None): Redis client used for movie details, or None.
        auth (object): Auth context exposing ``current_user``.
    """

    def __init__(self, client, database, cache=None, auth=None):
        self.client = client
        self.database = database
        self.cache = cache
        self.auth = auth if auth is not None else RequestTokenAuth()

    def collection(self, name: str):
        return self.database[name]

    @property
    def current_user(self):
        return self.auth.current_user


_session = None
_session_lock = Lock()


def build_session():
    """
    Create a session from the environment configuration.

    Returns:
        DataSession: Session with MongoDB, optional Redis cache and request auth.
    """
    client = MongoClient(
        config.MONGO_URI,
        serverSelectionTimeoutMS=config.MONGO_TIMEOUT_MS,
        connectTimeoutMS=config.MONGO_TIMEOUT_MS,
        socketTimeoutMS=config.MONGO_TIMEOUT_MS,
    )
    cache = None
    if config.CACHE_TTL_SECONDS > 0:
        cache = redis.Redis(
            host=config.REDIS_HOST,
            port=config.REDIS_PORT,
            db=config.REDIS_DB,
            socket_timeout=config.REDIS_TIMEOUT_SECONDS,
            socket_connect_timeout=config.REDIS_TIMEOUT_SECONDS,
        )
    logger.info("opening session on database %s", config.MONGO_DB)
    return DataSession(client, client[config.MONGO_DB], cache=cache)


def get_session():
    """
    Return the process-wide session, creating it on first use.

    Returns:
        DataSession: Shared session instance.
    """
    global _session
    if _session is None:
        with _session_lock:
            if _session is None:
                _session = build_session()
    return _session


def reset_session():
    """Forget the shared session so the next ``get_session`` builds a new one."""
    global _session
    with _session_lock:
        _session = None
