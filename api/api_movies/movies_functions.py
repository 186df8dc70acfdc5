import json
import logging
import math

from bson import ObjectId
from pydantic import ValidationError

from api.config import DEFAULT_POSTER, MOVIES_COLLECTION, POSTER_URL_PREFIX, USER_LIST_COLLECTION
from api.errors import DocumentDecodeError
from api.api_movies.movies_models import Movie, Review

logger = logging.getLogger(__name__)


def round_rating(value: float):
    """
    Round a rating half-up to one decimal place.

    Args:
        value (float): Raw average rating.

    Returns:
        float: Rating rounded to the nearest 0.1, halves rounding upwards.
    """
    return math.floor(value * 10 + 0.5) / 10


def complete_poster_url(poster: str | None):
    """
    Turn a stored poster value into something an image tag can load.

    Args:
        poster (str | None): Poster path or URL from the document.

    Returns:
        str: Bundled default when absent, TMDB URL for relative paths, or the
        stored value when it is already absolute.
    """
    if poster is None:
        return DEFAULT_POSTER
    if not poster.startswith(POSTER_URL_PREFIX) and not poster.startswith("https:"):
        completed = POSTER_URL_PREFIX + poster
        logger.debug("updating movie poster %s", completed)
        return completed
    return poster


def build_genre_list(genres: dict[str, bool]):
    """
    Flatten a genre mapping into a display string.

    Args:
        genres (dict[str, bool]): Genre flags keyed by genre name.

    Returns:
        str: Genre names joined with ``", "`` in mapping order.
    """
    return ", ".join(str(genre) for genre in genres)


def normalize_movie(movie: Movie):
    """
    Produce the display-ready version of a decoded movie.

    Args:
        movie (Movie): Movie decoded from the database.

    Returns:
        Movie: New movie with rounded rating, completed poster, overview
        default and a genre list rebuilt from ``genres``.
    """
    overview = movie.overview
    if overview is None:
        overview = " "
    return movie.model_copy(
        update={
            "average_rating": round_rating(movie.average_rating),
            "poster": complete_poster_url(movie.poster),
            "overview": overview,
            "genre_list": build_genre_list(movie.genres),
        }
    )


def describe_validation_error(exc: ValidationError):
    """
    Summarize a pydantic validation error on one line.

    Args:
        exc (ValidationError): Error raised while decoding a document.

    Returns:
        str: ``field: message`` pairs separated by ``"; "``.
    """
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "document"
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)


def decode_movie(document: dict | None, key: str):
    """
    Decode a raw movie document and attach its key.

    Args:
        document (dict | None): Document fetched from MongoDB.
        key (str): Document key, used as the movie identifier.

    Returns:
        Movie: Typed, not yet normalized, movie.

    Raises:
        DocumentDecodeError: When the document does not describe a movie.
    """
    if not isinstance(document, dict):
        raise DocumentDecodeError(key, "document is empty or not an object")
    try:
        movie = Movie.model_validate(document)
    except ValidationError as exc:
        raise DocumentDecodeError(key, describe_validation_error(exc)) from exc
    return movie.model_copy(update={"key": key})


def decode_review(document: dict | None, key: str | None = None):
    """
    Decode the review fields stored in a ``myreviews`` document.

    Args:
        document (dict | None): Review document.
        key (str | None): Document key, only used in error messages.

    Returns:
        Review: Typed review.

    Raises:
        DocumentDecodeError: When the review fields are missing or invalid.
    """
    if not isinstance(document, dict):
        raise DocumentDecodeError(key, "document is empty or not an object")
    try:
        return Review.model_validate(document)
    except ValidationError as exc:
        raise DocumentDecodeError(key, describe_validation_error(exc)) from exc


def build_page_query(load_more: bool, last_movie: object, genre_filter: str | None):
    """
    Build the MongoDB filter for one page of a listing.

    Args:
        load_more (bool): Continue after ``last_movie`` instead of restarting.
        last_movie (object): ``_id`` of the last document already shown.
        genre_filter (str | None): Genre that must be flagged true.

    Returns:
        dict: Filter to pass to ``find``; documents are paged by ``_id``.
    """
    query = {}
    if load_more and last_movie is not None:
        query["_id"] = {"$gt": last_movie}
    if isinstance(genre_filter, str) and genre_filter:
        logger.info("%s is selected", genre_filter)
        query[f"genres.{genre_filter}"] = True
    return query


def read_cached_document(redis_client: object, cache_key: str):
    """
    Read a raw document previously stored in Redis.

    Args:
        redis_client (Redis | None): Redis client instance, or None when caching is off.
        cache_key (str): Key to look up.

    Returns:
        dict | None: Cached document, or None on a miss or a corrupt entry.
    """
    if redis_client is None:
        return None
    cached = redis_client.get(cache_key)
    if not cached:
        logger.debug("cache miss %s", cache_key)
        return None
    try:
        document = json.loads(cached)
    except json.JSONDecodeError:
        logger.warning("ignoring corrupt cache entry %s", cache_key)
        return None
    logger.debug("cache hit %s", cache_key)
    return document


def write_cached_document(redis_client: object, cache_key: str, cache_ttl: int, document: dict):
    """
    Store a raw document in Redis.

    Args:
        redis_client (Redis | None): Redis client instance, or None when caching is off.
        cache_key (str): Key to write.
        cache_ttl (int): Time-to-live in seconds.
        document (dict): Document to store; ObjectIds are written as strings.
    """
    if redis_client is None or cache_ttl <= 0:
        return
    redis_client.setex(cache_key, cache_ttl, json.dumps(document, default=str))


def parse_flag(value: str | None):
    """Read a query-string flag such as ``load_more=true``."""
    if not value:
        return False
    return value.strip().lower() in {"1", "true", "yes"}


def parse_document_key(raw_key: str | None):
    """
    Turn a key received over HTTP back into the ``_id`` it was rendered from.

    Args:
        raw_key (str | None): Key or cursor as sent by the client.

    Returns:
        ObjectId | str | None: ObjectId for 24-digit hex keys, otherwise the key unchanged.
    """
    if isinstance(raw_key, str) and len(raw_key) == 24 and ObjectId.is_valid(raw_key):
        return ObjectId(raw_key)
    return raw_key


def build_key_query(key: str):
    """
    Build a lookup for a movie key that may stand for a string or an ObjectId ``_id``.

    Args:
        key (str): Movie key.

    Returns:
        dict: MongoDB filter matching either form of the key.
    """
    object_id = parse_document_key(key)
    if isinstance(object_id, ObjectId):
        return {"$or": [{"_id": key}, {"_id": object_id}]}
    return {"_id": key}


def is_listable_collection(name: str):
    """
    Check that a listing targets the movies collection or a user's saved list.

    Args:
        name (str): Collection name requested by the client.

    Returns:
        bool: True for ``movies`` and ``users/<id>/movies|reviews``.
    """
    return name == MOVIES_COLLECTION or bool(USER_LIST_COLLECTION.fullmatch(name or ""))
