import logging
from concurrent.futures import ThreadPoolExecutor

from pymongo import ASCENDING

from api.config import CACHE_TTL_SECONDS, FETCH_WORKERS, MOVIE_DETAIL_CACHE_PREFIX, MOVIES_COLLECTION, PAGE_SIZE
from api.errors import DocumentDecodeError, MovieNotFoundError
from api.api_movies.movies_functions import (
    build_key_query,
    build_page_query,
    decode_movie,
    decode_review,
    normalize_movie,
    read_cached_document,
    write_cached_document,
)
from api.api_movies.movies_models import MoviePage
from api.api_session.session import get_session

logger = logging.getLogger(__name__)

MODES = ("app", "mymovies", "myreviews")


class MovieQueryService:
    """
    Paged movie listings over a MongoDB collection.

    ``app`` pages read movies straight from the listed collection.
    ``mymovies`` and ``myreviews`` pages list documents keyed by movie key
    (a user's saved movies or reviews) and resolve every key against the
    ``movies`` collection.
    """

    def __init__(self, session=None, page_size: int = PAGE_SIZE, max_workers: int = FETCH_WORKERS, cache_ttl: int = CACHE_TTL_SECONDS):
        self.session = session if session is not None else get_session()
        self.page_size = page_size
        self.max_workers = max(1, max_workers)
        self.cache_ttl = cache_ttl

    def load_page(self, mode: str, load_more: bool, last_movie: object, genre_filter: str | None, collection_name: str, movies=(), reviews=()):
        """
        Load the next page of a listing.

        Args:
            mode (str): ``"app"``, ``"mymovies"`` or ``"myreviews"``.
            load_more (bool): Continue after ``last_movie``; False starts over.
            last_movie (object): Cursor returned with the previous page.
            genre_filter (str | None): Only list movies flagged with this genre.
            collection_name (str): Collection to page through.
            movies (Sequence[Movie]): Movies accumulated by earlier pages.
            reviews (Sequence[Review]): Reviews accumulated by earlier pages.

        Returns:
            MoviePage: Updated cursor, more-results flag and accumulated lists.
        """
        if mode not in MODES:
            raise ValueError(f"Unknown listing mode: {mode!r}")

        if not (load_more and last_movie is not None):
            movies = ()
            reviews = ()

        query = build_page_query(load_more, last_movie, genre_filter)
        cursor = self.session.collection(collection_name).find(query).sort("_id", ASCENDING).limit(self.page_size)
        documents = list(cursor)

        if not documents:
            logger.info("no more documents in %s", collection_name)
            return MoviePage(
                last_movie=last_movie,
                more_movies_found=False,
                movies=tuple(movies),
                reviews=tuple(reviews),
            )

        errors = []
        page_reviews = []
        if mode == "app":
            page_movies = []
            for document in documents:
                key = str(document["_id"])
                try:
                    page_movies.append(normalize_movie(decode_movie(document, key)))
                except DocumentDecodeError as exc:
                    logger.warning("skipping movie %s: %s", key, exc.message)
                    errors.append((key, exc.message))
        else:
            keys = [str(document["_id"]) for document in documents]
            if mode == "myreviews":
                page_reviews = [decode_review(document, key) for document, key in zip(documents, keys)]
            page_movies = self.fetch_movies(keys)

        logger.info("loaded %d documents from %s", len(documents), collection_name)
        return MoviePage(
            last_movie=documents[-1]["_id"],
            more_movies_found=True,
            movies=tuple(movies) + tuple(page_movies),
            reviews=tuple(reviews) + tuple(page_reviews),
            errors=tuple(errors),
        )

    def fetch_movies(self, keys: list[str]):
        """
        Fetch several movies concurrently, keeping the order of ``keys``.

        Args:
            keys (list[str]): Movie keys to resolve.

        Returns:
            list[Movie]: Normalized movies, one per key.
        """
        if not keys:
            return []
        workers = min(self.max_workers, len(keys))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(self.get_movie, keys))

    def get_movie(self, key: str):
        """
        Fetch a single movie by key from the ``movies`` collection.

        Args:
            key (str): Movie key.

        Returns:
            Movie: Normalized movie.

        Raises:
            MovieNotFoundError: When no movie has this key.
        """
        cache_key = f"{MOVIE_DETAIL_CACHE_PREFIX}{key}"
        document = read_cached_document(self.session.cache, cache_key)
        if document is None:
            document = self.session.collection(MOVIES_COLLECTION).find_one(build_key_query(key))
            if not document:
                raise MovieNotFoundError(key)
            write_cached_document(self.session.cache, cache_key, self.cache_ttl, document)
        return normalize_movie(decode_movie(document, key))
