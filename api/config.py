import os
import re

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB = os.getenv("MONGO_DB", "api_movie_reviews")
MONGO_TIMEOUT_MS = int(os.environ.get("MONGO_TIMEOUT_MS", 5000))

REDIS_HOST = os.environ.get("REDIS_HOST", "localhost")
REDIS_PORT = int(os.environ.get("REDIS_PORT", 6379))
REDIS_DB = int(os.environ.get("REDIS_DB", 0))
REDIS_TIMEOUT_SECONDS = float(os.environ.get("REDIS_TIMEOUT_SECONDS", 2))

# 0 disables the movie detail cache
CACHE_TTL_SECONDS = int(os.environ.get("CACHE_TTL_SECONDS", 600))
FETCH_WORKERS = int(os.environ.get("FETCH_WORKERS", 4))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

PAGE_SIZE = 10
MOVIES_COLLECTION = "movies"
MOVIE_DETAIL_CACHE_PREFIX = "movie_detail:"
DEFAULT_POSTER = "src/assets/Popcorn_Sparky.png"
POSTER_URL_PREFIX = "https://image.tmdb.org/t/p/w500"
# per-user saved movies and reviews, keyed by movie key
USER_LIST_COLLECTION = re.compile(r"users/[A-Za-z0-9_-]+/(movies|reviews)")
