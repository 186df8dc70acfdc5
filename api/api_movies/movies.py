import logging

from flask import Flask, jsonify, request
from flask_cors import CORS

from api.config import LOG_LEVEL, MOVIES_COLLECTION
from api.errors import MovieNotFoundError
from api.api_movies.movies_functions import is_listable_collection, parse_document_key, parse_flag
from api.api_movies.movies_service import MovieQueryService

app = Flask(__name__)
app.json.sort_keys = False
CORS(app)


def get_movie_service():
    return MovieQueryService()


@app.route("/movies", methods=["GET"])
def list_movies():
    """
    Handle GET requests for one page of a movie listing.

    Returns:
        Response: Flask response with the page payload or error payload.
    """
    mode = (request.args.get("mode") or "app").strip().lower()
    load_more = parse_flag(request.args.get("load_more"))
    last_movie = parse_document_key(request.args.get("last_movie") or None)
    genre = request.args.get("genre") or None
    collection_name = request.args.get("collection") or MOVIES_COLLECTION

    if not is_listable_collection(collection_name):
        return jsonify({"error": "Unknown collection"}), 400

    try:
        page = get_movie_service().load_page(mode, load_more, last_movie, genre, collection_name)
    except MovieNotFoundError:
        return jsonify({"error": "Movie not found"}), 404
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    return jsonify(page.to_payload())


@app.route("/movies/<key>", methods=["GET"])
def get_movie_detail(key: str):
    """
    Handle GET requests for a single movie.

    Args:
        key (str): Movie key from the path segment.

    Returns:
        Response: Flask response with the movie or error payload.
    """
    try:
        movie = get_movie_service().get_movie(key)
    except MovieNotFoundError:
        return jsonify({"error": "Movie not found"}), 404

    return jsonify(movie.to_payload())


if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL)
    app.run(host="0.0.0.0", port=5000, debug=True)
