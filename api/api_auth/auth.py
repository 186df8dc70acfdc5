import logging

import jwt
from flask import Flask, jsonify
from flask_cors import CORS

from api.config import LOG_LEVEL
from api.errors import NoCurrentUserError
from api.api_auth.auth_status import AuthStatusChecker

app = Flask(__name__)
app.json.sort_keys = False
CORS(app)


def get_status_checker():
    return AuthStatusChecker()


@app.route("/auth/status", methods=["GET"])
def get_auth_status():
    """
    Handle GET requests for the caller's sign-in state.

    Returns:
        Response: Flask response with the anonymous flag or error payload.
    """
    try:
        is_anon = get_status_checker().is_anonymous()
    except jwt.InvalidTokenError:
        return jsonify({"error": "Invalid identity token"}), 400

    return jsonify({"isAnonymous": is_anon})


@app.route("/auth/moderator", methods=["GET"])
def get_moderator_status():
    """
    Handle GET requests for the caller's moderator status.

    Returns:
        Response: Flask response with the moderator flag or error payload.
    """
    try:
        is_mod = get_status_checker().check_is_moderator()
    except NoCurrentUserError:
        return jsonify({"error": "Sign in required"}), 401
    except jwt.InvalidTokenError:
        return jsonify({"error": "Invalid identity token"}), 400

    return jsonify({"isModerator": is_mod})


if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL)
    app.run(host="0.0.0.0", port=5003, debug=True)
