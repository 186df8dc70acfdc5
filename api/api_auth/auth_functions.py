import logging

import jwt
from flask import has_request_context, request

logger = logging.getLogger(__name__)


def decode_token_claims(token: str):
    """
    Decode the payload of an identity token without checking its signature.

    The token has already been issued and verified by the auth provider's
    client SDK, so only the claims are read here.

    Args:
        token (str): Three-part, dot-separated identity token.

    Returns:
        dict: Claims held in the token payload.

    Raises:
        jwt.DecodeError: When the token is missing or malformed.
    """
    return jwt.decode(token, options={"verify_signature": False})


def extract_bearer_token(header_value: str | None):
    """
    Pull the token out of an ``Authorization`` header.

    Args:
        header_value (str | None): Raw header value.

    Returns:
        str | None: Token when the header uses the Bearer scheme, otherwise None.
    """
    if not header_value:
        return None
    scheme, _, token = header_value.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


class AuthUser:
    """The signed-in user behind the current request."""

    def __init__(self, id_token: str, email: str | None = None):
        self.id_token = id_token
        self.email = email

    def get_id_token(self):
        return self.id_token

    def __repr__(self):
        return f"AuthUser(email={self.email!r})"


class RequestTokenAuth:
    """
    Auth context that reads the current user from the active Flask request.

    The bearer token is decoded without signature verification, so its
    claims (email, ``moderator``) are whatever the caller sent. They are
    fine for display decisions only. Never authorize a server-side write or
    any other privileged action on them; verify the token against the
    auth provider's keys first.
    """

    header_name = "Authorization"

    @property
    def current_user(self):
        if not has_request_context():
            return None
        token = extract_bearer_token(request.headers.get(self.header_name))
        if not token:
            return None
        claims = decode_token_claims(token)
        return AuthUser(token, claims.get("email"))
