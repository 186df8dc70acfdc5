import logging

from api.errors import NoCurrentUserError
from api.api_auth.auth_functions import decode_token_claims
from api.api_session.session import get_session

logger = logging.getLogger(__name__)


class AuthStatusChecker:
    """
    Signed-in and moderator checks for the current user.

    The session is looked up again on every check so that a rebuilt shared
    session is picked up. Moderator status is never stored; it is read from
    the identity token each time.
    """

    def __init__(self, session_factory=get_session):
        self.session_factory = session_factory
        self.session = None
        self.is_anon = True

    def refresh_session(self):
        self.session = self.session_factory()
        return self.session

    def is_anonymous(self):
        """
        Report whether the current user is anonymous.

        Returns:
            bool: False only when the current user has an email address.
        """
        user = self.refresh_session().current_user
        self.is_anon = not (user is not None and user.email)
        return self.is_anon

    def toggle_anon_status_and_check_mod(self):
        """
        Flip the anonymous flag and check moderator status after signing in.

        Returns:
            bool: Moderator status when the new state is signed in, else False.
        """
        self.is_anon = not self.is_anon
        if self.is_anon:
            return False
        return self.check_is_moderator()

    def check_is_moderator(self):
        """
        Check the ``moderator`` claim of the current user's identity token.

        Returns:
            bool: True when the claim is present and truthy.

        Raises:
            NoCurrentUserError: When nobody is signed in.
            jwt.DecodeError: When the token cannot be decoded.
        """
        user = self.refresh_session().current_user
        if user is None:
            raise NoCurrentUserError("No user is signed in")
        claims = decode_token_claims(user.get_id_token())
        is_mod = bool(claims.get("moderator"))
        logger.debug("moderator check for %s: %s", user.email, is_mod)
        return is_mod
