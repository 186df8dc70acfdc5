class MovieNotFoundError(LookupError):
    """Raised when a movie key has no matching document."""

    def __init__(self, key: str):
        super().__init__(f"Movie not found: {key}")
        self.key = key


class NoCurrentUserError(RuntimeError):
    """Raised when an auth check needs a signed-in user and there is none."""


class DocumentDecodeError(ValueError):
    """Raised when a stored document does not have the expected shape."""

    def __init__(self, key: str | None, message: str):
        super().__init__(f"{key or '<unknown>'}: {message}")
        self.key = key
        self.message = message
