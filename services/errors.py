# services/errors.py


class CommentValidationError(ValueError):
    """Input reached the service in a shape it cannot process."""


class NotFoundError(LookupError):
    """Referenced subject or comment does not exist."""
