class ValidationError(ValueError):
    """Missing or invalid input (absent siteId, non-positive amount, bad date)."""


class NotFoundError(ValueError):
    """A referenced record does not exist."""
