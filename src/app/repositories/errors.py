class DuplicateKeyError(Exception):
    """Raised by a repository when an insert collides with a unique key.

    The session is unusable until the unit of work is rolled back.
    """
