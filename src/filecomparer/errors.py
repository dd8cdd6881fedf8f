"""Exception hierarchy for filecomparer.

I/O failures are not wrapped: ``OSError`` and its subclasses reach the caller
unchanged.
"""


class FileComparerError(Exception):
    """Package base exception."""


class AlgorithmError(FileComparerError):
    """Hash algorithm selector is unknown or cannot be instantiated."""


class InvalidArgumentError(FileComparerError, ValueError):
    """Argument has the wrong shape (digest length, input kind, chunk size)."""
