# app/core/errors.py
"""
Error taxonomy shared by the data-access layer and the services.

  - ConfigurationError: fatal, raised before the app is built.
  - DataAccessError: the backend rejected a read or write.
      - NotFoundError: a detail read matched no row.
      - PartialWriteError: a multi-step write failed midway and was compensated.
"""


class StorefrontError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(StorefrontError):
    pass


class DataAccessError(StorefrontError):
    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation}: {message}")
        self.operation = operation
        self.message = message


class NotFoundError(DataAccessError):
    pass


class PartialWriteError(DataAccessError):
    pass
