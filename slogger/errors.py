class SloggerError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


class IngestValidationError(SloggerError):
    """Payload rejected before anything was written."""

    status_code = 400


class AuthError(SloggerError):
    status_code = 401

    def __init__(self, message: str = "unauthorized"):
        super().__init__(message)


class StorageError(SloggerError):
    """
    Partition creation, insert or query failed at the storage engine.

    Nothing from the failed call is visible afterwards, so callers may retry.
    """

    status_code = 503
    retryable = True

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause

    def to_dict(self) -> dict:
        return {"error": self.message, "retryable": self.retryable}


class StorageTimeoutError(StorageError):
    status_code = 504
