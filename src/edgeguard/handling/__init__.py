"""Generic error handling, independent of the retry driver."""

from edgeguard.handling.handler import (
    AUTO_RETRY_MESSAGE,
    DEFAULT_TITLE,
    ErrorHandler,
    HandledError,
)

__all__ = ["AUTO_RETRY_MESSAGE", "DEFAULT_TITLE", "ErrorHandler", "HandledError"]
