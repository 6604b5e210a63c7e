"""Error hierarchy for notionmark.

Every public error class inherits from :class:`NotionmarkError`.  Each
carries a machine-readable ``code`` (from :class:`ErrorCode`), a
human-readable ``message``, an optional structured ``context`` dict, and an
optional ``cause`` (chained exception).

The conversion engine does not raise for malformed document content; these
errors come from the Notion API layer (:mod:`notionmark.notion_api`).
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error the package can raise."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTH_ERROR = "AUTH_ERROR"
    PERMISSION_ERROR = "PERMISSION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    RETRY_EXHAUSTED = "RETRY_EXHAUSTED"
    NETWORK_ERROR = "NETWORK_ERROR"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class NotionmarkError(Exception):
    """Base exception for all notionmark errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A developer-friendly description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


class _CodedError(NotionmarkError):
    """Shared constructor for subclasses bound to a single :class:`ErrorCode`."""

    _code: ErrorCode = ErrorCode.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=self._code,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# API / transport errors
# ---------------------------------------------------------------------------

class NotionmarkValidationError(_CodedError):
    """Notion API returned 400 (or another non-retryable 4xx).

    Context keys: ``status_code``, ``notion_code``, ``body``.
    """

    _code = ErrorCode.VALIDATION_ERROR


class NotionmarkAuthError(_CodedError):
    """Notion API returned 401: the integration token is invalid or expired.

    Context keys: ``status_code``, ``notion_code``.
    """

    _code = ErrorCode.AUTH_ERROR


class NotionmarkPermissionError(_CodedError):
    """Notion API returned 403: the integration lacks access to the resource.

    Context keys: ``status_code``, ``notion_code``, ``operation``.
    """

    _code = ErrorCode.PERMISSION_ERROR


class NotionmarkNotFoundError(_CodedError):
    """Notion API returned 404: the requested resource does not exist.

    Context keys: ``status_code``, ``notion_code``, ``path``.
    """

    _code = ErrorCode.NOT_FOUND


class NotionmarkConflictError(_CodedError):
    """Notion API returned 409: the resource was modified concurrently.

    Context keys: ``status_code``, ``notion_code``.
    """

    _code = ErrorCode.CONFLICT


class NotionmarkRetryExhaustedError(_CodedError):
    """All retry attempts have been exhausted for a retryable request.

    Context keys: ``attempts``, ``last_status_code``.
    """

    _code = ErrorCode.RETRY_EXHAUSTED


class NotionmarkNetworkError(_CodedError):
    """A transport-level failure occurred (timeout, DNS, connection reset).

    Context keys: ``url``, ``attempt``.
    """

    _code = ErrorCode.NETWORK_ERROR
