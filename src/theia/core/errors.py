"""
Structured error types for the Theia CLI.

Every failure the CLI can surface is a :class:`TheiaError`.  Errors carry a
category, structured context (resource, URL, HTTP status) and the chained
underlying exception, so the command layer can report a single message while
logs keep the full picture.

Architecture:
    ::

        ┌───────────────────────────────────────────────────────────────┐
        │                         TheiaError                            │
        │              (category, context, cause)                       │
        ├───────────────────────────────────────────────────────────────┤
        │                                                               │
        │  ConnectionSetupError     ListError          DecodeError      │
        │  (NETWORK)                (SOURCE)           (PARSE)          │
        │       │                       │                               │
        │  PortForwardError        ResourceNotFoundError                │
        │  KubectlNotFoundError                                         │
        │                                                               │
        │  AnomalyDetectionListError  (command-level wrapper, prefix)   │
        └───────────────────────────────────────────────────────────────┘

Examples:
    Chaining an HTTP failure:

    >>> err = ListError("the server returned 404 Not Found", status_code=404)
    >>> err.context.status_code
    404

    Wrapping at the command boundary:

    >>> str(AnomalyDetectionListError(err))
    'error when getting anomaly detection job list: the server returned 404 Not Found'

Guardrails:
    ❌ DON'T: Raise bare ``Exception`` from connection or listing code
    ✅ DO: Raise the matching ``TheiaError`` subclass with ``cause=``

    ❌ DON'T: Match on full error strings in callers
    ✅ DO: Match on ``AnomalyDetectionListError.PREFIX`` or on the type

Tags:
    error-handling, exception-hierarchy, error-context, theia-cli
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and reporting."""

    NETWORK = "NETWORK"
    CONFIG = "CONFIG"
    SOURCE = "SOURCE"
    PARSE = "PARSE"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """Structured metadata attached to an error.

    Attributes:
        resource: Kind of object involved (``service``, ``pod``, ``throughputanomalydetectors``)
        url: URL or API path that was being accessed
        status_code: HTTP status code if applicable
        metadata: Additional key-value pairs
    """

    resource: str | None = None
    url: str | None = None
    status_code: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ["resource", "url", "status_code"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class TheiaError(Exception):
    """
    Base exception for all Theia CLI errors.

    Subclasses set ``default_category``.  The optional ``cause`` is stored on
    the instance and chained as ``__cause__`` so tracebacks show the root error.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> TheiaError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ConnectionSetupError("no ClusterIP").with_context(
                resource="service", url="flow-visibility/theia-manager"
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONNECTION ERRORS
# =============================================================================


class ConnectionSetupError(TheiaError):
    """A usable API client or tunnel could not be established."""

    default_category = ErrorCategory.NETWORK


class KubectlNotFoundError(ConnectionSetupError):
    """The ``kubectl`` binary needed for port-forwarding is not available."""

    default_category = ErrorCategory.CONFIG


class PortForwardError(ConnectionSetupError):
    """The port-forward tunnel failed to start or exited early."""


# =============================================================================
# LIST / DECODE ERRORS
# =============================================================================


class ListError(TheiaError):
    """
    The list request did not succeed.

    Raised for non-2xx responses (``status_code`` set) and for transport
    failures during the request (``status_code`` is ``None``).
    """

    default_category = ErrorCategory.SOURCE

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        status_text: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.status_text = status_text
        if status_code is not None:
            self.context.status_code = status_code


class ResourceNotFoundError(ListError):
    """The collection endpoint returned 404."""


class DecodeError(TheiaError):
    """The response body does not match the expected list envelope."""

    default_category = ErrorCategory.PARSE


# =============================================================================
# COMMAND-LEVEL WRAPPER
# =============================================================================


class AnomalyDetectionListError(TheiaError):
    """Failure of ``anomaly-detection list``, wrapping the underlying cause.

    ``str()`` always starts with :attr:`PREFIX`; ``cause`` and ``__cause__``
    hold the original error.
    """

    PREFIX = "error when getting anomaly detection job list:"

    def __init__(self, cause: BaseException):
        category = cause.category if isinstance(cause, TheiaError) else None
        context = cause.context if isinstance(cause, TheiaError) else None
        super().__init__(
            f"{self.PREFIX} {cause}",
            category=category,
            context=context,
            cause=cause,
        )


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "TheiaError",
    "ConnectionSetupError",
    "KubectlNotFoundError",
    "PortForwardError",
    "ListError",
    "ResourceNotFoundError",
    "DecodeError",
    "AnomalyDetectionListError",
]
