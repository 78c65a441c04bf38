"""
Core primitives for the Theia CLI: settings, logging, errors and protocols.
"""

from theia.core.errors import (
    AnomalyDetectionListError,
    ConnectionSetupError,
    DecodeError,
    ErrorCategory,
    ErrorContext,
    KubectlNotFoundError,
    ListError,
    PortForwardError,
    ResourceNotFoundError,
    TheiaError,
)
from theia.core.logging import configure_logging, get_logger
from theia.core.protocols import ConnectionProvider, RestClient

__all__ = [
    "AnomalyDetectionListError",
    "ConnectionProvider",
    "ConnectionSetupError",
    "DecodeError",
    "ErrorCategory",
    "ErrorContext",
    "KubectlNotFoundError",
    "ListError",
    "PortForwardError",
    "ResourceNotFoundError",
    "RestClient",
    "TheiaError",
    "configure_logging",
    "get_logger",
]
