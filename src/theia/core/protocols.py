"""
Structural protocols for the Theia CLI.

Architecture:
    ::

        protocols.py
        ├── RestClient          — "perform HTTP request" + close
        └── ConnectionProvider  — (settings, use_cluster_ip) -> RestClient

    Consumers:
        ops/anomaly_detection.py, connection/client.py, cli/anomaly_detection.py

Guardrails:
    ❌ DON'T: Rebind module-level functions to swap the provider in tests
    ✅ DO: Pass any callable matching ConnectionProvider to the command
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    import httpx

    from theia.core.config import TheiaSettings


@runtime_checkable
class RestClient(Protocol):
    """Handle to the Theia manager API.

    Implementations own any tunnel behind the client; ``close()`` releases
    both and must be safe to call more than once.
    """

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Perform one HTTP request against *path* on the manager."""
        ...

    def close(self) -> None:
        """Release the HTTP client and stop the tunnel, if any."""
        ...


class ConnectionProvider(Protocol):
    """Factory for :class:`RestClient` handles."""

    def __call__(self, settings: TheiaSettings, use_cluster_ip: bool) -> RestClient:
        ...


__all__ = [
    "RestClient",
    "ConnectionProvider",
]
