"""
Anomaly detection operations.

Read-only access to throughput anomaly detector (TAD) jobs served by the
Theia manager under ``/apis/intelligence.theia.antrea.io/v1alpha1``.

Flow of one ``list`` invocation::

    CONNECTING ──▶ LISTING ──▶ RENDERING ──▶ DONE
        │             │
        └─────────────┴──▶ ERRORED  (AnomalyDetectionListError)

Exactly one connection is made and one GET is issued; nothing is retried.
The connection is closed before rendering, on success and on failure.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from enum import Enum

import httpx

from theia.connection.client import setup_theia_client_and_connection
from theia.core.config import TheiaSettings
from theia.core.errors import (
    AnomalyDetectionListError,
    DecodeError,
    ErrorCategory,
    ListError,
    ResourceNotFoundError,
    TheiaError,
)
from theia.core.logging import get_logger
from theia.core.protocols import ConnectionProvider, RestClient
from theia.ops.responses import ThroughputAnomalyDetector

logger = get_logger(__name__)

TAD_RESOURCE = "throughputanomalydetectors"
DEFAULT_API_GROUP = "intelligence.theia.antrea.io"
DEFAULT_API_VERSION = "v1alpha1"

Renderer = Callable[[list[ThroughputAnomalyDetector]], None]


def collection_path(
    group: str = DEFAULT_API_GROUP,
    version: str = DEFAULT_API_VERSION,
    resource: str = TAD_RESOURCE,
) -> str:
    """REST path of the collection endpoint for *resource*."""
    return f"/apis/{group}/{version}/{resource}"


# ------------------------------------------------------------------ #
# Resource lister
# ------------------------------------------------------------------ #


def list_anomaly_detectors(
    client: RestClient,
    *,
    group: str = DEFAULT_API_GROUP,
    version: str = DEFAULT_API_VERSION,
) -> list[ThroughputAnomalyDetector]:
    """GET the TAD collection and decode the list envelope.

    Raises:
        ListError: transport failure or non-2xx status
            (:class:`ResourceNotFoundError` for 404)
        DecodeError: body is not a ``{"items": [...]}`` envelope
    """
    path = collection_path(group, version)
    logger.debug("tad.list.request", path=path)

    try:
        response = client.request("GET", path)
    except httpx.TransportError as exc:
        raise ListError(
            f"request to {path} failed: {exc}",
            category=ErrorCategory.NETWORK,
            cause=exc,
        ).with_context(url=path, resource=TAD_RESOURCE)

    if not response.is_success:
        status_text = response.reason_phrase
        error_cls = ResourceNotFoundError if response.status_code == 404 else ListError
        raise error_cls(
            f"the server returned {response.status_code} {status_text}".rstrip(),
            status_code=response.status_code,
            status_text=status_text,
        ).with_context(url=path, resource=TAD_RESOURCE)

    try:
        body = response.json()
    except ValueError as exc:
        raise DecodeError(f"response body is not valid JSON: {exc}", cause=exc).with_context(url=path)

    if not isinstance(body, dict):
        raise DecodeError(f"expected a list object, got {type(body).__name__}").with_context(url=path)

    items = body.get("items")
    if items is None:
        items = []
    if not isinstance(items, list):
        raise DecodeError(f"'items' is not a list: {type(items).__name__}").with_context(url=path)

    records = [ThroughputAnomalyDetector.from_dict(item) for item in items]
    logger.debug("tad.list.decoded", count=len(records))
    return records


# ------------------------------------------------------------------ #
# Command handler
# ------------------------------------------------------------------ #


class ListPhase(str, Enum):
    """Phases of one ``anomaly-detection list`` invocation."""

    CONNECTING = "CONNECTING"
    LISTING = "LISTING"
    RENDERING = "RENDERING"
    DONE = "DONE"
    ERRORED = "ERRORED"


class AnomalyDetectionList:
    """Connect, list and render TAD jobs, wrapping any failure.

    Parameters
    ----------
    settings
        Resolved CLI settings.
    use_cluster_ip
        Address the manager Service directly instead of port-forwarding.
    provider
        Connection provider; defaults to
        :func:`~theia.connection.client.setup_theia_client_and_connection`.
    render
        Called once with the decoded collection after a successful list.
    """

    def __init__(
        self,
        settings: TheiaSettings,
        *,
        render: Renderer,
        use_cluster_ip: bool = False,
        provider: ConnectionProvider = setup_theia_client_and_connection,
    ) -> None:
        self.settings = settings
        self.use_cluster_ip = use_cluster_ip
        self.provider = provider
        self.render = render
        self.phase = ListPhase.CONNECTING

    def _fail(self, exc: Exception) -> AnomalyDetectionListError:
        failed_in = self.phase
        self.phase = ListPhase.ERRORED
        details = exc.to_dict() if isinstance(exc, TheiaError) else {"error": str(exc)}
        # The CLI prints the wrapped error itself; keep the details for --verbose.
        logger.debug("tad.list.failed", phase=failed_in.value, **details)
        return AnomalyDetectionListError(exc)

    def run(self) -> list[ThroughputAnomalyDetector]:
        """Execute the command.

        Returns the rendered collection.

        Raises:
            AnomalyDetectionListError: connecting or listing failed
        """
        started = time.perf_counter()
        self.phase = ListPhase.CONNECTING
        try:
            client = self.provider(self.settings, self.use_cluster_ip)
        except Exception as exc:
            raise self._fail(exc)

        try:
            self.phase = ListPhase.LISTING
            try:
                items = list_anomaly_detectors(
                    client,
                    group=self.settings.api_group,
                    version=self.settings.api_version,
                )
            except Exception as exc:
                raise self._fail(exc)
        finally:
            client.close()

        self.phase = ListPhase.RENDERING
        self.render(items)
        self.phase = ListPhase.DONE
        logger.debug(
            "tad.list.done",
            count=len(items),
            elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return items


def anomaly_detection_list(
    settings: TheiaSettings,
    *,
    render: Renderer,
    use_cluster_ip: bool = False,
    provider: ConnectionProvider = setup_theia_client_and_connection,
) -> list[ThroughputAnomalyDetector]:
    """Run :class:`AnomalyDetectionList` once."""
    return AnomalyDetectionList(
        settings,
        render=render,
        use_cluster_ip=use_cluster_ip,
        provider=provider,
    ).run()
