"""
Connection provider: an HTTP client for the Theia manager.

:func:`setup_theia_client_and_connection` resolves the manager's address,
either its Service ClusterIP or a local port-forward, loads the manager CA
from the cluster and returns a :class:`TheiaClient`.  The caller owns the
returned client and must ``close()`` it; closing also stops the tunnel.
"""

from __future__ import annotations

import ssl
from typing import Any

import httpx

from theia.connection.kube import (
    find_running_pod,
    get_service_cluster_ip,
    load_core_api,
    read_ca_bundle,
)
from theia.connection.portforwarder import PortForwarder
from theia.core.config import TheiaSettings
from theia.core.errors import ConnectionSetupError
from theia.core.logging import get_logger

logger = get_logger(__name__)


class TheiaClient:
    """REST handle on the Theia manager, optionally backed by a tunnel.

    Satisfies :class:`theia.core.protocols.RestClient`.
    """

    def __init__(
        self,
        http: httpx.Client,
        *,
        tunnel: PortForwarder | None = None,
        server_name: str | None = None,
    ) -> None:
        self._http = http
        self._tunnel = tunnel
        self._server_name = server_name
        self._closed = False

    @property
    def base_url(self) -> httpx.URL:
        return self._http.base_url

    @property
    def tunnel(self) -> PortForwarder | None:
        return self._tunnel

    @property
    def closed(self) -> bool:
        return self._closed

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send one request; TLS hostname checks use the Service DNS name."""
        if self._server_name:
            extensions = dict(kwargs.pop("extensions", None) or {})
            extensions.setdefault("sni_hostname", self._server_name)
            kwargs["extensions"] = extensions
        return self._http.request(method, path, **kwargs)

    def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("GET", path, **kwargs)

    def close(self) -> None:
        """Close the HTTP client and stop the tunnel (idempotent)."""
        if self._closed:
            return
        self._closed = True
        try:
            self._http.close()
        finally:
            if self._tunnel is not None:
                self._tunnel.stop()

    def __enter__(self) -> TheiaClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def _format_host(host: str) -> str:
    return f"[{host}]" if ":" in host and not host.startswith("[") else host


def _tls_verify(settings: TheiaSettings, core_api: Any) -> ssl.SSLContext | bool:
    if settings.insecure_skip_tls_verify:
        logger.warning("tls.verify.disabled", server=settings.server_name)
        return False

    bundle = read_ca_bundle(
        core_api,
        settings.namespace,
        settings.ca_configmap,
        settings.ca_configmap_key,
    )
    try:
        return ssl.create_default_context(cadata=bundle)
    except (ssl.SSLError, ValueError) as exc:
        raise ConnectionSetupError(
            f"invalid CA bundle in ConfigMap {settings.namespace}/{settings.ca_configmap}: {exc}",
            cause=exc,
        ).with_context(resource="configmap")


def setup_theia_client_and_connection(settings: TheiaSettings, use_cluster_ip: bool) -> TheiaClient:
    """Build a :class:`TheiaClient` for the manager.

    Args:
        settings: Resolved CLI settings
        use_cluster_ip: Address the Service ClusterIP directly instead of
            opening a port-forward (only works from inside the cluster network)

    Raises:
        ConnectionSetupError: kubeconfig, lookup, tunnel, address or TLS failure
    """
    core_api = load_core_api(settings)
    tunnel: PortForwarder | None = None
    try:
        if use_cluster_ip:
            host = get_service_cluster_ip(core_api, settings.namespace, settings.manager_service)
            port = settings.manager_port
        else:
            pod = find_running_pod(core_api, settings.namespace, settings.manager_pod_selector)
            tunnel = PortForwarder(
                settings.namespace,
                pod,
                settings.manager_port,
                kubectl=settings.kubectl,
                kubeconfig=settings.kubeconfig,
                context=settings.context,
                start_timeout=settings.port_forward_timeout,
            )
            port = tunnel.start()
            host = tunnel.address

        verify = _tls_verify(settings, core_api)
        headers = {"Authorization": f"Bearer {settings.token}"} if settings.token else {}
        base_url = f"https://{_format_host(host)}:{port}"
        try:
            http = httpx.Client(
                base_url=base_url,
                verify=verify,
                headers=headers,
                timeout=settings.request_timeout,
            )
        except httpx.InvalidURL as exc:
            raise ConnectionSetupError(
                f"invalid Theia manager address {base_url!r}: {exc}",
                cause=exc,
            ).with_context(url=base_url)
    except BaseException:
        if tunnel is not None:
            tunnel.stop()
        raise

    logger.debug("theia.client.ready", base_url=base_url, tunneled=tunnel is not None)
    server_name = None if settings.insecure_skip_tls_verify else settings.server_name
    return TheiaClient(http, tunnel=tunnel, server_name=server_name)
