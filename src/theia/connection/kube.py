"""
Kubernetes lookups needed to reach the Theia manager.

This is the single place where kubeconfig is loaded so the rest of the
connection code only sees plain values (an address, a pod name, a CA bundle).
All Kubernetes failures surface as :class:`ConnectionSetupError`, and a
failed API call is never retried.
"""

from __future__ import annotations

from typing import Any

from kubernetes import client, config
from kubernetes.client import ApiException
from kubernetes.config import ConfigException
from urllib3.exceptions import HTTPError

from theia.core.config import TheiaSettings
from theia.core.errors import ConnectionSetupError
from theia.core.logging import get_logger

logger = get_logger(__name__)


def load_core_api(settings: TheiaSettings) -> client.CoreV1Api:
    """Create a ``CoreV1Api`` using the configured kubeconfig/context."""
    configuration = client.Configuration()
    try:
        config.load_kube_config(
            config_file=settings.kubeconfig,
            context=settings.context,
            client_configuration=configuration,
        )
    except (ConfigException, OSError) as exc:
        raise ConnectionSetupError(
            f"couldn't load kubeconfig: {exc}",
            cause=exc,
        ).with_context(url=settings.kubeconfig)
    # urllib3 retries 3 times by default
    configuration.retries = 0
    return client.CoreV1Api(client.ApiClient(configuration))


def _api_error(what: str, exc: ApiException | HTTPError, resource: str) -> ConnectionSetupError:
    if isinstance(exc, ApiException):
        return ConnectionSetupError(f"{what}: {exc.reason}", cause=exc).with_context(
            resource=resource, status_code=exc.status
        )
    return ConnectionSetupError(
        f"{what}: Kubernetes API server unreachable: {exc}", cause=exc
    ).with_context(resource=resource)


def get_service_cluster_ip(core_api: Any, namespace: str, name: str) -> str:
    """Return the ClusterIP of Service *namespace/name*."""
    try:
        service = core_api.read_namespaced_service(name=name, namespace=namespace)
    except (ApiException, HTTPError) as exc:
        raise _api_error(f"error when getting Service {namespace}/{name}", exc, "service")

    cluster_ip = getattr(service.spec, "cluster_ip", None)
    if not cluster_ip or cluster_ip == "None":
        raise ConnectionSetupError(
            f"Service {namespace}/{name} has no ClusterIP"
        ).with_context(resource="service")
    logger.debug("kube.service.resolved", service=f"{namespace}/{name}", cluster_ip=cluster_ip)
    return cluster_ip


def find_running_pod(core_api: Any, namespace: str, label_selector: str) -> str:
    """Return the name of the first Running pod matching *label_selector*."""
    try:
        pods = core_api.list_namespaced_pod(namespace=namespace, label_selector=label_selector).items
    except (ApiException, HTTPError) as exc:
        raise _api_error(f"error when listing pods in {namespace}", exc, "pod")

    for pod in pods:
        if getattr(pod.status, "phase", None) == "Running":
            logger.debug("kube.pod.selected", pod=pod.metadata.name, namespace=namespace)
            return pod.metadata.name

    raise ConnectionSetupError(
        f"no running pod matches {label_selector!r} in namespace {namespace}"
    ).with_context(resource="pod")


def read_ca_bundle(core_api: Any, namespace: str, name: str, key: str) -> str:
    """Return the PEM CA bundle stored under *key* of ConfigMap *namespace/name*."""
    try:
        configmap = core_api.read_namespaced_config_map(name=name, namespace=namespace)
    except (ApiException, HTTPError) as exc:
        raise _api_error(f"error when getting ConfigMap {namespace}/{name}", exc, "configmap")

    data = configmap.data or {}
    bundle = data.get(key)
    if not bundle:
        raise ConnectionSetupError(
            f"ConfigMap {namespace}/{name} has no {key!r} entry"
        ).with_context(resource="configmap")
    return bundle
