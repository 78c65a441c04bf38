"""Centralized configuration for the Theia CLI.

Quick start::

    from theia.core.config import get_settings

    settings = get_settings(kubeconfig="~/.kube/config")
    print(settings.namespace)   # "flow-visibility"
"""

from .settings import (
    TheiaSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "TheiaSettings",
    "clear_settings_cache",
    "get_settings",
]
