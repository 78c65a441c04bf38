"""
Centralized settings for the Theia CLI.

:class:`TheiaSettings` is the single, validated, cached source of truth for
where the Theia manager lives and how to reach it.  Values come from
``THEIA_*`` environment variables or a ``.env`` file; CLI global options are
layered on top with :func:`get_settings` overrides.

Tags:
    theia-cli, configuration, settings, pydantic, caching
"""

from __future__ import annotations

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TheiaSettings(BaseSettings):
    """Theia CLI configuration.

    All fields can be set via ``THEIA_*`` environment variables (e.g.
    ``THEIA_NAMESPACE=flow-visibility``).
    """

    model_config = SettingsConfigDict(
        env_prefix="THEIA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Kubernetes access ────────────────────────────────────────
    kubeconfig: str | None = Field(default=None, description="Path to kubeconfig (default loading rules if unset)")
    context: str | None = Field(default=None, description="kubeconfig context name")
    kubectl: str = Field(default="kubectl", description="kubectl binary used for port-forwarding")

    # ── Theia manager ────────────────────────────────────────────
    namespace: str = Field(default="flow-visibility")
    manager_service: str = Field(default="theia-manager")
    manager_pod_selector: str = Field(default="app=theia-manager")
    manager_port: int = Field(default=11347)

    # ── Intelligence API ─────────────────────────────────────────
    api_group: str = Field(default="intelligence.theia.antrea.io")
    api_version: str = Field(default="v1alpha1")

    # ── TLS / auth ───────────────────────────────────────────────
    ca_configmap: str = Field(default="theia-ca")
    ca_configmap_key: str = Field(default="ca.crt")
    insecure_skip_tls_verify: bool = Field(default=False)
    token: str | None = Field(default=None, description="Bearer token sent to the manager", repr=False)

    # ── Timeouts (seconds) ───────────────────────────────────────
    request_timeout: float = Field(default=30.0)
    port_forward_timeout: float = Field(default=15.0)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="WARNING")
    log_format: str = Field(default="console", description="console or json")

    @property
    def server_name(self) -> str:
        """DNS name the manager's serving certificate is issued for."""
        return f"{self.manager_service}.{self.namespace}.svc"


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, TheiaSettings] = {}


def get_settings(
    *,
    _force_reload: bool = False,
    **overrides: Any,
) -> TheiaSettings:
    """Load, validate, and cache a :class:`TheiaSettings` instance.

    Parameters
    ----------
    overrides:
        Field values that take precedence over the environment, typically
        CLI options.  ``None`` values are ignored.
    _force_reload:
        Bypass cache and reload from the environment.
    """
    if _force_reload or "default" not in _settings_cache:
        _settings_cache["default"] = TheiaSettings()

    settings = _settings_cache["default"]
    update = {k: v for k, v in overrides.items() if v is not None}
    if update:
        unknown = set(update) - set(TheiaSettings.model_fields)
        if unknown:
            raise ValueError(f"Unknown setting(s): {', '.join(sorted(unknown))}")
        settings = settings.model_copy(update=update)
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()
