"""Tests for theia.core.config.settings — env loading, overrides and caching."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from theia.core.config import TheiaSettings, clear_settings_cache, get_settings


class TestTheiaSettings:
    def test_defaults(self):
        s = TheiaSettings()
        assert s.namespace == "flow-visibility"
        assert s.manager_service == "theia-manager"
        assert s.manager_port == 11347
        assert s.api_group == "intelligence.theia.antrea.io"
        assert s.api_version == "v1alpha1"
        assert s.ca_configmap == "theia-ca"
        assert s.insecure_skip_tls_verify is False
        assert s.kubeconfig is None

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("THEIA_NAMESPACE", "theia")
        monkeypatch.setenv("THEIA_MANAGER_PORT", "8443")
        monkeypatch.setenv("THEIA_INSECURE_SKIP_TLS_VERIFY", "true")
        s = TheiaSettings()
        assert s.namespace == "theia"
        assert s.manager_port == 8443
        assert s.insecure_skip_tls_verify is True

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("THEIA_CONTEXT=kind-theia\n")
        assert TheiaSettings().context == "kind-theia"

    def test_invalid_value(self, monkeypatch):
        monkeypatch.setenv("THEIA_MANAGER_PORT", "not-a-port")
        with pytest.raises(ValidationError):
            TheiaSettings()

    def test_server_name(self):
        s = TheiaSettings(namespace="theia", manager_service="manager")
        assert s.server_name == "manager.theia.svc"

    def test_token_hidden_from_repr(self):
        assert "s3cr3t" not in repr(TheiaSettings(token="s3cr3t"))


class TestGetSettings:
    def test_cached(self):
        assert get_settings() is get_settings()

    def test_force_reload(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("THEIA_NAMESPACE", "reloaded")
        assert get_settings() is first
        assert get_settings(_force_reload=True).namespace == "reloaded"

    def test_overrides_do_not_touch_cache(self):
        overridden = get_settings(context="kind-theia")
        assert overridden.context == "kind-theia"
        assert get_settings().context is None

    def test_none_overrides_ignored(self):
        assert get_settings(kubeconfig=None, context=None) is get_settings()

    def test_unknown_override(self):
        with pytest.raises(ValueError, match="Unknown setting"):
            get_settings(cluster="prod")

    def test_clear_cache(self):
        first = get_settings()
        clear_settings_cache()
        assert get_settings() is not first
