"""Tests for ``theia.connection.portforwarder`` (all kubectl calls mocked)."""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from theia.connection.portforwarder import PortForwarder
from theia.core.errors import ConnectionSetupError, KubectlNotFoundError, PortForwardError


def _proc(poll=None, returncode=None, stderr=""):
    proc = MagicMock()
    proc.poll.return_value = poll
    proc.returncode = returncode
    proc.stderr.read.return_value = stderr
    return proc


@pytest.fixture
def kubectl_on_path():
    with patch("theia.connection.portforwarder.shutil.which", return_value="/usr/local/bin/kubectl"):
        yield


class TestCommand:
    def test_command_line(self):
        pf = PortForwarder(
            "flow-visibility",
            "theia-manager-7d9f",
            11347,
            kubeconfig="/tmp/kc",
            context="kind-theia",
            local_port=40000,
        )
        assert pf._command("/usr/local/bin/kubectl") == [
            "/usr/local/bin/kubectl",
            "--kubeconfig", "/tmp/kc",
            "--context", "kind-theia",
            "port-forward",
            "--namespace", "flow-visibility",
            "--address", "127.0.0.1",
            "pod/theia-manager-7d9f",
            "40000:11347",
        ]

    def test_kubectl_missing(self):
        with patch("theia.connection.portforwarder.shutil.which", return_value=None):
            pf = PortForwarder("flow-visibility", "theia-manager-7d9f", 11347)
            with pytest.raises(KubectlNotFoundError) as exc_info:
                pf.start()
        assert isinstance(exc_info.value, ConnectionSetupError)
        assert "--use-cluster-ip" in str(exc_info.value)


class TestLifecycle:
    @patch("theia.connection.portforwarder.socket.create_connection")
    @patch("theia.connection.portforwarder.subprocess.Popen")
    def test_start_and_stop(self, mock_popen, mock_connect, kubectl_on_path):
        proc = _proc()
        mock_popen.return_value = proc

        pf = PortForwarder("flow-visibility", "theia-manager-7d9f", 11347, local_port=40000)
        assert pf.start() == 40000
        assert pf.is_running
        mock_connect.assert_called_with(("127.0.0.1", 40000), timeout=0.2)

        pf.stop()
        proc.terminate.assert_called_once()
        proc.wait.assert_called_once_with(timeout=5.0)
        assert not pf.is_running

        pf.stop()
        proc.terminate.assert_called_once()

    @patch("theia.connection.portforwarder._free_port", return_value=45678)
    @patch("theia.connection.portforwarder.socket.create_connection")
    @patch("theia.connection.portforwarder.subprocess.Popen")
    def test_picks_free_port(self, mock_popen, mock_connect, mock_free, kubectl_on_path):
        mock_popen.return_value = _proc()
        pf = PortForwarder("flow-visibility", "theia-manager-7d9f", 11347)
        assert pf.start() == 45678
        assert mock_popen.call_args.args[0][-1] == "45678:11347"
        pf.stop()

    @patch("theia.connection.portforwarder.subprocess.Popen")
    def test_kubectl_exits_early(self, mock_popen, kubectl_on_path):
        mock_popen.return_value = _proc(
            poll=1, returncode=1, stderr='error: pods "theia-manager-7d9f" not found\n'
        )
        pf = PortForwarder("flow-visibility", "theia-manager-7d9f", 11347, local_port=40000)

        with pytest.raises(PortForwardError, match="not found"):
            pf.start()
        assert not pf.is_running

    @patch("theia.connection.portforwarder.subprocess.Popen")
    def test_popen_oserror(self, mock_popen, kubectl_on_path):
        mock_popen.side_effect = PermissionError("permission denied")
        pf = PortForwarder("flow-visibility", "theia-manager-7d9f", 11347, local_port=40000)
        with pytest.raises(PortForwardError, match="couldn't run kubectl"):
            pf.start()

    @patch("theia.connection.portforwarder.subprocess.Popen")
    def test_not_ready_in_time(self, mock_popen, kubectl_on_path):
        proc = _proc()
        mock_popen.return_value = proc
        pf = PortForwarder("flow-visibility", "theia-manager-7d9f", 11347, local_port=40000, start_timeout=0)

        with pytest.raises(PortForwardError, match="not ready"):
            pf.start()
        proc.terminate.assert_called_once()

    def test_stop_kills_after_timeout(self):
        proc = _proc()
        proc.wait.side_effect = [subprocess.TimeoutExpired("kubectl", 5.0), 0]
        pf = PortForwarder("flow-visibility", "theia-manager-7d9f", 11347)
        pf._proc = proc

        pf.stop()

        proc.kill.assert_called_once()
        assert proc.wait.call_count == 2

    @patch("theia.connection.portforwarder.socket.create_connection")
    @patch("theia.connection.portforwarder.subprocess.Popen")
    def test_context_manager(self, mock_popen, mock_connect, kubectl_on_path):
        proc = _proc()
        mock_popen.return_value = proc
        with PortForwarder("flow-visibility", "theia-manager-7d9f", 11347, local_port=40000) as pf:
            assert pf.local_port == 40000
        proc.terminate.assert_called_once()
