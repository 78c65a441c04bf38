"""
Local port-forward tunnel to a pod, via the ``kubectl`` CLI (subprocess).

Uses ``kubectl port-forward`` rather than the websocket port-forward API of
the Python client: kubectl handles the SPDY stream and reconnects for us, and
it is always present where the cluster is administered.

Example::

    with PortForwarder("flow-visibility", "theia-manager-7d9f", 11347) as pf:
        port = pf.local_port
        ...  # talk to https://127.0.0.1:<port>
"""

from __future__ import annotations

import shutil
import socket
import subprocess
import time

from theia.core.errors import KubectlNotFoundError, PortForwardError
from theia.core.logging import get_logger

logger = get_logger(__name__)

_POLL_INTERVAL = 0.2
_STOP_TIMEOUT = 5.0


def _free_port(address: str) -> int:
    """Ask the OS for an unused local TCP port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((address, 0))
        return sock.getsockname()[1]


class PortForwarder:
    """Forwards ``address:local_port`` to ``pod:target_port``.

    Parameters
    ----------
    namespace, pod
        Target pod.
    target_port
        Container port on the pod.
    kubectl
        kubectl binary name or path.
    kubeconfig, context
        Passed through to kubectl when set.
    local_port
        Local port to bind; ``0`` picks a free one.
    start_timeout
        Seconds to wait for the local port to accept connections.
    """

    def __init__(
        self,
        namespace: str,
        pod: str,
        target_port: int,
        *,
        kubectl: str = "kubectl",
        kubeconfig: str | None = None,
        context: str | None = None,
        address: str = "127.0.0.1",
        local_port: int = 0,
        start_timeout: float = 15.0,
    ) -> None:
        self.namespace = namespace
        self.pod = pod
        self.target_port = target_port
        self.kubectl = kubectl
        self.kubeconfig = kubeconfig
        self.context = context
        self.address = address
        self.local_port = local_port
        self.start_timeout = start_timeout
        self._proc: subprocess.Popen[str] | None = None

    # ------------------------------------------------------------------
    # kubectl discovery
    # ------------------------------------------------------------------

    def _find_kubectl(self) -> str:
        kubectl = shutil.which(self.kubectl)
        if kubectl is None:
            raise KubectlNotFoundError(
                f"kubectl not found ({self.kubectl!r}); port-forwarding requires kubectl on PATH. "
                "Use --use-cluster-ip to address the service directly."
            )
        return kubectl

    def _command(self, kubectl: str) -> list[str]:
        cmd = [kubectl]
        if self.kubeconfig:
            cmd += ["--kubeconfig", self.kubeconfig]
        if self.context:
            cmd += ["--context", self.context]
        cmd += [
            "port-forward",
            "--namespace", self.namespace,
            "--address", self.address,
            f"pod/{self.pod}",
            f"{self.local_port}:{self.target_port}",
        ]
        return cmd

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._proc is not None and self._proc.poll() is None

    def start(self) -> int:
        """Start the tunnel and block until it accepts connections.

        Returns the local port.

        Raises
        ------
        KubectlNotFoundError
            If kubectl is not available.
        PortForwardError
            If kubectl exits early or the port never opens.
        """
        if self.is_running:
            return self.local_port

        kubectl = self._find_kubectl()
        if not self.local_port:
            self.local_port = _free_port(self.address)

        cmd = self._command(kubectl)
        logger.debug("portforward.exec", cmd=" ".join(cmd))
        try:
            self._proc = subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
            )
        except OSError as exc:
            raise PortForwardError(f"couldn't run kubectl port-forward: {exc}", cause=exc)

        self._wait_until_ready(self._proc)
        logger.info(
            "portforward.started",
            pod=f"{self.namespace}/{self.pod}",
            local=f"{self.address}:{self.local_port}",
            target_port=self.target_port,
        )
        return self.local_port

    def _wait_until_ready(self, proc: subprocess.Popen[str]) -> None:
        deadline = time.monotonic() + self.start_timeout
        while time.monotonic() < deadline:
            if proc.poll() is not None:
                stderr = proc.stderr.read().strip() if proc.stderr else ""
                returncode = proc.returncode
                self._proc = None
                raise PortForwardError(
                    f"kubectl port-forward exited with code {returncode}: {stderr}"
                ).with_context(resource="pod", pod=f"{self.namespace}/{self.pod}")
            try:
                with socket.create_connection((self.address, self.local_port), timeout=_POLL_INTERVAL):
                    return
            except OSError:
                time.sleep(_POLL_INTERVAL)

        self.stop()
        raise PortForwardError(
            f"port-forward to {self.namespace}/{self.pod} not ready after {self.start_timeout}s"
        ).with_context(resource="pod")

    def stop(self) -> None:
        """Stop the tunnel (idempotent)."""
        proc, self._proc = self._proc, None
        if proc is None:
            return
        if proc.poll() is None:
            proc.terminate()
            try:
                proc.wait(timeout=_STOP_TIMEOUT)
            except subprocess.TimeoutExpired:
                proc.kill()
                proc.wait()
        if proc.stderr:
            proc.stderr.close()
        logger.debug("portforward.stopped", pod=f"{self.namespace}/{self.pod}")

    def __enter__(self) -> PortForwarder:
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()
