"""
Connection layer: reach the Theia manager directly or through a tunnel.
"""

from theia.connection.client import TheiaClient, setup_theia_client_and_connection
from theia.connection.portforwarder import PortForwarder

__all__ = [
    "PortForwarder",
    "TheiaClient",
    "setup_theia_client_and_connection",
]
