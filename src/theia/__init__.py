"""
Theia - command-line client for Theia network flow visibility.

Subpackages:
- theia.core: settings, logging, errors, protocols
- theia.connection: Kubernetes lookups, port-forward tunnel, manager client
- theia.ops: anomaly detection operations
- theia.cli: Typer application
"""

__version__ = "0.1.0"
