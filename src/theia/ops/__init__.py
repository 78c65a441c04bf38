"""
Operations layer for the Theia CLI.

All business logic lives here; :mod:`theia.cli` only parses arguments and
formats output.
"""

from theia.ops.anomaly_detection import (
    AnomalyDetectionList,
    ListPhase,
    anomaly_detection_list,
    collection_path,
    list_anomaly_detectors,
)
from theia.ops.responses import ThroughputAnomalyDetector

__all__ = [
    "AnomalyDetectionList",
    "ListPhase",
    "ThroughputAnomalyDetector",
    "anomaly_detection_list",
    "collection_path",
    "list_anomaly_detectors",
]
