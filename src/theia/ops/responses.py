"""
Typed response objects for operations.

Responses carry only domain data decoded from the manager API: no HTTP
status codes, no CLI formatting.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from theia.core.errors import DecodeError


@dataclass(frozen=True, slots=True)
class ThroughputAnomalyDetector:
    """One throughput anomaly detection job.

    Attributes:
        name: ``metadata.name``, unique within one list.
        spark_application: Backing Spark application id (may be empty).
        state: Job state reported by the manager (``RUNNING``, ``COMPLETED``, …).
    """

    name: str
    spark_application: str = ""
    state: str = ""
    completed_stages: int = 0
    total_stages: int = 0
    error_msg: str = ""
    creation_time: str = ""
    start_time: str = ""
    end_time: str = ""

    @classmethod
    def from_dict(cls, item: Any) -> ThroughputAnomalyDetector:
        """Decode one list item ``{metadata: {name}, status: {...}}``.

        Raises:
            DecodeError: item is not an object or has no string ``metadata.name``
        """
        if not isinstance(item, dict):
            raise DecodeError(f"list item is not an object: {type(item).__name__}")
        metadata = item.get("metadata")
        name = metadata.get("name") if isinstance(metadata, dict) else None
        if not isinstance(name, str):
            raise DecodeError("list item has no metadata.name")
        status = item.get("status")
        if status is None:
            status = {}
        if not isinstance(status, dict):
            raise DecodeError(f"status of {name!r} is not an object")

        return cls(
            name=name,
            spark_application=_text(status.get("sparkApplication")),
            state=_text(status.get("state")),
            completed_stages=_int(status.get("completedStages")),
            total_stages=_int(status.get("totalStages")),
            error_msg=_text(status.get("errorMsg")),
            creation_time=_text(metadata.get("creationTimestamp")),
            start_time=_text(status.get("startTime")),
            end_time=_text(status.get("endTime")),
        )


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0
