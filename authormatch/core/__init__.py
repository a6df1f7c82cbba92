"""Core support for authormatch: observability and record I/O."""

from authormatch.core.observability import ObservabilityLogger, LogEntry
from authormatch.core.records import load_records, match_to_dict

__all__ = [
    # Observability
    "ObservabilityLogger",
    "LogEntry",
    # Records
    "load_records",
    "match_to_dict",
]
