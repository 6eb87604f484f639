"""Comparison history and drift detection.

Usage:
    from db_schema_diff.history import ComparisonHistoryService, HistoryRecord, DriftSummary
"""

from db_schema_diff.history.models import DriftSummary, HistoryRecord
from db_schema_diff.history.service import DEFAULT_RETENTION_DAYS, ComparisonHistoryService

__all__ = [
    "ComparisonHistoryService",
    "DEFAULT_RETENTION_DAYS",
    "DriftSummary",
    "HistoryRecord",
]
