"""
Storage for bobble.

- SQLiteReportStore: local persistence of uploaded build reports
"""

from .sqlite import SQLiteReportStore, StoredReport

__all__ = ["SQLiteReportStore", "StoredReport"]
