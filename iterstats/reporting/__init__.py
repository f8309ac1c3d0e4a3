"""
iterstats.reporting
===================

Read-only views over a `SnapshotLedger`.
"""

from iterstats.reporting.generic import SnapshotReporter

__all__ = ["SnapshotReporter"]
