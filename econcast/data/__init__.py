"""Edge adapters between the scoring core and the store."""

from .snapshot import (
    DatabaseSnapshotSource,
    JsonSnapshotSource,
    Snapshot,
    SnapshotSource,
    auto_resolve_expired,
)
from .submission import DatabaseSubmissionSink, ReadOnlySubmissionSink, SubmissionSink

__all__ = [
    "Snapshot",
    "SnapshotSource",
    "DatabaseSnapshotSource",
    "JsonSnapshotSource",
    "auto_resolve_expired",
    "SubmissionSink",
    "DatabaseSubmissionSink",
    "ReadOnlySubmissionSink",
]
