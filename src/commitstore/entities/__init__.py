"""Entities - Domain models for the record store.

- Record: the capability every storable entity implements
- FileRecord: a plain file kept under the repository's files folder
- CommitOptions / Signature: what a mutation is committed with
- CommitInfo: a commit read back from history
"""

from commitstore.entities.commit import CommitInfo, CommitOptions, Signature
from commitstore.entities.record import FileRecord, Record

__all__ = [
    "CommitInfo",
    "CommitOptions",
    "FileRecord",
    "Record",
    "Signature",
]
