"""commitstore - a file-based record store where every change is a git commit.

Example:
    >>> from commitstore import Database, FileRecord, Repository
    >>> db = Database("/tmp/records")
    >>> repo = db.create_repo(Repository(name="hello", description="Hello repo"))
    >>> doc = FileRecord(name="hello.txt")
    >>> repo.write_file(doc, b"hello world")
    >>> repo.write_meta(doc)
"""

from commitstore.core.database import Database
from commitstore.core.errors import (
    AlreadyExistsError,
    DecodeError,
    InvalidArgumentError,
    IOFailureError,
    NotFoundError,
    ProtectedRepositoryError,
    StoreError,
)
from commitstore.core.paths import sanitize
from commitstore.core.repository import Repository
from commitstore.entities import CommitInfo, CommitOptions, FileRecord, Record, Signature

__version__ = "0.1.0"

__all__ = [
    "AlreadyExistsError",
    "CommitInfo",
    "CommitOptions",
    "Database",
    "DecodeError",
    "FileRecord",
    "IOFailureError",
    "InvalidArgumentError",
    "NotFoundError",
    "ProtectedRepositoryError",
    "Record",
    "Repository",
    "Signature",
    "StoreError",
    "sanitize",
]
