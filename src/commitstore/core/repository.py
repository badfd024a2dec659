"""Repository - a git working tree holding records and their metadata.

Every mutation made through a Repository is followed by a commit of the
whole working tree, so the history of the directory is the audit trail of
the records in it.

Layout of a repository directory:
- meta-data/<name>.json                  the repository's own metadata
- <folder>/<file name>                   record content
- <folder>/meta-data/<file name>.json    record metadata
"""

import io
import os
import posixpath
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, BinaryIO, Optional, Union

from pydantic import Field, PrivateAttr

from commitstore.core.errors import (
    InvalidArgumentError,
    IOFailureError,
    NotFoundError,
    StoreError,
)
from commitstore.core.locking import RWLock
from commitstore.entities import CommitInfo, CommitOptions, Record
from commitstore.entities.record import utcnow
from commitstore.observability.logging import get_logger

if TYPE_CHECKING:
    from commitstore.core.database import Database

logger = get_logger(__name__)

COPY_CHUNK_SIZE = 64 * 1024

Content = Union[BinaryIO, bytes, bytearray, memoryview, str]


def _copy_stream(src: Any, dst: Any) -> int:
    """Copy src into dst until EOF, returning the number of bytes written."""
    written = 0
    while True:
        chunk = src.read(COPY_CHUNK_SIZE)
        if not chunk:
            return written
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        dst.write(chunk)
        written += len(chunk)


class Repository(Record):
    """A git repository stored as a sub-directory of a Database root.

    The repository is itself a record: its fields are persisted as
    ``meta-data/<name>.json`` at the top of its own directory.

    Locking is per instance. Two instances opened for the same directory do
    not coordinate, so concurrent callers should share one instance.
    """

    name: str = Field(..., description="Sanitized repository name, also its directory name")
    description: Optional[str] = None
    protected: bool = False
    soft_deleted: bool = False
    created_on: datetime = Field(default_factory=utcnow)
    updated_on: datetime = Field(default_factory=utcnow)
    deleted_on: Optional[datetime] = None

    _db: Any = PrivateAttr(default=None)
    _lock: RWLock = PrivateAttr(default_factory=RWLock)

    def file_name(self) -> str:
        return self.name

    def folder(self) -> str:
        return "repos"

    def bind(self, db: "Database") -> "Repository":
        """Attach the repository to the database that owns its directory."""
        self._db = db
        return self

    @property
    def db(self) -> "Database":
        if self._db is None:
            raise InvalidArgumentError(f"Repository '{self.name}' is not bound to a database")
        return self._db

    @property
    def dir(self) -> Path:
        """Full directory of the repository under the database root."""
        return Path(os.path.normpath(os.path.join(self.db.root, self.name)))

    def protect(self) -> None:
        """Mark the repository as protected from removal and persist the flag."""
        self._set_protected(True)

    def unprotect(self) -> None:
        """Clear the protected flag and persist it."""
        self._set_protected(False)

    def _set_protected(self, value: bool) -> None:
        with self._lock.write_locked():
            previous = self.protected
            self.protected = value
            try:
                self._write_meta(self, self.db.system_commit_options())
            except StoreError:
                self.protected = previous
                raise
        logger.info("repo_protection_changed", repo=self.name, protected=value)

    def commit_all(self, opts: Optional[CommitOptions] = None) -> Optional[str]:
        """Stage every change in the working tree and commit it.

        Returns:
            The new commit id, or None when there was nothing to commit
        """
        with self._lock.write_locked():
            return self._commit_all(opts or CommitOptions())

    def _commit_all(self, opts: CommitOptions) -> Optional[str]:
        vcs = self.db.vcs
        path = self.dir

        vcs.stage_all(path)
        if vcs.is_clean(path):
            return None

        now = datetime.now(timezone.utc)
        author = opts.author.model_copy(update={"when": now}) if opts.author else None
        committer = opts.committer.model_copy(update={"when": now}) if opts.committer else None

        sha = vcs.commit(path, opts.message.strip(), author, committer)
        logger.debug("repo_committed", repo=self.name, sha=sha)
        return sha

    def history(self, limit: Optional[int] = None) -> list[CommitInfo]:
        """Commits of the repository, newest first."""
        with self._lock.read_locked():
            return self.db.vcs.history(self.dir, limit)

    def _record_path(self, rec: Record) -> Path:
        return self.dir / rec.folder() / rec.file_name()

    def _meta_root(self, rec: Record) -> Path:
        # A repository's own metadata sits at the top of its directory
        if isinstance(rec, Repository):
            return self.dir
        return self.dir / rec.folder()

    def file_exists(self, rec: Record) -> bool:
        """Check whether the record's content file exists.

        Raises:
            IOFailureError: If the file cannot be checked for a reason other
                than being absent
        """
        path = self._record_path(rec)
        with self._lock.read_locked():
            try:
                path.stat()
            except (FileNotFoundError, NotADirectoryError):
                return False
            except OSError as e:
                raise IOFailureError(f"Unable to stat {path}: {e}", path=path, original_error=e) from e
        return True

    def write_file(
        self,
        rec: Record,
        content: Optional[Content],
        opts: Optional[CommitOptions] = None,
    ) -> int:
        """Write the record's content file and commit it.

        The folder is created when missing and an existing file is truncated.
        If the commit fails the written file stays in the working tree and
        is picked up by the next successful commit.

        Args:
            rec: Record naming the file
            content: Binary stream or bytes to write; text is encoded as UTF-8
            opts: Commit options; a description of the write is appended

        Returns:
            Number of bytes written

        Raises:
            InvalidArgumentError: If content is None
            IOFailureError: If the folder or file cannot be created or written
        """
        if content is None:
            raise InvalidArgumentError(f"write_file requires content: {rec.file_name()}")
        if isinstance(content, str):
            content = content.encode("utf-8")
        if isinstance(content, (bytes, bytearray, memoryview)):
            content = io.BytesIO(content)
        opts = opts or CommitOptions()

        with self._lock.write_locked():
            folder = self.dir / rec.folder()
            try:
                folder.mkdir(mode=0o700, parents=True, exist_ok=True)
            except OSError as e:
                raise IOFailureError(
                    f"Unable to make directory {folder}: {e}", path=folder, original_error=e
                ) from e

            target = folder / rec.file_name()
            try:
                f = open(target, "wb")
            except OSError as e:
                raise IOFailureError(
                    f"Unable to create file {rec.file_name()}: {e}", path=target, original_error=e
                ) from e

            with f:
                try:
                    written = _copy_stream(content, f)
                except OSError as e:
                    raise IOFailureError(
                        f"Copy failed to {rec.file_name()}: {e}", path=target, original_error=e
                    ) from e

            relative = posixpath.join(rec.folder(), rec.file_name())
            self._commit_all(opts.with_note(f"wrote {written} bytes to file {relative}"))

        logger.debug("file_written", repo=self.name, path=relative, bytes=written)
        return written

    def read_file(self, rec: Record, dest: Optional[BinaryIO]) -> int:
        """Copy the record's content file into ``dest``.

        Returns:
            Number of bytes copied

        Raises:
            InvalidArgumentError: If dest is None
            NotFoundError: If the file does not exist
            IOFailureError: If the file cannot be opened or read
        """
        if dest is None:
            raise InvalidArgumentError(f"read_file requires a destination: {rec.file_name()}")

        path = self._record_path(rec)
        with self._lock.read_locked():
            try:
                f = open(path, "rb")
            except FileNotFoundError as e:
                raise NotFoundError(f"No file {rec.file_name()}", path=path, original_error=e) from e
            except OSError as e:
                raise IOFailureError(
                    f"Unable to open file {rec.file_name()}: {e}", path=path, original_error=e
                ) from e

            with f:
                try:
                    return _copy_stream(f, dest)
                except OSError as e:
                    raise IOFailureError(
                        f"Copy failed from {rec.file_name()}: {e}", path=path, original_error=e
                    ) from e

    def remove_file(self, rec: Record, opts: Optional[CommitOptions] = None) -> None:
        """Remove the record's content file and commit the deletion.

        The record's metadata file is left in place; use remove_meta for it.

        Raises:
            NotFoundError: If the file does not exist (nothing is committed)
        """
        opts = opts or CommitOptions()
        path = self._record_path(rec)
        relative = posixpath.join(rec.folder(), rec.file_name())

        with self._lock.write_locked():
            try:
                path.unlink()
            except FileNotFoundError as e:
                raise NotFoundError(f"No file {rec.file_name()}", path=path, original_error=e) from e
            except OSError as e:
                raise IOFailureError(
                    f"Unable to remove file {rec.file_name()}: {e}", path=path, original_error=e
                ) from e
            self._commit_all(opts.with_note(f"removed file {relative}"))

        logger.debug("file_removed", repo=self.name, path=relative)

    def write_meta(self, rec: Record, opts: Optional[CommitOptions] = None) -> None:
        """Persist the record's fields as JSON metadata and commit them."""
        with self._lock.write_locked():
            self._write_meta(rec, opts or CommitOptions())

    def _write_meta(self, rec: Record, opts: CommitOptions) -> None:
        meta_dir = self.db.config.meta_dir
        self.db.meta_store.write(self._meta_root(rec), meta_dir, rec.file_name(), rec)

        relative = posixpath.join(meta_dir, rec.file_name()) + ".json"
        self._commit_all(opts.with_note(f"wrote meta-data to {relative}"))
        logger.debug("meta_written", repo=self.name, path=relative)

    def load_meta(self, rec: Record) -> None:
        """Populate ``rec`` in place from its stored metadata.

        Raises:
            NotFoundError: If there is no metadata for the record
            DecodeError: If the stored metadata does not fit the record
        """
        with self._lock.read_locked():
            self.db.meta_store.read(self._meta_root(rec), self.db.config.meta_dir, rec.file_name(), rec)

    def remove_meta(self, rec: Record, opts: Optional[CommitOptions] = None) -> None:
        """Remove the record's metadata file and commit the deletion.

        The record's content file is left in place; use remove_file for it.

        Raises:
            NotFoundError: If there is no metadata file (nothing is committed)
        """
        opts = opts or CommitOptions()
        meta_dir = self.db.config.meta_dir

        with self._lock.write_locked():
            path = self.db.meta_store.delete(self._meta_root(rec), meta_dir, rec.file_name())
            relative = os.path.relpath(path, self.dir).replace(os.sep, "/")
            self._commit_all(opts.with_note(f"removed meta-data file {relative}"))

        logger.debug("meta_removed", repo=self.name, path=relative)
