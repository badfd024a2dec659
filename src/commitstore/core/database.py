"""Database - a registry of repositories kept under one root directory.

Provides:
- Creating repositories (git init plus self-metadata as the first commit)
- Opening repositories into fresh instances
- Removing repositories, honouring the protected flag
- Listing every repository found under the root
"""

import os
import shutil
import threading
from pathlib import Path
from typing import Optional, Union

from commitstore.config.schema import AppConfig, StoreConfig
from commitstore.core.errors import (
    InvalidArgumentError,
    IOFailureError,
    NotFoundError,
    ProtectedRepositoryError,
    StoreError,
)
from commitstore.core.paths import sanitize
from commitstore.core.repository import Repository
from commitstore.entities import CommitOptions, Signature
from commitstore.observability.logging import get_logger
from commitstore.storage import create_metadata_store, create_version_control
from commitstore.storage.base import MetadataStore, VersionControl

logger = get_logger(__name__)


class Database:
    """File based database of git repositories.

    Each repository is a direct child directory of ``root`` named after the
    sanitized repository name. Create, open and remove are serialized by a
    database-wide lock; listing is not.
    """

    def __init__(
        self,
        root: Union[str, Path],
        config: Optional[StoreConfig] = None,
        version_control: Optional[VersionControl] = None,
        metadata_store: Optional[MetadataStore] = None,
    ):
        """Initialize the database.

        Args:
            root: Directory holding the repositories
            config: Store configuration (defaults to StoreConfig())
            version_control: Version-control engine (defaults from config)
            metadata_store: Metadata store (defaults from config)
        """
        self.root = Path(root)
        self.config = config or StoreConfig()
        self.vcs = version_control or create_version_control(self.config)
        self.meta_store = metadata_store or create_metadata_store(self.config)
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config: AppConfig) -> "Database":
        """Build a database rooted at the configured data directory."""
        return cls(config.data_dir, config.store)

    def system_commit_options(self) -> CommitOptions:
        """Commit options for commits the database makes on its own behalf."""
        identity = self.config.system_identity
        return CommitOptions(
            message=self.config.system_commit_message,
            author=Signature(name=identity.name, email=identity.email),
            committer=Signature(name=identity.name, email=identity.email),
        )

    def _repo_name(self, raw: str) -> str:
        name = sanitize(raw)
        # "." would resolve to the root itself
        if name in ("", "."):
            raise InvalidArgumentError(f"Invalid repository name: {raw!r}")
        return name

    def _check_under_root(self, repo: Repository) -> None:
        if repo.dir.parent != Path(os.path.normpath(self.root)):
            raise InvalidArgumentError(
                f"Repository '{repo.name}' does not resolve to a directory under the root",
                path=repo.dir,
            )

    def create_repo(self, repo: Optional[Repository]) -> Repository:
        """Create a repository directory, initialize git and commit its metadata.

        The repository name is sanitized in place before use.

        Args:
            repo: Repository to create, carrying its descriptive fields

        Returns:
            The same repository, bound to this database

        Raises:
            InvalidArgumentError: If repo is None or its sanitized name is empty or "."
            AlreadyExistsError: If a git repository already exists there
            IOFailureError: If the directory cannot be initialized
        """
        with self._lock:
            if repo is None:
                raise InvalidArgumentError("create_repo requires a repository")

            repo.name = self._repo_name(repo.name)
            repo.bind(self)
            self._check_under_root(repo)
            self.vcs.init(repo.dir, exclude=self.meta_store.scratch_patterns)
            repo.write_meta(repo, self.system_commit_options())

        logger.info("repo_created", repo=repo.name, path=str(repo.dir))
        return repo

    def open_repo(self, name: str) -> Repository:
        """Open an existing repository into a fresh instance.

        Raises:
            InvalidArgumentError: If the sanitized name is empty or "."
            NotFoundError: If there is no repository, or no metadata for it
            DecodeError: If the repository metadata is malformed
            IOFailureError: On any other open failure
        """
        name = self._repo_name(name)

        with self._lock:
            repo = Repository(name=name).bind(self)
            self.vcs.open(repo.dir)
            repo.load_meta(repo)
            # the directory, not the stored field, is the identity
            repo.name = name

        return repo

    def remove_repo(self, name: str, *, force: bool = False, missing_ok: bool = False) -> bool:
        """Delete a repository directory and all its history.

        This bypasses version control: the removal itself is not recorded.

        Args:
            name: Repository name
            force: Remove even if the repository is protected
            missing_ok: Return False instead of raising when it does not exist

        Returns:
            True if removed, False if missing and missing_ok was set

        Raises:
            NotFoundError: If the repository does not exist and missing_ok is false
            ProtectedRepositoryError: If the repository is protected and force is false
            IOFailureError: If the directory cannot be deleted
        """
        with self._lock:
            try:
                repo = self.open_repo(name)
            except NotFoundError:
                if missing_ok:
                    return False
                raise

            if repo.protected and not force:
                raise ProtectedRepositoryError(
                    f"Repository '{repo.name}' is protected", path=repo.dir
                )

            self._check_under_root(repo)
            try:
                shutil.rmtree(repo.dir)
            except OSError as e:
                raise IOFailureError(
                    f"Unable to remove repository {repo.name}: {e}", path=repo.dir, original_error=e
                ) from e

        logger.info("repo_removed", repo=repo.name, forced=force and repo.protected)
        return True

    def list_repos(self) -> list[Repository]:
        """List every repository under the root, sorted by name.

        Entries that cannot be opened as repositories are skipped.
        """
        try:
            entries = sorted(p.name for p in self.root.iterdir() if p.is_dir())
        except OSError:
            return []

        repos = []
        for entry in entries:
            try:
                repos.append(self.open_repo(entry))
            except StoreError:
                continue
        return repos
