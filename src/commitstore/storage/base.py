"""Abstract base classes for the engines the store builds on.

Why this exists:
- Keeps the repository logic independent of the version-control engine
- Keeps metadata serialization behind a small namespaced key/value contract
- Enables testing each engine on its own

How to extend:
1. Subclass VersionControl or MetadataStore
2. Implement all abstract methods, raising commitstore.core.errors types
3. Register it in commitstore.storage factories and StoreConfig
4. Add optional dependencies to pyproject.toml
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence

from pydantic import BaseModel

from commitstore.config.schema import StoreConfig
from commitstore.entities import CommitInfo, Signature


class VersionControl(ABC):
    """Abstract interface for version-control engines.

    Every method takes the working-tree path; implementations hold no
    per-repository state between calls.
    """

    def __init__(self, config: StoreConfig) -> None:
        self.config = config

    @abstractmethod
    def init(self, path: Path, exclude: Sequence[str] = ()) -> None:
        """Initialize a versioned directory, creating it if needed.

        Args:
            path: Working-tree directory
            exclude: Glob patterns that must never be staged

        Raises:
            AlreadyExistsError: If the path is already versioned
            IOFailureError: On any other initialization failure
        """

    @abstractmethod
    def open(self, path: Path) -> None:
        """Check that a versioned directory can be opened.

        Raises:
            NotFoundError: If no versioned directory exists at path
            IOFailureError: On any other open failure
        """

    @abstractmethod
    def stage_all(self, path: Path) -> None:
        """Stage every change in the working tree, deletions included."""

    @abstractmethod
    def is_clean(self, path: Path) -> bool:
        """Return True when nothing is staged relative to the last commit."""

    @abstractmethod
    def commit(
        self,
        path: Path,
        message: str,
        author: Optional[Signature] = None,
        committer: Optional[Signature] = None,
    ) -> str:
        """Commit the staged changes.

        Returns:
            The new commit id
        """

    @abstractmethod
    def history(self, path: Path, limit: Optional[int] = None) -> list[CommitInfo]:
        """List commits reachable from HEAD, newest first."""


class MetadataStore(ABC):
    """Abstract interface for flat-file metadata serialization.

    Entries are addressed by (root, namespace, key); each entry holds one
    pydantic model.
    """

    # Glob patterns of scratch files the store may leave beside its entries
    scratch_patterns: tuple[str, ...] = ()

    def __init__(self, config: StoreConfig) -> None:
        self.config = config

    @abstractmethod
    def path(self, root: Path, namespace: str, key: str) -> Path:
        """File path backing the entry."""

    @abstractmethod
    def write(self, root: Path, namespace: str, key: str, value: BaseModel) -> Path:
        """Serialize value into the entry, replacing any previous content.

        Raises:
            IOFailureError: If the entry cannot be written
        """

    @abstractmethod
    def read(self, root: Path, namespace: str, key: str, out: BaseModel) -> None:
        """Deserialize the entry into ``out`` in place.

        Raises:
            NotFoundError: If the entry does not exist
            DecodeError: If the entry does not fit the shape of ``out``
        """

    @abstractmethod
    def delete(self, root: Path, namespace: str, key: str) -> Path:
        """Delete the entry.

        Raises:
            NotFoundError: If the entry does not exist
        """
