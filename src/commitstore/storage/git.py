"""Git version-control engine backed by GitPython.

Each call opens the repository at the given working-tree path and closes it
again, so no git handles outlive an operation.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Sequence

import git

from commitstore.core.errors import AlreadyExistsError, IOFailureError, NotFoundError
from commitstore.entities import CommitInfo, Signature
from commitstore.storage.base import VersionControl


def _actor(signature: Optional[Signature]) -> Optional[git.Actor]:
    if signature is None:
        return None
    return git.Actor(signature.name, signature.email)


class GitVersionControl(VersionControl):
    """Version control through git working trees."""

    @contextmanager
    def _repo(self, path: Path) -> Iterator[git.Repo]:
        try:
            repo = git.Repo(path)
        except (git.NoSuchPathError, git.InvalidGitRepositoryError) as e:
            raise NotFoundError(f"No repository at {path}", path=path, original_error=e) from e
        except (git.GitError, OSError) as e:
            raise IOFailureError(
                f"Unable to open repository at {path}: {e}", path=path, original_error=e
            ) from e
        try:
            yield repo
        finally:
            repo.close()

    def init(self, path: Path, exclude: Sequence[str] = ()) -> None:
        path = Path(path)
        if (path / ".git").exists():
            raise AlreadyExistsError(f"Repository already exists at {path}", path=path)
        try:
            repo = git.Repo.init(path, mkdir=True)
        except (git.GitError, OSError) as e:
            raise IOFailureError(
                f"Unable to create repository at {path}: {e}", path=path, original_error=e
            ) from e

        try:
            if exclude:
                # info/exclude is local to the clone, never committed
                exclude_file = Path(repo.git_dir) / "info" / "exclude"
                exclude_file.parent.mkdir(parents=True, exist_ok=True)
                with open(exclude_file, "a", encoding="utf-8") as f:
                    f.write("".join(f"{pattern}\n" for pattern in exclude))
        except OSError as e:
            raise IOFailureError(
                f"Unable to write exclude patterns in {path}: {e}", path=path, original_error=e
            ) from e
        finally:
            repo.close()

    def open(self, path: Path) -> None:
        with self._repo(path):
            pass

    def stage_all(self, path: Path) -> None:
        with self._repo(path) as repo:
            try:
                repo.git.add(A=True)
            except git.GitCommandError as e:
                raise IOFailureError(
                    f"Unable to stage changes in {path}: {e}", path=path, original_error=e
                ) from e

    def is_clean(self, path: Path) -> bool:
        with self._repo(path) as repo:
            try:
                return not repo.is_dirty(index=True, working_tree=False, untracked_files=False)
            except git.GitCommandError as e:
                raise IOFailureError(
                    f"Unable to read status of {path}: {e}", path=path, original_error=e
                ) from e

    def commit(
        self,
        path: Path,
        message: str,
        author: Optional[Signature] = None,
        committer: Optional[Signature] = None,
    ) -> str:
        with self._repo(path) as repo:
            try:
                commit = repo.index.commit(
                    message,
                    author=_actor(author),
                    committer=_actor(committer),
                    author_date=author.when if author else None,
                    commit_date=committer.when if committer else None,
                )
            except (git.GitError, OSError, ValueError) as e:
                raise IOFailureError(
                    f"Unable to commit in {path}: {e}", path=path, original_error=e
                ) from e
            return commit.hexsha

    def history(self, path: Path, limit: Optional[int] = None) -> list[CommitInfo]:
        with self._repo(path) as repo:
            if not repo.head.is_valid():
                return []
            kwargs = {"max_count": limit} if limit else {}
            return [
                CommitInfo(
                    sha=c.hexsha,
                    message=str(c.message),
                    author_name=c.author.name or "",
                    author_email=c.author.email or "",
                    committed_at=c.committed_datetime,
                )
                for c in repo.iter_commits(**kwargs)
            ]
