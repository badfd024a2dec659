"""Unit tests for the Database repository registry."""

import os
import shutil
import tempfile
from pathlib import Path

import pytest

from commitstore.config.schema import AppConfig, CommitIdentity, StoreConfig
from commitstore.core.database import Database
from commitstore.core.errors import (
    AlreadyExistsError,
    DecodeError,
    InvalidArgumentError,
    NotFoundError,
    ProtectedRepositoryError,
)
from commitstore.core.repository import Repository


class TestDatabase:
    """Test Database functionality."""

    @pytest.fixture
    def temp_dir(self):
        """Create a temporary database root."""
        temp_path = Path(tempfile.mkdtemp())
        yield temp_path
        shutil.rmtree(temp_path)

    @pytest.fixture
    def db(self, temp_dir):
        return Database(temp_dir)

    def test_create_repo(self, db, temp_dir):
        repo = db.create_repo(Repository(name="TestRepo", description="A test repository"))

        assert repo.dir == temp_dir / "TestRepo"
        assert (temp_dir / "TestRepo" / ".git").is_dir()
        assert (temp_dir / "TestRepo" / "meta-data" / "TestRepo.json").exists()

    def test_create_repo_requires_repository(self, db):
        with pytest.raises(InvalidArgumentError):
            db.create_repo(None)

    @pytest.mark.parametrize("name", ["", "..", os.sep, f"..{os.sep}", ".", f".{os.sep}", f"{os.sep}.{os.sep}"])
    def test_create_repo_rejects_empty_names(self, db, temp_dir, name):
        with pytest.raises(InvalidArgumentError):
            db.create_repo(Repository(name=name))

        assert not (temp_dir / ".git").exists()

    def test_dot_cannot_reach_the_root(self, db, temp_dir):
        db.create_repo(Repository(name="keep"))

        with pytest.raises(InvalidArgumentError):
            db.open_repo(".")
        with pytest.raises(InvalidArgumentError):
            db.remove_repo(".", force=True, missing_ok=True)

        assert temp_dir.is_dir()
        assert [r.name for r in db.list_repos()] == ["keep"]

    @pytest.mark.parametrize(
        "name", [f"..{os.sep}escape", f"a{os.sep}..{os.sep}b", f".{os.sep}.{os.sep}x", f"{os.sep}abs"]
    )
    def test_sanitized_repo_stays_under_root(self, db, temp_dir, name):
        repo = db.create_repo(Repository(name=name))

        assert repo.dir.parent == temp_dir
        assert os.sep not in repo.name
        assert db.open_repo(name).dir == repo.dir

    def test_create_twice_raises_and_keeps_first(self, db):
        db.create_repo(Repository(name="TestRepo", description="first"))

        with pytest.raises(AlreadyExistsError):
            db.create_repo(Repository(name="TestRepo", description="second"))

        repo = db.open_repo("TestRepo")
        assert repo.description == "first"
        assert len(repo.history()) == 1

    def test_open_round_trips_metadata(self, db):
        created = db.create_repo(Repository(name="TestRepo", description="A test repository"))

        opened = db.open_repo("TestRepo")

        assert opened.model_dump() == created.model_dump()
        assert opened.db is db

    def test_open_returns_fresh_instances(self, db):
        db.create_repo(Repository(name="TestRepo"))

        assert db.open_repo("TestRepo") is not db.open_repo("TestRepo")

    def test_open_missing_raises_not_found(self, db):
        with pytest.raises(NotFoundError):
            db.open_repo("missing")

    def test_open_empty_name_raises(self, db):
        with pytest.raises(InvalidArgumentError):
            db.open_repo("")

    def test_open_plain_directory_raises_not_found(self, db, temp_dir):
        (temp_dir / "plain").mkdir()
        with pytest.raises(NotFoundError):
            db.open_repo("plain")

    def test_open_without_metadata_raises_not_found(self, db, temp_dir):
        db.vcs.init(temp_dir / "bare-git")
        with pytest.raises(NotFoundError):
            db.open_repo("bare-git")

    def test_open_with_corrupt_metadata_raises_decode_error(self, db, temp_dir):
        repo = db.create_repo(Repository(name="TestRepo"))
        (repo.dir / "meta-data" / "TestRepo.json").write_text('{"protected": "sometimes"}')

        with pytest.raises(DecodeError):
            db.open_repo("TestRepo")

    def test_remove_repo(self, db, temp_dir):
        db.create_repo(Repository(name="TestRepo"))

        assert db.remove_repo("TestRepo") is True
        assert not (temp_dir / "TestRepo").exists()
        with pytest.raises(NotFoundError):
            db.open_repo("TestRepo")

    def test_remove_missing_repo(self, db):
        with pytest.raises(NotFoundError):
            db.remove_repo("missing")
        assert db.remove_repo("missing", missing_ok=True) is False

    def test_remove_protected_repo_requires_force(self, db, temp_dir):
        db.create_repo(Repository(name="TestRepo")).protect()

        with pytest.raises(ProtectedRepositoryError):
            db.remove_repo("TestRepo")
        assert (temp_dir / "TestRepo").exists()

        assert db.remove_repo("TestRepo", force=True) is True
        assert not (temp_dir / "TestRepo").exists()

    def test_list_repos_skips_non_repositories(self, db, temp_dir):
        for name in ["TestRepo2", "TestRepo", "TestRepo1"]:
            db.create_repo(Repository(name=name))
        (temp_dir / "stray.txt").write_text("not a repo")
        (temp_dir / "plain").mkdir()
        db.vcs.init(temp_dir / "no-meta")

        repos = db.list_repos()

        assert [r.name for r in repos] == ["TestRepo", "TestRepo1", "TestRepo2"]

    def test_list_repos_skips_undecodable_metadata(self, db, temp_dir):
        db.create_repo(Repository(name="good"))
        bad = db.create_repo(Repository(name="bad"))
        (bad.dir / "meta-data" / "bad.json").write_bytes(b"\xff\xfe\x00garbage")

        with pytest.raises(DecodeError):
            db.open_repo("bad")
        assert [r.name for r in db.list_repos()] == ["good"]

    def test_create_repo_excludes_metadata_temp_files(self, db):
        repo = db.create_repo(Repository(name="TestRepo"))

        exclude = (repo.dir / ".git" / "info" / "exclude").read_text()
        assert "*.meta-tmp" in exclude.splitlines()

    def test_list_repos_empty_and_missing_root(self, db, temp_dir):
        assert db.list_repos() == []
        assert Database(temp_dir / "does-not-exist").list_repos() == []

    def test_custom_store_config(self, temp_dir):
        config = StoreConfig(
            meta_dir="_meta",
            system_commit_message="registry",
            system_identity=CommitIdentity(name="registry-bot", email="bot@example.com"),
        )
        db = Database(temp_dir, config)

        repo = db.create_repo(Repository(name="TestRepo"))

        assert (repo.dir / "_meta" / "TestRepo.json").exists()
        latest = repo.history()[0]
        assert latest.message == "registry\n\nwrote meta-data to _meta/TestRepo.json"
        assert latest.author_name == "registry-bot"
        assert latest.author_email == "bot@example.com"

    def test_from_config(self, temp_dir):
        config = AppConfig(data_dir=temp_dir / "data")

        db = Database.from_config(config)

        assert db.root == temp_dir / "data"
        assert db.config == config.store
