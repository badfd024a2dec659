"""Command-line interface for the commitstore record store.

Commands:
- info: Show configuration
- repo: Manage repositories (create, list, info, delete, protect, log)
- file: Manage files inside a repository (put, get, rm, exists)
"""

import sys
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from commitstore.config.loader import get_default_config_path, load_config
from commitstore.config.schema import AppConfig
from commitstore.core.database import Database
from commitstore.core.errors import NotFoundError, StoreError
from commitstore.core.repository import Repository
from commitstore.entities import CommitOptions, FileRecord
from commitstore.entities.record import utcnow
from commitstore.observability.logging import configure_from_config, get_logger

app = typer.Typer(
    name="commitstore",
    help="File-based record store where every change is a git commit",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)


def _load_config(config_file: Optional[Path]) -> AppConfig:
    """Load configuration and setup logging."""
    if config_file is None:
        config_file = get_default_config_path()

    config = load_config(config_file)
    configure_from_config(config.logging)

    return config


def _open_database(config_file: Optional[Path]) -> Database:
    return Database.from_config(_load_config(config_file))


def _fail(message: str) -> NoReturn:
    err_console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


def _open_repo(db: Database, name: str) -> Repository:
    try:
        return db.open_repo(name)
    except NotFoundError:
        _fail(f"Repository '{name}' not found")
    except StoreError as e:
        _fail(f"Error opening repository '{name}': {e}")


def _file_record(repo: Repository, name: str) -> FileRecord:
    """Build the record for ``name``, picking up stored metadata when present."""
    try:
        record = FileRecord(name=name)
    except ValueError as e:
        _fail(f"Invalid file name '{name}': {e}")
    try:
        repo.load_meta(record)
    except NotFoundError:
        pass
    except StoreError as e:
        _fail(f"Error reading metadata for '{name}': {e}")
    return record


@app.command()
def info(config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path")):
    """Show system information and configuration."""
    config = _load_config(config_file)

    table = Table(title="commitstore")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Data Directory", str(config.data_dir))
    table.add_row("Metadata Folder", config.store.meta_dir)
    table.add_row("Version Control", config.store.version_control.value)
    table.add_row("Metadata Store", config.store.metadata_store.value)
    table.add_row("System Identity", f"{config.store.system_identity.name} <{config.store.system_identity.email}>")
    table.add_row("Log Level", config.logging.level.value)

    console.print(table)


# Repository management subcommand group
repo_app = typer.Typer(help="Manage repositories")
app.add_typer(repo_app, name="repo")


@repo_app.command("create")
def repo_create(
    name: str = typer.Argument(..., help="Repository name"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Repository description"),
    protect: bool = typer.Option(False, "--protect", help="Protect the repository from deletion"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Create a new repository."""
    db = _open_database(config_file)

    try:
        repo = db.create_repo(Repository(name=name, description=description))
        if protect:
            repo.protect()
    except StoreError as e:
        _fail(f"Error creating repository: {e}")

    console.print(f"[green]✓[/green] Created repository: {repo.name}")
    console.print(f"  Path: {repo.dir}")
    if repo.description:
        console.print(f"  Description: {repo.description}")


@repo_app.command("list")
def repo_list(config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path")):
    """List all repositories."""
    db = _open_database(config_file)
    repositories = db.list_repos()

    if not repositories:
        console.print("[yellow]No repositories found[/yellow]")
        return

    table = Table(title="Repositories")
    table.add_column("Name", style="cyan")
    table.add_column("Description", style="green")
    table.add_column("Protected", style="yellow")
    table.add_column("Created", style="dim")

    for repo in repositories:
        table.add_row(
            repo.name,
            repo.description or "-",
            "yes" if repo.protected else "no",
            repo.created_on.astimezone().strftime("%Y-%m-%d %H:%M:%S"),
        )

    console.print(table)


@repo_app.command("info")
def repo_info(
    name: str = typer.Argument(..., help="Repository name"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Show repository information."""
    db = _open_database(config_file)
    repo = _open_repo(db, name)

    try:
        commits = repo.history()
    except StoreError as e:
        _fail(f"Error reading history: {e}")

    table = Table(title=f"Repository: {repo.name}")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Name", repo.name)
    table.add_row("Path", str(repo.dir))
    table.add_row("Description", repo.description or "-")
    table.add_row("Protected", "yes" if repo.protected else "no")
    table.add_row("Commits", str(len(commits)))
    table.add_row("Created", repo.created_on.astimezone().strftime("%Y-%m-%d %H:%M:%S"))
    table.add_row("Updated", repo.updated_on.astimezone().strftime("%Y-%m-%d %H:%M:%S"))

    console.print(table)


@repo_app.command("delete")
def repo_delete(
    name: str = typer.Argument(..., help="Repository name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
    force: bool = typer.Option(False, "--force", "-f", help="Delete even if the repository is protected"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Delete a repository and its entire history."""
    db = _open_database(config_file)

    if not yes:
        typer.confirm(
            f"Are you sure you want to delete repository '{name}' and all its history?",
            abort=True,
        )

    try:
        db.remove_repo(name, force=force)
    except NotFoundError:
        _fail(f"Repository '{name}' not found")
    except StoreError as e:
        _fail(f"Error deleting repository: {e}")

    console.print(f"[green]✓[/green] Deleted repository: {name}")


@repo_app.command("protect")
def repo_protect(
    name: str = typer.Argument(..., help="Repository name"),
    off: bool = typer.Option(False, "--off", help="Remove protection instead"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Protect a repository from deletion."""
    db = _open_database(config_file)
    repo = _open_repo(db, name)

    try:
        if off:
            repo.unprotect()
        else:
            repo.protect()
    except StoreError as e:
        _fail(f"Error updating repository: {e}")

    state = "unprotected" if off else "protected"
    console.print(f"[green]✓[/green] Repository {repo.name} is {state}")


@repo_app.command("log")
def repo_log(
    name: str = typer.Argument(..., help="Repository name"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, help="Maximum number of commits"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Show the commit history of a repository."""
    db = _open_database(config_file)
    repo = _open_repo(db, name)

    try:
        commits = repo.history(limit)
    except StoreError as e:
        _fail(f"Error reading history: {e}")

    if not commits:
        console.print("[yellow]No commits yet[/yellow]")
        return

    table = Table(title=f"History: {repo.name}")
    table.add_column("Commit", style="dim")
    table.add_column("Date", style="cyan")
    table.add_column("Author", style="yellow")
    table.add_column("Message", style="green")

    for commit in commits:
        table.add_row(
            commit.sha[:10],
            commit.committed_at.astimezone().strftime("%Y-%m-%d %H:%M:%S"),
            commit.author_name,
            commit.message.strip(),
        )

    console.print(table)


# File management subcommand group
file_app = typer.Typer(help="Manage files in a repository")
app.add_typer(file_app, name="file")


@file_app.command("put")
def file_put(
    repo_name: str = typer.Argument(..., help="Repository name"),
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="File to store"),
    name: Optional[str] = typer.Option(None, "--name", help="Stored file name (defaults to the file's name)"),
    message: str = typer.Option("", "--message", "-m", help="Commit message"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Store a file and its metadata, one commit each."""
    db = _open_database(config_file)
    repo = _open_repo(db, repo_name)
    record = _file_record(repo, name or path.name)
    record.updated_on = utcnow()

    try:
        with open(path, "rb") as f:
            written = repo.write_file(record, f, CommitOptions(message=message))
        repo.write_meta(record, CommitOptions(message=message))
    except StoreError as e:
        _fail(f"Error storing file: {e}")

    console.print(f"[green]✓[/green] Stored {record.name} ({written} bytes) in {repo.name}")


@file_app.command("get")
def file_get(
    repo_name: str = typer.Argument(..., help="Repository name"),
    name: str = typer.Argument(..., help="Stored file name"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to this path instead of stdout"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Print a stored file, or write it to --output."""
    db = _open_database(config_file)
    repo = _open_repo(db, repo_name)
    record = _file_record(repo, name)

    try:
        if output is None:
            repo.read_file(record, sys.stdout.buffer)
            sys.stdout.flush()
        else:
            with open(output, "wb") as f:
                copied = repo.read_file(record, f)
            console.print(f"[green]✓[/green] Wrote {copied} bytes to {output}")
    except NotFoundError:
        _fail(f"File '{name}' not found in {repo.name}")
    except StoreError as e:
        _fail(f"Error reading file: {e}")


@file_app.command("rm")
def file_rm(
    repo_name: str = typer.Argument(..., help="Repository name"),
    name: str = typer.Argument(..., help="Stored file name"),
    keep_meta: bool = typer.Option(False, "--keep-meta", help="Leave the metadata file in place"),
    message: str = typer.Option("", "--message", "-m", help="Commit message"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Remove a stored file and, unless --keep-meta, its metadata."""
    db = _open_database(config_file)
    repo = _open_repo(db, repo_name)
    record = _file_record(repo, name)

    try:
        repo.remove_file(record, CommitOptions(message=message))
    except NotFoundError:
        _fail(f"File '{name}' not found in {repo.name}")
    except StoreError as e:
        _fail(f"Error removing file: {e}")

    if not keep_meta:
        try:
            repo.remove_meta(record, CommitOptions(message=message))
        except NotFoundError:
            logger.debug("meta_missing", repo=repo.name, file=record.name)
        except StoreError as e:
            _fail(f"Error removing metadata: {e}")

    console.print(f"[green]✓[/green] Removed {record.name} from {repo.name}")


@file_app.command("exists")
def file_exists(
    repo_name: str = typer.Argument(..., help="Repository name"),
    name: str = typer.Argument(..., help="Stored file name"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Exit 0 if the file exists, 1 otherwise."""
    db = _open_database(config_file)
    repo = _open_repo(db, repo_name)

    try:
        found = repo.file_exists(_file_record(repo, name))
    except StoreError as e:
        _fail(f"Error checking file: {e}")

    console.print("yes" if found else "no")
    if not found:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
