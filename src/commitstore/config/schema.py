"""Configuration schema using Pydantic.

Why this exists:
- Type-safe configuration with validation
- Environment variable support (COMMITSTORE_ prefix, ``__`` for nesting)
- One explicit StoreConfig value handed to the Database instead of
  module-level settings

How to extend:
1. Add new fields to existing config classes
2. Create new config classes for new components
3. Document the setting in commitstore.example.toml
"""

from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class VersionControlType(str, Enum):
    """Supported version control engines."""

    GIT = "git"


class MetadataStoreType(str, Enum):
    """Supported metadata stores."""

    JSON = "json"


class CommitIdentity(BaseModel):
    """Identity used for commits the database makes on its own behalf."""

    name: str = "commitstore"
    email: str = "commitstore@localhost"


class StoreConfig(BaseModel):
    """Record store configuration.

    - meta_dir: folder holding metadata files, next to the records they describe
    - system_commit_message: message for database-internal commits
      (repository creation, protect/unprotect)
    - system_identity: author and committer of database-internal commits
    """

    meta_dir: str = Field(default="meta-data", min_length=1)
    system_commit_message: str = "db-repo"
    system_identity: CommitIdentity = Field(default_factory=CommitIdentity)
    version_control: VersionControlType = VersionControlType.GIT
    metadata_store: MetadataStoreType = MetadataStoreType.JSON


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = LogLevel.INFO
    json_logs: bool = False
    log_dir: Optional[Path] = None
    max_days: int = Field(default=30, gt=0)
    enable_file: bool = False

    def model_post_init(self, __context: Any) -> None:
        """Expand ~ in paths."""
        if self.log_dir:
            self.log_dir = self.log_dir.expanduser()


class AppConfig(BaseSettings):
    """Main application configuration.

    Loads from:
    1. Config file (TOML)
    2. Environment variables (prefixed with COMMITSTORE_)
    3. .env file
    """

    model_config = SettingsConfigDict(
        env_prefix="COMMITSTORE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    data_dir: Path = Field(default=Path.home() / ".commitstore" / "repos")

    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def model_post_init(self, __context: Any) -> None:
        """Post-initialization: create the database root if needed."""
        self.data_dir = self.data_dir.expanduser()
        self.data_dir.mkdir(parents=True, exist_ok=True)
