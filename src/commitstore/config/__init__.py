"""Configuration: pydantic schema and TOML/environment loading."""

from commitstore.config.schema import AppConfig, CommitIdentity, LoggingConfig, StoreConfig

__all__ = ["AppConfig", "CommitIdentity", "LoggingConfig", "StoreConfig"]
