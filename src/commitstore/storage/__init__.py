"""Storage layer: version-control and metadata engines."""

from commitstore.config.schema import MetadataStoreType, StoreConfig, VersionControlType
from commitstore.storage.base import MetadataStore, VersionControl


def create_version_control(config: StoreConfig) -> VersionControl:
    """Factory function to create the version-control engine.

    Args:
        config: Store configuration with version_control set

    Returns:
        Version-control engine

    Raises:
        ValueError: If the engine type is unknown
    """
    if config.version_control == VersionControlType.GIT:
        from commitstore.storage.git import GitVersionControl

        return GitVersionControl(config)

    raise ValueError(
        f"Unknown version control type: '{config.version_control}'. "
        f"Supported types: git"
    )


def create_metadata_store(config: StoreConfig) -> MetadataStore:
    """Factory function to create the metadata store.

    Args:
        config: Store configuration with metadata_store set

    Returns:
        Metadata store

    Raises:
        ValueError: If the store type is unknown
    """
    if config.metadata_store == MetadataStoreType.JSON:
        from commitstore.storage.json_store import JsonMetadataStore

        return JsonMetadataStore(config)

    raise ValueError(
        f"Unknown metadata store type: '{config.metadata_store}'. "
        f"Supported types: json"
    )


__all__ = [
    "MetadataStore",
    "VersionControl",
    "create_metadata_store",
    "create_version_control",
]
