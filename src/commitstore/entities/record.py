"""Record entity - anything that can be stored inside a repository."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import ClassVar, Optional

from pydantic import BaseModel, Field, field_validator

from commitstore.core.paths import sanitize


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Record(BaseModel, ABC):
    """A storable entity.

    A record names its file and the folder it lives in, relative to the
    repository directory. Its fields are what gets written as metadata.
    """

    @abstractmethod
    def file_name(self) -> str:
        """Stable file name of the record."""

    @abstractmethod
    def folder(self) -> str:
        """Sub-folder of the repository holding the record."""


class FileRecord(Record):
    """A plain file stored under the repository's ``files`` folder.

    Only descriptive fields are persisted as metadata; the file body is
    written separately through Repository.write_file.
    """

    FOLDER: ClassVar[str] = "files"

    name: str = Field(..., description="File name within the files folder")
    content_type: Optional[str] = None
    soft_deleted: bool = False
    created_on: datetime = Field(default_factory=utcnow)
    updated_on: datetime = Field(default_factory=utcnow)
    deleted_on: Optional[datetime] = None

    @field_validator("name")
    @classmethod
    def name_is_safe(cls, v: str) -> str:
        v = sanitize(v)
        if not v or not v.strip() or v == ".":
            raise ValueError(f"Invalid file name: {v!r}")
        return v

    def file_name(self) -> str:
        return self.name

    def folder(self) -> str:
        return self.FOLDER
