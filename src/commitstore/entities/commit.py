"""Commit entities - who commits, with what message, and what was recorded."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Signature(BaseModel):
    """Author or committer identity attached to a commit."""

    name: str
    email: str = ""
    when: Optional[datetime] = None


class CommitOptions(BaseModel):
    """Message and identities for a single commit.

    The store appends a description of the operation to ``message`` before
    committing. Identities left as None fall back to the engine defaults.
    """

    message: str = ""
    author: Optional[Signature] = None
    committer: Optional[Signature] = None

    def with_note(self, note: str) -> "CommitOptions":
        """Return a copy whose message has ``note`` appended after a blank line."""
        return self.model_copy(update={"message": f"{self.message}\n\n{note}"}, deep=True)


class CommitInfo(BaseModel):
    """A commit in a repository's history."""

    sha: str = Field(..., min_length=40, max_length=40)
    message: str
    author_name: str
    author_email: str
    committed_at: datetime
