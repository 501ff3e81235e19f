"""Pydantic models for repository reads and writes."""

from pydantic import BaseModel, Field


class RepoFile(BaseModel):
    """A text file in a site's repository."""

    path: str = Field(min_length=1)
    content: str
    sha: str | None = None


class PublishResult(BaseModel):
    """Outcome of writing files to the repository."""

    success: bool
    message: str
    url: str | None = None
    commit_sha: str | None = None
