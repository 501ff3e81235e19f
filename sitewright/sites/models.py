"""Pydantic models for managed sites."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


def _not_blank(v: str) -> str:
    if not v.strip():
        raise ValueError("must not be empty")
    return v.strip()


class SiteConfig(BaseModel):
    """A managed site as persisted in the site store."""

    id: str = Field(min_length=1)
    name: str
    github_owner: str
    github_repo: str
    github_branch: str = "main"
    content_file: str = "content.json"
    html_file: str = "index.html"
    created_at: str
    last_modified: str
    encrypted_token: str
    custom_schema: dict[str, Any] | None = None

    def summary(self) -> SiteSummary:
        return SiteSummary(
            id=self.id,
            name=self.name,
            github_owner=self.github_owner,
            github_repo=self.github_repo,
            github_branch=self.github_branch,
            last_modified=self.last_modified,
        )


class SiteSummary(BaseModel):
    """Credential-free projection used for listings."""

    id: str
    name: str
    github_owner: str
    github_repo: str
    github_branch: str
    last_modified: str


class SiteInput(BaseModel):
    """Validated payload for creating a site."""

    id: str | None = None
    name: str
    github_owner: str
    github_repo: str
    github_token: str
    github_branch: str = "main"
    content_file: str = "content.json"
    html_file: str = "index.html"
    custom_schema: dict[str, Any] | None = None

    @field_validator("name", "github_owner", "github_repo", "github_token")
    @classmethod
    def validate_required(cls, v: str) -> str:
        return _not_blank(v)


class SiteUpdate(BaseModel):
    """Partial update; unset fields keep their current value."""

    name: str | None = None
    github_owner: str | None = None
    github_repo: str | None = None
    github_token: str | None = None
    github_branch: str | None = None
    content_file: str | None = None
    html_file: str | None = None
    custom_schema: dict[str, Any] | None = None


class SiteCredentials(BaseModel):
    """Plaintext credentials for one operation; never persisted."""

    token: str

    def __repr__(self) -> str:
        return "SiteCredentials(token='***')"

    __str__ = __repr__
