"""GitHub repository provider using PyGithub."""

from __future__ import annotations

import asyncio
import logging
import re
from functools import cached_property
from urllib.parse import urlparse

from github import Auth, Github, GithubException, InputGitTreeElement
from github.Repository import Repository

from sitewright.errors import NotFound, RepositoryError
from sitewright.sites.models import SiteConfig
from sitewright.vcs.base import RepositoryProvider
from sitewright.vcs.models import PublishResult, RepoFile

logger = logging.getLogger(__name__)

_GITHUB_PREFIX = re.compile(r"^.*github\.com[/:]+", re.IGNORECASE)


def _segments(value: str) -> list[str]:
    """Path segments of an owner/repo reference given as a name, path or URL."""
    value = value.strip()
    if value.startswith(("http://", "https://")):
        value = urlparse(value).path
    elif "github.com" in value.lower():
        value = _GITHUB_PREFIX.sub("", value)
    return [s for s in re.split(r"[\\/]", value) if s]


def normalize_owner(owner: str) -> str:
    """``https://github.com/acme/site`` -> ``acme``; plain names pass through."""
    segments = _segments(owner)
    if not segments:
        return owner.strip()
    return segments[0].lstrip("@")


def normalize_repo(repo: str) -> str:
    """``git@github.com:acme/site.git`` -> ``site``; plain names pass through."""
    segments = _segments(repo)
    if not segments:
        return repo.strip()
    name = segments[1] if len(segments) >= 2 else segments[0]
    return re.sub(r"\.git$", "", name, flags=re.IGNORECASE)


def _is_retryable(exc: GithubException) -> bool:
    return exc.status == 429 or (exc.status is not None and exc.status >= 500)


class GitHubProvider(RepositoryProvider):
    """GitHub implementation of RepositoryProvider using PyGithub.

    PyGithub is synchronous, so all blocking calls are wrapped
    with asyncio.to_thread() to avoid blocking the event loop.
    """

    def __init__(self, token: str) -> None:
        if not token:
            raise ValueError("GitHub token required to create a repository provider.")
        self._token = token

    @cached_property
    def _client(self) -> Github:
        auth = Auth.Token(self._token)
        return Github(auth=auth)

    def _get_repo(self, site: SiteConfig) -> Repository:
        owner = normalize_owner(site.github_owner)
        name = normalize_repo(site.github_repo)
        return self._client.get_repo(f"{owner}/{name}")

    async def get_file_content(self, site: SiteConfig, path: str) -> RepoFile:
        """Fetch decoded text content of a file at the site's branch."""

        def _sync() -> RepoFile:
            repo = self._get_repo(site)
            content = repo.get_contents(path, ref=site.github_branch)
            if isinstance(content, list):
                raise RepositoryError("read", ValueError(f"Path '{path}' is a directory, not a file."))
            return RepoFile(path=path, content=content.decoded_content.decode("utf-8"), sha=content.sha)

        try:
            return await asyncio.to_thread(_sync)
        except GithubException as e:
            if e.status == 404:
                owner, name = normalize_owner(site.github_owner), normalize_repo(site.github_repo)
                raise NotFound(
                    f"GitHub returned 404 for {owner}/{name}/{path}. Confirm the repository "
                    "contains that file and that the access token can read it.",
                    details={"path": path, "branch": site.github_branch},
                ) from e
            raise RepositoryError("read", e, retryable=_is_retryable(e)) from e

    async def publish_files(
        self, site: SiteConfig, files: list[RepoFile], message: str
    ) -> PublishResult:
        """Commit *files* on top of the branch head via the git data API."""

        def _sync() -> PublishResult:
            repo = self._get_repo(site)
            ref = repo.get_git_ref(f"heads/{site.github_branch}")
            latest = repo.get_git_commit(ref.object.sha)
            elements = [
                InputGitTreeElement(path=f.path, mode="100644", type="blob", content=f.content)
                for f in files
            ]
            tree = repo.create_git_tree(elements, base_tree=latest.tree)
            commit = repo.create_git_commit(message, tree, [latest])
            ref.edit(commit.sha)
            logger.info(
                "published %d file(s) to %s@%s as %s",
                len(files),
                repo.full_name,
                site.github_branch,
                commit.sha[:7],
            )
            owner, name = normalize_owner(site.github_owner), normalize_repo(site.github_repo)
            return PublishResult(
                success=True,
                message="Changes published",
                url=f"https://{owner}.github.io/{name}/",
                commit_sha=commit.sha,
            )

        try:
            return await asyncio.to_thread(_sync)
        except GithubException as e:
            raise RepositoryError("publish", e, retryable=_is_retryable(e)) from e
