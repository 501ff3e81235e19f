"""Abstract repository interface for Sitewright."""

from abc import ABC, abstractmethod

from sitewright.sites.models import SiteConfig
from sitewright.vcs.models import PublishResult, RepoFile


class RepositoryProvider(ABC):
    """Abstract base class for repository hosts.

    Reads the page sources a draft is extracted from and writes published
    content back as a single commit on the site's branch.
    """

    @abstractmethod
    async def get_file_content(self, site: SiteConfig, path: str) -> RepoFile:
        """Fetch a text file at the site's branch.

        Args:
            site: The site whose repository to read.
            path: File path within the repository.
        """
        ...

    @abstractmethod
    async def publish_files(
        self, site: SiteConfig, files: list[RepoFile], message: str
    ) -> PublishResult:
        """Write *files* to the site's branch as one commit.

        Args:
            site: The site whose repository to write.
            files: Files to create or replace.
            message: Commit message.
        """
        ...
