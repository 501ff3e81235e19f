"""Repository providers for Sitewright."""

from sitewright.config.models import VCSConfig
from sitewright.secrets.codec import SecretCodec
from sitewright.sites.models import SiteConfig
from sitewright.sites.store import SiteStore
from sitewright.vcs.base import RepositoryProvider
from sitewright.vcs.github import GitHubProvider, normalize_owner, normalize_repo
from sitewright.vcs.models import PublishResult, RepoFile


def create_provider(site: SiteConfig, codec: SecretCodec, config: VCSConfig | None = None) -> RepositoryProvider:
    """Create a repository provider for *site*.

    The site's stored token is decrypted for the lifetime of the provider.
    """
    provider = config.provider if config is not None else "github"
    if provider != "github":
        raise ValueError(
            f"Unsupported VCS provider: {provider!r}. "
            "Currently only 'github' is supported."
        )
    credentials = SiteStore.resolve_credentials(site, codec)
    return GitHubProvider(token=credentials.token)


__all__ = [
    "GitHubProvider",
    "PublishResult",
    "RepoFile",
    "RepositoryProvider",
    "create_provider",
    "normalize_owner",
    "normalize_repo",
]
