"""Sitewright - natural-language content editing and publishing for static sites."""

from sitewright.config import SitewrightConfig, load_config
from sitewright.content import ContentModel, diff_content, extract_content
from sitewright.commit import build_commit_message
from sitewright.drafts import DraftStore, get_draft_store
from sitewright.secrets import SecretCodec
from sitewright.sync import SyncService
from sitewright.tools import ToolExecutor, default_registry

__version__ = "0.1.0"

__all__ = [
    "ContentModel",
    "DraftStore",
    "SecretCodec",
    "SitewrightConfig",
    "SyncService",
    "ToolExecutor",
    "build_commit_message",
    "default_registry",
    "diff_content",
    "extract_content",
    "get_draft_store",
    "load_config",
]
