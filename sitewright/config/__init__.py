from .loader import load_config
from .models import (
    CommitConfig,
    DraftsConfig,
    LLMSettings,
    OutputConfig,
    SecretsConfig,
    SitesConfig,
    SitewrightConfig,
    VCSConfig,
)

__all__ = [
    "CommitConfig",
    "DraftsConfig",
    "LLMSettings",
    "OutputConfig",
    "SecretsConfig",
    "SitesConfig",
    "SitewrightConfig",
    "VCSConfig",
    "load_config",
]
