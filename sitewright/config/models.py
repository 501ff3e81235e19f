from pydantic import BaseModel, Field
from typing import Literal


class LLMSettings(BaseModel):
    provider: Literal["anthropic", "openai"] = "anthropic"
    model: str = "claude-haiku-4-5-20251001"
    api_key_env: str = "ANTHROPIC_API_KEY"
    max_tokens: int = Field(default=4096, gt=0)
    timeout: int = Field(default=60, gt=0)
    base_url: str | None = None


class VCSConfig(BaseModel):
    provider: Literal["github"] = "github"
    timeout: float = Field(default=30.0, gt=0)


class SecretsConfig(BaseModel):
    session_secret_env: str = "SESSION_SECRET"


class SitesConfig(BaseModel):
    path: str = ".sitewright/sites.yaml"


class DraftsConfig(BaseModel):
    after_publish: Literal["clear", "rebaseline"] = "clear"
    persist: bool = True


class CommitConfig(BaseModel):
    product_tag: str = "[Sitewright]"
    attribution: str = "Edited by: Sitewright AI Assistant"
    max_headline_changes: int = Field(default=5, gt=0)


class OutputConfig(BaseModel):
    base_dir: str = ".sitewright"


class SitewrightConfig(BaseModel):
    llm: LLMSettings = Field(default_factory=LLMSettings)
    vcs: VCSConfig = Field(default_factory=VCSConfig)
    secrets: SecretsConfig = Field(default_factory=SecretsConfig)
    sites: SitesConfig = Field(default_factory=SitesConfig)
    drafts: DraftsConfig = Field(default_factory=DraftsConfig)
    commit: CommitConfig = Field(default_factory=CommitConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
