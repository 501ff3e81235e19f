"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import SitewrightConfig


CONFIG_ENV_VAR = "SITEWRIGHT_CONFIG"


def load_config(cli_path: str | None = None) -> SitewrightConfig:
    """Load config with resolution order:
    CLI > $SITEWRIGHT_CONFIG > project-local > user-global > defaults.

    An explicitly requested file (CLI or env) that does not exist is an
    error; the implicit locations are simply skipped.
    """
    explicit = cli_path or os.environ.get(CONFIG_ENV_VAR)
    if explicit and not Path(explicit).exists():
        raise ValueError(f"Config file not found: {explicit}")

    config_paths = [
        Path(explicit) if explicit else None,
        Path("./sitewright.yaml"),
        Path.home() / ".sitewright" / "config.yaml",
    ]

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    continue
                raw = _expand_env_vars(raw)
                return SitewrightConfig(**raw)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e

    return SitewrightConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `sitewright config init`
DEFAULT_CONFIG_TEMPLATE = """\
# sitewright.yaml

# LLM Provider (natural-language editing)
llm:
  provider: "anthropic"        # anthropic | openai
  model: "claude-haiku-4-5-20251001"
  api_key_env: "ANTHROPIC_API_KEY"
  max_tokens: 4096
  timeout: 60

# Repository hosting
vcs:
  provider: "github"
  timeout: 30                  # seconds per repository call

# Credential encryption
secrets:
  session_secret_env: "SESSION_SECRET"

# Site registry
sites:
  path: ".sitewright/sites.yaml"

# Drafts
drafts:
  after_publish: "clear"       # clear | rebaseline
  persist: true                # keep drafts between CLI invocations

# Commit messages
commit:
  product_tag: "[Sitewright]"
  attribution: "Edited by: Sitewright AI Assistant"
  max_headline_changes: 5

# Output
output:
  base_dir: ".sitewright"

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
