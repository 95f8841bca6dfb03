"""
Gateway configuration.

Provider endpoints, model whitelists, default sizes and the HuggingFace URL
pool are immutable values handed to each adapter at construction time.
Built-in defaults can be overridden from a YAML file with ${VAR}
environment variable substitution:

    timeout: 300
    volcengine:
      default_model: doubao-seedream-4-0-250828
    huggingface:
      api_urls:
        - https://my-space.hf.space
"""

import dataclasses
import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 300.0
DEFAULT_PROMPT = "A beautiful scenery"
DEFAULT_PORT = 10001
CONFIG_ENV_VAR = "IMGROUTER_CONFIG"


@dataclass(frozen=True)
class ProviderConfig:
    """Endpoint and model settings for a single-endpoint backend."""
    api_url: str
    default_model: str
    default_size: str
    default_edit_size: str
    supported_models: Tuple[str, ...] = ()
    supported_sizes: Tuple[str, ...] = ()  # empty: any size is forwarded


@dataclass(frozen=True)
class GiteeConfig(ProviderConfig):
    """Gitee exposes separate generation and edit endpoints."""
    edit_api_url: str = ""
    edit_models: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ModelScopeConfig(ProviderConfig):
    poll_interval: float = 5.0
    max_poll_attempts: int = 60


@dataclass(frozen=True)
class HuggingFaceConfig:
    """Gradio Spaces backend with an ordered failover pool."""
    api_urls: Tuple[str, ...]
    default_model: str
    default_size: str
    default_edit_size: str
    supported_models: Tuple[str, ...] = ()
    supported_sizes: Tuple[str, ...] = ()
    steps: int = 9


VOLCENGINE_DEFAULTS = ProviderConfig(
    api_url="https://ark.cn-beijing.volces.com/api/v3/images/generations",
    default_model="doubao-seedream-4-5-251128",
    default_size="2K",
    default_edit_size="2K",
    supported_models=(
        "doubao-seedream-4-5-251128",
        "doubao-seedream-4-0-250828",
    ),
)

GITEE_DEFAULTS = GiteeConfig(
    api_url="https://ai.gitee.com/v1/images/generations",
    edit_api_url="https://ai.gitee.com/v1/images/edits",
    default_model="z-image-turbo",
    default_size="2048x2048",
    default_edit_size="1024x1024",
    supported_models=("z-image-turbo",),
    edit_models=(
        "Qwen-Image-Edit",
        "HiDream-E1-Full",
        "FLUX.1-dev",
        "HelloMeme",
        "Kolors",
        "OmniConsistency",
    ),
)

MODELSCOPE_DEFAULTS = ModelScopeConfig(
    api_url="https://api-inference.modelscope.cn/v1",
    default_model="Tongyi-MAI/Z-Image-Turbo",
    default_size="2048x2048",
    default_edit_size="2048x2048",
    supported_models=("Tongyi-MAI/Z-Image-Turbo",),
)

HUGGINGFACE_DEFAULTS = HuggingFaceConfig(
    api_urls=(
        "https://luca115-z-image-turbo.hf.space",
        "https://mcp-tools-z-image-turbo.hf.space",
        "https://cpuai-z-image-turbo.hf.space",
        "https://victor-z-image-turbo-mcp.hf.space",
        "https://wavespeed-z-image-turbo.hf.space",
        "https://jinguotianxin-z-image-turbo.hf.space",
        "https://prithivmlmods-z-image-turbo-lora-dlc.hf.space",
        "https://linoyts-z-image-portrait.hf.space",
        "https://prokofyev8-z-image-portrait.hf.space",
        "https://ovi054-z-image-lora.hf.space",
        "https://yingzhac-z-image-nsfw.hf.space",
        "https://nymbo-tools.hf.space",
    ),
    default_model="Qwen-Image-Edit-2511",
    default_size="2048x2048",
    default_edit_size="2048x2048",
    supported_models=("z-image-turbo", "Qwen-Image-Edit-2511"),
)


@dataclass(frozen=True)
class GatewayConfig:
    """Aggregate configuration for all providers."""
    volcengine: ProviderConfig = VOLCENGINE_DEFAULTS
    gitee: GiteeConfig = GITEE_DEFAULTS
    modelscope: ModelScopeConfig = MODELSCOPE_DEFAULTS
    huggingface: HuggingFaceConfig = HUGGINGFACE_DEFAULTS
    timeout: float = DEFAULT_TIMEOUT
    default_prompt: str = DEFAULT_PROMPT


def _substitute_env(raw: str, path: str) -> str:
    """Replace ${VAR} with environment variable values."""
    def _replace_env(match):
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigurationError(
                f"Environment variable '{var_name}' not set "
                f"(referenced in config file '{path}')"
            )
        return value

    return re.sub(r"\$\{(\w+)\}", _replace_env, raw)


def _overlay(base, section: Optional[Dict[str, Any]], name: str):
    """Return a copy of a provider config dataclass with YAML overrides applied."""
    if not section:
        return base
    if not isinstance(section, dict):
        raise ConfigurationError(f"Config section '{name}' must be a mapping")

    known = {f.name for f in dataclasses.fields(base)}
    unknown = set(section) - known
    if unknown:
        raise ConfigurationError(
            f"Unknown keys in config section '{name}': {', '.join(sorted(unknown))}"
        )

    overrides = {}
    for key, value in section.items():
        if isinstance(value, list):
            value = tuple(value)
        overrides[key] = value
    return dataclasses.replace(base, **overrides)


def load_config(path: Optional[str] = None) -> GatewayConfig:
    """
    Build a GatewayConfig from a YAML file layered over the built-in defaults.

    Args:
        path: Config file path. Defaults to $IMGROUTER_CONFIG or "config.yaml".
            A missing file yields the built-in defaults.

    Raises:
        ConfigurationError: On unreadable YAML, unknown keys or unset ${VAR}.
    """
    import yaml

    path = path or os.getenv(CONFIG_ENV_VAR, "config.yaml")
    if not os.path.exists(path):
        logger.info(f"Config file {path} not found, using built-in defaults")
        return GatewayConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = f.read()

    try:
        data = yaml.safe_load(_substitute_env(raw, path)) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file '{path}': {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file '{path}' must contain a mapping")

    defaults = GatewayConfig()
    config = GatewayConfig(
        volcengine=_overlay(defaults.volcengine, data.get("volcengine"), "volcengine"),
        gitee=_overlay(defaults.gitee, data.get("gitee"), "gitee"),
        modelscope=_overlay(defaults.modelscope, data.get("modelscope"), "modelscope"),
        huggingface=_overlay(defaults.huggingface, data.get("huggingface"), "huggingface"),
        timeout=float(data.get("timeout", defaults.timeout)),
        default_prompt=data.get("default_prompt", defaults.default_prompt),
    )
    logger.info(f"Loaded gateway config from {path}")
    return config
