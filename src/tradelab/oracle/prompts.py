"""Oracle prompt management utilities."""

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml

from ..config.settings import get_settings


@lru_cache(maxsize=1)
def load_oracle_prompts() -> Dict[str, Any]:
    """
    Load oracle prompts from the YAML configuration file.

    Returns:
        Dictionary containing prompt configurations

    Raises:
        FileNotFoundError: If the prompts file doesn't exist
        yaml.YAMLError: If the YAML file is malformed
    """
    prompts_file = Path(__file__).parent / "prompts.yaml"

    try:
        with open(prompts_file, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Oracle prompts file not found: {prompts_file}")
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Error parsing prompts YAML file: {e}")


def get_prompt_config(prompt_key: str) -> Dict[str, Any]:
    """
    Get configuration for a specific prompt, merged over the defaults.

    Args:
        prompt_key: Key identifying the prompt (e.g., 'scenario_generation')

    Raises:
        KeyError: If the prompt key doesn't exist
    """
    prompts = load_oracle_prompts()

    if prompt_key not in prompts.get("prompts", {}):
        available = list(prompts.get("prompts", {}).keys())
        raise KeyError(f"Prompt '{prompt_key}' not found. Available prompts: {available}")

    config = dict(prompts.get("defaults", {}))
    config.update(prompts["prompts"][prompt_key])
    return config


def render_prompt(prompt_key: str, **values: Any) -> str:
    """Fill a prompt template with the given values."""
    return get_prompt_config(prompt_key)["template"].format(**values)


def get_max_tokens(prompt_key: str) -> int:
    """Token budget for a prompt, capped by the configured oracle maximum."""
    ceiling = get_settings().oracle_max_tokens
    return min(int(get_prompt_config(prompt_key).get("max_tokens", ceiling)), ceiling)


def get_error_message(error_type: str) -> str:
    """
    Get an error message template.

    Args:
        error_type: Type of error (e.g. 'unavailable')
    """
    messages = load_oracle_prompts().get("error_messages", {})
    if error_type not in messages:
        raise KeyError(f"Error message '{error_type}' not found")
    return messages[error_type]
