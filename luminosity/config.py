"""
Configuration handling for the luminosity tools.
"""

import json
import os
import re
from dataclasses import dataclass, asdict, fields
from typing import Optional, Dict, Any


@dataclass
class AppConfig:
    """Main application configuration."""
    log_level: str = "INFO"
    log_file: Optional[str] = None
    debug_mode: bool = False
    db_busy_timeout: int = 5000  # milliseconds
    load_collections: bool = False
    pretty_print: bool = False
    stats_outfile: str = "stats.json"
    sunburst_outfile: str = "sunburst.json"
    preview_output_dir: str = "previews"
    verify_previews: bool = False
    show_progress: bool = True


def _substitute_env_vars(value: Any) -> Any:
    """
    Substitute environment variables in string values.

    Args:
        value: Value to process for environment variables

    Returns:
        Value with environment variables substituted
    """
    if not isinstance(value, str):
        return value

    # Pattern to match ${ENV_VAR} syntax
    pattern = r'\${([^}]+)}'

    def replace_env_var(match):
        env_var = match.group(1)
        env_value = os.environ.get(env_var)
        if env_value is None:
            print(f"Warning: Environment variable {env_var} not found")
            return ""
        return env_value

    return re.sub(pattern, replace_env_var, value)


def _process_config_dict(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Process a configuration dictionary to substitute environment variables.
    """
    result = {}

    for key, value in config_dict.items():
        if isinstance(value, dict):
            result[key] = _process_config_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _process_config_dict(item) if isinstance(item, dict) else _substitute_env_vars(item)
                for item in value
            ]
        else:
            result[key] = _substitute_env_vars(value)

    return result


def load_config(config_path: str) -> AppConfig:
    """
    Load and validate configuration from JSON file.

    Args:
        config_path: Path to the configuration JSON file

    Returns:
        AppConfig object

    Raises:
        ValueError: If the configuration contains unknown fields
        RuntimeError: If the configuration file cannot be loaded
    """
    config_path = os.path.abspath(os.path.expanduser(config_path))

    try:
        with open(config_path, 'r') as cfg:
            config_dict = json.load(cfg)
    except (json.JSONDecodeError, IOError) as e:
        raise RuntimeError(f"Failed to load configuration from {config_path}: {str(e)}")

    if not isinstance(config_dict, dict):
        raise ValueError(f"Configuration in {config_path} must be a JSON object")

    config_dict = _process_config_dict(config_dict)

    known = {f.name for f in fields(AppConfig)}
    unknown = sorted(set(config_dict) - known)
    if unknown:
        raise ValueError(f"Unknown configuration fields: {', '.join(unknown)}")

    config = AppConfig(**config_dict)
    config.log_level = str(config.log_level).upper()
    return config


def save_config(config: AppConfig, config_path: str) -> None:
    """
    Save configuration to JSON file.

    Raises:
        RuntimeError: If the configuration cannot be saved
    """
    try:
        with open(config_path, 'w') as f:
            json.dump(asdict(config), f, indent=2)
    except (IOError, TypeError) as e:
        raise RuntimeError(f"Failed to save configuration: {str(e)}")
