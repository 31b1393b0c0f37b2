#!/usr/bin/env -S python3 -B -u
"""
Configuration loader for ovs-save.

Provides centralized configuration loading for the snapshot commands.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional

from .exceptions import ConfigurationError
from .structured_logging import get_logger


# Canonical names of the wrapped tools, keyed by configuration name
DEFAULT_TOOLS = {
    'ip': 'ip',
    'iptables_save': 'iptables-save',
    'ovs_ofctl': 'ovs-ofctl',
    'ovs_dpctl': 'ovs-dpctl',
    'ovs_vsctl': 'ovs-vsctl',
}


def _read_config_file(config_file: Path) -> Dict[str, Any]:
    """Read one YAML configuration file, raising ConfigurationError on failure."""
    try:
        with open(config_file, 'r') as f:
            file_config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Cannot load configuration: {e}",
            config_file=str(config_file),
            cause=e
        )

    if not isinstance(file_config, dict):
        raise ConfigurationError(
            "Configuration file must contain a mapping",
            config_file=str(config_file)
        )
    return file_config


def load_ovs_save_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load ovs-save configuration with proper precedence.

    Configuration file location precedence:
    1. Explicit path passed on the command line (if given)
    2. Environment variable OVS_SAVE_CONF (if set)
    3. ~/ovs_save.yaml (user's home directory)
    4. ./ovs_save.yaml (current directory)

    Files named explicitly (1 and 2) must load cleanly. The default
    locations are skipped with a warning when they cannot be parsed.

    Returns:
        Dictionary containing configuration values
    """
    logger = get_logger(__name__)

    # Default configuration
    defaults = {
        'search_path': os.environ.get('PATH', os.defpath),
        'verbose_level': 0,
        'tools': dict(DEFAULT_TOOLS),
    }

    config = dict(defaults)

    explicit = config_path or os.environ.get('OVS_SAVE_CONF')
    if explicit:
        file_config = _read_config_file(Path(explicit))
    else:
        file_config = {}
        for config_file in [Path.home() / 'ovs_save.yaml', Path('./ovs_save.yaml')]:
            if not config_file.exists():
                continue
            try:
                file_config = _read_config_file(config_file)
                break
            except ConfigurationError as e:
                # Continue to next file if current one fails
                logger.warning(f"Ignoring configuration file {config_file}: {e.message}")
                continue

    tools = file_config.pop('tools', None) or {}
    if not isinstance(tools, dict):
        raise ConfigurationError("'tools' must be a mapping of tool names")

    config.update(file_config)
    config['tools'] = dict(DEFAULT_TOOLS)
    config['tools'].update(tools)

    return config


def get_search_path(config: Dict[str, Any]) -> List[str]:
    """
    Get the tool search path as a list of directories.

    Args:
        config: Loaded configuration

    Returns:
        List of directories, in lookup order
    """
    search_path = config.get('search_path') or ''
    if isinstance(search_path, str):
        return [d for d in search_path.split(os.pathsep) if d]
    if isinstance(search_path, (list, tuple)):
        return [str(d) for d in search_path]
    raise ConfigurationError(
        f"'search_path' must be a string or a list, got {type(search_path).__name__}"
    )


def get_tool_names(config: Dict[str, Any]) -> Dict[str, str]:
    """
    Get the executable name configured for each wrapped tool.

    Returns:
        Dictionary mapping tool keys (ip, ovs_ofctl, ...) to executables
    """
    tools = dict(DEFAULT_TOOLS)
    tools.update(config.get('tools', {}))

    for key, value in tools.items():
        if not isinstance(value, str) or not value:
            raise ConfigurationError(f"Tool '{key}' must be a non-empty string")
    return tools


def get_verbose_level(config: Dict[str, Any]) -> int:
    """Get the configured default verbosity."""
    level = config.get('verbose_level', 0)
    if isinstance(level, bool) or not isinstance(level, int):
        raise ConfigurationError(f"'verbose_level' must be an integer, got {level!r}")
    return level
