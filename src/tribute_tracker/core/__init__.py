"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Remote store access (Supabase)
- Logging and console output (Loguru, Rich)

Clean architecture principle: The core layer has no dependencies on
domain or application layers.
"""

# Configuration
from .config import (
    Config,
    load_config,
    parse_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    create_default_config,
    ensure_directories,
)

# Remote store
from .remote import RemoteNotConfigured, RemoteStore, has_remote

# Console
from .console import configure_console, get_console

__all__ = [
    # Config
    "Config",
    "load_config",
    "parse_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "create_default_config",
    "ensure_directories",
    # Remote
    "RemoteNotConfigured",
    "RemoteStore",
    "has_remote",
    # Console
    "get_console",
    "configure_console",
]
