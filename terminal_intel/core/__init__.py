"""
Core domain models, naming rules and configuration for Terminal Intelligence.
"""

from terminal_intel.core.config import (
    detect_shell,
    get_config_dir,
    get_default_profile_path,
)

__all__ = [
    "detect_shell",
    "get_config_dir",
    "get_default_profile_path",
]
