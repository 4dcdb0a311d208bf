"""
Configuration and path resolution for Terminal Intelligence.

Centralizes OS-specific profile path logic and the layered configuration
(defaults, config files, environment variables, runtime overrides).
"""
import json
import os
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from terminal_intel.core.errors import ConfigError
from terminal_intel.core.models import Entry, ShellDialect
from terminal_intel.core.naming import AliasRules

CONFIG_FILENAMES = ("terminal-intel.yaml", "terminal-intel.yml", "terminal-intel.json")
ENV_PREFIX = "TI_"


def detect_shell() -> ShellDialect:
    """
    Guess the user's shell dialect.

    Returns
    ----
    ShellDialect
        PowerShell on Windows, otherwise derived from $SHELL (bash by default)
    """
    if platform.system() == "Windows":
        return ShellDialect.POWERSHELL

    shell = Path(os.environ.get("SHELL", "")).name
    if shell == "zsh":
        return ShellDialect.ZSH
    if shell in ("pwsh", "powershell"):
        return ShellDialect.POWERSHELL
    return ShellDialect.BASH


def get_default_profile_path(shell: ShellDialect) -> Path:
    """
    Get the default profile file for a shell dialect.

    Returns
    ----
    Path
        ~/.bashrc, ~/.zshrc or the current-user PowerShell profile
    """
    home = Path.home()

    if shell == ShellDialect.ZSH:
        return home / ".zshrc"
    elif shell == ShellDialect.POWERSHELL:
        if platform.system() == "Windows":
            return home / "Documents" / "PowerShell" / "Microsoft.PowerShell_profile.ps1"
        return home / ".config" / "powershell" / "Microsoft.PowerShell_profile.ps1"
    return home / ".bashrc"


def get_config_dir() -> Path:
    """
    Get the per-user configuration directory based on OS.

    Returns
    ----
    Path
        Directory searched for terminal-intel.yaml (not created)
    """
    system = platform.system()
    home = Path.home()

    if system == 'Darwin':  # macOS
        return home / "Library" / "Application Support" / "terminal-intel"
    elif system == 'Windows':
        return home / "AppData" / "Roaming" / "terminal-intel"
    elif system == 'Linux':
        xdg = os.environ.get("XDG_CONFIG_HOME")
        return (Path(xdg) if xdg else home / ".config") / "terminal-intel"
    return home / ".terminal-intel"


@dataclass
class ConfigSource:
    """Represents a configuration source with priority and metadata."""

    name: str
    data: Dict[str, Any]
    priority: int = 0
    source_type: str = "unknown"
    file_path: Optional[Path] = None


class Config:
    """
    Layered configuration.

    Sources are merged by priority, higher priority overwriting lower:
    defaults (0), user config dir files (10), working directory files (20),
    TI_* environment variables (60), runtime `set()` calls (100).
    """

    def __init__(self, config_dir: Union[str, Path] = None, work_dir: Union[str, Path] = None):
        self.config_dir = Path(config_dir) if config_dir else get_config_dir()
        self.work_dir = Path(work_dir) if work_dir else Path.cwd()
        self.sources: List[ConfigSource] = []
        self._data: Dict[str, Any] = {}
        self._loaded = False

    def load(self, reload: bool = False) -> "Config":
        """
        Load configuration from all available sources.

        Args:
            reload: Force reload even if already loaded

        Returns:
            Self for method chaining
        """
        if self._loaded and not reload:
            return self

        runtime = [s for s in self.sources if s.source_type == "runtime"]
        self.sources.clear()
        self._data.clear()

        self._load_default_config()
        self._load_file_configs(self.config_dir, 10)
        if self.work_dir.resolve() != self.config_dir.resolve():
            self._load_file_configs(self.work_dir, 20)
        self._load_environment_vars()
        self.sources.extend(runtime)

        self._merge_sources()
        self._loaded = True

        return self

    def _load_default_config(self):
        """Load default configuration values."""
        defaults = {
            "logging": {"level": "INFO"},
            "entries": {"path": "languages.csv"},
            "profile": {"path": None, "shell": None},
            "registry": {"executable": "ollama", "timeout": 600},
            "commander": {"output_dir": ".", "template": None},
            "base": {"name": "Base Model", "identifier": "gemma3:12b", "alias": "oll"},
            "alias": {"marker": "o", "suffix": "-commander", "prefix_length": 2},
        }

        self.sources.append(
            ConfigSource(name="defaults", data=defaults, priority=0, source_type="internal")
        )

    def _load_file_configs(self, directory: Path, priority: int):
        """Load the first config file found in a directory."""
        for filename in CONFIG_FILENAMES:
            file_path = directory / filename
            if file_path.exists():
                try:
                    data = self._load_file(file_path)
                except (OSError, ValueError, yaml.YAMLError) as e:
                    raise ConfigError(f"Error loading config file {file_path}: {e}")
                if not isinstance(data, dict):
                    raise ConfigError(f"Config file {file_path} must contain a mapping")
                self.sources.append(
                    ConfigSource(
                        name=filename,
                        data=data,
                        priority=priority,
                        source_type="file",
                        file_path=file_path,
                    )
                )
                return

    def _load_environment_vars(self):
        """Load configuration from environment variables."""
        env_data = {}

        for key, value in os.environ.items():
            if key.startswith(ENV_PREFIX):
                # TI_REGISTRY_EXECUTABLE -> registry.executable
                section, _, option = key[len(ENV_PREFIX):].lower().partition("_")
                if not option:
                    continue

                try:
                    parsed_value = json.loads(value)
                except (json.JSONDecodeError, ValueError):
                    parsed_value = value

                self._set_nested_value(env_data, f"{section}.{option}", parsed_value)

        if env_data:
            self.sources.append(
                ConfigSource(name="environment", data=env_data, priority=60, source_type="environment")
            )

    def _load_file(self, file_path: Path) -> Dict[str, Any]:
        """Load configuration from a specific file."""
        with open(file_path, "r", encoding="utf-8") as f:
            if file_path.suffix.lower() == ".json":
                return json.load(f)
            return yaml.safe_load(f) or {}

    def _merge_sources(self):
        """Merge all configuration sources by priority."""
        self._data = {}
        for source in sorted(self.sources, key=lambda s: s.priority):
            self._deep_merge(self._data, source.data)

    def _deep_merge(self, target: Dict[str, Any], source: Dict[str, Any]):
        """Deep merge source dictionary into target dictionary."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._deep_merge(target[key], value)
            elif isinstance(value, dict):
                target[key] = {}
                self._deep_merge(target[key], value)
            else:
                target[key] = value

    def _set_nested_value(self, data: Dict[str, Any], key_path: str, value: Any):
        """Set a nested value using dot notation (e.g., 'registry.executable')."""
        keys = key_path.split(".")
        current = data

        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., 'profile.shell')
            default: Default value if key is not found

        Returns:
            The configuration value or default
        """
        if not self._loaded:
            self.load()

        current = self._data
        try:
            for k in key.split("."):
                current = current[k]
        except (KeyError, TypeError):
            return default
        return default if current is None else current

    def set(self, key: str, value: Any, priority: int = 100):
        """
        Set a configuration value at runtime.

        Args:
            key: Configuration key in dot notation
            value: Value to set
            priority: Priority for this configuration source
        """
        if not self._loaded:
            self.load()

        runtime_data = {}
        self._set_nested_value(runtime_data, key, value)

        self.sources = [
            s for s in self.sources
            if not (s.name == f"runtime.{key}" and s.source_type == "runtime")
        ]
        self.sources.append(
            ConfigSource(name=f"runtime.{key}", data=runtime_data, priority=priority, source_type="runtime")
        )
        self._merge_sources()

    # Typed accessors used by the CLI

    def shell(self) -> ShellDialect:
        value = self.get("profile.shell")
        if value is None:
            return detect_shell()
        try:
            return ShellDialect(str(value).lower())
        except ValueError:
            raise ConfigError(
                f"Unknown shell '{value}'. Expected one of: "
                + ", ".join(d.value for d in ShellDialect)
            )

    def profile_path(self) -> Path:
        value = self.get("profile.path")
        if value:
            return Path(value).expanduser()
        return get_default_profile_path(self.shell())

    def alias_rules(self) -> AliasRules:
        try:
            prefix_length = int(self.get("alias.prefix_length", 2))
        except (TypeError, ValueError):
            raise ConfigError("alias.prefix_length must be an integer")
        return AliasRules(
            marker=str(self.get("alias.marker", "o")),
            suffix=str(self.get("alias.suffix", "")),
            prefix_length=prefix_length,
        )

    def base_entry(self) -> Entry:
        return Entry(
            name=str(self.get("base.name", "Base Model")),
            identifier=str(self.get("base.identifier", "gemma3:12b")),
            alias=str(self.get("base.alias", "oll")),
        )

    def __repr__(self) -> str:
        return f"<Config(config_dir='{self.config_dir}', sources={len(self.sources)})>"
