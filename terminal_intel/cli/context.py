"""
CLI context and configuration management.

Provides shared context for Click commands: the layered configuration and the
objects built from it (profile store, registry, synchronizer).
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import logging

from terminal_intel.core.config import Config
from terminal_intel.profile.store import FileProfileStore, ProfileStore
from terminal_intel.services.commander import CommanderGenerator
from terminal_intel.services.events import SyncObserver
from terminal_intel.services.registry import OllamaRegistry
from terminal_intel.services.synchronizer import ProfileSynchronizer

logger = logging.getLogger(__name__)


@dataclass
class CLIContext:
    """
    Shared context for CLI commands.

    Attributes:
        verbose: Enable verbose logging output
        config_dir: Optional directory holding terminal-intel.yaml
        _config: Internal configuration (lazy-initialized)
    """
    verbose: bool = False
    config_dir: Optional[Path] = None
    _config: Optional[Config] = field(default=None, repr=False, init=False)

    def get_config(self) -> Config:
        """Get or load the configuration (lazy initialization)."""
        if self._config is None:
            self._config = Config(config_dir=self.config_dir).load()
            if self.verbose:
                logger.debug("Configuration sources: %s", [s.name for s in self._config.sources])
        return self._config

    def apply_overrides(self, profile: Optional[Path] = None, shell: Optional[str] = None):
        """Apply command line options on top of file and environment config."""
        config = self.get_config()
        if profile is not None:
            config.set("profile.path", str(profile))
        if shell is not None:
            config.set("profile.shell", shell)

    def get_store(self) -> ProfileStore:
        return FileProfileStore(self.get_config().profile_path())

    def get_registry(self) -> OllamaRegistry:
        config = self.get_config()
        return OllamaRegistry(
            executable=config.get("registry.executable", "ollama"),
            timeout=int(config.get("registry.timeout", 600)),
        )

    def get_generator(self) -> CommanderGenerator:
        config = self.get_config()
        return CommanderGenerator(
            base_model=config.get("base.identifier", "gemma3:12b"),
            template_path=config.get("commander.template"),
        )

    def get_synchronizer(self, store: ProfileStore, observer: Optional[SyncObserver] = None) -> ProfileSynchronizer:
        config = self.get_config()
        return ProfileSynchronizer(
            store,
            dialect=config.shell(),
            rules=config.alias_rules(),
            base_entry=config.base_entry(),
            cli=config.get("registry.executable", "ollama"),
            observer=observer,
        )
