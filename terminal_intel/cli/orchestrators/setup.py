"""
Setup orchestrator.

Coordinates the complete first-run (and re-run) flow: prerequisites, commander
files, models, profile aliases and verification. Every step skips work that is
already done, so the flow can be re-run after adding languages to the CSV.
"""
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from terminal_intel.core.errors import CommanderFileError, RegistryError
from terminal_intel.core.models import Entry
from terminal_intel.core.naming import entry_alias
from terminal_intel.readers.entry_reader import load_entries
from terminal_intel.services.commander import CommanderGenerator
from terminal_intel.services.registry import OllamaRegistry
from terminal_intel.services.synchronizer import ProfileSynchronizer

logger = logging.getLogger(__name__)


def _log_progress(level: str, message: str):
    logger.log(logging.WARNING if level in ("warning", "error") else logging.INFO, message)


class SetupOrchestrator:
    """Orchestrates setup: generate, register, alias, verify."""

    def __init__(
        self,
        registry: OllamaRegistry,
        generator: CommanderGenerator,
        synchronizer: ProfileSynchronizer,
        progress: Optional[Callable[[str, str], None]] = None,
    ):
        """
        Initialize setup orchestrator.

        Parameters
        ----
        registry : OllamaRegistry
            Model registry used to list and create models
        generator : CommanderGenerator
            Writes commander files
        synchronizer : ProfileSynchronizer
            Synchronizes the shell profile
        progress : callable, optional
            Called with (level, message) for each step; level is one of
            "header", "info", "success", "warning", "error"
        """
        self.registry = registry
        self.generator = generator
        self.synchronizer = synchronizer
        self.progress = progress or _log_progress

    def run_setup(self, csv_path: Path, output_dir: Path = Path("."), reload: bool = True) -> Dict[str, Any]:
        """
        Run the full setup flow.

        Parameters
        ----
        csv_path : Path
            Entry CSV
        output_dir : Path
            Directory holding commander files
        reload : bool
            Whether to re-source the profile after changes

        Returns
        ----
        dict
            Statistics about the run

        Raises
        ----
        EntrySourceError, ToolNotFoundError, RegistryError
            On prerequisite failures, before anything is written
        ProfileInconsistencyError, ProfileReadError, BackupError, ProfileWriteError
            If the profile cannot be synchronized safely
        """
        stats = {
            'entries': 0,
            'aliases': [],
            'files_existing': 0,
            'files_generated': [],
            'models_existing': 0,
            'models_created': [],
            'models_failed': [],
            'aliases_existing': 0,
            'aliases_added': 0,
            'base_added': False,
            'backup_path': None,
            'reload': None,
            'errors': [],
        }

        # Step 1: prerequisites
        self.progress("header", "Step 1: Verifying Prerequisites")
        entries = load_entries(csv_path)
        stats['entries'] = len(entries)
        stats['aliases'] = [entry_alias(e, self.synchronizer.rules) for e in entries]
        self.progress("success", f"Found {csv_path} ({len(entries)} entries)")
        self.registry.verify()
        self.progress("success", "Ollama is available and its service is running")

        # Step 2: commander files
        self.progress("header", "Step 2: Checking/Generating Commander Files")
        self._generate_files(entries, output_dir, stats)

        # Step 3: models
        self.progress("header", "Step 3: Checking/Creating Ollama Models")
        self._create_models(entries, output_dir, stats)

        # Step 4: aliases
        self.progress("header", "Step 4: Checking/Setting Up Aliases")
        report = self.synchronizer.run(entries, reload=reload)
        stats['aliases_existing'] = len(report.plan.existing)
        stats['aliases_added'] = report.result.appended
        stats['base_added'] = report.result.base_added
        stats['backup_path'] = report.result.backup_path
        stats['reload'] = report.reload

        # Step 5: verification
        self.progress("header", "Step 5: Verification")
        self._verify(entries, stats)

        return stats

    def _generate_files(self, entries: List[Entry], output_dir: Path, stats: Dict[str, Any]):
        missing = self.generator.missing_files(entries, output_dir)
        stats['files_existing'] = len(entries) - len(missing)
        if not missing:
            self.progress("success", f"All commander files already exist ({stats['files_existing']} files)")
            return

        self.progress("info", f"Generating {len(missing)} missing commander files...")
        for entry in missing:
            try:
                path = self.generator.generate(entry, output_dir)
            except CommanderFileError as e:
                self.progress("error", str(e))
                stats['errors'].append(str(e))
                continue
            stats['files_generated'].append(str(path))
            self.progress("success", f"Generated {path} for {entry.name}")

    def _create_models(self, entries: List[Entry], output_dir: Path, stats: Dict[str, Any]):
        missing = set(self.registry.missing(e.identifier for e in entries))
        stats['models_existing'] = len(entries) - len(missing)

        for entry in entries:
            if entry.identifier not in missing:
                continue

            path = output_dir / entry.identifier
            if not path.is_file():
                self.progress("warning", f"Commander file '{path}' not found, skipping...")
                stats['models_failed'].append(entry.identifier)
                continue

            self.progress("info", f"Creating Ollama model for {entry.name} ({entry.identifier})...")
            try:
                self.registry.create(entry.identifier, path)
            except RegistryError as e:
                self.progress("error", f"Failed to create model: {entry.identifier}")
                stats['models_failed'].append(entry.identifier)
                stats['errors'].append(str(e))
                continue
            stats['models_created'].append(entry.identifier)
            self.progress("success", f"Created model: {entry.identifier}")

        if not missing:
            self.progress("success", f"All Ollama models already exist ({stats['models_existing']} models)")
        elif stats['models_failed']:
            self.progress("warning", f"{len(stats['models_failed'])} models failed to create")

    def _verify(self, entries: List[Entry], stats: Dict[str, Any]):
        try:
            still_missing = self.registry.missing(e.identifier for e in entries)
        except RegistryError as e:
            self.progress("warning", f"Could not verify models: {e}")
            stats['errors'].append(str(e))
            return

        if still_missing:
            self.progress("warning", f"Models not registered: {', '.join(still_missing)}")
        else:
            self.progress("success", f"All {len(entries)} commander models are registered")
