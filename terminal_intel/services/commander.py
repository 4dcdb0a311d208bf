"""
Commander model files.

A commander file is an Ollama Modelfile that pins a base model and a system
prompt restricting answers to code in one language.
"""
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from terminal_intel.core.errors import CommanderFileError, ConfigError
from terminal_intel.core.models import Entry

logger = logging.getLogger(__name__)

PLACEHOLDER = "PowerShell"

DEFAULT_TEMPLATE = '''FROM {base_model}
SYSTEM """
You are a PowerShell command and script generation AI assistant. You will only respond with the requested PowerShell command or script block. No introductions, explanations, comments, or extraneous text.  Only provide the code.
"""'''


class CommanderGenerator:
    """Renders and writes commander files."""

    def __init__(self, base_model: str = "gemma3:12b", template_path: Optional[Union[str, Path]] = None):
        """
        Parameters
        ----
        base_model : str
            Model the commander builds on (used by the built-in template)
        template_path : str or Path, optional
            Custom template; every occurrence of "PowerShell" is replaced
        """
        self.base_model = base_model
        self.template_path = Path(template_path).expanduser() if template_path else None

    def template(self) -> str:
        if self.template_path is None:
            return DEFAULT_TEMPLATE.format(base_model=self.base_model)
        try:
            return self.template_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read commander template {self.template_path}: {e}")

    def render(self, language: str) -> str:
        return self.template().replace(PLACEHOLDER, language)

    def generate(self, entry: Entry, output_dir: Union[str, Path] = ".") -> Path:
        """
        Write the commander file for one entry.

        Returns
        ----
        Path
            `<output_dir>/<identifier>`
        """
        output_path = Path(output_dir) / entry.identifier
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(self.render(entry.name) + "\n", encoding="utf-8")
        except OSError as e:
            raise CommanderFileError(f"Cannot write commander file {output_path}: {e}")
        logger.debug("Generated %s with '%s' replacing '%s'", output_path, entry.name, PLACEHOLDER)
        return output_path

    @staticmethod
    def missing_files(entries: Iterable[Entry], output_dir: Union[str, Path] = ".") -> List[Entry]:
        """Entries whose commander file does not exist yet."""
        return [e for e in entries if not (Path(output_dir) / e.identifier).is_file()]

    def generate_and_register(self, entry: Entry, registry, output_dir: Union[str, Path] = ".") -> Path:
        """Write the commander file, then create the model from it."""
        path = self.generate(entry, output_dir)
        logger.debug("Creating Ollama model: %s", entry.identifier)
        registry.create(entry.identifier, path)
        return path
