"""
Model registry backed by the ollama CLI.

Only two capabilities are needed: list the registered models and create one
from a commander file. Everything else the CLI does is out of reach here.
"""
import logging
import shutil
import subprocess
from pathlib import Path
from typing import Iterable, List, Union

from terminal_intel.core.errors import RegistryError, ToolNotFoundError

logger = logging.getLogger(__name__)


class OllamaRegistry:
    """
    Reads and registers models using the ollama CLI.

    Requires ollama to be installed and its service to be running.
    """

    def __init__(self, executable: str = "ollama", timeout: int = 600):
        """
        Initialize registry wrapper.

        Parameters
        ----
        executable : str
            Name or path of the ollama executable
        timeout : int
            Timeout in seconds for `create` (model builds can be slow)
        """
        self.executable = executable
        self.timeout = timeout

    def _run(self, args: List[str], timeout: int) -> subprocess.CompletedProcess:
        cmd = [self.executable] + args
        logger.debug("Running: %s", " ".join(cmd))
        try:
            return subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
        except FileNotFoundError:
            raise ToolNotFoundError(
                f"{self.executable} is not installed or not in PATH! "
                "Please install Ollama first: https://ollama.ai/"
            )
        except subprocess.TimeoutExpired:
            raise RegistryError(f"{' '.join(cmd)} timed out after {timeout}s")

    def verify(self) -> None:
        """
        Verify ollama is installed and its service answers.

        Raises
        ---
        ToolNotFoundError
            If the executable is not on PATH
        RegistryError
            If `ollama list` fails (service not running)
        """
        if shutil.which(self.executable) is None:
            raise ToolNotFoundError(
                f"{self.executable} is not installed or not in PATH! "
                "Please install Ollama first: https://ollama.ai/"
            )
        result = self._run(["list"], timeout=30)
        if result.returncode != 0:
            raise RegistryError(
                "Ollama service is not running! Please start Ollama service first",
                stderr=result.stderr,
            )

    def list(self) -> List[str]:
        """
        List registered model names without their `:tag` suffix.

        Returns
        ----
        List[str]
            Model names in the order ollama prints them
        """
        result = self._run(["list"], timeout=30)
        if result.returncode != 0:
            raise RegistryError(f"ollama list failed: {result.stderr.strip()}", stderr=result.stderr)

        names = []
        # First line is the NAME/ID/SIZE/MODIFIED header
        for line in result.stdout.splitlines()[1:]:
            fields = line.split()
            if not fields:
                continue
            names.append(fields[0].split(":", 1)[0])
        return names

    def missing(self, identifiers: Iterable[str]) -> List[str]:
        """Identifiers that are not registered yet, in input order."""
        registered = set(self.list())
        return [i for i in identifiers if i not in registered]

    def create(self, identifier: str, template_path: Union[str, Path]) -> None:
        """
        Create a model from a commander file.

        Raises
        ---
        RegistryError
            If ollama reports a failure
        """
        result = self._run(["create", identifier, "-f", str(template_path)], timeout=self.timeout)
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            logger.debug("ollama create %s failed: %s", identifier, stderr)
            raise RegistryError(f"Failed to create Ollama model: {identifier}: {stderr}", stderr=result.stderr)
        logger.debug("Successfully created Ollama model: %s", identifier)
