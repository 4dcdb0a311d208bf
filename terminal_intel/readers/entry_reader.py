"""
Reader for the commander entry list (languages.csv).

The CSV has a header row followed by one `language,identifier` pair per
line. Header names are not interpreted: the first two columns are used.
"""
import logging
from pathlib import Path
from typing import List, Union

import pandas as pd

from terminal_intel.core.errors import EntrySourceError
from terminal_intel.core.models import Entry

logger = logging.getLogger(__name__)

EXAMPLE_CSV = "language,filename\nPython,py-commander\nJavaScript,js-commander\n"


def load_entries(csv_path: Union[str, Path]) -> List[Entry]:
    """
    Load commander entries from a CSV file.

    Args:
        csv_path: Path to the entry CSV

    Returns:
        Entries in file order. Rows with a blank field are skipped silently;
        rows with extra fields are reported and skipped.

    Raises:
        EntrySourceError: If the file does not exist or cannot be parsed
    """
    path = Path(csv_path)
    if not path.is_file():
        raise EntrySourceError(
            f"CSV file '{path}' not found!\n"
            f"CSV format: language,filename\n"
            f"Example CSV content:\n{EXAMPLE_CSV}"
        )

    def report_bad_line(fields):
        logger.warning("Skipping malformed row in %s: %s", path, ",".join(fields))
        return None

    try:
        df = pd.read_csv(
            path,
            header=0,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            engine="python",
            on_bad_lines=report_bad_line,
        )
    except pd.errors.EmptyDataError:
        logger.warning("Entry source %s is empty", path)
        return []
    except (OSError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise EntrySourceError(f"Cannot read CSV file '{path}': {e}")

    if len(df.columns) < 2:
        raise EntrySourceError(
            f"CSV file '{path}' needs two columns (language,filename), found {len(df.columns)}"
        )

    df = df.iloc[:, :2].fillna("")
    entries = []
    for name, identifier in df.itertuples(index=False, name=None):
        name = str(name).strip()
        identifier = str(identifier).strip()
        if not name or not identifier:
            continue
        entries.append(Entry(name=name, identifier=identifier))

    logger.debug("Loaded %d entries from %s", len(entries), path)
    return entries
