"""
Naming rules for generated aliases and shell functions.

Everything here is a pure function of the identifier, which is what lets the
synchronizer recognize its own output on the next run.
"""
import re
from dataclasses import dataclass

from terminal_intel.core.models import Entry, ShellDialect

COMMANDER_SUFFIX = "-commander"
ALIAS_MARKER = "o"
ALIAS_PREFIX_LENGTH = 2

POSIX_FUNCTION_PREFIX = "ti_"
POWERSHELL_FUNCTION_PREFIX = "Invoke-"


@dataclass(frozen=True)
class AliasRules:
    """Parameters of alias derivation."""
    marker: str = ALIAS_MARKER
    suffix: str = COMMANDER_SUFFIX
    prefix_length: int = ALIAS_PREFIX_LENGTH


DEFAULT_RULES = AliasRules()


def derive_alias(identifier: str, rules: AliasRules = DEFAULT_RULES) -> str:
    """
    Derive the short alias for an identifier.

    Strips the commander suffix, keeps the first `prefix_length` characters
    and prepends the marker. Short identifiers are not padded.

    Examples:
        >>> derive_alias("py-commander")
        'opy'
        >>> derive_alias("x")
        'ox'
    """
    base = identifier
    if rules.suffix and base.endswith(rules.suffix):
        base = base[: -len(rules.suffix)]
    return rules.marker + base[: rules.prefix_length]


def derive_function_name(identifier: str, dialect: ShellDialect) -> str:
    """
    Derive the shell function name that wraps `<cli> run <identifier>`.

    Args:
        identifier: Model identifier
        dialect: Shell dialect the function is written in

    Returns:
        `ti_py_commander` for POSIX shells, `Invoke-PyCommander` for PowerShell
    """
    if dialect == ShellDialect.POWERSHELL:
        parts = re.split(r"[^A-Za-z0-9]+", identifier)
        return POWERSHELL_FUNCTION_PREFIX + "".join(p[:1].upper() + p[1:] for p in parts if p)
    return POSIX_FUNCTION_PREFIX + re.sub(r"[^A-Za-z0-9_]", "_", identifier)


def entry_alias(entry: Entry, rules: AliasRules = DEFAULT_RULES) -> str:
    """Alias for an entry, honouring an explicit override."""
    return entry.alias or derive_alias(entry.identifier, rules)
