"""
Shell dialect syntax for commander blocks.

Each dialect knows how to render a one-line function definition plus a
one-line alias, and how to recognize the same constructs when reading a
profile back.
"""
import re
from dataclasses import dataclass
from typing import Optional, Pattern

from terminal_intel.core.models import ShellDialect


@dataclass(frozen=True)
class DialectSyntax:
    """Rendering templates and recognition patterns for one dialect."""
    definition_template: str
    alias_template: str
    definition_pattern: Pattern
    alias_pattern: Pattern
    comment_prefix: str = "#"
    escape_char: str = "\\"

    def render_definition(self, function_name: str, cli: str, identifier: str) -> str:
        return self.definition_template.format(name=function_name, cli=cli, identifier=identifier)

    def render_alias(self, alias: str, function_name: str) -> str:
        return self.alias_template.format(alias=alias, name=function_name)


# `name() { ... }` or `function name { ... }` / `function name() { ... }`
_POSIX_DEFINITION = re.compile(
    r"^\s*(?:function\s+(?P<kw_name>[A-Za-z_][\w:.-]*)\s*(?:\(\s*\))?|(?P<name>[A-Za-z_][\w:.-]*)\s*\(\s*\))\s*\{?(?P<body>.*)$"
)
_POSIX_ALIAS = re.compile(
    r"""^\s*alias\s+(?:--\s+)?(?P<name>[^=\s]+)=(?P<quote>['"]?)(?P<value>.*?)(?P=quote)\s*(?:#.*)?$"""
)

_POWERSHELL_DEFINITION = re.compile(
    r"^\s*function\s+(?:global:)?(?P<name>[\w-]+)\s*(?:\([^)]*\))?\s*\{?(?P<body>.*)$",
    re.IGNORECASE,
)
_POWERSHELL_ALIAS = re.compile(
    r"""^\s*(?:Set|New)-Alias\s+(?:-Name\s+)?['"]?(?P<name>[^\s'"]+)['"]?\s+(?:-Value\s+)?['"]?(?P<value>[^\s'"]+)['"]?.*$""",
    re.IGNORECASE,
)

POSIX_SYNTAX = DialectSyntax(
    definition_template='{name}() {{ {cli} run {identifier} "$@"; }}',
    alias_template="alias {alias}='{name}'",
    definition_pattern=_POSIX_DEFINITION,
    alias_pattern=_POSIX_ALIAS,
)

POWERSHELL_SYNTAX = DialectSyntax(
    definition_template="function {name} {{ {cli} run {identifier} @args }}",
    alias_template="Set-Alias -Name {alias} -Value {name}",
    definition_pattern=_POWERSHELL_DEFINITION,
    alias_pattern=_POWERSHELL_ALIAS,
    escape_char="`",
)

_INVOKE_PATTERN = re.compile(r"\brun\s+['\"]?(?P<identifier>[^\s'\";}]+)")


def get_syntax(dialect: ShellDialect) -> DialectSyntax:
    """Return the syntax description for a dialect."""
    if dialect == ShellDialect.POWERSHELL:
        return POWERSHELL_SYNTAX
    return POSIX_SYNTAX


def find_invoked_identifier(body: str) -> Optional[str]:
    """Extract the identifier passed to `<cli> run` in a function body or alias value."""
    match = _INVOKE_PATTERN.search(body)
    return match.group("identifier") if match else None
