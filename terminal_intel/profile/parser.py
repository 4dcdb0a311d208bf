"""
Structured parsing of shell profiles.

A profile is split into definition, alias and unrecognized blocks so that
existence checks compare structured keys instead of searching raw text.
"""
import logging
from typing import Dict, Iterator, List, Optional, Tuple

from terminal_intel.core.models import BlockKind, ProfileBlock, ShellDialect
from terminal_intel.profile.dialects import DialectSyntax, find_invoked_identifier, get_syntax

logger = logging.getLogger(__name__)


class ProfileIndex:
    """
    Parsed view of a profile's text.

    Definitions and aliases are indexed by name. When a name occurs more than
    once the last occurrence wins, as it would when the shell sources the file.
    """

    def __init__(self, blocks: List[ProfileBlock]):
        self.blocks = blocks
        self.definitions: Dict[str, ProfileBlock] = {}
        self.aliases: Dict[str, ProfileBlock] = {}
        for block in blocks:
            if block.kind == BlockKind.DEFINITION:
                self.definitions[block.name] = block
            elif block.kind == BlockKind.ALIAS:
                self.aliases[block.name] = block

    def definition(self, name: str) -> Optional[ProfileBlock]:
        return self.definitions.get(name)

    def alias(self, name: str) -> Optional[ProfileBlock]:
        return self.aliases.get(name)

    def count(self, kind: BlockKind, name: str) -> int:
        """Number of blocks of a kind bound to a name."""
        return sum(1 for b in self.blocks if b.kind == kind and b.name == name)

    def __len__(self) -> int:
        return len(self.blocks)


def _count_delimiters(text: str, escape_char: str) -> Tuple[int, int]:
    """
    Net `{`/`}` and `(`/`)` counts of one line.

    Characters inside quotes, after an escape character or after an unquoted
    comment marker are not counted.
    """
    braces = parens = 0
    quote = None
    escaped = False
    for pos, ch in enumerate(text):
        if escaped:
            escaped = False
            continue
        if quote == "'":
            if ch == "'":
                quote = None
            continue
        if ch == escape_char:
            escaped = True
            continue
        if quote == '"':
            if ch == '"':
                quote = None
            continue
        if ch in "'\"":
            quote = ch
        elif ch == "#" and (pos == 0 or text[pos - 1].isspace()):
            break
        elif ch == "{":
            braces += 1
        elif ch == "}":
            braces -= 1
        elif ch == "(":
            parens += 1
        elif ch == ")":
            parens -= 1
    return braces, parens


def _starts_block(line: str, syntax: DialectSyntax) -> bool:
    """A top-level definition or alias; ends any unterminated body above it."""
    if not line or line[0].isspace():
        return False
    return bool(syntax.definition_pattern.match(line) or syntax.alias_pattern.match(line))


def _definition_end(lines: List[str], start: int, body: str, syntax: DialectSyntax) -> int:
    """Index of the last line of the definition starting at `start`."""
    braces, parens = _count_delimiters(lines[start], syntax.escape_char)
    end = start

    # `name()` alone, body opened on the next line
    if braces == 0 and parens == 0 and not body.strip() and end + 1 < len(lines):
        if lines[end + 1].lstrip()[:1] in ("{", "("):
            end += 1
            braces, parens = _count_delimiters(lines[end], syntax.escape_char)

    while (braces > 0 or parens > 0) and end + 1 < len(lines):
        if _starts_block(lines[end + 1], syntax):
            break
        end += 1
        line_braces, line_parens = _count_delimiters(lines[end], syntax.escape_char)
        braces += line_braces
        parens += line_parens
    return end


def _iter_blocks(lines: List[str], syntax: DialectSyntax) -> Iterator[ProfileBlock]:
    i = 0
    while i < len(lines):
        line = lines[i]
        stripped = line.strip()

        if not stripped or stripped.startswith(syntax.comment_prefix):
            yield ProfileBlock(BlockKind.UNRECOGNIZED, i, i, line)
            i += 1
            continue

        match = syntax.definition_pattern.match(line)
        if match:
            name = match.groupdict().get("kw_name") or match.group("name")
            end = _definition_end(lines, i, match.group("body"), syntax)
            text = "\n".join(lines[i:end + 1])
            yield ProfileBlock(
                BlockKind.DEFINITION, i, end, text,
                name=name,
                invokes=find_invoked_identifier(text),
            )
            i = end + 1
            continue

        match = syntax.alias_pattern.match(line)
        if match:
            value = match.group("value")
            yield ProfileBlock(
                BlockKind.ALIAS, i, i, line,
                name=match.group("name"),
                target=value,
                invokes=find_invoked_identifier(value),
            )
            i += 1
            continue

        yield ProfileBlock(BlockKind.UNRECOGNIZED, i, i, line)
        i += 1


def parse_profile(text: str, dialect: ShellDialect) -> ProfileIndex:
    """
    Parse profile text into recognized blocks.

    Parameters
    ----
    text : str
        Full profile contents
    dialect : ShellDialect
        Dialect the profile is written in

    Returns
    ----
    ProfileIndex
        Blocks in file order, indexed by definition and alias name
    """
    blocks = list(_iter_blocks(text.splitlines(), get_syntax(dialect)))
    logger.debug(
        "Parsed %d profile blocks (%d definitions, %d aliases)",
        len(blocks),
        sum(1 for b in blocks if b.kind == BlockKind.DEFINITION),
        sum(1 for b in blocks if b.kind == BlockKind.ALIAS),
    )
    return ProfileIndex(blocks)
