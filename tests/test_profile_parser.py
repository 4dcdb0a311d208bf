"""
Tests for the structured profile parser.
"""
from terminal_intel.core.models import BlockKind, ShellDialect
from terminal_intel.profile.parser import parse_profile

BASHRC = """# ~/.bashrc
# alias opy='ti_py_commander'
export PATH=$PATH:$HOME/bin
ti_py_commander() { ollama run py-commander "$@"; }
alias opy='ti_py_commander'
function multi {
    ollama run js-commander "$@"
}
alias ll='ls -la'
"""

PROFILE_PS1 = """# PowerShell profile
function Invoke-PyCommander { ollama run py-commander @args }
Set-Alias -Name opy -Value Invoke-PyCommander
New-Alias ojs Invoke-JsCommander
"""


class TestPosixProfile:
    """Parsing bash/zsh profiles."""

    def test_one_line_definition(self):
        index = parse_profile(BASHRC, ShellDialect.BASH)
        block = index.definition("ti_py_commander")
        assert block is not None
        assert block.invokes == "py-commander"
        assert block.start_line == block.end_line == 3

    def test_alias_target(self):
        index = parse_profile(BASHRC, ShellDialect.BASH)
        assert index.alias("opy").target == "ti_py_commander"
        assert index.alias("ll").target == "ls -la"

    def test_multi_line_definition(self):
        index = parse_profile(BASHRC, ShellDialect.BASH)
        block = index.definition("multi")
        assert (block.start_line, block.end_line) == (5, 7)
        assert block.invokes == "js-commander"

    def test_comments_are_not_recognized(self):
        index = parse_profile(BASHRC, ShellDialect.BASH)
        assert index.count(BlockKind.ALIAS, "opy") == 1
        assert index.blocks[1].kind == BlockKind.UNRECOGNIZED

    def test_last_alias_wins(self):
        text = "alias opy='first'\nalias opy='second'\n"
        index = parse_profile(text, ShellDialect.BASH)
        assert index.alias("opy").target == "second"
        assert index.count(BlockKind.ALIAS, "opy") == 2

    def test_legacy_direct_alias(self):
        index = parse_profile("alias opy='ollama run py-commander'\n", ShellDialect.BASH)
        assert index.alias("opy").invokes == "py-commander"

    def test_empty_profile(self):
        index = parse_profile("", ShellDialect.BASH)
        assert len(index) == 0

    def test_quoted_brace_does_not_open_body(self):
        text = "lb() { echo \"{\"; }\nalias opy='ti_py_commander'\n"
        index = parse_profile(text, ShellDialect.BASH)
        block = index.definition("lb")
        assert (block.start_line, block.end_line) == (0, 0)
        assert index.alias("opy").target == "ti_py_commander"

    def test_subshell_body(self):
        text = "mkcd() ( mkdir -p \"$1\" && cd \"$1\" )\nti_py_commander() { ollama run py-commander \"$@\"; }\n"
        index = parse_profile(text, ShellDialect.BASH)
        assert index.definition("mkcd").end_line == 0
        assert index.definition("ti_py_commander").invokes == "py-commander"

    def test_multi_line_subshell_body(self):
        text = "mkcd() (\n    mkdir -p \"$1\"\n    cd \"$1\"\n)\nalias ll='ls -la'\n"
        index = parse_profile(text, ShellDialect.BASH)
        assert index.definition("mkcd").end_line == 3
        assert index.alias("ll") is not None

    def test_brace_on_next_line(self):
        text = "greet()\n{\n    echo \"}\"\n}\nalias ll='ls -la'\n"
        index = parse_profile(text, ShellDialect.BASH)
        assert index.definition("greet").end_line == 3
        assert index.alias("ll").start_line == 4

    def test_braces_in_comments_are_ignored(self):
        text = "f() { true; }  # closes {\nalias ll='ls -la'\n"
        index = parse_profile(text, ShellDialect.BASH)
        assert index.definition("f").end_line == 0
        assert index.alias("ll") is not None

    def test_unterminated_body_stops_at_next_definition(self):
        text = "broken() {\n    echo hi\nti_py_commander() { ollama run py-commander \"$@\"; }\nalias opy='ti_py_commander'\n"
        index = parse_profile(text, ShellDialect.BASH)
        assert index.definition("broken").end_line == 1
        assert index.definition("ti_py_commander").start_line == 2
        assert index.alias("opy").target == "ti_py_commander"


class TestPowerShellProfile:
    """Parsing PowerShell profiles."""

    def test_definition_and_aliases(self):
        index = parse_profile(PROFILE_PS1, ShellDialect.POWERSHELL)
        assert index.definition("Invoke-PyCommander").invokes == "py-commander"
        assert index.alias("opy").target == "Invoke-PyCommander"
        assert index.alias("ojs").target == "Invoke-JsCommander"

    def test_backtick_escaped_brace(self):
        text = "function Show-Brace { Write-Host `{ }\nSet-Alias -Name opy -Value Invoke-PyCommander\n"
        index = parse_profile(text, ShellDialect.POWERSHELL)
        assert index.definition("Show-Brace").end_line == 0
        assert index.alias("opy").target == "Invoke-PyCommander"
