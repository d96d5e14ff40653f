"""Tests for ``ame render`` CLI command."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from click.testing import CliRunner

from ame.cli import main

if TYPE_CHECKING:
    from pathlib import Path

_MANIFEST = """\
name: greeter
system:
  - content: "{component.persona}"
  - content: "Greet {who}."
user:
  - content: "{message}"
blocks:
  persona: "You are {assistantName}."
variables:
  - name: who
    required: true
  - name: assistantName
    default: Bot
  - name: message
    default: Hello
tools: []
models:
  - provider: anthropic
    name: claude-sonnet-4-5
"""


def _write(tmp_path: Path) -> Path:
    f = tmp_path / "greeter.yaml"
    f.write_text(_MANIFEST)
    return f


class TestRenderCommand:
    def test_json(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(main, ["render", str(_write(tmp_path)), "--var", "who=Ada", "--json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"system": "You are Bot.\n\nGreet Ada.", "user": "Hello"}

    def test_panels(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(main, ["render", str(_write(tmp_path)), "--var", "who=Ada"])

        assert result.exit_code == 0
        assert "system" in result.output
        assert "Greet Ada." in result.output

    def test_unbound_required_variable_warns(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(main, ["render", str(_write(tmp_path))])

        assert result.exit_code == 0
        assert "Unbound required variables" in result.output
        assert "{who}" in result.output

    def test_invalid_manifest(self, tmp_path: Path) -> None:
        f = tmp_path / "bad.yaml"
        f.write_text("system: []\n")
        result = CliRunner().invoke(main, ["render", str(f)])

        assert result.exit_code == 1
        assert "Validation error" in result.output
