"""Template rendering — block references first, then variable placeholders.

Block references look like ``{component.<name>}`` and are expanded
recursively. Variable references look like ``{<name>}`` and are replaced
by bound values; unbound placeholders are left as literal text.

Typical usage::

    renderer = TemplateRenderer(manifest.block_map)
    system_prompt = renderer.render(manifest.system, variables)
"""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ame.core.manifest.models import Chunk

logger = logging.getLogger(__name__)

BLOCK_PATTERN = re.compile(r"\{component\.([^{}]+)\}")
VARIABLE_PATTERN = re.compile(r"\{([^{}]+)\}")

DEFAULT_MAX_DEPTH = 50
CHUNK_SEPARATOR = "\n\n"


class TemplateRenderer:
    """Resolve manifest chunks into final prompt text.

    Cycles are detected with a visited set carried down each resolution
    chain; a reference to a block already on the chain is left unresolved.
    ``max_depth`` bounds nesting independently of cycle detection.
    """

    def __init__(self, blocks: Mapping[str, str] | None = None, *, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self.blocks = dict(blocks or {})
        self.max_depth = max_depth

    def render(self, chunks: Iterable[Chunk], variables: Mapping[str, Any] | None = None) -> str:
        """Render *chunks* in order and join them with a blank line."""
        bound = variables or {}
        return CHUNK_SEPARATOR.join(self.render_text(chunk.content, bound) for chunk in chunks)

    def render_text(self, template: str, variables: Mapping[str, Any] | None = None) -> str:
        """Render a single template string."""
        if not template:
            return ""
        expanded = self.resolve_blocks(template)
        return substitute_variables(expanded, variables or {})

    def resolve_blocks(self, text: str) -> str:
        """Expand every ``{component.X}`` reference in *text*."""
        return self._resolve(text, frozenset(), 0)

    def _resolve(self, text: str, chain: frozenset[str], depth: int) -> str:
        if depth >= self.max_depth:
            logger.warning(
                "Block nesting exceeded max depth %d, leaving references unresolved",
                self.max_depth,
            )
            return text

        def replace(match: re.Match[str]) -> str:
            name = match.group(1)
            if name in chain:
                logger.warning("Circular block reference detected at block '%s'", name)
                return match.group(0)
            content = self.blocks.get(name)
            if content is None:
                logger.warning("Unknown block referenced: %s", name)
                return match.group(0)
            return self._resolve(content, chain | {name}, depth + 1)

        return BLOCK_PATTERN.sub(replace, text)


def substitute_variables(template: str, variables: Mapping[str, Any]) -> str:
    """Replace ``{name}`` tokens with bound values; unbound tokens stay literal."""

    def replace(match: re.Match[str]) -> str:
        key = match.group(1)
        if key not in variables or variables[key] is None:
            return match.group(0)
        return _stringify(variables[key])

    return VARIABLE_PATTERN.sub(replace, template)


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)
