"""Manifest loading — parse YAML/JSON text or files into a :class:`Manifest`.

Typical usage::

    manifest = load_manifest(Path("agents/collector.yaml"))
"""

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ame.core.errors import ManifestValidationError
from ame.core.manifest.models import Manifest


def parse_manifest(raw: str, *, format: str = "yaml") -> Manifest:
    """Parse a raw string into a validated :class:`Manifest`.

    Args:
        raw: The raw file contents.
        format: ``"yaml"`` (default) or ``"json"``.

    Raises:
        ManifestValidationError: On parse errors or schema validation failures.
    """
    try:
        data: Any = json.loads(raw) if format == "json" else yaml.safe_load(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ManifestValidationError(f"{format.upper()} parse error: {exc}") from exc

    # Exported manifest files wrap the manifest with an etag
    if isinstance(data, dict) and isinstance(data.get("manifest"), dict):
        data = data["manifest"]
    return validate_manifest(data)


def validate_manifest(data: Any) -> Manifest:
    """Validate a mapping (or pass through a :class:`Manifest`)."""
    if isinstance(data, Manifest):
        return data
    if not isinstance(data, dict):
        raise ManifestValidationError("manifest must be a mapping")
    try:
        return Manifest.model_validate(data)
    except ValidationError as exc:
        raise ManifestValidationError(str(exc)) from exc


def load_manifest(path: str | Path) -> Manifest:
    """Read and parse a single manifest file (``.json`` or YAML)."""
    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestValidationError(f"Cannot read {p}: {exc}") from exc
    fmt = "json" if p.suffix == ".json" else "yaml"
    return parse_manifest(raw, format=fmt)
