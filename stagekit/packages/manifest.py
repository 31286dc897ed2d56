# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Application manifest (`manifest.yaml`).

Only the declared fields are read: `name` (required), `dependencies` and
`dev_dependencies`. Dependency values are passed through untouched; resolving
them is the dependency resolver's job, not ours.

The name becomes a directory under `<build>/packages/`, so it must be a single
path segment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import yaml

from stagekit.errors import ManifestError

logger = logging.getLogger(__name__)

MANIFEST_FILE_NAME = "manifest.yaml"


def _check_name(name: str, origin: str | None) -> None:
	if not name:
		raise ManifestError("manifest is missing 'name'", location=origin)
	if "/" in name or "\\" in name or name in (".", ".."):
		raise ManifestError(f"manifest name '{name}' must be a single path segment", location=origin)


@dataclass(frozen=True)
class Manifest:
	name: str
	dependencies: dict[str, Any] = field(default_factory=dict)
	dev_dependencies: dict[str, Any] = field(default_factory=dict)
	raw: dict[str, Any] = field(default_factory=dict)

	def __post_init__(self) -> None:
		_check_name(self.name, None)

	def dependency_names(self, *, include_dev: bool = False) -> list[str]:
		"""Declared dependency names, optionally followed by dev-only ones."""
		names = list(self.dependencies)
		if include_dev:
			names.extend(n for n in self.dev_dependencies if n not in self.dependencies)
		return names


class ManifestReader(Protocol):
	"""Reads the manifest of the application rooted at `application_dir`."""

	def read_manifest(self, application_dir: Path) -> Manifest:
		...


def _dependency_table(data: dict[str, Any], key: str, origin: str | None) -> dict[str, Any]:
	raw = data.get(key)
	if raw is None:
		return {}
	if not isinstance(raw, dict):
		raise ManifestError(f"manifest field '{key}' must be a mapping", location=origin)
	return dict(raw)


def parse_manifest(text: str, *, origin: str | None = None) -> Manifest:
	try:
		data = yaml.safe_load(text)
	except yaml.YAMLError as err:
		mark = getattr(err, "problem_mark", None)
		line = mark.line + 1 if mark is not None else None
		problem = getattr(err, "problem", None) or str(err)
		raise ManifestError(f"manifest is not valid YAML: {problem}", location=origin, line=line) from err
	if not isinstance(data, dict):
		raise ManifestError("manifest must be a mapping at top level", location=origin)
	name = data.get("name")
	if not isinstance(name, str):
		raise ManifestError("manifest is missing 'name'", location=origin)
	_check_name(name, origin)
	return Manifest(
		name=name,
		dependencies=_dependency_table(data, "dependencies", origin),
		dev_dependencies=_dependency_table(data, "dev_dependencies", origin),
		raw=data,
	)


class FileManifestReader:
	"""Reads `<application_dir>/manifest.yaml` on every call (no caching)."""

	def read_manifest(self, application_dir: Path) -> Manifest:
		path = application_dir / MANIFEST_FILE_NAME
		try:
			text = path.read_text(encoding="utf-8")
		except OSError as err:
			raise ManifestError(f"cannot read manifest: {err.strerror or err}", location=str(path)) from err
		manifest = parse_manifest(text, origin=str(path))
		logger.debug("read manifest '%s' from %s", manifest.name, path)
		return manifest
