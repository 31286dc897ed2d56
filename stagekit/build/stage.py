# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Staging steps driven by the `stagekit` CLI.

`stage_build` is the re-invocation target: a parent process serializes its
`BuildContext` with `safe_map`, writes it as JSON, and runs
`python -m stagekit stage --context <file>` to get an identical context in a
fresh process.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from stagekit.build.context import BuildContext
from stagekit.build.imports import get_import_directives
from stagekit.build.locations import as_directory, is_absolute_location
from stagekit.build.resolver import resolve_uri
from stagekit.errors import InvalidArgumentError, ProvisioningError
from stagekit.packages.package_config import FilePackageConfigReader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StageOptions:
	context_path: Path  # "-" reads the map from stdin


@dataclass(frozen=True)
class StageReport:
	build_directory: str
	runtime_directory: str
	packages_directory: str
	application_directory: str
	entry_file: str | None

	def to_dict(self) -> dict[str, Any]:
		return {
			"ok": True,
			"build_directory": self.build_directory,
			"runtime_directory": self.runtime_directory,
			"packages_directory": self.packages_directory,
			"application_directory": self.application_directory,
			"entry_file": self.entry_file,
		}


@dataclass(frozen=True)
class ImportsOptions:
	uri: str
	packages_path: Path | None = None
	also_import_original_file: bool = False


@dataclass(frozen=True)
class ResolveOptions:
	uri: str
	packages_path: Path


def load_context_map(path: Path) -> dict[str, Any]:
	if str(path) == "-":
		text = sys.stdin.read()
	else:
		try:
			text = path.read_text(encoding="utf-8")
		except OSError as err:
			raise InvalidArgumentError(f"cannot read build context: {err.strerror or err}", location=str(path)) from err
	try:
		data = json.loads(text)
	except json.JSONDecodeError as err:
		raise InvalidArgumentError(f"build context is not valid JSON: {err.msg}", location=str(path)) from err
	if not isinstance(data, dict):
		raise InvalidArgumentError("build context must be a JSON object", location=str(path))
	return data


def stage_build(opts: StageOptions) -> StageReport:
	"""
	Rebuild the context from its transport map and provision the build layout.

	When the context carries an embedded source, it is written to the entry
	file (`main.<ext>`).
	"""
	ctx = BuildContext.from_map(load_context_map(opts.context_path))
	logger.info("staging %s into %s", ctx.application_library_file_uri, ctx.build_directory_uri)

	build_dir = ctx.build_directory
	runtime_dir = ctx.build_runtime_directory
	packages_dir = ctx.build_packages_directory
	app_dir = ctx.build_application_directory

	entry_file: Path | None = None
	if ctx.source:
		entry_file = ctx.get_file(ctx.target_script_file_uri)
		try:
			entry_file.write_text(ctx.source, encoding="utf-8")
		except OSError as err:
			raise ProvisioningError(f"cannot write entry file: {err.strerror or err}", location=str(entry_file)) from err
		logger.info("wrote entry file %s", entry_file)

	return StageReport(
		build_directory=str(build_dir),
		runtime_directory=str(runtime_dir),
		packages_directory=str(packages_dir),
		application_directory=str(app_dir),
		entry_file=str(entry_file) if entry_file is not None else None,
	)


def _read_packages(path: Path | None) -> dict[str, str]:
	if path is None:
		return {}
	return FilePackageConfigReader().read_package_config(path, relative_to=as_directory(str(path.absolute().parent)))


def list_imports(opts: ImportsOptions) -> list[str]:
	uri = opts.uri
	if not is_absolute_location(uri):
		# Plain paths from the command line may be relative to the cwd.
		uri = str(Path(uri).absolute())
	return get_import_directives(
		uri=uri,
		also_import_original_file=opts.also_import_original_file,
		packages=_read_packages(opts.packages_path),
	)


def resolve_location(opts: ResolveOptions) -> str | None:
	return resolve_uri(opts.uri, _read_packages(opts.packages_path))
