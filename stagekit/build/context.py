# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Build context: configuration and derived locations for one staging run.

A `BuildContext` is created once per build (or rebuilt from its transport map
in a child process) and never changes afterwards. Every derived location is
recomputed on access from the stored fields; directory accessors provision
the directory before returning it.

Build directory layout:

	<build>/generated_runtime/     scratch outputs
	<build>/packages/              staged package copies
	<build>/packages/<name>/       the application, named by its manifest
	<build>/main.<ext>             entry file
	<build>/main.g.<ext>           entry file without the entry wrapper
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Mapping

from stagekit.build import imports, provision
from stagekit.build.locations import as_directory, is_absolute_location, is_package_uri, path_part, resolve_reference
from stagekit.build.resolver import resolve_uri
from stagekit.errors import InvalidArgumentError
from stagekit.packages.manifest import FileManifestReader, Manifest, ManifestReader
from stagekit.packages.package_config import PACKAGES_FILE_NAME, FilePackageConfigReader, PackageConfigReader

KEY_APPLICATION_LIBRARY = "sourceApplicationLibraryFileUri"
KEY_BUILD_DIRECTORY = "buildDirectoryUri"
KEY_EXECUTABLE = "executableUri"
KEY_SOURCE = "source"
KEY_INCLUDE_DEV_DEPENDENCIES = "includeDevDependencies"

TRANSPORT_KEYS = (
	KEY_APPLICATION_LIBRARY,
	KEY_BUILD_DIRECTORY,
	KEY_EXECUTABLE,
	KEY_SOURCE,
	KEY_INCLUDE_DEV_DEPENDENCIES,
)

GENERATED_RUNTIME_DIR = "generated_runtime/"
PACKAGES_DIR = "packages/"
ENTRY_FILE_STEM = "main"
ENTRY_FILE_WITHOUT_MAIN_STEM = "main.g"


@dataclass(frozen=True)
class BuildContext:
	"""Configuration and context values used while staging a build."""

	# Location of the library file of the application to be compiled.
	application_library_file_uri: str
	# Location of the directory where build artifacts are stored.
	build_directory_uri: str
	# Location of the executable build product.
	executable_uri: str
	# The source script for the executable.
	source: str | None = None
	# Whether dev dependencies of the application are part of the executable's dependencies.
	include_dev_dependencies: bool = False
	manifest_reader: ManifestReader = field(default_factory=FileManifestReader, compare=False, repr=False)
	package_config_reader: PackageConfigReader = field(
		default_factory=FilePackageConfigReader, compare=False, repr=False
	)

	def __post_init__(self) -> None:
		for name in ("application_library_file_uri", "build_directory_uri", "executable_uri"):
			value = getattr(self, name)
			if isinstance(value, os.PathLike):
				value = os.fspath(value)
				object.__setattr__(self, name, value)
			if not isinstance(value, str) or not is_absolute_location(value):
				raise InvalidArgumentError(f"'{name}' must be an absolute location", location=str(value))
		if self.include_dev_dependencies is None:
			object.__setattr__(self, "include_dev_dependencies", False)

	@classmethod
	def from_map(
		cls,
		data: Mapping[str, Any],
		*,
		manifest_reader: ManifestReader | None = None,
		package_config_reader: PackageConfigReader | None = None,
	) -> BuildContext:
		"""Rebuild a context from the map produced by `to_map`/`safe_map`."""
		missing = [k for k in TRANSPORT_KEYS if k not in data]
		if missing:
			raise InvalidArgumentError(f"build context map is missing key(s): {', '.join(missing)}")
		include_dev = data[KEY_INCLUDE_DEV_DEPENDENCIES]
		if include_dev is not None and not isinstance(include_dev, bool):
			raise InvalidArgumentError(f"'{KEY_INCLUDE_DEV_DEPENDENCIES}' must be a boolean")
		source = data[KEY_SOURCE]
		if source is not None and not isinstance(source, str):
			raise InvalidArgumentError(f"'{KEY_SOURCE}' must be a string")
		readers: dict[str, Any] = {}
		if manifest_reader is not None:
			readers["manifest_reader"] = manifest_reader
		if package_config_reader is not None:
			readers["package_config_reader"] = package_config_reader
		return cls(
			data[KEY_APPLICATION_LIBRARY],
			data[KEY_BUILD_DIRECTORY],
			data[KEY_EXECUTABLE],
			source,
			include_dev_dependencies=bool(include_dev),
			**readers,
		)

	def to_map(self) -> dict[str, Any]:
		return {
			KEY_APPLICATION_LIBRARY: self.application_library_file_uri,
			KEY_BUILD_DIRECTORY: self.build_directory_uri,
			KEY_SOURCE: self.source,
			KEY_EXECUTABLE: self.executable_uri,
			KEY_INCLUDE_DEV_DEPENDENCIES: self.include_dev_dependencies,
		}

	@property
	def safe_map(self) -> dict[str, Any]:
		"""
		Transport map for handing this context to a fresh process.

		Unlike `to_map`, this provisions the library file's parent directory
		first, so the receiving process finds the location usable.
		"""
		self.get_file(self.application_library_file_uri)
		return self.to_map()

	# Derived locations.

	def _build_location(self, relative: str) -> str:
		return resolve_reference(as_directory(self.build_directory_uri), relative)

	@property
	def source_extension(self) -> str:
		"""Suffix of the application library file (e.g. `.src`), possibly empty."""
		return PurePosixPath(path_part(self.application_library_file_uri)).suffix

	@property
	def target_script_file_uri(self) -> str:
		return self._build_location(ENTRY_FILE_STEM + self.source_extension)

	@property
	def target_script_file_without_main_function_uri(self) -> str:
		return self._build_location(ENTRY_FILE_WITHOUT_MAIN_STEM + self.source_extension)

	@property
	def source_application_directory_uri(self) -> str:
		return resolve_reference(self.application_library_file_uri, "../")

	@property
	def source_application_directory(self) -> Path:
		"""The directory of the application being compiled."""
		return self.get_directory(self.source_application_directory_uri)

	@property
	def source_library_file(self) -> Path:
		"""The library file of the application being compiled."""
		return self.get_file(self.application_library_file_uri)

	@property
	def source_application_manifest(self) -> Manifest:
		"""The application's manifest, re-read on every access."""
		return self.manifest_reader.read_manifest(self.source_application_directory)

	@property
	def source_application_manifest_map(self) -> dict[str, Any]:
		return self.source_application_manifest.raw

	@property
	def dependency_names(self) -> list[str]:
		return self.source_application_manifest.dependency_names(include_dev=self.include_dev_dependencies)

	@property
	def build_directory(self) -> Path:
		return self.get_directory(self.build_directory_uri)

	@property
	def build_runtime_directory(self) -> Path:
		return self.get_directory(self._build_location(GENERATED_RUNTIME_DIR))

	@property
	def build_packages_directory(self) -> Path:
		"""Directory for compiled packages."""
		return self.get_directory(self._build_location(PACKAGES_DIR))

	@property
	def build_application_directory(self) -> Path:
		"""Directory for the compiled application, named after its manifest."""
		name = self.source_application_manifest.name
		return self.get_directory(self._build_location(PACKAGES_DIR + name + "/"))

	@property
	def resolved_packages(self) -> dict[str, str]:
		"""Dependency package roots, relative entries resolved against the application directory."""
		app_dir = self.source_application_directory
		return self.package_config_reader.read_package_config(
			app_dir / PACKAGES_FILE_NAME,
			relative_to=self.source_application_directory_uri,
		)

	# Operations.

	def get_directory(self, location: str | Path) -> Path:
		return provision.get_directory(location)

	def get_file(self, location: str | Path) -> Path:
		return provision.get_file(location)

	def _packages_for(self, uri: str | None) -> dict[str, str]:
		# The package table is only read when a package URI needs it.
		return self.resolved_packages if uri and is_package_uri(uri) else {}

	def resolve_uri(self, uri: str | None) -> str | None:
		return resolve_uri(uri, self._packages_for(uri))

	def get_import_directives(
		self,
		*,
		uri: str | None = None,
		source: str | None = None,
		also_import_original_file: bool = False,
	) -> list[str]:
		return imports.get_import_directives(
			uri=uri,
			source=source,
			also_import_original_file=also_import_original_file,
			packages=self._packages_for(uri),
		)
