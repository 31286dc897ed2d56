# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Resolved-package table (`.packages` file).

The file maps package names to the package's library directory, one entry per
line:

	# generated by the dependency resolver
	foo:file:///home/me/.cache/foo-1.2.0/lib/
	app:lib/

Comments (`#`) and blank lines are ignored. Relative targets are resolved
against the directory the table is read relative to (the application root).
Entries that name a `lib/` directory are mapped to the package root above it,
because `package:` resolution appends `lib/` itself.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from lark import Lark, Tree
from lark.exceptions import UnexpectedInput

from stagekit.build.locations import as_directory, is_absolute_location, resolve_reference
from stagekit.errors import PackageConfigError

logger = logging.getLogger(__name__)

PACKAGES_FILE_NAME = ".packages"

_GRAMMAR = r"""
start: _line (_NEWLINE _line)*
_line: entry?
entry: NAME ":" TARGET

NAME: /[^\s:#]+/
TARGET: /\S+/
COMMENT: /#[^\n]*/
_NEWLINE: /\r?\n/

%ignore COMMENT
%ignore /[ \t]+/
"""

_PARSER = Lark(_GRAMMAR, parser="lalr", start="start")


class PackageConfigReader(Protocol):
	"""Provides the resolved-package table for an application."""

	def read_package_config(self, path: Path, *, relative_to: str) -> dict[str, str]:
		"""Return package name -> package root location (ending in `/`)."""
		...


def _package_root(location: str) -> str:
	root = as_directory(location)
	if root.endswith("/lib/"):
		return resolve_reference(root, "../")
	return root


def parse_package_config(text: str, *, relative_to: str, origin: str | None = None) -> dict[str, str]:
	"""
	Parse `.packages` text into a name -> package root table.

	`relative_to` is the directory location relative targets resolve against;
	`origin` is only used in error messages.
	"""
	try:
		tree = _PARSER.parse(text)
	except UnexpectedInput as err:
		raise PackageConfigError(
			f"malformed package entry at column {err.column}",
			location=origin,
			line=err.line,
		) from err

	base = as_directory(relative_to)
	out: dict[str, str] = {}
	for entry in tree.children:
		if not isinstance(entry, Tree):
			continue
		name_tok, target_tok = entry.children
		name = str(name_tok)
		if name in out:
			raise PackageConfigError(
				f"duplicate package '{name}'",
				location=origin,
				package_name=name,
				line=name_tok.line,
			)
		target = str(target_tok)
		if not is_absolute_location(target):
			target = resolve_reference(base, target)
		out[name] = _package_root(target)
	return out


class FilePackageConfigReader:
	"""Reads the resolved-package table from a `.packages` file on disk."""

	def read_package_config(self, path: Path, *, relative_to: str) -> dict[str, str]:
		try:
			text = path.read_text(encoding="utf-8")
		except OSError as err:
			raise PackageConfigError(
				f"cannot read package config: {err.strerror or err}; run dependency resolution first",
				location=str(path),
			) from err
		packages = parse_package_config(text, relative_to=relative_to, origin=str(path))
		logger.debug("read %d package(s) from %s", len(packages), path)
		return packages
