# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Package-URI resolution.

`package:<name>/<path...>` references are resolved against a resolved-package
table (package name -> package root). The root's `lib/` directory is the
package's public library directory; every path segment but the last is joined
as a directory and the last one as a leaf, so both `package:foo/bar/baz.src`
(a file) and `package:foo/bar/` (a directory) resolve without looking at the
filesystem.
"""

from __future__ import annotations

import logging
from typing import Mapping
from urllib.parse import urlsplit

from stagekit.build.locations import (
	as_directory,
	is_absolute_location,
	join_directory,
	join_leaf,
	PACKAGE_SCHEME,
)
from stagekit.errors import InvalidReferenceError, UnresolvedPackageError

logger = logging.getLogger(__name__)

PACKAGE_LIB_DIR = "lib"


def resolve_uri(uri: str | None, packages: Mapping[str, str]) -> str | None:
	"""
	Resolve `uri` to an absolute location.

	- `package:` references are looked up in `packages`.
	- absolute locations are returned unchanged.
	- `None`/empty input is passed through, so callers can treat "no target"
	  as a no-op.

	Raises `UnresolvedPackageError` for unknown package names and
	`InvalidReferenceError` for relative, non-package references.
	"""
	if not uri:
		return uri

	parts = urlsplit(uri)
	if parts.scheme == PACKAGE_SCHEME:
		segments = parts.path.split("/")
		name = segments[0]
		root = packages.get(name)
		if root is None:
			raise UnresolvedPackageError(
				f"package '{name}' is not in the resolved package table",
				location=uri,
				package_name=name,
			)
		out = join_directory(as_directory(root), PACKAGE_LIB_DIR)
		for i in range(1, len(segments)):
			if i < len(segments) - 1:
				out = join_directory(out, segments[i])
			else:
				out = join_leaf(out, segments[i])
		logger.debug("resolved %s -> %s", uri, out)
		return out

	if is_absolute_location(uri):
		return uri

	raise InvalidReferenceError("location must be absolute or a package URI", location=uri)
