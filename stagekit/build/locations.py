# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Location helpers shared by the resolver, the import rewriter and the
provisioner.

A *location* is a string that is either a URI with a scheme
(`file:///app/lib/main.src`, `package:foo/bar.src`) or a rooted filesystem
path (`/app/lib/main.src`). Joining follows RFC 3986 reference resolution, so
a location names a directory only when it ends in `/`.
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote, unquote, urljoin, urlsplit
from urllib.request import url2pathname

from stagekit.errors import InvalidReferenceError

PACKAGE_SCHEME = "package"
FILE_SCHEME = "file"


def scheme_of(location: str) -> str:
	return urlsplit(location).scheme


def is_package_uri(location: str) -> bool:
	return scheme_of(location) == PACKAGE_SCHEME


def is_absolute_location(location: str) -> bool:
	"""Return True for URIs with a scheme and for rooted paths."""
	return bool(scheme_of(location)) or location.startswith("/")


def as_directory(location: str) -> str:
	"""Return `location` with a trailing `/` so joins resolve beneath it."""
	return location if location.endswith("/") else location + "/"


def resolve_reference(base: str, reference: str) -> str:
	"""
	Resolve `reference` against `base` (RFC 3986 section 5).

	A scheme-less `base` is a filesystem path: it is quoted before the join so
	`#`, `?` and `%` in directory names stay part of the path, and the result
	comes back as a decoded path.
	"""
	if scheme_of(base) or scheme_of(reference):
		return urljoin(base, reference)
	joined = urljoin(quote(base), reference)
	return unquote(urlsplit(joined).path)


def join_directory(base: str, segment: str) -> str:
	"""Join `segment` beneath `base` as a directory (`seg/`)."""
	return resolve_reference(base, "./" + segment + "/")


def join_leaf(base: str, segment: str) -> str:
	"""Join `segment` beneath `base` as a leaf (no trailing `/`)."""
	return resolve_reference(base, "./" + segment)


def path_part(location: str) -> str:
	"""The path component of a URI, or a plain path as written."""
	if scheme_of(location):
		return urlsplit(location).path
	return location


def to_path(location: str) -> Path:
	"""
	Convert a `file:` URI or a rooted path into a filesystem `Path`.

	Other schemes have no filesystem representation and are rejected.
	"""
	parts = urlsplit(location)
	if parts.scheme == FILE_SCHEME:
		return Path(url2pathname(parts.path))
	if not parts.scheme:
		return Path(location)
	raise InvalidReferenceError(
		f"'{parts.scheme}:' locations do not name a filesystem entry",
		location=location,
	)
