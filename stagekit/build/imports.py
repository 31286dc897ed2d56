# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Import directive extraction.

This is a lexical pass, not a parser: it finds `import '<target>';` statements
(single or double quotes) and rewrites relative targets to absolute `file://`
locations so the statements stay valid when copied into a synthesized entry
file that lives somewhere else (the build directory).
"""

from __future__ import annotations

import re
from typing import Mapping

from stagekit.build.locations import is_absolute_location, is_package_uri, resolve_reference, to_path
from stagekit.build.resolver import resolve_uri
from stagekit.errors import InvalidArgumentError, SourceReadError, UnresolvableRelativeImportError

IMPORT_DIRECTIVE_RE = re.compile(r"""import ['"]([^'"]*?)['"];""")


def _read_source(location: str) -> str:
	path = to_path(location)
	try:
		return path.read_text(encoding="utf-8")
	except (OSError, UnicodeDecodeError) as err:
		raise SourceReadError(f"cannot read source file: {err}", location=location) from err


def get_import_directives(
	*,
	uri: str | None = None,
	source: str | None = None,
	also_import_original_file: bool = False,
	packages: Mapping[str, str] | None = None,
) -> list[str]:
	"""
	Return the import statements of a library, in source order.

	Exactly one of `uri` (a location, possibly `package:`) and `source` (literal
	text) must be given. Package and absolute imports are returned verbatim;
	relative ones are resolved against the file named by `uri`. With
	`also_import_original_file`, an import of the resolved `uri` itself is
	appended last.
	"""
	if uri is not None and source is not None:
		raise InvalidArgumentError("either uri or source must be non-null, but not both")
	if uri is None and source is None:
		raise InvalidArgumentError("either uri or source must be non-null, but not both")
	if also_import_original_file and uri is None:
		raise InvalidArgumentError("flag 'also_import_original_file' may only be set if 'uri' is also set")

	file_uri = resolve_uri(uri, packages or {})
	text = source if source is not None else _read_source(file_uri)

	imports: list[str] = []
	for m in IMPORT_DIRECTIVE_RE.finditer(text):
		target = m.group(1)
		if is_package_uri(target) or is_absolute_location(target):
			imports.append(m.group(0))
			continue
		if source is not None:
			raise UnresolvableRelativeImportError(
				"Cannot resolve relative URIs when using 'source'. "
				"Replace imported URIs with package or absolute URIs, "
				"or use 'uri' argument variant of this method.",
				location=target,
			)
		resolved = to_path(resolve_reference(file_uri, target))
		imports.append(f"import 'file://{resolved.as_posix()}';")

	if also_import_original_file:
		imports.append(f"import '{file_uri}';")

	return imports
