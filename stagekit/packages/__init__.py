# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Collaborators that read application metadata from disk.

Both readers are consumed through small protocols (`ManifestReader`,
`PackageConfigReader`) so a `BuildContext` can be given in-memory fakes.
"""

from __future__ import annotations

__all__ = [
	"manifest",
	"package_config",
]
